"""MissionSubmission ORM — one proof submitted by a user for a mission.

Invariants:
    - status transitions: pending -> approved | rejected
    - reward_xp / reward_coins are set only once the submission is approved
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from econ_sentinel.db.base import Base, new_id


class MissionSubmission(Base):
    __tablename__ = "mission_submissions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False, index=True,
    )
    mission_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("missions.id"), nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    reward_xp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reward_coins: Mapped[int | None] = mapped_column(Integer, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
