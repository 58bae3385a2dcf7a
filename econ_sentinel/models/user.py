"""User ORM — economy balances and progression counters for one platform user.

Invariants:
    - id is an opaque string primary key (issued by the host platform)
    - coins, xp and counters are integers; the ledger keeps them >= 0
    - level is derived from xp but stored (the sentinel flags drift)

Design Decisions:
    - Counters denormalized on the row: rules read one record, no aggregation query
    - plan stored as its display label ("Free Flow", "Hitmaker", …): matches PlanTier values
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from econ_sentinel.db.base import Base, new_id


class User(Base):
    """Economy-bearing user."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    plan: Mapped[str] = mapped_column(
        String(40), nullable=False, default="Free Flow",
    )
    coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    monthly_missions_completed: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    total_missions_completed: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    weekly_check_in_streak: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
