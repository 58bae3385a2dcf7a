"""RedeemedItem ORM — purchase receipt with the balance before and after.

Invariants:
    - coins_after == coins_before - item_price for a consistent purchase
    - item_name/item_price are snapshots taken at purchase time

Design Decisions:
    - Snapshots instead of a JOIN: catalog edits must not rewrite purchase history
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from econ_sentinel.db.base import Base, new_id


class RedeemedItem(Base):
    __tablename__ = "redeemed_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False, index=True,
    )
    item_id: Mapped[str] = mapped_column(String(64), nullable=False)
    item_name: Mapped[str] = mapped_column(String(120), nullable=False)
    item_price: Mapped[int] = mapped_column(Integer, nullable=False)
    coins_before: Mapped[int] = mapped_column(Integer, nullable=False)
    coins_after: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="completed",
    )
    redeemed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
