"""StoreItem ORM — items purchasable with coins.

Invariants:
    - rarity NULL marks a usable item (mic slot, spotlight); otherwise collectible
"""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from econ_sentinel.db.base import Base, new_id


class StoreItem(Base):
    __tablename__ = "store_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rarity: Mapped[str | None] = mapped_column(String(20), nullable=True)
