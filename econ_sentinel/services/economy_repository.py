"""SQL Economy Repository — EconomyRepository implemented over an AsyncSession.

Invariants:
    - Collections map 1:1 to ORM models (explicit dict, no reflection)
    - Records crossing the boundary are plain dicts keyed by column name
    - insert/update flush but never commit: the caller owns the unit of work
    - Unknown record keys are dropped on insert/update (records may carry derived fields)

Design Decisions:
    - Predicate/updater callables over a query DSL: the core stays ignorant of SQL
      (ADR: dependency arrows point inward)
    - update() evaluates predicates in Python. Single-row writers (ledger, Auto-Heal)
      pass record_id so only that row is loaded; the predicate still guards it
"""

import logging
from typing import Callable

from sqlalchemy import select as select_stmt
from sqlalchemy.ext.asyncio import AsyncSession

from econ_sentinel.core.repository_protocols import Record
from econ_sentinel.db.base import Base
from econ_sentinel.models import (
    AdminAuditLog, Mission, MissionSubmission, QueueEntry,
    RedeemedItem, StoreItem, Transaction, User,
)

logger = logging.getLogger(__name__)

COLLECTIONS: dict[str, type[Base]] = {
    "users": User,
    "transactions": Transaction,
    "missions": Mission,
    "mission_submissions": MissionSubmission,
    "store_items": StoreItem,
    "redeemed_items": RedeemedItem,
    "queue_entries": QueueEntry,
    "admin_audit_log": AdminAuditLog,
}


def _model_for(collection: str) -> type[Base]:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise KeyError(f"Unknown collection: {collection}") from None


def _column_values(model: type[Base], record: Record) -> dict:
    columns = {c.key for c in model.__mapper__.columns}
    return {k: v for k, v in record.items() if k in columns}


class SqlEconomyRepository:
    """Economy persistence over one request-scoped AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def select(self, collection: str) -> list[Record]:
        model = _model_for(collection)
        result = await self.db.execute(select_stmt(model))
        return [row.to_record() for row in result.scalars().all()]

    async def get(self, collection: str, record_id: str) -> Record | None:
        row = await self.db.get(_model_for(collection), record_id)
        return row.to_record() if row else None

    async def insert(self, collection: str, record: Record) -> Record:
        model = _model_for(collection)
        row = model(**_column_values(model, record))
        self.db.add(row)
        await self.db.flush()
        return row.to_record()

    async def update(
        self,
        collection: str,
        predicate: Callable[[Record], bool],
        updater: Callable[[Record], Record],
        record_id: str | None = None,
    ) -> int:
        model = _model_for(collection)
        if record_id is not None:
            row = await self.db.get(model, record_id)
            rows = [row] if row is not None else []
        else:
            result = await self.db.execute(select_stmt(model))
            rows = result.scalars().all()
        updated = 0
        for row in rows:
            current = row.to_record()
            if not predicate(current):
                continue
            changes = _column_values(model, updater(dict(current)))
            changes.pop("id", None)
            for key, value in changes.items():
                setattr(row, key, value)
            updated += 1
        if updated:
            await self.db.flush()
        logger.debug(f"Updated {updated} row(s) in {collection}")
        return updated

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
