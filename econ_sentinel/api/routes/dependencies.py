"""Route Dependencies — request-scoped services built on the request's DB session.

Invariants:
    - One SqlEconomyRepository per request, bound to the get_db session
    - Lock and replay registries are process-wide (services/ledger_core.get_process_guards)

Design Decisions:
    - Plain FastAPI Depends factories: tests override get_db and get everything else for free
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from econ_sentinel.config import get_settings
from econ_sentinel.infrastructure.database import get_db
from econ_sentinel.services.admin_monitor import AdminMonitor
from econ_sentinel.services.economy_repository import SqlEconomyRepository
from econ_sentinel.services.ledger_core import (
    LedgerCore, build_ledger_core, get_process_guards,
)
from econ_sentinel.services.sentinel_service import SentinelService


def get_repository(db: AsyncSession = Depends(get_db)) -> SqlEconomyRepository:
    return SqlEconomyRepository(db)


def get_ledger(
    repository: SqlEconomyRepository = Depends(get_repository),
) -> LedgerCore:
    return build_ledger_core(repository)


def get_admin_monitor(
    repository: SqlEconomyRepository = Depends(get_repository),
) -> AdminMonitor:
    return AdminMonitor(repository)


def get_sentinel(
    repository: SqlEconomyRepository = Depends(get_repository),
) -> SentinelService:
    lock, _ = get_process_guards()
    return SentinelService(
        repository, tz=get_settings().audit_timezone, lock=lock,
    )
