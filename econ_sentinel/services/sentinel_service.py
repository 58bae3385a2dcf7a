"""Sentinel Service — loads economy snapshots and runs the pure scans over them.

Invariants:
    - Scans are read-only: run_full_scan, run_for_user and audit_summary never write
    - heal_user is the only writer here; it holds the same "value:<user_id>" lock the
      ledger uses, so healing never interleaves with a balance mutation
    - Audit hour-of-day rules run in the configured audit timezone

Design Decisions:
    - Snapshot loaded collection by collection through EconomyRepository: the core
      scan stays pure and testable without a database (ADR: ExMA impureim sandwich)
    - Critical alerts are logged at ERROR on every full scan, one line per alert
"""

import logging
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from econ_sentinel.core.audit_engine import AuditEngine
from econ_sentinel.core.audit_reporter import (
    detect_system_wide_anomalies, summarize_audit,
)
from econ_sentinel.core.auto_heal import apply_all_heals
from econ_sentinel.core.economy_state import MissionSubmission, UserEconomyState
from econ_sentinel.core.errors import ErrorContext, LockConflictError, UserNotFoundError
from econ_sentinel.core.repository_protocols import EconomyRepository
from econ_sentinel.core.sentinel_engine import (
    EconomySnapshot, ScanResult, run_economy_check_for_user, run_full_economy_scan,
)
from econ_sentinel.core.sentinel_reporter import critical_alerts, health_report
from econ_sentinel.infrastructure.resource_lock import ResourceLock
from econ_sentinel.services.ledger_core import LOCK_PREFIX

logger = logging.getLogger(__name__)

SNAPSHOT_COLLECTIONS = (
    "users", "missions", "mission_submissions", "redeemed_items",
    "store_items", "queue_entries", "transactions",
)
HEALED_FIELDS = (
    "coins", "xp", "level", "monthly_missions_completed",
    "total_missions_completed", "weekly_check_in_streak",
)


class SentinelService:
    """Economy health scans, per-user checks, audit summaries and healing."""

    def __init__(
        self, repository: EconomyRepository, tz: tzinfo | str = timezone.utc,
        lock: ResourceLock | None = None,
    ):
        self.repository = repository
        self.tz = _resolve_tz(tz)
        self.lock = lock

    async def load_snapshot(self) -> EconomySnapshot:
        collections = {
            name: await self.repository.select(name)
            for name in SNAPSHOT_COLLECTIONS
        }
        return EconomySnapshot.from_records(collections)

    async def run_full_scan(self, now: datetime | None = None) -> ScanResult:
        snapshot = await self.load_snapshot()
        scan = run_full_economy_scan(snapshot, now=now, tz=self.tz)
        for alert in critical_alerts(scan):
            logger.error(f"[SENTINEL ALERT] {alert}")
        logger.info(
            f"Economy scan finished: {scan.global_risk_level.value}",
            extra={"severity": scan.global_risk_level.value},
        )
        return scan

    async def scan_report(self, now: datetime | None = None) -> dict:
        scan = await self.run_full_scan(now)
        return {
            "report": health_report(scan),
            "critical_alerts": critical_alerts(scan),
        }

    async def run_for_user(self, user_id: str, now: datetime | None = None) -> dict:
        user = await self._load_user(user_id)
        snapshot = await self.load_snapshot()
        check = run_economy_check_for_user(
            user, _submissions_of(user_id, snapshot.submissions),
            now=now, tz=self.tz,
        )
        audit = AuditEngine(self.tz).run_audit_for_user(
            user, snapshot.audit_logs, now,
        )
        return {
            "user_id": user_id,
            "check": check.to_dict(),
            "audit": audit.to_dict(),
        }

    async def audit_summary(self, now: datetime | None = None) -> dict:
        snapshot = await self.load_snapshot()
        results = AuditEngine(self.tz).run_audit_for_all_users(
            snapshot.users, snapshot.audit_logs, now,
        )
        return {
            "summary": summarize_audit(results),
            "system_wide_anomalies": detect_system_wide_anomalies(results),
        }

    async def heal_user(self, user_id: str) -> dict:
        """Clamp a user's balances and counters back into the valid domain."""
        lock_key = LOCK_PREFIX + user_id
        if self.lock is not None and not self.lock.acquire(lock_key):
            raise LockConflictError(
                lock_key, self.lock.remaining_ms(lock_key),
                ErrorContext(user_id=user_id, source="auto_heal"),
            )
        try:
            user = await self._load_user(user_id)
            healed = apply_all_heals(user)
            changed = healed != user
            if changed:
                values = {f: getattr(healed, f) for f in HEALED_FIELDS}
                await self.repository.update(
                    "users",
                    lambda record: record["id"] == user_id,
                    lambda record: {**record, **values},
                    record_id=user_id,
                )
                await self.repository.commit()
                logger.info(
                    f"User {user_id} healed", extra={"user_id": user_id},
                )
            return {"user_id": user_id, "healed": changed, "user": healed.to_record()}
        finally:
            if self.lock is not None:
                self.lock.release(lock_key)

    async def _load_user(self, user_id: str) -> UserEconomyState:
        record = await self.repository.get("users", user_id)
        if record is None:
            raise UserNotFoundError(user_id)
        return UserEconomyState.from_record(record)


def _resolve_tz(tz: tzinfo | str) -> tzinfo:
    if not isinstance(tz, str):
        return tz
    return timezone.utc if tz.upper() == "UTC" else ZoneInfo(tz)


def _submissions_of(
    user_id: str, submissions: list[MissionSubmission],
) -> list[MissionSubmission]:
    return [s for s in submissions if s.user_id == user_id]
