"""Admin Monitor — runs the admin pre-commit rules and records every decision.

Invariants:
    - Every evaluated action writes one admin_audit_log entry, blocked or not
    - blocked is True only for a failed HIGH-severity rule
    - enforce() raises AdminActionBlockedError with the rule details verbatim
    - MEDIUM/LOW failures and soft warnings are logged and surfaced as alerts, never block

Design Decisions:
    - Rules stay pure in core/admin_rules.py; this class only adds IO (queue snapshot,
      audit log) around them (ADR: ExMA impureim sandwich)
    - One monitor_* method per action kind, evaluate() dispatches by explicit dict
"""

import logging
from dataclasses import dataclass, field

from econ_sentinel.core.admin_rules import AdminAction, evaluate_admin_action
from econ_sentinel.core.errors import AdminActionBlockedError
from econ_sentinel.core.repository_protocols import EconomyRepository
from econ_sentinel.core.rule_result import RuleResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonitorResult:
    ok: bool
    blocked: bool
    result: RuleResult
    alerts: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "blocked": self.blocked,
            "alerts": list(self.alerts),
            "result": self.result.to_dict(),
        }


class AdminMonitor:
    """Admin action gate over an EconomyRepository."""

    def __init__(self, repository: EconomyRepository):
        self.repository = repository

    async def monitor_mission_creation(self, mission: dict) -> MonitorResult:
        return await self._record(AdminAction("mission_creation", mission))

    async def monitor_store_edit(self, item: dict) -> MonitorResult:
        return await self._record(AdminAction("store_edit", item))

    async def monitor_punishment(self, punishment: dict) -> MonitorResult:
        return await self._record(AdminAction("punishment", punishment))

    async def monitor_level_adjustment(self, old: dict, new: dict) -> MonitorResult:
        return await self._record(
            AdminAction("level_adjustment", {"old": old, "new": new}),
        )

    async def monitor_queue_action(
        self, entry_id: str, queue: list[dict] | None = None,
    ) -> MonitorResult:
        """Validate a queue edit against the given snapshot, or the stored queue."""
        if queue is None:
            queue = await self.repository.select("queue_entries")
        return await self._record(
            AdminAction("queue_action", {"id": entry_id, "queue": queue}),
        )

    async def evaluate(self, action: AdminAction) -> MonitorResult:
        if action.name == "queue_action" and isinstance(action.payload, dict):
            return await self.monitor_queue_action(
                str(action.payload.get("id", "")), action.payload.get("queue"),
            )
        return await self._record(action)

    @staticmethod
    def enforce(monitor_result: MonitorResult) -> MonitorResult:
        if monitor_result.blocked:
            raise AdminActionBlockedError(
                monitor_result.result.rule, monitor_result.result.details,
            )
        return monitor_result

    async def _record(self, action: AdminAction) -> MonitorResult:
        result = evaluate_admin_action(action)
        await self.repository.insert("admin_audit_log", {
            "action_name": action.name,
            "payload": _loggable(action.payload),
            "validation_result": [result.to_dict()],
            "blocked": result.blocking,
        })
        await self.repository.commit()
        _log_result(action.name, result)

        alerts = [result.details] if result.details else []
        return MonitorResult(
            ok=result.passed, blocked=result.blocking,
            result=result, alerts=alerts,
        )


def _log_result(action_name: str, result: RuleResult) -> None:
    extra = {
        "action_name": action_name, "rule": result.rule,
        "severity": result.severity.value,
    }
    if result.blocking:
        logger.error(f"[ADMIN BLOCKED] {result.details}", extra=extra)
    elif not result.passed:
        logger.warning(f"[ADMIN WARNING] {result.details}", extra=extra)
    elif result.details:
        logger.info(f"[ADMIN NOTICE] {result.details}", extra=extra)


def _loggable(payload: dict) -> dict:
    # queue snapshots can be large; keep only the ids
    queue = payload.get("queue") if isinstance(payload, dict) else None
    if isinstance(queue, list):
        return {
            **payload,
            "queue": [entry.get("id") for entry in queue if isinstance(entry, dict)],
        }
    return payload
