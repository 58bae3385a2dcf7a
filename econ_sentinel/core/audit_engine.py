"""Audit Engine — runs every audit rule for a user and classifies per-user risk.

Invariants:
    - evaluate() returns one RuleResult per rule, in a fixed order, never raises
    - risk_level: danger if any HIGH failure, attention if any other failure, else safe
    - run_audit_for_all_users audits role == "user" only (admins are exempt)
    - Batch audits split the logs by user_id once, so each user sees only their own rows

Design Decisions:
    - AuditEngine is a thin holder for `tz`: rules stay module functions, the engine
      only fixes their shared inputs (ADR: explicit rule list, no registry magic)
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo

from econ_sentinel.core.domain_types import AuditRiskLevel, RuleSeverity, UserRole
from econ_sentinel.core.economy_state import (
    MissionSubmission, RedeemedItem, Transaction, UserEconomyState,
)
from econ_sentinel.core.rule_result import RuleResult
from econ_sentinel.core.audit_rules import (
    rule_rapid_level_growth,
    rule_unusual_lc_gain,
    rule_suspicious_mission_pattern,
    rule_impossible_streak,
    rule_queue_abuse,
    rule_store_anomaly,
)


@dataclass
class AuditLogs:
    """Historical logs shared by every audit rule."""
    transactions: list[Transaction] = field(default_factory=list)
    submissions: list[MissionSubmission] = field(default_factory=list)
    redeemed_items: list[RedeemedItem] = field(default_factory=list)

    def by_user(self) -> dict[str, "AuditLogs"]:
        """Split every log by user_id in one pass."""
        partitions: dict[str, AuditLogs] = defaultdict(AuditLogs)
        for tx in self.transactions:
            partitions[tx.user_id].transactions.append(tx)
        for submission in self.submissions:
            partitions[submission.user_id].submissions.append(submission)
        for item in self.redeemed_items:
            partitions[item.user_id].redeemed_items.append(item)
        return dict(partitions)


@dataclass(frozen=True)
class AuditResult:
    user_id: str
    passed_rules: int
    failed_rules: int
    risk_level: AuditRiskLevel
    details: list[RuleResult]

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "result_summary": {
                "passed_rules": self.passed_rules,
                "failed_rules": self.failed_rules,
                "risk_level": self.risk_level.value,
            },
            "details": [d.to_dict() for d in self.details],
        }


class AuditEngine:
    """Per-user fraud heuristics over transactions, submissions and redemptions."""

    def __init__(self, tz: tzinfo = timezone.utc):
        self.tz = tz

    def evaluate(
        self, user: UserEconomyState, logs: AuditLogs,
        now: datetime | None = None,
    ) -> list[RuleResult]:
        now = now or datetime.now(timezone.utc)
        return [
            rule_rapid_level_growth(user, now=now),
            rule_unusual_lc_gain(user, logs.transactions),
            rule_suspicious_mission_pattern(user, logs.submissions, tz=self.tz),
            rule_impossible_streak(user, now=now),
            rule_queue_abuse(user, logs.redeemed_items),
            rule_store_anomaly(user, logs.redeemed_items),
        ]

    def run_audit_for_user(
        self, user: UserEconomyState, logs: AuditLogs,
        now: datetime | None = None,
    ) -> AuditResult:
        results = self.evaluate(user, logs, now)
        failures = [r for r in results if not r.passed]
        return AuditResult(
            user_id=user.id,
            passed_rules=len(results) - len(failures),
            failed_rules=len(failures),
            risk_level=classify_audit_risk(failures),
            details=results,
        )

    def run_audit_for_all_users(
        self, users: list[UserEconomyState], logs: AuditLogs,
        now: datetime | None = None,
    ) -> list[AuditResult]:
        now = now or datetime.now(timezone.utc)
        per_user = logs.by_user()
        return [
            self.run_audit_for_user(user, per_user.get(user.id, AuditLogs()), now)
            for user in users
            if user.role == UserRole.USER.value
        ]


def classify_audit_risk(failures: list[RuleResult]) -> AuditRiskLevel:
    if not failures:
        return AuditRiskLevel.SAFE
    if any(f.severity == RuleSeverity.HIGH for f in failures):
        return AuditRiskLevel.DANGER
    return AuditRiskLevel.ATTENTION
