"""Sentinel Engine — full-population economy scan over a persistence snapshot.

Invariants:
    - PURE: takes an EconomySnapshot, returns a ScanResult; never raises on bad records
    - Only FAILED RuleResults are kept, grouped per subject and per category
    - global_risk_level: critical if any HIGH failure, attention if any other failure, else stable
    - Purchases whose buyer or item is missing, and submissions whose mission is
      missing, are skipped (the join has nothing to check against)

Design Decisions:
    - Per-user evaluation shares no mutable state: each subject produces its own
      SubjectReport, appended to a category list (safe to parallelize later)
    - "Today" is the calendar day of `now` in `tz`, matching the daily mission limit
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo

from econ_sentinel.core.audit_engine import AuditEngine, AuditLogs
from econ_sentinel.core.domain_types import RiskLevel, RuleSeverity, SubmissionStatus
from econ_sentinel.core.economy_calculator import DEFAULT_CALCULATOR
from econ_sentinel.core.economy_state import (
    Mission, MissionSubmission, QueueEntry, RedeemedItem, StoreItem,
    Transaction, UserEconomyState,
)
from econ_sentinel.core.repository_protocols import EconomyCalculator, Record
from econ_sentinel.core.rule_result import RuleResult, failed, passed, worst_severity
from econ_sentinel.core.sentinel_rules import (
    rule_coin_integrity,
    rule_daily_mission_limit,
    rule_level_integrity,
    rule_plan_restriction,
    rule_queue_integrity,
    rule_reward_math,
    rule_store_consistency,
    rule_xp_boundaries,
)


@dataclass
class EconomySnapshot:
    users: list[UserEconomyState] = field(default_factory=list)
    missions: list[Mission] = field(default_factory=list)
    submissions: list[MissionSubmission] = field(default_factory=list)
    purchases: list[RedeemedItem] = field(default_factory=list)
    store_items: list[StoreItem] = field(default_factory=list)
    queue: list[QueueEntry] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)

    @classmethod
    def from_records(cls, collections: dict[str, list[Record]]) -> "EconomySnapshot":
        return cls(
            users=[UserEconomyState.from_record(r) for r in collections.get("users", [])],
            missions=[Mission.from_record(r) for r in collections.get("missions", [])],
            submissions=[
                MissionSubmission.from_record(r)
                for r in collections.get("mission_submissions", [])
            ],
            purchases=[
                RedeemedItem.from_record(r)
                for r in collections.get("redeemed_items", [])
            ],
            store_items=[
                StoreItem.from_record(r) for r in collections.get("store_items", [])
            ],
            queue=[QueueEntry.from_record(r) for r in collections.get("queue_entries", [])],
            transactions=[
                Transaction.from_record(r) for r in collections.get("transactions", [])
            ],
        )

    @property
    def audit_logs(self) -> AuditLogs:
        return AuditLogs(
            transactions=self.transactions,
            submissions=self.submissions,
            redeemed_items=self.purchases,
        )


@dataclass(frozen=True)
class SubjectReport:
    """Failed rules for one scanned subject (user, purchase, submission, queue)."""
    subject_type: str
    subject_id: str
    user_id: str | None
    failures: list[RuleResult]

    @property
    def errors(self) -> list[RuleResult]:
        return [f for f in self.failures if f.severity == RuleSeverity.HIGH]

    @property
    def warnings(self) -> list[RuleResult]:
        return [f for f in self.failures if f.severity != RuleSeverity.HIGH]

    def to_dict(self) -> dict:
        return {
            "subject_type": self.subject_type,
            "subject_id": self.subject_id,
            "user_id": self.user_id,
            "errors": [f.details for f in self.errors],
            "warnings": [f.details for f in self.warnings],
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass
class ScanResult:
    global_risk_level: RiskLevel = RiskLevel.STABLE
    user_reports: list[SubjectReport] = field(default_factory=list)
    store_reports: list[SubjectReport] = field(default_factory=list)
    submission_reports: list[SubjectReport] = field(default_factory=list)
    queue_reports: list[SubjectReport] = field(default_factory=list)

    @property
    def all_reports(self) -> list[SubjectReport]:
        return [
            *self.user_reports, *self.store_reports,
            *self.submission_reports, *self.queue_reports,
        ]

    def to_dict(self) -> dict:
        return {
            "global_risk_level": self.global_risk_level.value,
            "user_reports": [r.to_dict() for r in self.user_reports],
            "store_reports": [r.to_dict() for r in self.store_reports],
            "submission_reports": [r.to_dict() for r in self.submission_reports],
            "queue_reports": [r.to_dict() for r in self.queue_reports],
        }


def count_submissions_today(
    user_id: str, submissions: list[MissionSubmission],
    *, now: datetime, tz: tzinfo = timezone.utc,
) -> int:
    today = now.astimezone(tz).date()
    return sum(
        1 for s in submissions
        if s.user_id == user_id
        and s.submitted_at is not None
        and s.submitted_at.astimezone(tz).date() == today
    )


def user_economy_rules(
    user: UserEconomyState, submissions_today: int,
    *, calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> list[RuleResult]:
    return [
        rule_xp_boundaries(user),
        rule_coin_integrity(user),
        rule_level_integrity(user, calculator=calculator),
        rule_daily_mission_limit(user, submissions_today, calculator=calculator),
    ]


def run_full_economy_scan(
    snapshot: EconomySnapshot,
    *,
    now: datetime | None = None,
    tz: tzinfo = timezone.utc,
    calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> ScanResult:
    now = now or datetime.now(timezone.utc)
    scan = ScanResult()
    audit = AuditEngine(tz)
    per_user = snapshot.audit_logs.by_user()
    users_by_id = {u.id: u for u in snapshot.users}
    items_by_id = {i.id: i for i in snapshot.store_items}
    missions_by_id = {m.id: m for m in snapshot.missions}

    for user in snapshot.users:
        logs = per_user.get(user.id, AuditLogs())
        today = count_submissions_today(user.id, logs.submissions, now=now, tz=tz)
        results = user_economy_rules(user, today, calculator=calculator)
        results += audit.evaluate(user, logs, now)
        _collect(scan.user_reports, "user", user.id, user.id, results)

    for purchase in snapshot.purchases:
        buyer = users_by_id.get(purchase.user_id)
        item = items_by_id.get(purchase.item_id)
        if buyer is None or item is None:
            continue
        results = [
            rule_store_consistency(purchase, buyer, item, calculator=calculator),
            rule_plan_restriction(buyer, item),
        ]
        _collect(scan.store_reports, "purchase", purchase.id, buyer.id, results)

    for submission in snapshot.submissions:
        if submission.status != SubmissionStatus.APPROVED:
            continue
        author = users_by_id.get(submission.user_id)
        mission = missions_by_id.get(submission.mission_id)
        if author is None or mission is None:
            continue
        results = [rule_reward_math(submission, author, mission, calculator=calculator)]
        _collect(scan.submission_reports, "submission", submission.id, author.id, results)

    active_queue = [entry for entry in snapshot.queue if entry.is_active]
    _collect(scan.queue_reports, "queue", "queue", None, [rule_queue_integrity(active_queue)])

    scan.global_risk_level = classify_global_risk(scan)
    return scan


def run_economy_check_for_user(
    user: UserEconomyState, submissions: list[MissionSubmission],
    *,
    now: datetime | None = None,
    tz: tzinfo = timezone.utc,
    calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> RuleResult:
    """Single-user economy check collapsed into one RuleResult (worst severity wins)."""
    now = now or datetime.now(timezone.utc)
    today = count_submissions_today(user.id, submissions, now=now, tz=tz)
    failures = [
        r for r in user_economy_rules(user, today, calculator=calculator)
        if not r.passed
    ]
    if not failures:
        return passed("user_economy_check")
    return failed(
        "user_economy_check",
        worst_severity(failures),
        "; ".join(f.details for f in failures),
    )


def classify_global_risk(scan: ScanResult) -> RiskLevel:
    reports = scan.all_reports
    if any(report.errors for report in reports):
        return RiskLevel.CRITICAL
    if any(report.warnings for report in reports):
        return RiskLevel.ATTENTION
    return RiskLevel.STABLE


def _collect(
    bucket: list[SubjectReport], subject_type: str, subject_id: str,
    user_id: str | None, results: list[RuleResult],
) -> None:
    failures = [r for r in results if not r.passed]
    if failures:
        bucket.append(SubjectReport(subject_type, subject_id, user_id, failures))
