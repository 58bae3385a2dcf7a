"""Audit Reporter — population-level summaries of per-user audit results.

Invariants:
    - Pure: input is a list of AuditResult, output is a JSON-serializable dict
    - most_violated_rules holds at most 5 entries, sorted by count descending
    - System-wide anomalies fire on population ratios, never on a single user

Design Decisions:
    - Thresholds relative to population size: a fixed count would page on big days
"""

from collections import Counter

from econ_sentinel.core.audit_engine import AuditResult
from econ_sentinel.core.domain_types import AuditRiskLevel

MOST_VIOLATED_LIMIT = 5
RAPID_GROWTH_POPULATION_SHARE = 0.10
UNUSUAL_GAIN_POPULATION_SHARE = 0.05


def summarize_audit(results: list[AuditResult]) -> dict:
    violations = Counter(
        detail.rule
        for result in results
        for detail in result.details
        if not detail.passed
    )
    return {
        "total_users_audited": len(results),
        "high_risk_users": _users_at(results, AuditRiskLevel.DANGER),
        "attention_users": _users_at(results, AuditRiskLevel.ATTENTION),
        "most_violated_rules": [
            {"rule": rule, "count": count}
            for rule, count in violations.most_common(MOST_VIOLATED_LIMIT)
        ],
    }


def detect_system_wide_anomalies(results: list[AuditResult]) -> list[str]:
    if not results:
        return []
    anomalies = []
    if _failure_share(results, "rapid_level_growth") > RAPID_GROWTH_POPULATION_SHARE:
        anomalies.append(
            "Muitos usuários com evolução de nível suspeita. Verificar economia de XP.",
        )
    if _failure_share(results, "unusual_lc_gain") > UNUSUAL_GAIN_POPULATION_SHARE:
        anomalies.append(
            "Muitos usuários com ganho de LC anormal. Verificar fontes de moedas.",
        )
    return anomalies


def _users_at(results: list[AuditResult], level: AuditRiskLevel) -> list[dict]:
    return [
        {"user_id": r.user_id, "failed_rules": r.failed_rules}
        for r in results if r.risk_level == level
    ]


def _failure_share(results: list[AuditResult], rule: str) -> float:
    hits = sum(
        1 for r in results
        if any(d.rule == rule and not d.passed for d in r.details)
    )
    return hits / len(results)
