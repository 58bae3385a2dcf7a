"""Sentinel Reporter — turns a ScanResult into a health report and paging alerts.

Invariants:
    - Pure: no IO, output is JSON-serializable
    - risky_users is deduplicated and sorted (stable output for dashboards and tests)
    - critical_alerts contains HIGH-severity failures only, one plain-text line each
"""

from econ_sentinel.core.sentinel_engine import ScanResult, SubjectReport

PATTERN_TYPES: dict[str, str] = {
    "user": "User Economy",
    "purchase": "Store",
    "submission": "Mission Reward",
    "queue": "Queue",
}

ALERT_PREFIXES: dict[str, str] = {
    "user": "User",
    "purchase": "Purchase",
    "submission": "Submission",
    "queue": "Queue",
}


def health_report(scan: ScanResult) -> dict:
    reports = scan.all_reports
    risky_users = sorted({r.user_id for r in reports if r.user_id})
    patterns = [
        {
            "type": PATTERN_TYPES[report.subject_type],
            "rule": failure.rule,
            "severity": failure.severity.value,
            "detail": failure.details,
            "subject_id": report.subject_id,
        }
        for report in reports
        for failure in report.failures
    ]
    return {
        "overall_status": scan.global_risk_level.value,
        "risky_user_count": len(risky_users),
        "risky_users": risky_users,
        "total_issues": len(patterns),
        "patterns": patterns,
    }


def critical_alerts(scan: ScanResult) -> list[str]:
    return [
        _alert_line(report, error.details)
        for report in scan.all_reports
        for error in report.errors
    ]


def _alert_line(report: SubjectReport, detail: str) -> str:
    prefix = ALERT_PREFIXES[report.subject_type]
    if report.subject_type == "queue":
        return f"{prefix}: {detail}"
    return f"{prefix} {report.subject_id}: {detail}"
