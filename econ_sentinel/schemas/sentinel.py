"""Sentinel Schemas — health report, per-user check and audit summary responses."""

from pydantic import BaseModel

from econ_sentinel.schemas.admin import RuleResultSchema


class EconomyPattern(BaseModel):
    type: str
    rule: str
    severity: str
    detail: str
    subject_id: str


class HealthReport(BaseModel):
    overall_status: str
    risky_user_count: int
    risky_users: list[str]
    total_issues: int
    patterns: list[EconomyPattern]


class ScanResponse(BaseModel):
    report: HealthReport
    critical_alerts: list[str]


class AuditResultSummary(BaseModel):
    passed_rules: int
    failed_rules: int
    risk_level: str


class UserAudit(BaseModel):
    user_id: str
    result_summary: AuditResultSummary
    details: list[RuleResultSchema]


class UserCheckResponse(BaseModel):
    user_id: str
    check: RuleResultSchema
    audit: UserAudit


class AuditSummaryResponse(BaseModel):
    summary: dict
    system_wide_anomalies: list[str]


class HealResponse(BaseModel):
    user_id: str
    healed: bool
    user: dict
