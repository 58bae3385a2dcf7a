"""Admin Schemas — admin action envelope and monitor verdict.

Invariants:
    - action is free text: unknown actions are rejected by the rule engine (HIGH), not here
    - payload shape depends on action and is parsed by core/admin_rules.py
"""

from pydantic import BaseModel, Field


class AdminActionRequest(BaseModel):
    action: str = Field(min_length=1, max_length=50)
    payload: dict = Field(default_factory=dict)


class RuleResultSchema(BaseModel):
    rule: str
    passed: bool
    severity: str
    details: str = ""


class AdminActionResponse(BaseModel):
    ok: bool
    blocked: bool
    alerts: list[str]
    result: RuleResultSchema
