"""Ledger Schemas — request/response contracts for balance mutations.

Invariants:
    - kind is COIN or XP (Literal, validated by Pydantic)
    - delta is accepted as any JSON value and sanitized by the ledger,
      so a malformed amount surfaces as INVALID_AMOUNT rather than a schema error
    - source is required and non-blank
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class LedgerApplyRequest(BaseModel):
    kind: Literal["COIN", "XP"]
    delta: Any
    source: str = Field(min_length=1, max_length=80)
    idempotency_key: str | None = Field(None, min_length=8, max_length=128)

    @field_validator("source")
    @classmethod
    def strip_source(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("source cannot be empty or whitespace")
        return v


class LedgerApplyResponse(BaseModel):
    user_id: str
    kind: str
    previous_value: int
    new_value: int
    signature: str
    nonce: str
