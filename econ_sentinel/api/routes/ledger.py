"""Ledger Routes — HTTP entry point to the Ledger Mutation Core.

Invariants:
    - The only HTTP path that changes coins or xp
    - Lock conflicts surface as 409 with retry_after_ms (global EconSentinelError handler)
"""

import logging

from fastapi import APIRouter, Depends

from econ_sentinel.api.routes.dependencies import get_ledger
from econ_sentinel.schemas.ledger import LedgerApplyRequest, LedgerApplyResponse
from econ_sentinel.services.ledger_core import LedgerCore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ledger", tags=["ledger"])


@router.post("/{user_id}/apply", response_model=LedgerApplyResponse)
async def apply_mutation(
    user_id: str, body: LedgerApplyRequest,
    ledger: LedgerCore = Depends(get_ledger),
):
    """Apply a signed, floor-clamped coin or XP delta to one user."""
    result = await ledger.apply(
        user_id, body.kind, body.delta, body.source, body.idempotency_key,
    )
    return LedgerApplyResponse(user_id=user_id, kind=body.kind, **result.to_dict())
