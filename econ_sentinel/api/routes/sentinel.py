"""Sentinel Routes — economy health scans, per-user checks, audit summary, healing.

Invariants:
    - GET endpoints are read-only
    - POST /users/{user_id}/heal is the only write and shares the ledger's user lock
"""

from fastapi import APIRouter, Depends

from econ_sentinel.api.routes.dependencies import get_sentinel
from econ_sentinel.schemas.sentinel import (
    AuditSummaryResponse, HealResponse, ScanResponse, UserCheckResponse,
)
from econ_sentinel.services.sentinel_service import SentinelService

router = APIRouter(prefix="/api/v1/sentinel", tags=["sentinel"])


@router.get("/scan", response_model=ScanResponse)
async def full_scan(sentinel: SentinelService = Depends(get_sentinel)):
    """Full-population scan: health report plus high-severity alerts."""
    return await sentinel.scan_report()


@router.get("/users/{user_id}", response_model=UserCheckResponse)
async def user_check(
    user_id: str, sentinel: SentinelService = Depends(get_sentinel),
):
    return await sentinel.run_for_user(user_id)


@router.get("/audit", response_model=AuditSummaryResponse)
async def audit_summary(sentinel: SentinelService = Depends(get_sentinel)):
    return await sentinel.audit_summary()


@router.post("/users/{user_id}/heal", response_model=HealResponse)
async def heal_user(
    user_id: str, sentinel: SentinelService = Depends(get_sentinel),
):
    return await sentinel.heal_user(user_id)
