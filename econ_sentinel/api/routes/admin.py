"""Admin Routes — pre-commit validation of admin edits.

Invariants:
    - Every request is recorded in admin_audit_log before the verdict is returned
    - A failed HIGH rule answers 422 with the rule details verbatim
"""

from fastapi import APIRouter, Depends

from econ_sentinel.api.routes.dependencies import get_admin_monitor
from econ_sentinel.core.admin_rules import AdminAction
from econ_sentinel.schemas.admin import AdminActionRequest, AdminActionResponse
from econ_sentinel.services.admin_monitor import AdminMonitor

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.post("/actions", response_model=AdminActionResponse)
async def validate_admin_action(
    body: AdminActionRequest,
    monitor: AdminMonitor = Depends(get_admin_monitor),
):
    result = await monitor.evaluate(AdminAction(body.action, body.payload))
    return AdminMonitor.enforce(result).to_dict()
