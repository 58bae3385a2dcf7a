"""Health & Readiness Checks — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if database is unreachable (readiness)
    - Readiness also reports the ledger guards (locks held, nonces tracked) and
      whether the signing key is still the development default

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
    - db_manager read through the module at call time: it is created in the lifespan
    - A development signing key degrades readiness to a warning, not a 503: local
      docker-compose runs must still come up
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from econ_sentinel import __version__
from econ_sentinel.config import DEV_SIGNING_KEY, get_settings
import econ_sentinel.infrastructure.database as database
from econ_sentinel.services.ledger_core import get_process_guards

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness check. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "econ-sentinel",
        "version": __version__,
    }


def _ledger_status() -> dict:
    lock, replay_guard = get_process_guards()
    default_key = get_settings().ledger_signing_key == DEV_SIGNING_KEY
    if default_key:
        logger.warning("Ledger is signing with the development key")
    return {
        "locks_held": lock.held_count(),
        "nonces_tracked": len(replay_guard),
        "signing_key": "development_default" if default_key else "configured",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check: database connectivity plus ledger guard state."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        logger.warning("Readiness check failed: database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy", "ledger": _ledger_status()},
    }
