"""Error Handlers — global exception handlers for the economy API.

Invariants:
    - EconSentinelError → its own to_response() envelope and http_status
    - LockConflictError answers with a Retry-After header (whole seconds, rounded up)
    - RequestValidationError → 400 VALIDATION_ERROR with one entry per field
    - Anything else → 500 INTERNAL_ERROR, internals only in the server log

Design Decisions:
    - Three handlers registered from one function so main.py stays a wiring file
      (ADR: ExMA import fan-out < 10)
    - 4xx domain errors log at WARNING: they are caller mistakes or contention,
      not service faults
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from econ_sentinel.core.errors import (
    EconSentinelError, ErrorCategory, ErrorSeverity, LockConflictError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EconSentinelError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


async def handle_domain_error(request: Request, exc: EconSentinelError):
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code, "path": request.url.path,
            "user_id": exc.context.user_id, "rule": exc.context.rule,
            "lock_key": getattr(exc, "lock_key", None),
        },
    )
    return JSONResponse(
        status_code=exc.http_status, content=exc.to_response(),
        headers=_retry_after(exc),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    fields = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Invalid request on {request.url.path}: "
        f"{', '.join(f['field'] for f in fields)}",
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=fields,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}", exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def _retry_after(exc: EconSentinelError) -> dict[str, str] | None:
    if not isinstance(exc, LockConflictError) or not exc.context.retry_after_ms:
        return None
    return {"Retry-After": str(math.ceil(exc.context.retry_after_ms / 1000))}


def _envelope(
    code: str, message: str, category: ErrorCategory,
    severity: ErrorSeverity, **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }
