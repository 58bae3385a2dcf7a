"""Error Hierarchy — typed, categorized exceptions for every ledger failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are the caller's problem; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - Rule failures are NOT errors: sanity/audit/admin rules return RuleResult data

Design Decisions:
    - Single hierarchy with EconSentinelError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - LockConflictError carries retry_after_ms: caller decides backoff, ledger never retries inline
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    SECURITY = "security"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    source: str | None = None
    rule: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class EconSentinelError(Exception):
    """Base exception for all economic-integrity errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "source": self.context.source,
                    "rule": self.context.rule,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Ledger Errors ──────────────────────────────────────────────

class LockConflictError(EconSentinelError):
    """Another mutation holds the advisory lock for this user. Transient."""
    def __init__(
        self, lock_key: str, retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            "Operação bloqueada: concorrência detectada.",
            "LOCK_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.lock_key = lock_key


class UserNotFoundError(EconSentinelError):
    """Ledger target user does not exist."""
    def __init__(self, user_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_id = user_id
        super().__init__(
            f"Usuário '{user_id}' não encontrado.",
            "USER_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.user_id = user_id


class InvalidAmountError(EconSentinelError):
    """Delta is not a finite integral amount."""
    def __init__(self, raw_value: Any, context: ErrorContext | None = None):
        super().__init__(
            f"Valor inválido: {raw_value!r}.",
            "INVALID_AMOUNT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.raw_value = raw_value


class ReplayDetectedError(EconSentinelError):
    """Mutation nonce was already consumed inside the retention window."""
    def __init__(self, nonce: str, context: ErrorContext | None = None):
        super().__init__(
            "Replay detectado ou falha na geração de nonce.",
            "REPLAY_DETECTED", ErrorCategory.SECURITY,
            ErrorSeverity.CRITICAL, context, 409,
        )
        self.nonce = nonce


# ─── Admin Gate Errors ──────────────────────────────────────────

class AdminActionBlockedError(EconSentinelError):
    """Admin mutation rejected by a high-severity pre-commit rule."""
    def __init__(self, rule: str, details: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.rule = rule
        super().__init__(
            details, "ADMIN_ACTION_BLOCKED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 422,
        )
        self.rule = rule
        self.details = details


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(EconSentinelError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
