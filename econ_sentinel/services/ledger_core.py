"""Ledger Mutation Core — the single authorized gate for coin/XP balance changes.

Invariants:
    - Every apply() holds the advisory lock "value:<user_id>" for its whole duration
      and releases it in a finally block
    - Lock conflict, unknown user, invalid amount and replay all fail BEFORE any write
    - An amount whose result would not fit the 32-bit balance column is an invalid amount
    - new_value = max(0, current + delta): no balance is ever persisted negative
    - COIN mutations append a Transaction in the same commit as the balance update
    - XP mutations change xp only; level drift is the sentinel's and Auto-Heal's concern

Design Decisions:
    - Lock and replay registries are injected: one pair per process via
      get_process_guards(), fresh pairs in tests (ADR: no module-level mutable state)
    - idempotency_key doubles as the nonce, scoped per user: a retried request with the
      same key is rejected as a replay instead of being applied twice, unless the first
      attempt rolled back, in which case the key is released again
    - No inline retry on lock conflict: LockConflictError carries retry_after_ms and
      the caller decides the backoff
"""

import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable

from econ_sentinel.config import get_settings
from econ_sentinel.core.domain_types import LedgerKind, TransactionType
from econ_sentinel.core.errors import (
    ErrorContext, InvalidAmountError, LockConflictError,
    ReplayDetectedError, UserNotFoundError,
)
from econ_sentinel.core.ledger_operation import (
    LedgerOperation, generate_nonce, sign_operation,
)
from econ_sentinel.core.repository_protocols import EconomyRepository
from econ_sentinel.core.sanitize import (
    MAX_STORED_VALUE, coerce_amount, sanitize_int, sanitize_string,
)
from econ_sentinel.infrastructure.replay_guard import ReplayGuard
from econ_sentinel.infrastructure.resource_lock import ResourceLock

logger = logging.getLogger(__name__)

LOCK_PREFIX = "value:"
_BALANCE_FIELDS = {LedgerKind.COIN: "coins", LedgerKind.XP: "xp"}


@dataclass(frozen=True)
class LedgerResult:
    previous_value: int
    new_value: int
    signature: str
    nonce: str

    def to_dict(self) -> dict:
        return {
            "previous_value": self.previous_value,
            "new_value": self.new_value,
            "signature": self.signature,
            "nonce": self.nonce,
        }


class LedgerCore:
    """Serializes balance mutations per user and signs each one."""

    def __init__(
        self,
        repository: EconomyRepository,
        lock: ResourceLock,
        replay_guard: ReplayGuard,
        signing_key: str,
        lock_ttl_ms: int | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.repository = repository
        self.lock = lock
        self.replay_guard = replay_guard
        self.signing_key = signing_key
        self.lock_ttl_ms = lock_ttl_ms
        self._clock = clock

    async def apply(
        self,
        user_id: str,
        kind: LedgerKind | str,
        delta: Any,
        source: str,
        idempotency_key: str | None = None,
    ) -> LedgerResult:
        kind = LedgerKind(kind)
        lock_key = LOCK_PREFIX + user_id
        if not self.lock.acquire(lock_key, self.lock_ttl_ms):
            raise LockConflictError(
                lock_key,
                retry_after_ms=self.lock.remaining_ms(lock_key),
                context=ErrorContext(user_id=user_id, source=source),
            )
        try:
            return await self._apply_locked(
                user_id, kind, delta, source, idempotency_key,
            )
        finally:
            self.lock.release(lock_key)

    async def _apply_locked(
        self, user_id: str, kind: LedgerKind, delta: Any, source: str,
        idempotency_key: str | None,
    ) -> LedgerResult:
        user = await self.repository.get("users", user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        context = ErrorContext(user_id=user_id, source=source)
        amount = coerce_amount(delta)
        if amount is None:
            raise InvalidAmountError(delta, context)

        field = _BALANCE_FIELDS[kind]
        previous = sanitize_int(user.get(field))
        new_value = max(0, previous + amount)
        if new_value > MAX_STORED_VALUE:
            raise InvalidAmountError(delta, context)

        nonce = idempotency_key or generate_nonce()
        replay_key = f"{user_id}:{nonce}"
        if not self.replay_guard.accept(replay_key):
            logger.warning(
                f"Replay rejected for {user_id}",
                extra={"user_id": user_id, "nonce": nonce, "source": source},
            )
            raise ReplayDetectedError(nonce, context)

        operation = LedgerOperation(
            user_id=user_id, kind=kind, delta=amount,
            source=sanitize_string(source),
            timestamp_ms=int(self._clock() * 1000), nonce=nonce,
        )
        signature = sign_operation(operation, self.signing_key)

        try:
            await self.repository.update(
                "users",
                lambda record: record["id"] == user_id,
                lambda record: {**record, field: new_value},
                record_id=user_id,
            )
            applied = new_value - previous
            if kind == LedgerKind.COIN and applied != 0:
                await self.repository.insert("transactions", {
                    "user_id": user_id,
                    "type": (
                        TransactionType.EARN.value if applied > 0
                        else TransactionType.SPEND.value
                    ),
                    "amount": abs(applied),
                    "source": operation.source,
                    "signature": signature,
                })
            await self.repository.commit()
        except Exception:
            await self.repository.rollback()
            # nothing was applied, so a retry with the same key must go through
            self.replay_guard.forget(replay_key)
            raise

        logger.info(
            f"[LEDGER] {kind.value} {previous} -> {new_value}",
            extra={
                "user_id": user_id, "kind": kind.value, "delta": amount,
                "source": operation.source, "signature": signature,
                "nonce": nonce,
            },
        )
        return LedgerResult(previous, new_value, signature, nonce)


@lru_cache
def get_process_guards() -> tuple[ResourceLock, ReplayGuard]:
    """One lock registry and one replay registry per process."""
    settings = get_settings()
    return (
        ResourceLock(default_ttl_ms=settings.lock_ttl_ms),
        ReplayGuard(retention_seconds=settings.replay_window_seconds),
    )


def build_ledger_core(repository: EconomyRepository) -> LedgerCore:
    settings = get_settings()
    lock, replay_guard = get_process_guards()
    return LedgerCore(
        repository, lock, replay_guard,
        signing_key=settings.ledger_signing_key,
        lock_ttl_ms=settings.lock_ttl_ms,
    )
