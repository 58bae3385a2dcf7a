"""Replay Guard — short-lived registry that accepts each mutation nonce once.

Invariants:
    - accept(nonce) is True the first time, False on reuse inside the retention window
    - After the window elapses the nonce is forgotten and accepted again
    - Expired nonces are purged on every call (no background timer)
    - forget(nonce) releases a nonce early so a rolled-back mutation can be retried

Design Decisions:
    - Lazy purge instead of per-nonce timers: no threads or tasks to cancel on shutdown
    - Injectable clock, instance-owned state: tests get isolated guards
"""

import threading
import time
from typing import Callable

DEFAULT_RETENTION_SECONDS = 300


class ReplayGuard:
    """Nonce -> expiry registry with a fixed retention window."""

    def __init__(
        self, retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.retention_seconds = retention_seconds
        self._clock = clock
        self._seen: dict[str, float] = {}
        self._guard = threading.Lock()

    def accept(self, nonce: str) -> bool:
        with self._guard:
            now = self._clock()
            self._purge(now)
            if nonce in self._seen:
                return False
            self._seen[nonce] = now + self.retention_seconds
            return True

    def forget(self, nonce: str) -> None:
        with self._guard:
            self._seen.pop(nonce, None)

    def __len__(self) -> int:
        with self._guard:
            self._purge(self._clock())
            return len(self._seen)

    def _purge(self, now: float) -> None:
        expired = [n for n, expiry in self._seen.items() if expiry <= now]
        for nonce in expired:
            del self._seen[nonce]
