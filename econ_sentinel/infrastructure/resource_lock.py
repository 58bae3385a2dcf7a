"""Resource Lock — advisory, non-blocking, TTL-bounded mutual exclusion by string key.

Invariants:
    - acquire() never waits: it returns False immediately when an unexpired entry exists
    - An entry past its expiry is free: a crashed holder self-expires after ttl
    - release() deletes unconditionally (cooperative callers only)
    - The key -> expiry map is instance state guarded by a threading.Lock

Design Decisions:
    - Advisory TTL lock, not an OS mutex: single-process deployment (ADR: liveness over
      correctness-under-failure). Before running more than one instance this MUST be
      replaced by a database row lock or lease
    - Injectable monotonic clock: tests drive expiry without sleeping
"""

import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 5000


class ResourceLock:
    """Key -> expiry registry. One instance per process, injected where needed."""

    def __init__(
        self, default_ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl_ms = default_ttl_ms
        self._clock = clock
        self._expiries: dict[str, float] = {}
        self._guard = threading.Lock()

    def acquire(self, key: str, ttl_ms: int | None = None) -> bool:
        ttl = self.default_ttl_ms if ttl_ms is None else ttl_ms
        with self._guard:
            now = self._clock()
            expiry = self._expiries.get(key)
            if expiry is not None and expiry > now:
                logger.warning(
                    f"Lock contention on {key}",
                    extra={"lock_key": key},
                )
                return False
            self._expiries[key] = now + ttl / 1000
            return True

    def release(self, key: str) -> None:
        with self._guard:
            self._expiries.pop(key, None)

    def is_held(self, key: str) -> bool:
        with self._guard:
            expiry = self._expiries.get(key)
            return expiry is not None and expiry > self._clock()

    def remaining_ms(self, key: str) -> int:
        """Time until the current holder's entry expires (0 when free)."""
        with self._guard:
            expiry = self._expiries.get(key)
            if expiry is None:
                return 0
            return max(0, int((expiry - self._clock()) * 1000))

    def held_count(self) -> int:
        with self._guard:
            now = self._clock()
            return sum(1 for expiry in self._expiries.values() if expiry > now)
