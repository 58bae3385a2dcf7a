"""Resource Lock — advisory TTL lock keyed by string.

Tests cover:
    - acquire is exclusive while the entry is unexpired
    - release frees the key unconditionally
    - expired entries are free again (crashed holder self-expires)
    - contention is logged with the lock key
"""

import logging

from econ_sentinel.infrastructure.resource_lock import ResourceLock


class _Clock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_acquire_free_key_succeeds():
    lock = ResourceLock(clock=_Clock())
    assert lock.acquire("value:u1") is True
    assert lock.is_held("value:u1")


def test_second_acquire_fails_while_held():
    lock = ResourceLock(clock=_Clock())
    lock.acquire("value:u1")
    assert lock.acquire("value:u1") is False


def test_keys_are_independent():
    lock = ResourceLock(clock=_Clock())
    lock.acquire("value:u1")
    assert lock.acquire("value:u2") is True


def test_release_frees_key():
    lock = ResourceLock(clock=_Clock())
    lock.acquire("value:u1")
    lock.release("value:u1")
    assert not lock.is_held("value:u1")
    assert lock.acquire("value:u1") is True


def test_release_of_unknown_key_is_noop():
    lock = ResourceLock(clock=_Clock())
    lock.release("never-acquired")
    assert not lock.is_held("never-acquired")


def test_expired_entry_is_free():
    clock = _Clock()
    lock = ResourceLock(clock=clock)
    lock.acquire("value:u1", ttl_ms=5000)
    clock.now += 5.0
    assert not lock.is_held("value:u1")
    assert lock.acquire("value:u1") is True


def test_entry_still_held_just_before_expiry():
    clock = _Clock()
    lock = ResourceLock(clock=clock)
    lock.acquire("value:u1", ttl_ms=5000)
    clock.now += 4.999
    assert lock.acquire("value:u1") is False


def test_remaining_ms_counts_down():
    clock = _Clock()
    lock = ResourceLock(default_ttl_ms=2000, clock=clock)
    lock.acquire("k")
    clock.now += 0.5
    assert lock.remaining_ms("k") == 1500
    assert lock.remaining_ms("other") == 0


def test_contention_is_logged(caplog):
    lock = ResourceLock(clock=_Clock())
    lock.acquire("value:u1")
    with caplog.at_level(logging.WARNING):
        lock.acquire("value:u1")
    assert any(
        getattr(r, "lock_key", None) == "value:u1" for r in caplog.records
    )


def test_held_count_ignores_expired_entries():
    clock = _Clock()
    lock = ResourceLock(default_ttl_ms=1000, clock=clock)
    lock.acquire("value:u1")
    lock.acquire("value:u2", ttl_ms=5000)
    assert lock.held_count() == 2
    clock.now += 2
    assert lock.held_count() == 1
