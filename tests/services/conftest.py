"""Service test fixtures — async DB, in-memory repository, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness check sees the test engine
    - Process-wide lock/replay registries are reset around every test

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - InMemoryEconomyRepository yields to the event loop on every read so concurrent
      ledger calls genuinely interleave
"""

import asyncio
import copy

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

import econ_sentinel.models  # noqa: F401
from econ_sentinel.db.base import Base
from econ_sentinel.infrastructure.database import get_db, DatabaseSessionManager
from econ_sentinel.infrastructure.replay_guard import ReplayGuard
from econ_sentinel.infrastructure.resource_lock import ResourceLock
from econ_sentinel.services.ledger_core import LedgerCore, get_process_guards
import econ_sentinel.infrastructure.database as db_module
from econ_sentinel.main import app


class InMemoryEconomyRepository:
    """Dict-of-lists EconomyRepository; rollback restores the last committed state."""

    def __init__(self, collections: dict[str, list[dict]] | None = None):
        self.collections = copy.deepcopy(collections or {})
        self._committed = copy.deepcopy(self.collections)
        self.commits = 0
        self.rollbacks = 0

    async def select(self, collection):
        await asyncio.sleep(0)
        return [dict(r) for r in self.collections.get(collection, [])]

    async def get(self, collection, record_id):
        await asyncio.sleep(0)
        for record in self.collections.get(collection, []):
            if record.get("id") == record_id:
                return dict(record)
        return None

    async def insert(self, collection, record):
        stored = {"id": f"{collection}-{len(self.collections.get(collection, []))}", **record}
        self.collections.setdefault(collection, []).append(stored)
        return dict(stored)

    async def update(self, collection, predicate, updater, record_id=None):
        rows = self.collections.get(collection, [])
        updated = 0
        for index, record in enumerate(rows):
            if record_id is not None and record.get("id") != record_id:
                continue
            if predicate(dict(record)):
                rows[index] = updater(dict(record))
                updated += 1
        return updated

    async def commit(self):
        self.commits += 1
        self._committed = copy.deepcopy(self.collections)

    async def rollback(self):
        self.rollbacks += 1
        self.collections = copy.deepcopy(self._committed)


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def make_repo():
    return InMemoryEconomyRepository


@pytest.fixture
def memory_repo():
    return InMemoryEconomyRepository({
        "users": [
            {"id": "u1", "plan": "Free Flow", "coins": 30, "xp": 100, "level": 1},
            {"id": "u2", "plan": "Hitmaker", "coins": 1000, "xp": 3500, "level": 3},
        ],
    })


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(memory_repo, clock):
    return LedgerCore(
        memory_repo,
        ResourceLock(clock=clock),
        ReplayGuard(clock=clock),
        signing_key="test-signing-key",
        clock=clock,
    )


@pytest.fixture(autouse=True)
def reset_process_guards():
    get_process_guards.cache_clear()
    yield
    get_process_guards.cache_clear()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
