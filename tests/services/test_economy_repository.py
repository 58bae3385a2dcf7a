"""SqlEconomyRepository — EconomyRepository over SQLAlchemy async sessions.

Tests cover:
    - insert returns the stored record with generated id and column defaults
    - unknown record keys are dropped, unknown collections raise KeyError
    - update applies the updater to matching rows only and never rewrites ids
    - update with record_id loads only that row
    - rollback discards flushed but uncommitted changes
"""

import pytest

from econ_sentinel.models import User
from econ_sentinel.services.economy_repository import SqlEconomyRepository


@pytest.fixture
def repo(test_db):
    return SqlEconomyRepository(test_db)


async def test_insert_fills_defaults(repo):
    record = await repo.insert("users", {"name": "Ana", "coins": 12, "derived": 1})
    assert record["id"]
    assert record["coins"] == 12
    assert record["plan"] == "Free Flow"
    assert record["level"] == 1
    assert "derived" not in record


async def test_get_and_select(repo):
    await repo.insert("users", {"id": "u1", "coins": 5})
    await repo.insert("users", {"id": "u2", "coins": 7})
    await repo.commit()

    assert (await repo.get("users", "u1"))["coins"] == 5
    assert await repo.get("users", "missing") is None
    assert {r["id"] for r in await repo.select("users")} == {"u1", "u2"}


async def test_update_matching_rows_only(repo, test_db):
    await repo.insert("users", {"id": "u1", "coins": 5})
    await repo.insert("users", {"id": "u2", "coins": 7})

    updated = await repo.update(
        "users",
        lambda r: r["id"] == "u1",
        lambda r: {**r, "id": "hijacked", "coins": r["coins"] + 10},
    )
    await repo.commit()

    assert updated == 1
    assert (await test_db.get(User, "u1")).coins == 15
    assert (await test_db.get(User, "u2")).coins == 7
    assert await test_db.get(User, "hijacked") is None


async def test_rollback_discards_uncommitted(repo):
    await repo.insert("users", {"id": "u1", "coins": 5})
    await repo.commit()
    await repo.update("users", lambda r: True, lambda r: {**r, "coins": 0})
    await repo.rollback()
    assert (await repo.get("users", "u1"))["coins"] == 5


async def test_json_columns_round_trip(repo):
    await repo.insert("admin_audit_log", {
        "action_name": "store_edit",
        "payload": {"name": "Boné", "price": -5},
        "validation_result": [{"rule": "store_price_safety", "passed": False}],
        "blocked": True,
    })
    [entry] = await repo.select("admin_audit_log")
    assert entry["payload"]["price"] == -5
    assert entry["blocked"] is True


async def test_unknown_collection(repo):
    with pytest.raises(KeyError):
        await repo.select("wallets")


async def test_update_by_record_id_loads_only_that_row(repo, test_db):
    await repo.insert("users", {"id": "u1", "coins": 5})
    await repo.insert("users", {"id": "u2", "coins": 7})
    await repo.commit()

    seen = []

    def predicate(record):
        seen.append(record["id"])
        return True

    updated = await repo.update(
        "users", predicate, lambda r: {**r, "coins": 1}, record_id="u2",
    )
    await repo.commit()

    assert updated == 1
    assert seen == ["u2"]
    assert (await test_db.get(User, "u1")).coins == 5
    assert (await test_db.get(User, "u2")).coins == 1
    assert await repo.update("users", predicate, lambda r: r, record_id="ghost") == 0
