"""HTTP routes — ledger, admin gate, sentinel and health endpoints end to end.

Tests cover:
    - ledger apply: 200 with signature, 404 unknown user, 400 invalid amount
      and schema errors, 409 replay with the same idempotency key
    - admin actions: 200 for allowed edits, 422 for blocked ones, both audit-logged
    - sentinel scan / per-user check / audit summary / heal
    - health liveness and readiness, including ledger guard state
    - oversized deltas and malformed admin payloads are rejected, not 500s
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from econ_sentinel.models import AdminAuditLog, Transaction, User


@pytest.fixture
async def seeded(test_db):
    joined = datetime(2025, 1, 1, tzinfo=timezone.utc)
    test_db.add_all([
        User(id="u1", name="Ana", plan="Free Flow", coins=30, xp=100, joined_at=joined),
        User(id="u2", name="Bia", plan="Hitmaker", coins=-40, xp=200, joined_at=joined),
    ])
    await test_db.commit()
    return test_db


# ─── Ledger ─────────────────────────────────────────────────────

async def test_ledger_apply_clamps_and_records(client, seeded):
    response = await client.post(
        "/api/v1/ledger/u1/apply",
        json={"kind": "COIN", "delta": -50, "source": "store"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["previous_value"] == 30
    assert body["new_value"] == 0
    assert len(body["signature"]) == 64

    [tx] = (await seeded.execute(select(Transaction))).scalars().all()
    assert tx.type == "spend" and tx.amount == 30
    assert tx.signature == body["signature"]


async def test_ledger_unknown_user(client, seeded):
    response = await client.post(
        "/api/v1/ledger/ghost/apply",
        json={"kind": "COIN", "delta": 5, "source": "mission"},
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


async def test_ledger_invalid_amount(client, seeded):
    response = await client.post(
        "/api/v1/ledger/u1/apply",
        json={"kind": "COIN", "delta": "abc", "source": "mission"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_AMOUNT"


async def test_ledger_rejects_unknown_kind(client, seeded):
    response = await client.post(
        "/api/v1/ledger/u1/apply",
        json={"kind": "GEMS", "delta": 5, "source": "mission"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_ledger_rejects_delta_beyond_balance_column(client, seeded):
    payload = {
        "kind": "COIN", "delta": 10**30, "source": "mission",
        "idempotency_key": "submission-0002",
    }
    response = await client.post("/api/v1/ledger/u1/apply", json=payload)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_AMOUNT"

    retry = await client.post(
        "/api/v1/ledger/u1/apply", json={**payload, "delta": 5},
    )
    assert retry.status_code == 200
    assert retry.json()["new_value"] == 35


async def test_ledger_replay_rejected(client, seeded):
    payload = {
        "kind": "XP", "delta": 10, "source": "mission",
        "idempotency_key": "submission-0001",
    }
    first = await client.post("/api/v1/ledger/u1/apply", json=payload)
    second = await client.post("/api/v1/ledger/u1/apply", json=payload)
    assert first.status_code == 200
    assert first.json()["nonce"] == "submission-0001"
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "REPLAY_DETECTED"


# ─── Admin ──────────────────────────────────────────────────────

async def test_admin_allowed_action(client, seeded):
    response = await client.post("/api/v1/admin/actions", json={
        "action": "store_edit", "payload": {"name": "Troféu", "price": 300},
    })
    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert response.json()["blocked"] is False


async def test_admin_blocked_action_is_logged(client, seeded):
    response = await client.post("/api/v1/admin/actions", json={
        "action": "punishment", "payload": {"reason": "", "deduction": {"coins": 5}},
    })
    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "ADMIN_ACTION_BLOCKED"
    assert error["context"]["rule"] == "admin_punishment_safety"

    [entry] = (await seeded.execute(select(AdminAuditLog))).scalars().all()
    assert entry.action_name == "punishment"
    assert entry.blocked is True


async def test_admin_malformed_payload_is_blocked_not_crashed(client, seeded):
    response = await client.post("/api/v1/admin/actions", json={
        "action": "punishment", "payload": {"reason": "spam", "deduction": 5},
    })
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "ADMIN_ACTION_BLOCKED"

    [entry] = (await seeded.execute(select(AdminAuditLog))).scalars().all()
    assert entry.blocked is True


# ─── Sentinel ───────────────────────────────────────────────────

async def test_sentinel_scan_reports_negative_coins(client, seeded):
    response = await client.get("/api/v1/sentinel/scan")
    assert response.status_code == 200
    body = response.json()
    assert body["report"]["overall_status"] == "critical"
    assert body["report"]["risky_users"] == ["u2"]
    assert len(body["critical_alerts"]) == 1


async def test_sentinel_user_check(client, seeded):
    response = await client.get("/api/v1/sentinel/users/u1")
    assert response.status_code == 200
    body = response.json()
    assert body["check"]["passed"] is True
    assert body["audit"]["result_summary"]["risk_level"] == "safe"


async def test_sentinel_user_check_unknown(client, seeded):
    response = await client.get("/api/v1/sentinel/users/ghost")
    assert response.status_code == 404


async def test_sentinel_audit_summary(client, seeded):
    response = await client.get("/api/v1/sentinel/audit")
    assert response.status_code == 200
    assert response.json()["summary"]["total_users_audited"] == 2


async def test_sentinel_heal(client, seeded):
    response = await client.post("/api/v1/sentinel/users/u2/heal")
    assert response.status_code == 200
    assert response.json()["healed"] is True
    assert response.json()["user"]["coins"] == 0

    seeded.expire_all()
    assert (await seeded.get(User, "u2")).coins == 0


# ─── Health ─────────────────────────────────────────────────────

async def test_health_liveness(client):
    response = await client.get("/api/v1/health/")
    assert response.status_code == 200
    assert response.json()["service"] == "econ-sentinel"


async def test_health_readiness(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


async def test_health_readiness_reports_ledger_guards(client, seeded):
    await client.post(
        "/api/v1/ledger/u1/apply",
        json={"kind": "XP", "delta": 10, "source": "mission",
              "idempotency_key": "submission-0003"},
    )
    response = await client.get("/api/v1/health/ready")
    ledger = response.json()["checks"]["ledger"]
    assert ledger["locks_held"] == 0
    assert ledger["nonces_tracked"] == 1
    assert ledger["signing_key"] in {"configured", "development_default"}
