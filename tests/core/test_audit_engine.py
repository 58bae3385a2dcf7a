"""Audit engine and audit reporter — per-user verdicts and population summaries."""

from datetime import datetime, timedelta, timezone

from econ_sentinel.core.audit_engine import AuditEngine, AuditLogs
from econ_sentinel.core.audit_reporter import (
    detect_system_wide_anomalies, summarize_audit,
)
from econ_sentinel.core.domain_types import AuditRiskLevel, TransactionType
from econ_sentinel.core.economy_state import (
    RedeemedItem, Transaction, UserEconomyState,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
EMPTY_LOGS = AuditLogs(transactions=[], submissions=[], redeemed_items=[])


def _user(user_id: str, **overrides) -> UserEconomyState:
    fields = {"id": user_id, "joined_at": NOW - timedelta(days=60)}
    fields.update(overrides)
    return UserEconomyState(**fields)


def test_clean_user_is_safe():
    result = AuditEngine().run_audit_for_user(_user("u1"), EMPTY_LOGS, NOW)
    assert result.risk_level is AuditRiskLevel.SAFE
    assert result.failed_rules == 0
    assert result.passed_rules == 6


def test_high_failure_makes_user_dangerous():
    user = _user("u1", weekly_check_in_streak=9)
    result = AuditEngine().run_audit_for_user(user, EMPTY_LOGS, NOW)
    assert result.risk_level is AuditRiskLevel.DANGER
    assert result.to_dict()["result_summary"]["failed_rules"] == 1


def test_medium_failure_means_attention():
    logs = AuditLogs(
        transactions=[Transaction("u1", TransactionType.EARN, 800, "event", NOW)],
        submissions=[], redeemed_items=[],
    )
    result = AuditEngine().run_audit_for_user(_user("u1"), logs, NOW)
    assert result.risk_level is AuditRiskLevel.ATTENTION


def test_run_for_all_users_skips_admins():
    users = [_user("u1"), _user("a1", role="admin"), _user("s1", role="superadmin")]
    results = AuditEngine().run_audit_for_all_users(users, EMPTY_LOGS, NOW)
    assert [r.user_id for r in results] == ["u1"]


def test_summary_counts_and_ranks_rules():
    purchase = RedeemedItem(
        id="r1", user_id="u2", item_id="i1", item_name="Badge", item_price=100,
        coins_before=100, coins_after=-5, redeemed_at=NOW,
    )
    logs = AuditLogs(transactions=[], submissions=[], redeemed_items=[purchase])
    users = [_user("u1"), _user("u2"), _user("u3", weekly_check_in_streak=9)]
    results = AuditEngine().run_audit_for_all_users(users, logs, NOW)

    summary = summarize_audit(results)
    assert summary["total_users_audited"] == 3
    assert {u["user_id"] for u in summary["high_risk_users"]} == {"u2", "u3"}
    assert summary["attention_users"] == []
    rules = {entry["rule"] for entry in summary["most_violated_rules"]}
    assert rules == {"store_anomaly", "impossible_streak"}


def test_system_wide_rapid_growth_detected():
    fresh = NOW - timedelta(hours=6)
    users = [_user(f"u{i}", level=9, joined_at=fresh) for i in range(2)]
    users += [_user(f"v{i}") for i in range(8)]
    results = AuditEngine().run_audit_for_all_users(users, EMPTY_LOGS, NOW)
    anomalies = detect_system_wide_anomalies(results)
    assert len(anomalies) == 1
    assert "nível" in anomalies[0]


def test_no_results_means_no_anomalies():
    assert detect_system_wide_anomalies([]) == []


def test_logs_split_by_user_in_one_pass():
    logs = AuditLogs(
        transactions=[
            Transaction("u1", TransactionType.EARN, 800, "event", NOW),
            Transaction("u2", TransactionType.EARN, 5, "mission", NOW),
        ],
        submissions=[],
        redeemed_items=[RedeemedItem(
            id="r1", user_id="u2", item_id="i1", item_name="Badge", item_price=100,
            coins_before=100, coins_after=0, redeemed_at=NOW,
        )],
    )
    per_user = logs.by_user()
    assert set(per_user) == {"u1", "u2"}
    assert [tx.amount for tx in per_user["u1"].transactions] == [800]
    assert per_user["u1"].redeemed_items == []
    assert [r.id for r in per_user["u2"].redeemed_items] == ["r1"]


def test_batch_audit_matches_single_user_audit():
    logs = AuditLogs(
        transactions=[Transaction("u1", TransactionType.EARN, 800, "event", NOW)],
        submissions=[], redeemed_items=[],
    )
    engine = AuditEngine()
    batch = engine.run_audit_for_all_users([_user("u1"), _user("u2")], logs, NOW)
    assert [r.risk_level for r in batch] == [AuditRiskLevel.ATTENTION, AuditRiskLevel.SAFE]
    assert batch[0] == engine.run_audit_for_user(_user("u1"), logs, NOW)
