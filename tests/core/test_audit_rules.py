"""Audit rules — fraud heuristics over per-user logs.

Tests cover:
    - rapid level growth (level > 5 and > 4 levels/day)
    - unusual LC gain per UTC day
    - suspicious mission pattern: overnight share and rapid fire
    - impossible streak, queue abuse, store anomaly
"""

from datetime import datetime, timedelta, timezone

from econ_sentinel.core.audit_rules import (
    is_queueable_item,
    rule_impossible_streak,
    rule_queue_abuse,
    rule_rapid_level_growth,
    rule_store_anomaly,
    rule_suspicious_mission_pattern,
    rule_unusual_lc_gain,
)
from econ_sentinel.core.domain_types import RuleSeverity, TransactionType
from econ_sentinel.core.economy_state import (
    MissionSubmission, RedeemedItem, Transaction, UserEconomyState,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def _user(**overrides) -> UserEconomyState:
    fields = {"id": "u1", "joined_at": NOW - timedelta(days=30)}
    fields.update(overrides)
    return UserEconomyState(**fields)


def _submission(at: datetime, user_id: str = "u1") -> MissionSubmission:
    return MissionSubmission(id=f"s-{at.isoformat()}", user_id=user_id,
                             mission_id="m1", submitted_at=at)


def _redemption(name: str, at: datetime, **overrides) -> RedeemedItem:
    fields = {
        "id": f"r-{at.isoformat()}", "user_id": "u1", "item_id": "i1",
        "item_name": name, "item_price": 100, "coins_before": 500,
        "coins_after": 400, "redeemed_at": at,
    }
    fields.update(overrides)
    return RedeemedItem(**fields)


# ─── rapid_level_growth ──────────────────────────────────────────

def test_rapid_growth_flags_new_high_level_user():
    user = _user(level=8, joined_at=NOW - timedelta(hours=12))
    result = rule_rapid_level_growth(user, now=NOW)
    assert not result.passed
    assert result.severity is RuleSeverity.HIGH


def test_rapid_growth_ignores_low_levels():
    user = _user(level=5, joined_at=NOW)
    assert rule_rapid_level_growth(user, now=NOW).passed


def test_rapid_growth_passes_for_veterans():
    user = _user(level=30, joined_at=NOW - timedelta(days=100))
    assert rule_rapid_level_growth(user, now=NOW).passed


# ─── unusual_lc_gain ─────────────────────────────────────────────

def _earn(amount: int, at: datetime, user_id: str = "u1") -> Transaction:
    return Transaction(user_id=user_id, type=TransactionType.EARN,
                       amount=amount, source="mission", date=at)


def test_lc_gain_above_threshold_in_one_day_fails():
    txs = [_earn(300, NOW), _earn(201, NOW + timedelta(hours=1))]
    result = rule_unusual_lc_gain(_user(), txs)
    assert not result.passed
    assert result.severity is RuleSeverity.MEDIUM
    assert "501" in result.details


def test_lc_gain_split_across_days_passes():
    txs = [_earn(300, NOW), _earn(300, NOW + timedelta(days=1))]
    assert rule_unusual_lc_gain(_user(), txs).passed


def test_lc_gain_ignores_spends_and_other_users():
    spend = Transaction(user_id="u1", type=TransactionType.SPEND,
                        amount=900, source="store", date=NOW)
    assert rule_unusual_lc_gain(_user(), [spend, _earn(900, NOW, "u2")]).passed


# ─── suspicious_mission_pattern ──────────────────────────────────

def test_overnight_majority_is_low_severity():
    day = datetime(2026, 3, 1, tzinfo=timezone.utc)
    times = [
        day.replace(hour=2, minute=30), day.replace(hour=2, minute=40),
        day.replace(hour=2, minute=50), day.replace(hour=10, minute=0),
        day.replace(hour=10, minute=10),
    ]
    result = rule_suspicious_mission_pattern(_user(), [_submission(t) for t in times])
    assert not result.passed
    assert result.severity is RuleSeverity.LOW
    assert "madrugada" in result.details


def test_rapid_fire_is_medium_severity():
    start = datetime(2026, 3, 1, 14, 0, tzinfo=timezone.utc)
    times = [start + timedelta(minutes=m) for m in (0, 1, 2, 60, 120)]
    result = rule_suspicious_mission_pattern(_user(), [_submission(t) for t in times])
    assert not result.passed
    assert result.severity is RuleSeverity.MEDIUM


def test_exactly_five_minutes_apart_is_not_rapid_fire():
    start = datetime(2026, 3, 1, 14, 0, tzinfo=timezone.utc)
    times = [start + timedelta(minutes=m) for m in (0, 2.5, 5, 60, 120)]
    assert rule_suspicious_mission_pattern(
        _user(), [_submission(t) for t in times],
    ).passed


def test_fewer_than_five_submissions_pass():
    start = datetime(2026, 3, 1, 3, 0, tzinfo=timezone.utc)
    times = [start + timedelta(minutes=m) for m in range(4)]
    assert rule_suspicious_mission_pattern(
        _user(), [_submission(t) for t in times],
    ).passed


def test_overnight_hours_follow_configured_timezone():
    brt = timezone(timedelta(hours=-3))
    day = datetime(2026, 3, 1, tzinfo=timezone.utc)
    # 05:xx UTC is 02:xx in UTC-3
    times = [day.replace(hour=5, minute=m) for m in (0, 20, 40)]
    times += [day.replace(hour=15), day.replace(hour=18)]
    subs = [_submission(t) for t in times]
    assert rule_suspicious_mission_pattern(_user(), subs).passed
    assert not rule_suspicious_mission_pattern(_user(), subs, tz=brt).passed


# ─── impossible_streak ───────────────────────────────────────────

def test_streak_above_seven_fails():
    result = rule_impossible_streak(_user(weekly_check_in_streak=8), now=NOW)
    assert not result.passed
    assert result.severity is RuleSeverity.HIGH


def test_streak_longer_than_membership_fails():
    user = _user(weekly_check_in_streak=5, joined_at=NOW - timedelta(days=2))
    assert not rule_impossible_streak(user, now=NOW).passed


def test_plausible_streak_passes():
    user = _user(weekly_check_in_streak=3, joined_at=NOW - timedelta(days=2))
    assert rule_impossible_streak(user, now=NOW).passed


# ─── queue_abuse ─────────────────────────────────────────────────

def test_three_queueable_redemptions_in_an_hour_fail():
    items = [
        _redemption("Microfone VIP", NOW),
        _redemption("Destaque na Home", NOW + timedelta(minutes=20)),
        _redemption("microfone", NOW + timedelta(minutes=50)),
    ]
    result = rule_queue_abuse(_user(), items)
    assert not result.passed
    assert result.severity is RuleSeverity.MEDIUM


def test_non_queueable_items_are_ignored():
    items = [
        _redemption("Badge", NOW + timedelta(minutes=m)) for m in (0, 1, 2)
    ]
    assert rule_queue_abuse(_user(), items).passed


def test_is_queueable_item_matches_keywords_case_insensitively():
    assert is_queueable_item("MICROFONE Gold")
    assert is_queueable_item("Destaque semanal")
    assert not is_queueable_item("Avatar")


# ─── store_anomaly ───────────────────────────────────────────────

def test_negative_balance_after_purchase_is_high():
    item = _redemption("Badge", NOW, coins_after=-5)
    result = rule_store_anomaly(_user(), [item])
    assert not result.passed
    assert result.severity is RuleSeverity.HIGH


def test_insufficient_balance_before_purchase_is_medium():
    item = _redemption("Badge", NOW, coins_before=50, item_price=100, coins_after=0)
    result = rule_store_anomaly(_user(), [item])
    assert result.severity is RuleSeverity.MEDIUM
    assert "50 < 100" in result.details


def test_consistent_purchases_pass():
    assert rule_store_anomaly(_user(), [_redemption("Badge", NOW)]).passed
