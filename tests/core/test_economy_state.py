"""Economy state parsing — from_record sanitizes but never clamps."""

from datetime import datetime, timezone

from econ_sentinel.core.domain_types import PlanTier, SubmissionStatus, TransactionType
from econ_sentinel.core.economy_state import (
    Mission, QueueEntry, StoreItem, Transaction, MissionSubmission, UserEconomyState,
)


def test_user_from_record_keeps_negative_balances():
    user = UserEconomyState.from_record({"id": "u1", "coins": -5, "xp": -10})
    assert user.coins == -5
    assert user.xp == -10


def test_user_from_record_defaults_corrupt_fields():
    user = UserEconomyState.from_record({"id": "u1", "coins": "lots", "level": None})
    assert user.coins == 0
    assert user.level == 1
    assert user.plan is PlanTier.FREE


def test_user_to_record_serializes_plan_label():
    user = UserEconomyState(id="u1", plan=PlanTier.HITMAKER)
    assert user.to_record()["plan"] == "Hitmaker"


def test_days_since_join_without_date_is_zero():
    now = datetime(2026, 1, 10, tzinfo=timezone.utc)
    assert UserEconomyState(id="u1").days_since_join(now) == 0


def test_transaction_type_defaults_to_earn():
    tx = Transaction.from_record({"user_id": "u1", "type": "bogus", "amount": 5})
    assert tx.type is TransactionType.EARN
    assert tx.date.tzinfo is not None


def test_submission_unknown_status_is_pending():
    sub = MissionSubmission.from_record({"id": "s1", "status": "weird"})
    assert sub.status is SubmissionStatus.PENDING
    assert sub.reward_xp is None


def test_store_item_without_rarity_is_usable():
    assert StoreItem.from_record({"id": "i1", "name": "Microfone"}).is_usable
    assert not StoreItem.from_record({"id": "i2", "rarity": "rare"}).is_usable


def test_queue_entry_reads_legacy_item_field():
    entry = QueueEntry.from_record({
        "id": "q1", "user_id": "u1", "redeemed_item_id": "r9", "status": "done",
    })
    assert entry.item_id == "r9"
    assert not entry.is_active


def test_huge_reward_fields_parse_without_raising():
    mission = Mission.from_record({"id": "m1", "xp": 10**400, "coins": 10**400})
    assert mission.coins == 10**400
    assert mission.xp > 20_000
    sub = MissionSubmission.from_record({"id": "s1", "reward_coins": 1e400})
    assert sub.reward_coins is None
