"""Economy State — dataclasses for users, logs and catalog entries read by the rules.

Invariants:
    - from_record never raises: corrupt fields fall back to neutral values
    - from_record does NOT clamp out-of-domain numbers (negative coins stay negative)
      so the sanity pipeline can see them; clamping is Auto-Heal's job
    - Timestamps are always aware datetimes (naive input assumed UTC)
    - Plans are normalized to PlanTier on load

Design Decisions:
    - Frozen dataclasses: rules are pure, healing returns a new state via dataclasses.replace
    - Records are dicts keyed by snake_case column names (ADR: repository speaks dicts)
"""

import math
from dataclasses import dataclass, asdict
from datetime import datetime, timezone

from econ_sentinel.core.domain_types import (
    PlanTier, SubmissionStatus, TransactionType, UserRole,
)
from econ_sentinel.core.economy_calculator import normalize_plan
from econ_sentinel.core.sanitize import (
    sanitize_int, sanitize_string, parse_timestamp,
)

SECONDS_PER_DAY = 86_400


@dataclass(frozen=True)
class UserEconomyState:
    id: str
    plan: PlanTier = PlanTier.FREE
    coins: int = 0
    xp: int = 0
    level: int = 1
    monthly_missions_completed: int = 0
    total_missions_completed: int = 0
    weekly_check_in_streak: int = 0
    joined_at: datetime | None = None
    role: str = UserRole.USER.value

    @classmethod
    def from_record(cls, record: dict) -> "UserEconomyState":
        return cls(
            id=sanitize_string(record.get("id"), "corrupted-user"),
            plan=normalize_plan(record.get("plan")),
            coins=sanitize_int(record.get("coins")),
            xp=sanitize_int(record.get("xp")),
            level=sanitize_int(record.get("level"), 1),
            monthly_missions_completed=sanitize_int(
                record.get("monthly_missions_completed"),
            ),
            total_missions_completed=sanitize_int(
                record.get("total_missions_completed"),
            ),
            weekly_check_in_streak=sanitize_int(
                record.get("weekly_check_in_streak"),
            ),
            joined_at=parse_timestamp(record.get("joined_at")),
            role=sanitize_string(record.get("role"), UserRole.USER.value),
        )

    def to_record(self) -> dict:
        record = asdict(self)
        record["plan"] = self.plan.value
        return record

    def days_since_join(self, now: datetime) -> float:
        """Fractional days on the platform. Unknown join date counts as joined now."""
        joined = self.joined_at or now
        return (now - joined).total_seconds() / SECONDS_PER_DAY


@dataclass(frozen=True)
class Transaction:
    user_id: str
    type: TransactionType
    amount: int
    source: str
    date: datetime

    @classmethod
    def from_record(cls, record: dict) -> "Transaction":
        raw_type = record.get("type")
        return cls(
            user_id=sanitize_string(record.get("user_id")),
            type=(
                TransactionType.SPEND if raw_type == TransactionType.SPEND.value
                else TransactionType.EARN
            ),
            amount=sanitize_int(record.get("amount")),
            source=sanitize_string(record.get("source")),
            date=parse_timestamp(record.get("date"))
            or datetime.fromtimestamp(0, tz=timezone.utc),
        )


@dataclass(frozen=True)
class MissionSubmission:
    id: str
    user_id: str
    mission_id: str
    submitted_at: datetime | None
    status: SubmissionStatus = SubmissionStatus.PENDING
    reward_xp: int | None = None
    reward_coins: int | None = None

    @classmethod
    def from_record(cls, record: dict) -> "MissionSubmission":
        try:
            status = SubmissionStatus(record.get("status"))
        except ValueError:
            status = SubmissionStatus.PENDING
        return cls(
            id=sanitize_string(record.get("id")),
            user_id=sanitize_string(record.get("user_id")),
            mission_id=sanitize_string(record.get("mission_id")),
            submitted_at=parse_timestamp(record.get("submitted_at")),
            status=status,
            reward_xp=_optional_int(record.get("reward_xp")),
            reward_coins=_optional_int(record.get("reward_coins")),
        )


@dataclass(frozen=True)
class Mission:
    id: str
    title: str = ""
    description: str = ""
    type: str = "creative"
    xp: int = 0
    coins: int | None = None

    @classmethod
    def from_record(cls, record: dict) -> "Mission":
        return cls(
            id=sanitize_string(record.get("id")),
            title=sanitize_string(record.get("title")),
            description=sanitize_string(record.get("description")),
            type=sanitize_string(record.get("type")),
            xp=sanitize_int(record.get("xp")),
            coins=_optional_int(record.get("coins")),
        )


@dataclass(frozen=True)
class StoreItem:
    """Catalog item. Items without rarity are usable items (mic slots, spotlights)."""
    id: str
    name: str = ""
    price: int = 0
    rarity: str | None = None

    @classmethod
    def from_record(cls, record: dict) -> "StoreItem":
        rarity = record.get("rarity")
        return cls(
            id=sanitize_string(record.get("id")),
            name=sanitize_string(record.get("name"), "Unknown Item"),
            price=sanitize_int(record.get("price")),
            rarity=sanitize_string(rarity) if rarity else None,
        )

    @property
    def is_usable(self) -> bool:
        return self.rarity is None


@dataclass(frozen=True)
class RedeemedItem:
    id: str
    user_id: str
    item_id: str
    item_name: str
    item_price: int
    coins_before: int
    coins_after: int
    redeemed_at: datetime | None
    status: str = "completed"

    @classmethod
    def from_record(cls, record: dict) -> "RedeemedItem":
        return cls(
            id=sanitize_string(record.get("id")),
            user_id=sanitize_string(record.get("user_id")),
            item_id=sanitize_string(record.get("item_id")),
            item_name=sanitize_string(record.get("item_name")),
            item_price=sanitize_int(record.get("item_price")),
            coins_before=sanitize_int(record.get("coins_before")),
            coins_after=sanitize_int(record.get("coins_after")),
            redeemed_at=parse_timestamp(record.get("redeemed_at")),
            status=sanitize_string(record.get("status"), "completed"),
        )


@dataclass(frozen=True)
class QueueEntry:
    id: str
    user_id: str
    item_id: str = ""
    item_name: str = ""
    status: str = "pending"
    priority: int = 1

    @classmethod
    def from_record(cls, record: dict) -> "QueueEntry":
        status = record.get("status")
        return cls(
            id=sanitize_string(record.get("id")),
            user_id=sanitize_string(record.get("user_id")),
            # legacy rows stored redeemed_item_id
            item_id=sanitize_string(
                record.get("item_id") or record.get("redeemed_item_id"),
            ),
            item_name=sanitize_string(record.get("item_name"), "Unknown Item"),
            status=status if status in ("pending", "processing", "done") else "pending",
            priority=sanitize_int(record.get("priority"), 1, minimum=1),
        )

    @property
    def is_active(self) -> bool:
        return self.status != "done"


def _optional_int(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return int(number) if math.isfinite(number) else None
