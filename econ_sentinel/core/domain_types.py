"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, MissionId, ItemId wrap str — the platform mints string ids ("u1", "item-…")
    - All valid states encoded as Enums — no raw string matching
    - PlanTier values are the display names persisted by the platform

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: RuleResult goes straight to the API)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
MissionId = NewType("MissionId", str)
ItemId = NewType("ItemId", str)


# ─── Enums ───────────────────────────────────────────────────────

class LedgerKind(str, Enum):
    """Balance the ledger mutates."""
    COIN = "COIN"
    XP = "XP"


class TransactionType(str, Enum):
    EARN = "earn"
    SPEND = "spend"


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RuleSeverity(str, Enum):
    """Uniform severity for sanity, audit and admin rules. HIGH is a hard failure."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskLevel(str, Enum):
    """Global classification of a full economy scan."""
    STABLE = "stable"
    ATTENTION = "attention"
    CRITICAL = "critical"


class AuditRiskLevel(str, Enum):
    """Per-user classification of an audit run."""
    SAFE = "safe"
    ATTENTION = "attention"
    DANGER = "danger"


class PlanTier(str, Enum):
    """Closed set of subscription tiers."""
    FREE = "Free Flow"
    ASCENSAO = "Artista em Ascensão"
    PROFISSIONAL = "Artista Profissional"
    HITMAKER = "Hitmaker"


class MissionType(str, Enum):
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    CREATIVE = "creative"
    SPECIAL = "special"
    YOUTUBE = "youtube"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


# Mission types an admin may create (youtube is legacy, read-only)
ADMIN_MISSION_TYPES: frozenset[str] = frozenset({
    MissionType.INSTAGRAM.value,
    MissionType.TIKTOK.value,
    MissionType.CREATIVE.value,
    MissionType.SPECIAL.value,
})
