"""Economy Calculator — leveling curve, plan multipliers and reward tables.

Invariants:
    - All functions are PURE: no IO, deterministic
    - Every plan multiplier is >= 1.0 (a computed reward never drops below its base)
    - get_daily_mission_limit returns None for unlimited plans
    - Unknown plan strings normalize to Free Flow

Design Decisions:
    - The calculator is owned by the subscription/leveling team; this module is the
      default implementation of the EconomyCalculator protocol so rules can be
      exercised standalone (ADR: core never hard-codes which calculator it gets)
    - Level curve uses integer sqrt: identical thresholds to the float formula,
      no rounding drift at large XP
"""

import math
from dataclasses import dataclass

from econ_sentinel.core.domain_types import PlanTier


@dataclass(frozen=True)
class LevelInfo:
    level: int
    xp_to_next_level: int


@dataclass(frozen=True)
class RewardPair:
    xp: int
    coins: int


PLAN_MULTIPLIERS: dict[str, float] = {
    PlanTier.FREE.value: 1.0,
    PlanTier.ASCENSAO.value: 1.0,
    PlanTier.PROFISSIONAL.value: 1.05,
    PlanTier.HITMAKER.value: 1.10,
}

PLAN_STORE_DISCOUNTS: dict[str, float] = {
    PlanTier.FREE.value: 0.0,
    PlanTier.ASCENSAO.value: 0.0,
    PlanTier.PROFISSIONAL.value: 0.05,
    PlanTier.HITMAKER.value: 0.10,
}

DAILY_MISSION_LIMITS: dict[str, int | None] = {
    PlanTier.FREE.value: 1,
    PlanTier.ASCENSAO.value: 2,
    PlanTier.PROFISSIONAL.value: 3,
    PlanTier.HITMAKER.value: None,
}

BASE_MISSION_REWARDS: dict[str, RewardPair] = {
    "curta": RewardPair(xp=15, coins=1),
    "media": RewardPair(xp=30, coins=3),
    "longa": RewardPair(xp=60, coins=6),
}

XP_PER_LEVEL_STEP = 1000

_PLAN_ALIASES: dict[str, PlanTier] = {
    "free flow": PlanTier.FREE,
    "free": PlanTier.FREE,
    "gratuito": PlanTier.FREE,
    "freeflow": PlanTier.FREE,
    "free-flow": PlanTier.FREE,
    "artista em ascensão": PlanTier.ASCENSAO,
    "artista em ascensao": PlanTier.ASCENSAO,
    "ascensão": PlanTier.ASCENSAO,
    "ascensao": PlanTier.ASCENSAO,
    "starter": PlanTier.ASCENSAO,
    "starter artist": PlanTier.ASCENSAO,
    "artista profissional": PlanTier.PROFISSIONAL,
    "profissional": PlanTier.PROFISSIONAL,
    "pro": PlanTier.PROFISSIONAL,
    "pro artist": PlanTier.PROFISSIONAL,
    "artista pro": PlanTier.PROFISSIONAL,
    "hitmaker": PlanTier.HITMAKER,
    "hit maker": PlanTier.HITMAKER,
    "hit": PlanTier.HITMAKER,
    "legendary": PlanTier.HITMAKER,
    "legendary artist": PlanTier.HITMAKER,
    "vip": PlanTier.HITMAKER,
}


def normalize_plan(raw: str | None) -> PlanTier:
    """Map UI labels, legacy ids and typos onto the closed tier set."""
    if not raw:
        return PlanTier.FREE
    return _PLAN_ALIASES.get(str(raw).strip().lower(), PlanTier.FREE)


def calculate_level_from_xp(xp: int) -> LevelInfo:
    """Triangular curve: level L starts at 1000 * L * (L - 1) / 2 XP."""
    if xp < XP_PER_LEVEL_STEP:
        return LevelInfo(level=1, xp_to_next_level=XP_PER_LEVEL_STEP)
    level = (1 + math.isqrt(1 + (8 * xp) // XP_PER_LEVEL_STEP)) // 2
    return LevelInfo(
        level=level,
        xp_to_next_level=XP_PER_LEVEL_STEP * level * (level + 1) // 2,
    )


def xp_for_level_start(level: int) -> int:
    if level <= 1:
        return 0
    return XP_PER_LEVEL_STEP * (level - 1) * level // 2


def plan_multiplier(plan: str) -> float:
    return PLAN_MULTIPLIERS.get(normalize_plan(plan).value, 1.0)


def apply_plan_multiplier(base_amount: int, plan: str) -> int:
    return math.floor(base_amount * plan_multiplier(plan))


def get_daily_mission_limit(plan: str) -> int | None:
    return DAILY_MISSION_LIMITS.get(normalize_plan(plan).value, 1)


def calculate_discounted_price(price: int, plan: str) -> int:
    discount = PLAN_STORE_DISCOUNTS.get(normalize_plan(plan).value, 0.0)
    return math.floor(price * (1 - discount))


class DefaultEconomyCalculator:
    """Module functions bundled behind the EconomyCalculator protocol."""

    base_mission_rewards = BASE_MISSION_REWARDS

    def calculate_level_from_xp(self, xp: int) -> LevelInfo:
        return calculate_level_from_xp(xp)

    def plan_multiplier(self, plan: str) -> float:
        return plan_multiplier(plan)

    def get_daily_mission_limit(self, plan: str) -> int | None:
        return get_daily_mission_limit(plan)

    def calculate_discounted_price(self, price: int, plan: str) -> int:
        return calculate_discounted_price(price, plan)


DEFAULT_CALCULATOR = DefaultEconomyCalculator()
