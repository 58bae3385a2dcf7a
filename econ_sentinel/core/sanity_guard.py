"""Sanity Guard — stateless invariant predicates over user, mission and item state.

Invariants:
    - All functions are PURE: no IO, no side effects, never raise
    - Return SanityResult(ok=True) on success, ok=False with a reason on violation
    - No predicate short-circuits another: callers compose results explicitly

Design Decisions:
    - Pure functions over method dispatch: testable without mocks (ADR: Functional Core)
    - Calculator passed as keyword with the default library as fallback: production
      wiring and tests can inject a different leveling curve
"""

import math

from econ_sentinel.core.domain_types import PlanTier
from econ_sentinel.core.economy_calculator import DEFAULT_CALCULATOR, RewardPair
from econ_sentinel.core.economy_state import Mission, StoreItem, UserEconomyState
from econ_sentinel.core.repository_protocols import EconomyCalculator
from econ_sentinel.core.rule_result import SANITY_OK, SanityResult

MULTIPLIER_ROUNDING_TOLERANCE = 1


def coins_never_negative(user: UserEconomyState) -> SanityResult:
    if user.coins < 0:
        return SanityResult(
            ok=False, reason=f"User {user.id} has negative coins: {user.coins}",
        )
    return SANITY_OK


def xp_never_negative(user: UserEconomyState) -> SanityResult:
    if user.xp < 0:
        return SanityResult(
            ok=False, reason=f"User {user.id} has negative XP: {user.xp}",
        )
    return SANITY_OK


def user_economy_bounds(user: UserEconomyState) -> SanityResult:
    """Coins then XP. First violation is reported."""
    coins = coins_never_negative(user)
    if not coins.ok:
        return coins
    return xp_never_negative(user)


def reward_matches_mission_type(
    mission: Mission, calculated_reward: RewardPair,
) -> SanityResult:
    """Realized reward must never fall below the mission's declared base."""
    below_xp = calculated_reward.xp < mission.xp
    below_coins = (
        mission.coins is not None and calculated_reward.coins < mission.coins
    )
    if below_xp or below_coins:
        return SanityResult(
            ok=False,
            reason=(
                f"Calculated reward (XP:{calculated_reward.xp}, "
                f"LC:{calculated_reward.coins}) is lower than mission base "
                f"(XP:{mission.xp}, LC:{mission.coins or 0})"
            ),
        )
    return SANITY_OK


def multipliers_correct(
    plan: str, base_reward: int, final_reward: int,
    *, calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> SanityResult:
    multiplier = calculator.plan_multiplier(plan)
    expected = math.floor(base_reward * multiplier)
    if abs(final_reward - expected) > MULTIPLIER_ROUNDING_TOLERANCE:
        return SanityResult(
            ok=False,
            reason=(
                f"Multiplier mismatch for {plan}. Base: {base_reward}, "
                f"Exp: {expected}, Got: {final_reward}"
            ),
        )
    return SANITY_OK


def level_up_correct(
    user: UserEconomyState,
    *, calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> SanityResult:
    calculated = calculator.calculate_level_from_xp(user.xp).level
    if user.level != calculated:
        return SanityResult(
            ok=False,
            reason=(
                f"Level integrity failed. User XP {user.xp} implies level "
                f"{calculated}, but user has level {user.level}"
            ),
        )
    return SANITY_OK


def daily_limits_respected(
    user: UserEconomyState, submissions_today: int,
    *, calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> SanityResult:
    limit = calculator.get_daily_mission_limit(user.plan.value)
    if limit is not None and submissions_today > limit:
        return SanityResult(
            ok=False,
            reason=(
                f"Daily limit exceeded for {user.plan.value}. "
                f"Limit: {limit}, Count: {submissions_today}"
            ),
        )
    return SANITY_OK


def store_price_integrity(item: StoreItem) -> SanityResult:
    if item.price < 0:
        return SanityResult(
            ok=False, reason=f"Item {item.name} has negative price: {item.price}",
        )
    return SANITY_OK


def plan_restrictions(user: UserEconomyState, item: StoreItem) -> SanityResult:
    """Free Flow users may not hold usable (rarity-less) items."""
    if user.plan == PlanTier.FREE and item.is_usable:
        return SanityResult(
            ok=False,
            reason=f"Free Flow user attempted restricted item: {item.name}",
        )
    return SANITY_OK
