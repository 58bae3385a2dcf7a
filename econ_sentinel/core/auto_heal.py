"""Economy Auto-Heal — idempotent repairs for invariant violations found by the Sanity Guard.

Invariants:
    - Every fixer is idempotent: healing an already-healed state returns fixed=False
    - Fixers only clamp invalid values back into the valid domain; they never grant resources
    - Input state is never mutated: corrected state is a new frozen dataclass
    - Every correction is logged; unresolvable violations return fixed=False AND log a flag

Design Decisions:
    - Plan/item mismatch is flagged, not corrected: revoking a purchase is a human decision
      (ADR: auto-heal is conservative)
    - apply_all_heals folds corrected state forward in a fixed order: coins, xp, level, counters
"""

import logging
from dataclasses import replace

from econ_sentinel.core.economy_calculator import RewardPair
from econ_sentinel.core.economy_state import StoreItem, UserEconomyState
from econ_sentinel.core.rule_result import HealResult
from econ_sentinel.core.sanity_guard import plan_restrictions

logger = logging.getLogger(__name__)

NOT_FIXED = HealResult(fixed=False)


def _log_heal(user_id: str | None, message: str) -> None:
    logger.info(f"[ECONOMY AUTO-HEAL] {message}", extra={"user_id": user_id})


def auto_fix_negative_coins(user: UserEconomyState) -> HealResult:
    if user.coins < 0:
        message = f"Negative coins detected ({user.coins}). Reset to 0."
        _log_heal(user.id, message)
        return HealResult(fixed=True, message=message, user=replace(user, coins=0))
    return NOT_FIXED


def auto_fix_negative_xp(user: UserEconomyState) -> HealResult:
    if user.xp < 0:
        message = f"Negative XP detected ({user.xp}). Reset to 0."
        _log_heal(user.id, message)
        return HealResult(fixed=True, message=message, user=replace(user, xp=0))
    return NOT_FIXED


def auto_fix_invalid_level(user: UserEconomyState) -> HealResult:
    if user.level < 1:
        message = f"Invalid level detected ({user.level}). Reset to 1."
        _log_heal(user.id, message)
        return HealResult(fixed=True, message=message, user=replace(user, level=1))
    return NOT_FIXED


def auto_fix_counters(user: UserEconomyState) -> HealResult:
    if user.monthly_missions_completed >= 0 and user.total_missions_completed >= 0:
        return NOT_FIXED
    healed = replace(
        user,
        monthly_missions_completed=max(0, user.monthly_missions_completed),
        total_missions_completed=max(0, user.total_missions_completed),
    )
    message = "Negative mission counters detected. Reset to 0."
    _log_heal(user.id, message)
    return HealResult(fixed=True, message=message, user=healed)


def auto_fix_overflow_rewards(reward: RewardPair) -> HealResult:
    if reward.xp >= 0 and reward.coins >= 0:
        return NOT_FIXED
    healed = RewardPair(xp=max(0, reward.xp), coins=max(0, reward.coins))
    message = "Negative rewards detected. Reset to 0."
    _log_heal(None, message)
    return HealResult(fixed=True, message=message, reward=healed)


def auto_fix_plan_mismatch(user: UserEconomyState, item: StoreItem) -> HealResult:
    """Flag for manual review. Never corrects anything."""
    check = plan_restrictions(user, item)
    if check.ok:
        return NOT_FIXED
    message = (
        f"Plan mismatch detected ({user.plan.value} vs item '{item.name}'). "
        "Logged for manual review."
    )
    logger.warning(
        f"[ECONOMY AUTO-HEAL] {message}", extra={"user_id": user.id},
    )
    return HealResult(fixed=False, message=message)


def apply_all_heals(user: UserEconomyState) -> UserEconomyState:
    """Run every user fixer in sequence, folding corrected state forward."""
    current = user
    for fixer in (
        auto_fix_negative_coins,
        auto_fix_negative_xp,
        auto_fix_invalid_level,
        auto_fix_counters,
    ):
        result = fixer(current)
        if result.fixed and result.user is not None:
            current = result.user
    return current
