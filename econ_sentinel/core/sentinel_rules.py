"""Sentinel Rules — Sanity Guard predicates lifted into severity-tagged RuleResults.

Invariants:
    - All functions are PURE: no IO, never raise
    - Severity is assigned HERE, not in the sanity predicates (predicates stay boolean)
    - HIGH marks a broken invariant (negative balance, purchase without funds);
      MEDIUM marks an inconsistency worth a look; LOW is informational

Design Decisions:
    - Sanity reasons reused verbatim in details where they exist, so a scan and a
      direct predicate call describe the same violation the same way
"""

from collections import Counter

from econ_sentinel.core.domain_types import RuleSeverity
from econ_sentinel.core.economy_calculator import DEFAULT_CALCULATOR, RewardPair
from econ_sentinel.core.economy_state import (
    Mission, MissionSubmission, QueueEntry, RedeemedItem, StoreItem, UserEconomyState,
)
from econ_sentinel.core.repository_protocols import EconomyCalculator
from econ_sentinel.core.rule_result import RuleResult, SanityResult, failed, passed
from econ_sentinel.core.sanity_guard import (
    coins_never_negative,
    daily_limits_respected,
    level_up_correct,
    multipliers_correct,
    plan_restrictions,
    reward_matches_mission_type,
    store_price_integrity,
    xp_never_negative,
)

MAX_QUEUE_ENTRIES_PER_USER = 3


def from_sanity(rule: str, check: SanityResult, severity: RuleSeverity) -> RuleResult:
    """Adapt a boolean sanity check to the RuleResult contract."""
    if check.ok:
        return passed(rule)
    return failed(rule, severity, check.reason or "")


# ─── User ────────────────────────────────────────────────────────

def rule_xp_boundaries(user: UserEconomyState) -> RuleResult:
    return from_sanity("xp_boundaries", xp_never_negative(user), RuleSeverity.HIGH)


def rule_coin_integrity(user: UserEconomyState) -> RuleResult:
    return from_sanity("coin_integrity", coins_never_negative(user), RuleSeverity.HIGH)


def rule_level_integrity(
    user: UserEconomyState,
    *, calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> RuleResult:
    return from_sanity(
        "level_integrity",
        level_up_correct(user, calculator=calculator),
        RuleSeverity.MEDIUM,
    )


def rule_daily_mission_limit(
    user: UserEconomyState, submissions_today: int,
    *, calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> RuleResult:
    return from_sanity(
        "daily_mission_limit",
        daily_limits_respected(user, submissions_today, calculator=calculator),
        RuleSeverity.MEDIUM,
    )


# ─── Submission ──────────────────────────────────────────────────

def rule_reward_math(
    submission: MissionSubmission, user: UserEconomyState, mission: Mission,
    *, calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> RuleResult:
    """Recorded reward vs mission base and plan multiplier.

    Submissions without a recorded reward only get the expected-value check.
    """
    multiplier = calculator.plan_multiplier(user.plan.value)
    if multiplier < 1.0 or mission.xp < 0 or (mission.coins or 0) < 0:
        return failed(
            "reward_math", RuleSeverity.MEDIUM,
            f"Cálculo de recompensa inválido para a missão {mission.id}.",
        )
    if submission.reward_xp is None:
        return passed("reward_math")

    realized = RewardPair(
        xp=submission.reward_xp,
        coins=submission.reward_coins if submission.reward_coins is not None else 0,
    )
    checks = [
        reward_matches_mission_type(mission, realized),
        multipliers_correct(
            user.plan.value, mission.xp, realized.xp, calculator=calculator,
        ),
    ]
    if submission.reward_coins is not None and mission.coins is not None:
        checks.append(multipliers_correct(
            user.plan.value, mission.coins, realized.coins, calculator=calculator,
        ))
    for check in checks:
        if not check.ok:
            return failed("reward_math", RuleSeverity.MEDIUM, check.reason or "")
    return passed("reward_math")


# ─── Store ───────────────────────────────────────────────────────

def rule_store_consistency(
    purchase: RedeemedItem, user: UserEconomyState, item: StoreItem,
    *, calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> RuleResult:
    if purchase.coins_after < 0:
        return failed(
            "store_consistency", RuleSeverity.HIGH,
            f"Compra deixou saldo negativo. Saldo após: {purchase.coins_after}",
        )
    price_check = store_price_integrity(item)
    if not price_check.ok:
        return failed("store_consistency", RuleSeverity.HIGH, price_check.reason or "")
    if purchase.coins_before < purchase.item_price:
        return failed(
            "store_consistency", RuleSeverity.HIGH,
            f"Compra realizada com saldo insuficiente. Saldo: "
            f"{purchase.coins_before}, Custo: {purchase.item_price}",
        )
    expected_price = calculator.calculate_discounted_price(item.price, user.plan.value)
    if purchase.item_price != expected_price:
        return failed(
            "store_consistency", RuleSeverity.MEDIUM,
            f"Desconto incorreto aplicado. Esperado: {expected_price}, "
            f"Pago: {purchase.item_price}",
        )
    return passed("store_consistency")


def rule_plan_restriction(user: UserEconomyState, item: StoreItem) -> RuleResult:
    return from_sanity(
        "plan_restriction", plan_restrictions(user, item), RuleSeverity.LOW,
    )


# ─── Queue ───────────────────────────────────────────────────────

def rule_queue_integrity(queue: list[QueueEntry]) -> RuleResult:
    counts: Counter[str] = Counter()
    for entry in queue:
        counts[entry.user_id] += 1
        if counts[entry.user_id] > MAX_QUEUE_ENTRIES_PER_USER:
            return failed(
                "queue_integrity", RuleSeverity.MEDIUM,
                f"Usuário {entry.user_id} está na fila {counts[entry.user_id]} "
                "vezes, indicando possível abuso.",
            )
    return passed("queue_integrity")
