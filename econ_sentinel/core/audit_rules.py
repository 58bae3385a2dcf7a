"""Audit Rules — heuristic per-user fraud/anomaly detection over historical logs.

Invariants:
    - All functions are PURE: no IO, never raise; `now` and `tz` are explicit inputs
    - Every rule returns a RuleResult; a passing result has severity LOW and empty details
    - Thresholds below are part of the contract (changing them changes who gets flagged)
    - Sliding windows: sort chronologically, compare event[i + 2] - event[i] to the window

Design Decisions:
    - Each rule filters the shared logs by user id itself: the engine passes the
      whole population's logs once instead of pre-partitioning per user
    - Queueable items detected by name keywords: redemptions carry no category column
      (ADR: matches how the store names mic and spotlight slots)
"""

import math
from collections import defaultdict
from datetime import datetime, timedelta, tzinfo, timezone

from econ_sentinel.core.domain_types import RuleSeverity, TransactionType
from econ_sentinel.core.economy_state import (
    MissionSubmission, RedeemedItem, Transaction, UserEconomyState,
)
from econ_sentinel.core.rule_result import RuleResult, failed, passed

LEVEL_GROWTH_THRESHOLD = 4          # levels per day
LEVEL_GROWTH_MIN_LEVEL = 5
LC_GAIN_THRESHOLD = 500             # LC per day
MIN_SUBMISSIONS_FOR_PATTERN = 5
NIGHT_HOURS = range(2, 5)           # [02:00, 05:00)
NIGHT_SHARE_THRESHOLD = 0.5
RAPID_FIRE_WINDOW = timedelta(minutes=5)
QUEUE_ABUSE_WINDOW = timedelta(hours=1)
MAX_WEEKLY_STREAK = 7
QUEUEABLE_KEYWORDS = ("microfone", "destaque")


def rule_rapid_level_growth(
    user: UserEconomyState, *, now: datetime,
) -> RuleResult:
    """Average (level - 1) per day on platform above 4, for users past level 5."""
    days_on_platform = max(1.0, user.days_since_join(now))
    avg_growth = (user.level - 1) / days_on_platform
    if user.level > LEVEL_GROWTH_MIN_LEVEL and avg_growth > LEVEL_GROWTH_THRESHOLD:
        return failed(
            "rapid_level_growth", RuleSeverity.HIGH,
            f"Usuário subiu em média {avg_growth:.1f} níveis por dia desde que entrou.",
        )
    return passed("rapid_level_growth")


def rule_unusual_lc_gain(
    user: UserEconomyState, transactions: list[Transaction],
) -> RuleResult:
    """Any single UTC day whose summed earn transactions exceed 500 LC."""
    earnings_by_day: dict[str, int] = defaultdict(int)
    for tx in transactions:
        if tx.user_id == user.id and tx.type == TransactionType.EARN:
            day = tx.date.astimezone(timezone.utc).date().isoformat()
            earnings_by_day[day] += tx.amount

    for day in sorted(earnings_by_day):
        if earnings_by_day[day] > LC_GAIN_THRESHOLD:
            return failed(
                "unusual_lc_gain", RuleSeverity.MEDIUM,
                f"Usuário ganhou {earnings_by_day[day]} LC em {day}.",
            )
    return passed("unusual_lc_gain")


def rule_suspicious_mission_pattern(
    user: UserEconomyState, submissions: list[MissionSubmission],
    *, tz: tzinfo = timezone.utc,
) -> RuleResult:
    """Mostly-overnight submitting (low) or 3 submissions inside 5 minutes (medium)."""
    times = sorted(
        s.submitted_at for s in submissions
        if s.user_id == user.id and s.submitted_at is not None
    )
    if len(times) < MIN_SUBMISSIONS_FOR_PATTERN:
        return passed("suspicious_mission_pattern")

    night = sum(1 for t in times if t.astimezone(tz).hour in NIGHT_HOURS)
    if night / len(times) > NIGHT_SHARE_THRESHOLD:
        return failed(
            "suspicious_mission_pattern", RuleSeverity.LOW,
            "Alta porcentagem de missões enviadas durante a madrugada.",
        )

    if _three_within(times, RAPID_FIRE_WINDOW):
        return failed(
            "suspicious_mission_pattern", RuleSeverity.MEDIUM,
            "Múltiplas missões enviadas em um intervalo muito curto.",
        )
    return passed("suspicious_mission_pattern")


def rule_impossible_streak(
    user: UserEconomyState, *, now: datetime,
) -> RuleResult:
    streak = user.weekly_check_in_streak
    if streak > MAX_WEEKLY_STREAK:
        return failed(
            "impossible_streak", RuleSeverity.HIGH,
            f"Streak de {streak} é maior que {MAX_WEEKLY_STREAK}.",
        )
    days_on_platform = math.ceil(user.days_since_join(now))
    if streak > days_on_platform + 1:
        return failed(
            "impossible_streak", RuleSeverity.HIGH,
            f"Streak de {streak} é maior que os dias na plataforma ({days_on_platform}).",
        )
    return passed("impossible_streak")


def rule_queue_abuse(
    user: UserEconomyState, redeemed_items: list[RedeemedItem],
) -> RuleResult:
    """Three queueable redemptions inside one hour."""
    times = sorted(
        r.redeemed_at for r in redeemed_items
        if r.user_id == user.id
        and r.redeemed_at is not None
        and is_queueable_item(r.item_name)
    )
    if _three_within(times, QUEUE_ABUSE_WINDOW):
        return failed(
            "queue_abuse", RuleSeverity.MEDIUM,
            "Usuário resgatou múltiplos itens de fila em um curto período.",
        )
    return passed("queue_abuse")


def rule_store_anomaly(
    user: UserEconomyState, redeemed_items: list[RedeemedItem],
) -> RuleResult:
    for redemption in redeemed_items:
        if redemption.user_id != user.id:
            continue
        if redemption.coins_after < 0:
            return failed(
                "store_anomaly", RuleSeverity.HIGH,
                f'Resgate do item "{redemption.item_name}" resultou em saldo '
                f"negativo ({redemption.coins_after}).",
            )
        if redemption.coins_before < redemption.item_price:
            return failed(
                "store_anomaly", RuleSeverity.MEDIUM,
                f'Resgate do item "{redemption.item_name}" ocorreu com saldo '
                f"insuficiente ({redemption.coins_before} < {redemption.item_price}).",
            )
    return passed("store_anomaly")


def is_queueable_item(item_name: str) -> bool:
    name = item_name.lower()
    return any(keyword in name for keyword in QUEUEABLE_KEYWORDS)


def _three_within(times: list[datetime], window: timedelta) -> bool:
    """Sorted timestamps: does any run of 3 consecutive events fit strictly inside window?"""
    return any(
        times[i + 2] - times[i] < window for i in range(len(times) - 2)
    )
