"""Admin Rules — pre-commit gates evaluated before an admin edit is persisted.

Invariants:
    - All functions are PURE: no IO, never raise
    - A failed HIGH result blocks the action; MEDIUM/LOW results are surfaced but do not block
    - Off-tier mission rewards PASS with a LOW warning in details (soft check)
    - evaluate_admin_action dispatches by explicit table; unknown actions fail HIGH
    - A payload (or nested old/new, deduction, queue entry) of the wrong JSON shape
      fails HIGH with "Payload inválido" instead of raising

Design Decisions:
    - Explicit dict over getattr: every action->rule mapping visible in one place
      (ADR: no convention-over-config)
    - Payloads arrive as dicts from the API and are parsed here with the same
      from_record constructors the sentinel uses (ADR: one parsing path)
"""

from dataclasses import dataclass
from typing import Callable

from econ_sentinel.core.domain_types import ADMIN_MISSION_TYPES, RuleSeverity
from econ_sentinel.core.economy_calculator import DEFAULT_CALCULATOR
from econ_sentinel.core.economy_state import (
    Mission, QueueEntry, StoreItem, UserEconomyState,
)
from econ_sentinel.core.repository_protocols import EconomyCalculator
from econ_sentinel.core.rule_result import RuleResult, failed, passed
from econ_sentinel.core.sanitize import sanitize_int, sanitize_string

MIN_SAFE_PRICE = 10
MAX_ACCESSIBLE_PRICE = 20_000
MAX_XP_ADJUSTMENT = 50_000
MAX_COIN_ADJUSTMENT = 10_000


@dataclass(frozen=True)
class Punishment:
    reason: str
    deduction_coins: int = 0
    deduction_xp: int = 0

    @classmethod
    def from_payload(cls, payload: dict) -> "Punishment":
        deduction = payload.get("deduction")
        if not isinstance(deduction, dict):
            deduction = {}
        return cls(
            reason=sanitize_string(payload.get("reason")),
            deduction_coins=sanitize_int(deduction.get("coins")),
            deduction_xp=sanitize_int(deduction.get("xp")),
        )


@dataclass(frozen=True)
class AdminAction:
    """An admin-authored change awaiting validation."""
    name: str
    payload: dict


def mission_creation_consistency(
    mission: Mission,
    *, calculator: EconomyCalculator = DEFAULT_CALCULATOR,
) -> RuleResult:
    if mission.type not in ADMIN_MISSION_TYPES:
        return failed(
            "mission_creation_consistency", RuleSeverity.MEDIUM,
            "Tipo de missão inválido.",
        )
    if not mission.description.strip():
        return failed(
            "mission_creation_consistency", RuleSeverity.HIGH,
            "Descrição não pode ser vazia.",
        )
    on_tier = any(
        tier.xp == mission.xp and tier.coins == mission.coins
        for tier in calculator.base_mission_rewards.values()
    )
    if not on_tier:
        return passed(
            "mission_creation_consistency",
            "Recompensa de XP/LC fora dos padrões (curta/média/longa).",
        )
    return passed("mission_creation_consistency")


def store_price_safety(item: StoreItem) -> RuleResult:
    if item.price < 0:
        return failed(
            "store_price_safety", RuleSeverity.HIGH,
            "Preço não pode ser negativo.",
        )
    if 0 < item.price < MIN_SAFE_PRICE:
        return failed(
            "store_price_safety", RuleSeverity.MEDIUM,
            "Preço absurdamente baixo. Pode desequilibrar a economia.",
        )
    if item.price > MAX_ACCESSIBLE_PRICE:
        return failed(
            "store_price_safety", RuleSeverity.LOW,
            "Preço absurdamente alto. Pode ser inacessível.",
        )
    return passed("store_price_safety")


def admin_punishment_safety(punishment: Punishment) -> RuleResult:
    if not punishment.reason.strip():
        return failed(
            "admin_punishment_safety", RuleSeverity.HIGH,
            "Punições devem ter um motivo registrado.",
        )
    if punishment.deduction_coins < 0 or punishment.deduction_xp < 0:
        return failed(
            "admin_punishment_safety", RuleSeverity.HIGH,
            "Valores de dedução não podem ser negativos.",
        )
    return passed("admin_punishment_safety")


def level_adjustment_safety(
    old_user: UserEconomyState, new_user: UserEconomyState,
) -> RuleResult:
    xp_diff = new_user.xp - old_user.xp
    coin_diff = new_user.coins - old_user.coins
    if new_user.xp < 0:
        return failed(
            "level_adjustment_safety", RuleSeverity.HIGH,
            "XP não pode ser ajustado para um valor negativo.",
        )
    if abs(xp_diff) > MAX_XP_ADJUSTMENT:
        return failed(
            "level_adjustment_safety", RuleSeverity.MEDIUM,
            f"Ajuste de XP muito grande: {xp_diff:+d} XP.",
        )
    if abs(coin_diff) > MAX_COIN_ADJUSTMENT:
        return failed(
            "level_adjustment_safety", RuleSeverity.MEDIUM,
            f"Ajuste de Moedas muito grande: {coin_diff:+d} Moedas.",
        )
    return passed("level_adjustment_safety")


def queue_action_safety(entry_id: str, queue: list[QueueEntry]) -> RuleResult:
    if not any(entry.id == entry_id for entry in queue):
        return failed(
            "queue_action_safety", RuleSeverity.HIGH,
            f"Item com ID {entry_id} não foi encontrado na fila.",
        )
    return passed("queue_action_safety")


# ─── Dispatch ────────────────────────────────────────────────────

PAYLOAD_RULES: dict[str, str] = {
    "mission_creation": "mission_creation_consistency",
    "store_edit": "store_price_safety",
    "punishment": "admin_punishment_safety",
    "level_adjustment": "level_adjustment_safety",
    "queue_action": "queue_action_safety",
}


def invalid_payload(rule: str, field: str) -> RuleResult:
    return failed(rule, RuleSeverity.HIGH, f"Payload inválido: {field}.")


def _evaluate_mission_creation(payload: dict) -> RuleResult:
    return mission_creation_consistency(Mission.from_record(payload))


def _evaluate_store_edit(payload: dict) -> RuleResult:
    return store_price_safety(StoreItem.from_record(payload))


def _evaluate_punishment(payload: dict) -> RuleResult:
    deduction = payload.get("deduction")
    if deduction is not None and not isinstance(deduction, dict):
        return invalid_payload("admin_punishment_safety", "deduction")
    return admin_punishment_safety(Punishment.from_payload(payload))


def _evaluate_level_adjustment(payload: dict) -> RuleResult:
    old, new = payload.get("old") or {}, payload.get("new") or {}
    for field, value in (("old", old), ("new", new)):
        if not isinstance(value, dict):
            return invalid_payload("level_adjustment_safety", field)
    return level_adjustment_safety(
        UserEconomyState.from_record(old), UserEconomyState.from_record(new),
    )


def _evaluate_queue_action(payload: dict) -> RuleResult:
    raw_queue = payload.get("queue") or []
    if not isinstance(raw_queue, list) or not all(isinstance(e, dict) for e in raw_queue):
        return invalid_payload("queue_action_safety", "queue")
    queue = [QueueEntry.from_record(e) for e in raw_queue]
    return queue_action_safety(sanitize_string(payload.get("id")), queue)


ADMIN_ACTION_RULES: dict[str, Callable[[dict], RuleResult]] = {
    "mission_creation": _evaluate_mission_creation,
    "store_edit": _evaluate_store_edit,
    "punishment": _evaluate_punishment,
    "level_adjustment": _evaluate_level_adjustment,
    "queue_action": _evaluate_queue_action,
}


def evaluate_admin_action(action: AdminAction) -> RuleResult:
    evaluate = ADMIN_ACTION_RULES.get(action.name)
    if evaluate is None:
        return failed(
            "unknown_admin_action", RuleSeverity.HIGH,
            f"Ação administrativa desconhecida: {action.name}.",
        )
    if not isinstance(action.payload, dict):
        return invalid_payload(PAYLOAD_RULES[action.name], "payload")
    return evaluate(action.payload)
