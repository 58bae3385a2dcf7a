"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Persistence accessed through EconomyRepository (select / insert / update over named collections)
    - Leveling and reward math accessed through EconomyCalculator
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in EconomyRepository: implementations do IO; core pure functions that
      consume its records are never async themselves
    - Records are plain dicts: core parses them with from_record constructors
"""

from typing import Any, Callable, Mapping, Protocol

from econ_sentinel.core.economy_calculator import LevelInfo, RewardPair

Record = dict[str, Any]


class EconomyRepository(Protocol):
    """Contract for economy persistence — implemented by shell."""
    async def select(self, collection: str) -> list[Record]: ...
    async def get(self, collection: str, record_id: str) -> Record | None: ...
    async def insert(self, collection: str, record: Record) -> Record: ...
    async def update(
        self,
        collection: str,
        predicate: Callable[[Record], bool],
        updater: Callable[[Record], Record],
        record_id: str | None = None,
    ) -> int: ...
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...


class EconomyCalculator(Protocol):
    """Contract for the leveling/multiplier/reward-table library."""
    base_mission_rewards: Mapping[str, RewardPair]

    def calculate_level_from_xp(self, xp: int) -> LevelInfo: ...
    def plan_multiplier(self, plan: str) -> float: ...
    def get_daily_mission_limit(self, plan: str) -> int | None: ...
    def calculate_discounted_price(self, price: int, plan: str) -> int: ...
