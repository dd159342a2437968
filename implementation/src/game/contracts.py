"""Contract generation, lifecycle and progress.

Ranks gate contracts sequentially: the highest accessible rank is the
last one reached before the first rank whose requirements are unmet.
Patterns are always sized to the grid as it is at generation time.
"""
from __future__ import annotations

import itertools
import random
import time
from typing import Callable, Dict, List, Optional, Tuple

from game import catalog
from game.events import ContractEvent, EventType
from game.shapes import count_cells, draw, empty_pattern, shapes_for
from game.state import GameState
from game.types import ActionResult, Contract, Pattern, Rank

CURATED_PATTERN_CHANCE = 0.4
MONEY_BOOST_PER_LEVEL = 0.15
AUTO_START_DELAY_MS = 500

MONEY_BOOST_ID = "money_boost"
PREVIEW_ID = "contract_preview"
PRECISION_ID = "precision_mode"
AUTO_START_ID = "auto_start_contract"

_contract_ids = itertools.count(1)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ContractSystem:
    def __init__(
        self,
        state: GameState,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.state = state
        self.rng = rng or random.Random()
        self.clock = clock or _now_ms
        self.selected_rank_level: Optional[int] = None

        self._preview: Optional[Contract] = None
        self._auto_start_at: Optional[int] = None
        state.events.subscribe(EventType.CONTRACT_COMPLETED, self._on_contract_completed)
        state.events.subscribe(EventType.STATE_LOADED, self._on_state_loaded)

    # ── Ranks ────────────────────────────────────────────────────

    def _access_snapshot(self) -> Tuple[int, int, set]:
        return self.state.completed_contracts, self.state.min_grid_side(), self.state.unlocked_colors

    def can_access(self, rank: Rank) -> bool:
        return catalog.can_access_rank(rank, *self._access_snapshot())

    def get_highest_accessible_rank(self) -> int:
        highest = 1
        for rank in catalog.ranks():
            if not self.can_access(rank):
                break
            highest = rank.level
        return highest

    def get_available_ranks(self) -> List[Rank]:
        return [rank for rank in catalog.ranks() if self.can_access(rank)]

    def get_next_rank_requirements(self) -> Optional[Tuple[Rank, dict]]:
        next_rank = catalog.get_rank(self.get_highest_accessible_rank() + 1)
        if next_rank is None:
            return None
        return next_rank, catalog.missing_requirements(next_rank, *self._access_snapshot())

    def select_rank(self, level: Optional[int]) -> bool:
        if level is None:
            self.selected_rank_level = None
            return True
        rank = catalog.get_rank(level)
        if rank is None or not self.can_access(rank):
            return False
        self.selected_rank_level = level
        return True

    def money_boost_multiplier(self) -> float:
        return 1 + self.state.get_upgrade_level(MONEY_BOOST_ID) * MONEY_BOOST_PER_LEVEL

    # ── Generation ───────────────────────────────────────────────

    def rank_colors(self, rank: Rank) -> List[str]:
        colors = [c for c in rank.required_colors if self.state.has_color(c)]
        return colors or [catalog.DEFAULT_COLOR]

    def generate_pattern(self, rank: Rank) -> Pattern:
        grid = self.state.grid
        colors = self.rank_colors(rank)

        if rank.use_curated and self.rng.random() < CURATED_PATTERN_CHANCE:
            curated = catalog.random_curated_pattern(self.state.min_grid_side(), colors, self.rng)
            if curated is not None:
                return catalog.fit_pattern_to_grid(curated.pattern, grid.width, grid.height)

        pattern = empty_pattern(grid.width, grid.height)
        low, high = catalog.complexity_range(rank.pattern_complexity)
        target = self.rng.randint(low, high)
        kind = self.rng.choice(shapes_for(rank.pattern_complexity))

        palette = colors if rank.mix_colors and len(colors) > 1 else [self.rng.choice(colors)]
        draw(kind, pattern, palette, target, self.rng)
        return pattern

    def generate_contract(self, rank_level: Optional[int] = None) -> Optional[Contract]:
        if rank_level is None:
            rank_level = self.get_highest_accessible_rank()
        rank = catalog.get_rank(rank_level)
        if rank is None or not self.can_access(rank):
            return None

        pattern = self.generate_pattern(rank)
        cell_count = count_cells(pattern)
        reward = int(
            catalog.base_reward(rank.pattern_complexity)
            * rank.reward_multiplier
            * self.money_boost_multiplier()
            * (cell_count / 4)
        )
        return Contract(
            id=f"contract_{next(_contract_ids)}",
            rank_level=rank.level,
            rank_name=rank.name,
            pattern=pattern,
            reward=max(reward, 1),
            cell_count=cell_count,
            created_at=self.clock(),
        )

    # ── Lifecycle ────────────────────────────────────────────────

    def can_accept_contract(self) -> bool:
        return self.state.active_contract is None

    def _target_level(self, rank_level: Optional[int]) -> int:
        if rank_level is not None:
            return rank_level
        if self.selected_rank_level is not None:
            return self.selected_rank_level
        return self.get_highest_accessible_rank()

    def preview_contract(self, rank_level: Optional[int] = None) -> ActionResult:
        if not self.state.has_upgrade(PREVIEW_ID):
            return ActionResult.fail("Requires Contract Preview")
        contract = self.generate_contract(self._target_level(rank_level))
        if contract is None:
            return ActionResult.fail("Cannot access this rank")
        self._preview = contract
        return ActionResult.ok(contract=contract)

    @property
    def preview(self) -> Optional[Contract]:
        return self._preview

    def _take_preview(self, level: int) -> Optional[Contract]:
        offer, self._preview = self._preview, None
        if offer is None or offer.rank_level != level:
            return None
        grid = self.state.grid
        if offer.width != grid.width or offer.height != grid.height:
            return None
        rank = catalog.get_rank(level)
        if rank is None or not self.can_access(rank):
            return None
        return offer

    def accept_contract(self, rank_level: Optional[int] = None) -> ActionResult:
        if self.state.active_contract is not None:
            return ActionResult.fail("Already have an active contract")

        level = self._target_level(rank_level)
        contract = self._take_preview(level) or self.generate_contract(level)
        if contract is None:
            return ActionResult.fail("Cannot access this rank")

        self._auto_start_at = None
        self.state.set_active_contract(contract)
        print(f"[contracts] Started {contract.id} ({contract.rank_name}, {contract.cell_count} cells, ${contract.reward})")
        return ActionResult.ok(contract=contract)

    def abandon_contract(self) -> ActionResult:
        if self.state.active_contract is None:
            return ActionResult.fail("No active contract")
        self.state.clear_contract()
        return ActionResult.ok()

    def get_progress(self) -> Optional[Dict[str, int]]:
        contract = self.state.active_contract
        if contract is None:
            return None
        grid = self.state.grid
        correct = 0
        wrong = 0
        for x, y, actual in grid.iter_cells():
            expected = contract.expected(x, y)
            if expected is not None:
                if expected == actual:
                    correct += 1
            elif actual is not None:
                wrong += 1
        total = contract.cell_count
        percent = round(correct / total * 100) if total > 0 else 0
        return {"correct": correct, "wrong": wrong, "total": total, "percent": percent}

    def precision_hint(self, x: int, y: int) -> Optional[str]:
        contract = self.state.active_contract
        if contract is None or not self.state.has_upgrade(PRECISION_ID):
            return None
        return contract.expected(x, y)

    # ── Auto-start ───────────────────────────────────────────────

    def _on_contract_completed(self, event: ContractEvent) -> None:
        if event.contract is not None:
            print(f"[contracts] Completed {event.contract.id} (+${event.contract.reward})")
        if self.state.is_automation_enabled(AUTO_START_ID):
            self._auto_start_at = self.clock() + AUTO_START_DELAY_MS

    def _on_state_loaded(self, _event) -> None:
        self._preview = None
        self._auto_start_at = None

    @property
    def auto_start_pending(self) -> bool:
        return self._auto_start_at is not None

    def tick(self, now_ms: Optional[int] = None) -> bool:
        """Run a scheduled auto-start if it is due; True when a contract was started."""
        if self._auto_start_at is None:
            return False
        now = self.clock() if now_ms is None else now_ms
        if now < self._auto_start_at:
            return False
        self._auto_start_at = None
        if self.state.active_contract is not None or not self.state.is_automation_enabled(AUTO_START_ID):
            return False
        return self.accept_contract().success
