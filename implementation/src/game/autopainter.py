"""Per-colour auto-painters.

Each owned ``auto_painter_<color>`` paints one cell of its colour per
interval, scanning the active contract row-major for the first cell that
still needs it. Paints go through Grid.set_cell like manual edits, so they
are undoable and trigger the completion check.
"""
from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional

from game.events import EventType
from game.state import GameState
from game.upgrades import AUTO_PAINTERS_TOGGLE, auto_painter_color

SPEED_BOOST_ID = "speed_boost"
SPEED_BOOST_RATE = 0.25
LEVEL_FLOOR = 0.2
SPEED_FLOOR = 0.1
MIN_INTERVAL_MS = 200


def _now_ms() -> int:
    return int(time.time() * 1000)


def compute_interval(
    level: int,
    speed_boost_level: int = 0,
    base_interval: float = 5000.0,
    reduction_per_level: float = 0.15,
) -> float:
    interval = base_interval
    interval *= max(LEVEL_FLOOR, 1 - level * reduction_per_level)
    interval *= max(SPEED_FLOOR, 1 - speed_boost_level * SPEED_BOOST_RATE)
    return max(MIN_INTERVAL_MS, interval)


class AutoPainterSystem:
    def __init__(self, state: GameState, clock: Optional[Callable[[], int]] = None) -> None:
        self.state = state
        self.clock = clock or _now_ms
        # color id -> ms of the last successful paint (or first sighting)
        self.last_paint: Dict[str, int] = {}
        state.events.subscribe(EventType.STATE_LOADED, lambda _e: self.reset())

    def interval_for(self, painter_id: str) -> float:
        cfg = self.state.catalog.auto_painter
        return compute_interval(
            self.state.get_upgrade_level(painter_id),
            self.state.get_upgrade_level(SPEED_BOOST_ID),
            cfg.base_interval,
            cfg.interval_reduction_per_level,
        )

    def tick(self, now_ms: Optional[int] = None) -> int:
        """One poll; returns how many cells were painted."""
        if self.state.active_contract is None:
            return 0
        if not self.state.is_automation_enabled(AUTO_PAINTERS_TOGGLE):
            return 0

        now = self.clock() if now_ms is None else now_ms
        painted = 0
        for painter_id in self.state.owned_auto_painters():
            color_id = auto_painter_color(painter_id)
            if not color_id:
                continue
            last = self.last_paint.get(color_id)
            if last is None:
                self.last_paint[color_id] = now
                continue
            if now - last < self.interval_for(painter_id):
                continue
            if self.paint_next_cell(color_id):
                self.last_paint[color_id] = now
                painted += 1
            # A finished contract clears the grid; the rest have nothing to do this tick
            if self.state.active_contract is None:
                break
        return painted

    def paint_next_cell(self, color_id: str) -> bool:
        contract = self.state.active_contract
        if contract is None:
            return False
        grid = self.state.grid
        for x, y, actual in grid.iter_cells():
            if contract.expected(x, y) == color_id and actual != color_id:
                return grid.set_cell(x, y, color_id)
        return False

    def reset(self) -> None:
        self.last_paint.clear()

    def status(self) -> Dict[str, Any]:
        return {
            "enabled": self.state.is_automation_enabled(AUTO_PAINTERS_TOGGLE),
            "painters": [
                {
                    "id": painter_id,
                    "color_id": auto_painter_color(painter_id),
                    "level": self.state.get_upgrade_level(painter_id),
                    "interval": self.interval_for(painter_id),
                }
                for painter_id in self.state.owned_auto_painters()
            ],
        }
