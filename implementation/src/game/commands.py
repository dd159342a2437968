"""Named commands from the frontend (or a script) mapped onto the session.

Every command returns an ActionResult; argument errors and unknown names
are failures, not exceptions.
"""
from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from game.session import GameSession
from game.types import ActionResult

MULTI_BRUSH_ID = "multi_brush"


class CommandDispatcher:
    def __init__(self, session: GameSession) -> None:
        self.session = session
        self.handlers: Dict[str, Callable[..., ActionResult]] = {
            "accept_contract": self.accept_contract,
            "abandon_contract": self.abandon_contract,
            "preview_contract": self.preview_contract,
            "select_rank": self.select_rank,
            "set_cell": self.set_cell,
            "set_cells": self.set_cells,
            "paint": self.paint,
            "undo": self.undo,
            "clear_grid": self.clear_grid,
            "buy_color": self.buy_color,
            "buy_upgrade": self.buy_upgrade,
            "buy_grid_expansion": self.buy_grid_expansion,
            "set_automation_enabled": self.set_automation_enabled,
            "select_color": self.select_color,
            "save": self.save,
            "load": self.load,
            "export": self.export,
            "import": self.import_,
        }

    def dispatch(self, name: str, **kwargs: Any) -> ActionResult:
        handler = self.handlers.get(name)
        if handler is None:
            return ActionResult.fail(f"Unknown command: {name}")
        try:
            inspect.signature(handler).bind(**kwargs)
        except TypeError as e:
            return ActionResult.fail(f"Bad arguments for {name}: {e}")
        return handler(**kwargs)

    @property
    def state(self):
        return self.session.state

    def _color_allowed(self, color: Optional[str]) -> bool:
        return color is None or self.state.has_color(color)

    # ── Contracts ────────────────────────────────────────────────

    def accept_contract(self, rank_level: Optional[int] = None) -> ActionResult:
        return self.session.contracts.accept_contract(rank_level)

    def abandon_contract(self) -> ActionResult:
        return self.session.contracts.abandon_contract()

    def preview_contract(self, rank_level: Optional[int] = None) -> ActionResult:
        return self.session.contracts.preview_contract(rank_level)

    def select_rank(self, rank_level: Optional[int] = None) -> ActionResult:
        if not self.session.contracts.select_rank(rank_level):
            return ActionResult.fail("Cannot access this rank")
        return ActionResult.ok(rank_level=rank_level)

    # ── Painting ─────────────────────────────────────────────────

    def set_cell(self, x: int, y: int, color: Optional[str] = None) -> ActionResult:
        if not self.state.grid.in_bounds(x, y):
            return ActionResult.fail("Invalid cell")
        if not self._color_allowed(color):
            return ActionResult.fail("Color not unlocked")
        return ActionResult.ok(changed=self.state.grid.set_cell(x, y, color))

    def set_cells(self, cells: Iterable[Tuple[int, int, Optional[str]]]) -> ActionResult:
        batch = [tuple(c) for c in cells]
        if any(len(c) != 3 for c in batch):
            return ActionResult.fail("Cells must be (x, y, color) triples")
        if not all(self._color_allowed(c[2]) for c in batch):
            return ActionResult.fail("Color not unlocked")
        return ActionResult.ok(count=self.state.grid.set_cells(batch))

    def brush_cells(self, x: int, y: int) -> List[Tuple[int, int]]:
        """Cells covered by the brush at (x, y): a + whose arm length is the multi-brush level."""
        radius = self.state.get_upgrade_level(MULTI_BRUSH_ID)
        cells = [(x, y)]
        for i in range(1, radius + 1):
            cells += [(x, y - i), (x, y + i), (x - i, y), (x + i, y)]
        return [(cx, cy) for cx, cy in cells if self.state.grid.in_bounds(cx, cy)]

    def paint(self, x: int, y: int, erase: bool = False) -> ActionResult:
        if not self.state.grid.in_bounds(x, y):
            return ActionResult.fail("Invalid cell")
        color = None if erase else self.state.selected_color
        count = self.state.grid.set_cells((cx, cy, color) for cx, cy in self.brush_cells(x, y))
        return ActionResult.ok(count=count)

    def undo(self) -> ActionResult:
        if not self.state.grid.undo():
            return ActionResult.fail("Nothing to undo")
        return ActionResult.ok()

    def clear_grid(self) -> ActionResult:
        self.state.grid.clear()
        return ActionResult.ok()

    # ── Shop ─────────────────────────────────────────────────────

    def buy_color(self, color_id: str) -> ActionResult:
        return self.session.shop.buy_color(color_id)

    def buy_upgrade(self, upgrade_id: str) -> ActionResult:
        return self.session.shop.buy_upgrade(upgrade_id)

    def buy_grid_expansion(self) -> ActionResult:
        return self.session.shop.buy_grid_expansion()

    def set_automation_enabled(self, upgrade_id: str, enabled: bool) -> ActionResult:
        if not self.state.set_automation_enabled(upgrade_id, enabled):
            return ActionResult.fail("Upgrade not owned")
        return ActionResult.ok(upgrade_id=upgrade_id, enabled=bool(enabled))

    def select_color(self, color_id: str) -> ActionResult:
        if not self.state.select_color(color_id):
            return ActionResult.fail("Color not unlocked")
        return ActionResult.ok(color_id=color_id)

    # ── Persistence ──────────────────────────────────────────────

    def save(self) -> ActionResult:
        if not self.session.saves.save():
            return ActionResult.fail("Save failed")
        return ActionResult.ok(path=str(self.session.saves.path))

    def load(self) -> ActionResult:
        if not self.session.saves.load():
            return ActionResult.fail("No usable save")
        return ActionResult.ok()

    def export(self) -> ActionResult:
        return ActionResult.ok(text=self.session.saves.export_text())

    def import_(self, blob: str) -> ActionResult:
        if not self.session.saves.import_text(blob):
            return ActionResult.fail("Not a valid save")
        return ActionResult.ok()
