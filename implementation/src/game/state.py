"""GameState: the aggregate root every other system is handed explicitly.

GameState owns the Grid and all progression fields, republishes grid
events on its own bus and re-checks the active contract synchronously
after every cell mutation, so by the time a CELL_CHANGED subscriber runs
the contract status is already current.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Set

from game.catalog import DEFAULT_COLOR, STARTER_COLORS
from game.events import (
    AutomationToggle,
    CellChange,
    CellsChange,
    ColorEvent,
    ContractEvent,
    EventBus,
    EventType,
    GridExpansionEvent,
    GridSize,
    MoneyChange,
    UpgradeChange,
)
from game.grid import MAX_HISTORY, Grid
from game.store import ResourceStore
from game.types import Contract
from game.upgrades import AUTO_PAINTERS_TOGGLE, UpgradeCatalog, default_catalog, is_auto_painter

SAVE_VERSION = 4
SUPPORTED_VERSIONS = (2, 3, 4)
UNDO_BUFFER_ID = "undo_buffer"


def _parse_cells(raw: Any, width: int) -> List[List[Any]]:
    """Normalize sparse triples or the legacy dense list into [x, y, color] triples."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise TypeError("grid cells must be a list")
    if not raw or not isinstance(raw[0], (list, tuple)):
        cells = []
        for i, color in enumerate(raw):
            if color is None:
                continue
            if not isinstance(color, str):
                raise TypeError(f"bad dense cell {color!r}")
            cells.append([i % width, i // width, color])
        return cells

    cells = []
    for entry in raw:
        if not isinstance(entry, (list, tuple)) or len(entry) < 3:
            raise ValueError(f"bad cell entry {entry!r}")
        x, y, color = entry[0], entry[1], entry[2]
        if isinstance(x, bool) or isinstance(y, bool) or not isinstance(x, int) or not isinstance(y, int):
            raise ValueError(f"bad cell coordinates {entry!r}")
        if color is None:
            continue
        if not isinstance(color, str):
            raise TypeError(f"bad cell color {entry!r}")
        cells.append([x, y, color])
    return cells


class GameState:
    def __init__(self, width: int = 4, height: int = 4, catalog: Optional[UpgradeCatalog] = None) -> None:
        self.events = EventBus()
        self.catalog = catalog or default_catalog()

        self.grid = Grid(width, height)
        self.grid_level = 1
        self.store = ResourceStore()

        self.unlocked_colors: Set[str] = set(STARTER_COLORS)
        self.selected_color: str = DEFAULT_COLOR

        self.upgrades: Dict[str, int] = {}
        self.automation_enabled: Dict[str, bool] = {}

        self.active_contract: Optional[Contract] = None
        self.completed_contracts = 0

        self._completing = False
        self._wire_grid(self.grid)

    def _wire_grid(self, grid: Grid) -> None:
        grid.events.subscribe(EventType.CELL_CHANGED, self._on_cell_changed)
        grid.events.subscribe(EventType.CELLS_CHANGED, self._on_cells_changed)
        grid.events.subscribe(EventType.GRID_CLEARED, lambda p: self.events.emit(EventType.GRID_CLEARED, p))
        grid.events.subscribe(EventType.GRID_LOADED, lambda p: self.events.emit(EventType.GRID_LOADED, p))
        grid.events.subscribe(EventType.GRID_RESIZED, lambda p: self.events.emit(EventType.GRID_RESIZED, p))

    def _on_cell_changed(self, change: CellChange) -> None:
        self.store.total_cells_filled += 1
        settled = self._settle_contract()
        self.events.emit(EventType.CELL_CHANGED, change)
        if settled is not None:
            self._finish_contract(settled)

    def _on_cells_changed(self, batch: CellsChange) -> None:
        self.store.total_cells_filled += len(batch)
        settled = self._settle_contract()
        self.events.emit(EventType.CELLS_CHANGED, batch)
        if settled is not None:
            self._finish_contract(settled)

    # ── Grid ─────────────────────────────────────────────────────

    def expand_grid(self, new_width: int, new_height: int) -> bool:
        if not self.grid.expand(new_width, new_height):
            return False
        self.grid_level += 1
        self.events.emit(
            EventType.GRID_EXPANDED,
            GridExpansionEvent(new_width, new_height, self.grid_level),
        )
        return True

    def grid_size(self) -> GridSize:
        return GridSize(self.grid.width, self.grid.height)

    def min_grid_side(self) -> int:
        return min(self.grid.width, self.grid.height)

    # ── Money ────────────────────────────────────────────────────

    @property
    def money(self) -> int:
        return self.store.money

    @property
    def stats(self) -> ResourceStore:
        return self.store

    def add_money(self, amount: int) -> bool:
        if not self.store.add_money(amount):
            return False
        self.events.emit(EventType.MONEY_CHANGED, MoneyChange(self.store.money, amount))
        return True

    def spend_money(self, amount: int) -> bool:
        if not self.store.spend_money(amount):
            return False
        self.events.emit(EventType.MONEY_CHANGED, MoneyChange(self.store.money, -amount))
        return True

    def add_play_time(self, seconds: float) -> None:
        if seconds > 0:
            self.store.play_time += seconds

    # ── Colors ───────────────────────────────────────────────────

    def unlock_color(self, color_id: str) -> bool:
        if color_id in self.unlocked_colors:
            return False
        self.unlocked_colors.add(color_id)
        self.events.emit(EventType.COLOR_UNLOCKED, ColorEvent(color_id))
        return True

    def has_color(self, color_id: str) -> bool:
        return color_id in self.unlocked_colors

    def select_color(self, color_id: str) -> bool:
        if color_id not in self.unlocked_colors:
            return False
        self.selected_color = color_id
        self.events.emit(EventType.COLOR_SELECTED, ColorEvent(color_id))
        return True

    # ── Upgrades / automation ────────────────────────────────────

    def get_upgrade_level(self, upgrade_id: str) -> int:
        return self.upgrades.get(upgrade_id, 0)

    def has_upgrade(self, upgrade_id: str) -> bool:
        return self.get_upgrade_level(upgrade_id) > 0

    def owned_upgrades(self) -> Set[str]:
        return {uid for uid, level in self.upgrades.items() if level > 0}

    def purchase_upgrade(self, upgrade_id: str) -> bool:
        """Bump the level by one; pricing and caps are enforced by the shop, not here."""
        current = self.get_upgrade_level(upgrade_id)
        self.upgrades[upgrade_id] = current + 1
        if current == 0:
            self.automation_enabled[upgrade_id] = True
        if upgrade_id == UNDO_BUFFER_ID:
            self._apply_history_capacity()
        self.events.emit(EventType.UPGRADE_CHANGED, UpgradeChange(upgrade_id, current + 1))
        return True

    def _apply_history_capacity(self) -> None:
        upgrade = self.catalog.get(UNDO_BUFFER_ID)
        per_level = int(upgrade.rate_per_level) if upgrade else 20
        self.grid.set_max_history(MAX_HISTORY + per_level * self.get_upgrade_level(UNDO_BUFFER_ID))

    def is_automation_enabled(self, upgrade_id: str) -> bool:
        # The painter master switch works without owning anything
        if upgrade_id == AUTO_PAINTERS_TOGGLE:
            return self.automation_enabled.get(AUTO_PAINTERS_TOGGLE, True) is not False
        if not self.has_upgrade(upgrade_id):
            return False
        return self.automation_enabled.get(upgrade_id, True) is not False

    def set_automation_enabled(self, upgrade_id: str, enabled: bool) -> bool:
        if upgrade_id != AUTO_PAINTERS_TOGGLE and not self.has_upgrade(upgrade_id):
            return False
        self.automation_enabled[upgrade_id] = bool(enabled)
        self.events.emit(EventType.AUTOMATION_TOGGLED, AutomationToggle(upgrade_id, bool(enabled)))
        return True

    def has_any_auto_painter(self) -> bool:
        return bool(self.owned_auto_painters())

    def owned_auto_painters(self) -> List[str]:
        return sorted(uid for uid, level in self.upgrades.items() if level > 0 and is_auto_painter(uid))

    # ── Contracts ────────────────────────────────────────────────

    def set_active_contract(self, contract: Contract) -> None:
        self.active_contract = contract
        self.grid.clear()
        self.events.emit(EventType.CONTRACT_STARTED, ContractEvent(contract))

    def clear_contract(self) -> None:
        contract = self.active_contract
        self.active_contract = None
        self.grid.clear()
        self.events.emit(EventType.CONTRACT_CLEARED, ContractEvent(contract))

    def is_contract_satisfied(self, contract: Contract) -> bool:
        grid = self.grid
        # Any filled cell the pattern leaves empty (or doesn't cover) is a mismatch
        for x, y, color in grid.filled_cells():
            if contract.expected(x, y) != color:
                return False
        for y, row in enumerate(contract.pattern):
            for x, expected in enumerate(row):
                if expected is not None and grid.get(x, y) != expected:
                    return False
        return True

    def _settle_contract(self) -> Optional[Contract]:
        """Pay out a satisfied contract and drop it; the grid is left as painted."""
        contract = self.active_contract
        if contract is None or self._completing or not self.is_contract_satisfied(contract):
            return None
        self.add_money(contract.reward)
        self.active_contract = None
        self.completed_contracts += 1
        self.store.total_contracts_completed += 1
        return contract

    def _finish_contract(self, contract: Contract) -> None:
        self._completing = True
        try:
            self.grid.clear()
        finally:
            self._completing = False
        self.events.emit(EventType.CONTRACT_COMPLETED, ContractEvent(contract))

    # ── Serialization ────────────────────────────────────────────

    def serialize(self) -> Dict[str, Any]:
        return {
            "version": SAVE_VERSION,
            "grid": self.grid.serialize(),
            "gridLevel": self.grid_level,
            "money": self.store.money,
            "unlockedColors": sorted(self.unlocked_colors),
            "selectedColor": self.selected_color,
            "upgrades": dict(self.upgrades),
            "automationEnabled": dict(self.automation_enabled),
            "activeContract": self.active_contract.to_dict() if self.active_contract else None,
            "completedContracts": self.completed_contracts,
            "stats": self.store.stats_dict(),
        }

    @staticmethod
    def _parse_snapshot(data: Any) -> Dict[str, Any]:
        """Validate a save document without touching live state; raises on bad data."""
        if not isinstance(data, dict):
            raise TypeError("save data must be an object")
        version = data.get("version")
        if isinstance(version, bool) or version not in SUPPORTED_VERSIONS:
            raise ValueError(f"unsupported save version {version!r}")

        grid = data.get("grid") or {}
        if not isinstance(grid, dict):
            raise TypeError("grid must be an object")
        width = int(grid.get("width") or 4)
        height = int(grid.get("height") or 4)
        if width <= 0 or height <= 0:
            raise ValueError("grid dimensions must be positive")

        unlocked = set(data.get("unlockedColors") or STARTER_COLORS)
        unlocked.update(STARTER_COLORS)
        selected = data.get("selectedColor") or DEFAULT_COLOR
        if selected not in unlocked:
            selected = DEFAULT_COLOR

        upgrades_raw = data.get("upgrades") or {}
        automation_raw = data.get("automationEnabled") or {}
        if not isinstance(upgrades_raw, dict) or not isinstance(automation_raw, dict):
            raise TypeError("upgrades and automationEnabled must be objects")

        contract_raw = data.get("activeContract")
        contract = Contract.from_dict(contract_raw) if isinstance(contract_raw, dict) else None

        stats = data.get("stats") or {}
        if not isinstance(stats, dict):
            raise TypeError("stats must be an object")

        return {
            "grid": {"width": width, "height": height, "cells": _parse_cells(grid.get("cells"), width)},
            "grid_level": int(data.get("gridLevel") or 1),
            "money": max(0, int(data.get("money") or 0)),
            "unlocked": unlocked,
            "selected": str(selected),
            "upgrades": {str(k): int(v) for k, v in upgrades_raw.items()},
            "automation": {str(k): bool(v) for k, v in automation_raw.items()},
            "contract": contract,
            "completed": int(data.get("completedContracts") or 0),
            "stats": stats,
        }

    def deserialize(self, data: Any) -> bool:
        try:
            parsed = self._parse_snapshot(data)
            # Stats parse can still fail on odd values; do it before mutating anything
            staged = ResourceStore()
            staged.load_stats(parsed["stats"])
        except (KeyError, TypeError, ValueError) as e:
            print(f"[state] Rejecting save data: {e}")
            return False

        grid_data = parsed["grid"]
        if grid_data["width"] > self.grid.width or grid_data["height"] > self.grid.height:
            self.grid.expand(max(grid_data["width"], self.grid.width), max(grid_data["height"], self.grid.height))
        self.grid.deserialize(grid_data)

        self.grid_level = parsed["grid_level"]
        staged.money = parsed["money"]
        self.store = staged
        self.unlocked_colors = parsed["unlocked"]
        self.selected_color = parsed["selected"]
        self.upgrades = parsed["upgrades"]
        self.automation_enabled = parsed["automation"]
        self.active_contract = parsed["contract"]
        self.completed_contracts = parsed["completed"]
        self._apply_history_capacity()

        self.events.emit(EventType.STATE_LOADED)
        return True
