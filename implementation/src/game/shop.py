"""Pricing and affordability; the only state it touches lives on GameState."""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from game import catalog
from game.state import GameState
from game.types import ActionResult, ColorInfo, GridExpansion, UpgradeType
from game.upgrades import UpgradeCatalog, auto_painter_color, is_auto_painter


class ShopSystem:
    def __init__(self, state: GameState, upgrades: Optional[UpgradeCatalog] = None) -> None:
        self.state = state
        self.upgrades = upgrades or state.catalog

    # ── Grid expansion ───────────────────────────────────────────

    def next_expansion(self) -> Optional[GridExpansion]:
        return self.upgrades.next_grid_expansion(self.state.grid_level)

    def can_buy_grid_expansion(self) -> bool:
        nxt = self.next_expansion()
        return nxt is not None and self.state.money >= nxt.cost

    def buy_grid_expansion(self) -> ActionResult:
        nxt = self.next_expansion()
        if nxt is None:
            return ActionResult.fail("Max grid size reached")
        if self.state.money < nxt.cost:
            return ActionResult.fail("Cannot afford")

        grid = self.state.grid
        if nxt.size < grid.width or nxt.size < grid.height:
            return ActionResult.fail("Grid expansion failed")

        # Not transactional: money goes first, as callers already checked affordability
        self.state.spend_money(nxt.cost)
        if not self.state.expand_grid(nxt.size, nxt.size):
            return ActionResult.fail("Grid expansion failed")
        print(f"[shop] Grid expanded to {nxt.size}x{nxt.size} for ${nxt.cost}")
        return ActionResult.ok(level=nxt.level, size=nxt.size, cost=nxt.cost)

    # ── Colors ───────────────────────────────────────────────────

    def color_price(self, color_id: str) -> int:
        info = catalog.get_color(color_id)
        return info.cost if info else 0

    def can_buy_color(self, color_id: str) -> bool:
        if catalog.get_color(color_id) is None or self.state.has_color(color_id):
            return False
        return self.state.money >= self.color_price(color_id)

    def buy_color(self, color_id: str) -> ActionResult:
        if catalog.get_color(color_id) is None:
            return ActionResult.fail("Unknown color")
        if self.state.has_color(color_id):
            return ActionResult.fail("Already owned")
        price = self.color_price(color_id)
        if self.state.money < price:
            return ActionResult.fail("Cannot afford")

        if price > 0:
            self.state.spend_money(price)
        self.state.unlock_color(color_id)
        print(f"[shop] Unlocked {color_id} for ${price}")
        return ActionResult.ok(color_id=color_id, price=price)

    def available_colors(self) -> List[ColorInfo]:
        return catalog.purchasable_colors(self.state.unlocked_colors)

    # ── Upgrades ─────────────────────────────────────────────────

    def upgrade_price(self, upgrade_id: str) -> float:
        return self.upgrades.cost(upgrade_id, self.state.get_upgrade_level(upgrade_id))

    def _blocker(self, upgrade_id: str) -> Optional[str]:
        """Reason the upgrade can't be bought right now, or None."""
        upgrade = self.upgrades.get(upgrade_id)
        if upgrade is None:
            return "Unknown upgrade"
        if is_auto_painter(upgrade_id):
            color_id = auto_painter_color(upgrade_id)
            if catalog.get_color(color_id) is None:
                return "Unknown color"
            if not self.state.has_color(color_id):
                return "Color not unlocked"
        if self.state.get_upgrade_level(upgrade_id) >= upgrade.max_level:
            return "Max level reached"
        if not self.upgrades.requirements_met(upgrade_id, self.state.owned_upgrades()):
            required = self.upgrades.get(upgrade.requires)
            return f"Requires {required.name if required else upgrade.requires}"
        if self.state.money < self.upgrade_price(upgrade_id):
            return "Cannot afford"
        return None

    def can_buy_upgrade(self, upgrade_id: str) -> bool:
        return self._blocker(upgrade_id) is None

    def buy_upgrade(self, upgrade_id: str) -> ActionResult:
        reason = self._blocker(upgrade_id)
        if reason:
            return ActionResult.fail(reason)

        price = int(self.upgrade_price(upgrade_id))
        self.state.spend_money(price)
        self.state.purchase_upgrade(upgrade_id)
        level = self.state.get_upgrade_level(upgrade_id)
        print(f"[shop] Bought {upgrade_id} level {level} for ${price}")
        return ActionResult.ok(upgrade_id=upgrade_id, price=price, level=level)

    def _describe(self, upgrade: UpgradeType, owned: set) -> Dict[str, Any]:
        level = self.state.get_upgrade_level(upgrade.id)
        next_cost = self.upgrades.cost(upgrade.id, level)
        maxed = level >= upgrade.max_level
        meets = self.upgrades.requirements_met(upgrade.id, owned)
        return {
            "upgrade": upgrade,
            "id": upgrade.id,
            "name": upgrade.name,
            "level": level,
            "next_cost": None if maxed or math.isinf(next_cost) else int(next_cost),
            "maxed": maxed,
            "owned": level > 0,
            "meets_requirements": meets,
            "can_afford": not maxed and meets and self.state.money >= next_cost,
        }

    def available_upgrades(self) -> List[Dict[str, Any]]:
        owned = self.state.owned_upgrades()
        listing = list(self.upgrades.all_upgrades())
        unlocked = [c for c in catalog.all_colors() if self.state.has_color(c.id)]
        listing += self.upgrades.auto_painters_for(unlocked)
        return [self._describe(u, owned) for u in listing]

    # ── Summary views ────────────────────────────────────────────

    def shop_data(self) -> Dict[str, Any]:
        money = self.state.money
        return {
            "grid_expansion": self.next_expansion(),
            "can_buy_grid_expansion": self.can_buy_grid_expansion(),
            "grid_level": self.state.grid_level,
            "grid_size": self.state.min_grid_side(),
            "colors": [
                {"color": c, "can_afford": money >= c.cost} for c in self.available_colors()
            ],
            "upgrades": self.available_upgrades(),
        }

    def affordable_counts(self) -> Dict[str, int]:
        data = self.shop_data()
        return {
            "grid_expansion": 1 if data["can_buy_grid_expansion"] else 0,
            "colors": sum(1 for c in data["colors"] if c["can_afford"]),
            "upgrades": sum(1 for u in data["upgrades"] if u["can_afford"]),
        }
