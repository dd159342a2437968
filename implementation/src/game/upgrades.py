"""Upgrade catalog, grid expansion tiers and cost computation.

Costs grow geometrically: cost = floor(base_cost * cost_multiplier ** level),
evaluated at the currently owned level. A multiplier of 1 keeps the price
flat. Per-colour auto-painters are not listed in the data file; they are
synthesized from the colour catalog and share AUTO_PAINTER_CONFIG.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from game.types import ColorInfo, GridExpansion, UpgradeType

AUTO_PAINTER_PREFIX = "auto_painter_"
AUTO_PAINTERS_TOGGLE = "auto_painters"


@dataclass(frozen=True)
class AutoPainterConfig:
    base_cost: float = 75
    cost_multiplier: float = 1.5
    max_level: int = 5
    base_interval: float = 5000.0  # ms
    interval_reduction_per_level: float = 0.15


class UpgradeCatalog:
    """Read-only view over upgrade_data.json."""

    def __init__(self) -> None:
        self.upgrades: Dict[str, UpgradeType] = {}
        self.grid_expansions: List[GridExpansion] = []
        self.auto_painter = AutoPainterConfig()

    def load(self, path: Optional[Path] = None) -> "UpgradeCatalog":
        if path is None:
            path = Path(__file__).resolve().parent / "upgrade_data.json"
        if not path.exists():
            print(f"[upgrades] Missing {path.name}; catalog is empty")
            return self
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            print(f"[upgrades] Could not read {path.name}: {e}")
            return self

        self.upgrades = {}
        for entry in raw.get("upgrades", []):
            upgrade = UpgradeType(
                id=entry["id"],
                name=entry["name"],
                description=entry.get("description", ""),
                base_cost=float(entry["base_cost"]),
                cost_multiplier=float(entry.get("cost_multiplier", 1.0)),
                max_level=int(entry.get("max_level", 1)),
                type=entry.get("type", "utility"),
                shop_tab=entry.get("shop_tab", "upgrades"),
                priority=int(entry.get("priority", 0)),
                rate_per_level=float(entry.get("rate_per_level", 0.0)),
                requires=entry.get("requires"),
                can_toggle=bool(entry.get("can_toggle", False)),
            )
            self.upgrades[upgrade.id] = upgrade

        expansions = [
            GridExpansion(
                level=int(e["level"]),
                size=int(e["size"]),
                cost=int(e["cost"]),
                name=e.get("name", f"{e['size']}x{e['size']} Grid"),
            )
            for e in raw.get("grid_expansions", [])
        ]
        self.grid_expansions = sorted(expansions, key=lambda e: e.level)

        ap = raw.get("auto_painter")
        if isinstance(ap, dict):
            self.auto_painter = AutoPainterConfig(
                base_cost=float(ap.get("base_cost", 75)),
                cost_multiplier=float(ap.get("cost_multiplier", 1.5)),
                max_level=int(ap.get("max_level", 5)),
                base_interval=float(ap.get("base_interval", 5000)),
                interval_reduction_per_level=float(ap.get("interval_reduction_per_level", 0.15)),
            )
        return self

    # ── Lookup ───────────────────────────────────────────────────

    def get(self, upgrade_id: str) -> Optional[UpgradeType]:
        if is_auto_painter(upgrade_id):
            color_id = auto_painter_color(upgrade_id)
            return self.auto_painter_upgrade(color_id) if color_id else None
        return self.upgrades.get(upgrade_id)

    def all_upgrades(self) -> List[UpgradeType]:
        return sorted(self.upgrades.values(), key=lambda u: u.priority)

    def toggleable(self) -> List[UpgradeType]:
        return [u for u in self.all_upgrades() if u.can_toggle]

    def auto_painter_upgrade(self, color_id: str, color_name: Optional[str] = None) -> UpgradeType:
        name = color_name or color_id.title()
        cfg = self.auto_painter
        return UpgradeType(
            id=f"{AUTO_PAINTER_PREFIX}{color_id}",
            name=f"Auto: {name}",
            description=f"Automatically paints {name.lower()} cells. Faster per level.",
            base_cost=cfg.base_cost,
            cost_multiplier=cfg.cost_multiplier,
            max_level=cfg.max_level,
            type="auto_painter",
            shop_tab="automation",
            priority=2,
            color_id=color_id,
        )

    def auto_painters_for(self, colors: Iterable[ColorInfo]) -> List[UpgradeType]:
        return [self.auto_painter_upgrade(c.id, c.name) for c in colors]

    # ── Pricing ──────────────────────────────────────────────────

    def cost(self, upgrade_id: str, level: int) -> float:
        """Price of buying the next level when *level* levels are owned; inf for unknown ids."""
        upgrade = self.get(upgrade_id)
        if upgrade is None:
            return math.inf
        return math.floor(upgrade.base_cost * upgrade.cost_multiplier ** level)

    def requirements_met(self, upgrade_id: str, owned: Iterable[str]) -> bool:
        upgrade = self.get(upgrade_id)
        if upgrade is None:
            return False
        if upgrade.requires and upgrade.requires not in set(owned):
            return False
        return True

    def next_grid_expansion(self, current_level: int) -> Optional[GridExpansion]:
        for expansion in self.grid_expansions:
            if expansion.level == current_level + 1:
                return expansion
        return None


def is_auto_painter(upgrade_id: str) -> bool:
    return upgrade_id.startswith(AUTO_PAINTER_PREFIX)


def auto_painter_color(upgrade_id: str) -> Optional[str]:
    if not is_auto_painter(upgrade_id):
        return None
    return upgrade_id[len(AUTO_PAINTER_PREFIX):] or None


_DEFAULT: Optional[UpgradeCatalog] = None


def default_catalog() -> UpgradeCatalog:
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = UpgradeCatalog().load()
    return _DEFAULT
