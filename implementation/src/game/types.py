from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# Row-major: pattern[y][x], None marks a cell that must stay empty
Pattern = List[List[Optional[str]]]


class Complexity(str, Enum):
    SIMPLE = "simple"
    BASIC = "basic"
    MEDIUM = "medium"
    COMPLEX = "complex"
    ADVANCED = "advanced"
    EXPERT = "expert"
    MASTER = "master"


@dataclass(frozen=True)
class ColorInfo:
    id: str
    name: str
    hex: str
    cost: int = 0
    unlocked: bool = False  # free starter color
    special: bool = False


@dataclass(frozen=True)
class Rank:
    level: int
    name: str
    contracts_required: int
    min_grid_size: int
    required_colors: Tuple[str, ...]
    pattern_complexity: Complexity
    reward_multiplier: float
    description: str = ""
    mix_colors: bool = False
    use_curated: bool = False


@dataclass(frozen=True)
class UpgradeType:
    id: str
    name: str
    description: str
    base_cost: float
    cost_multiplier: float
    max_level: int
    type: str
    shop_tab: str = "upgrades"
    priority: int = 0
    rate_per_level: float = 0.0
    requires: Optional[str] = None
    can_toggle: bool = False
    color_id: Optional[str] = None


@dataclass(frozen=True)
class GridExpansion:
    level: int
    size: int
    cost: int
    name: str = ""


@dataclass(frozen=True)
class CuratedPattern:
    name: str
    size: int
    pattern: Pattern

    def colors(self) -> set[str]:
        return {cell for row in self.pattern for cell in row if cell is not None}


@dataclass(frozen=True)
class Contract:
    id: str
    rank_level: int
    rank_name: str
    pattern: Pattern
    reward: int
    cell_count: int
    created_at: int  # epoch milliseconds

    @property
    def width(self) -> int:
        return len(self.pattern[0]) if self.pattern else 0

    @property
    def height(self) -> int:
        return len(self.pattern)

    def expected(self, x: int, y: int) -> Optional[str]:
        """Expected color at (x, y); anything outside the pattern must be empty."""
        if 0 <= y < len(self.pattern):
            row = self.pattern[y]
            if 0 <= x < len(row):
                return row[x]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "rankLevel": self.rank_level,
            "rankName": self.rank_name,
            "pattern": [list(row) for row in self.pattern],
            "reward": self.reward,
            "cellCount": self.cell_count,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contract":
        raw_pattern = data["pattern"]
        if not isinstance(raw_pattern, list):
            raise TypeError("contract pattern must be a list of rows")
        pattern: Pattern = []
        for row in raw_pattern:
            if not isinstance(row, list):
                raise TypeError("contract pattern rows must be lists")
            pattern.append([cell if isinstance(cell, str) else None for cell in row])
        cell_count = sum(1 for row in pattern for cell in row if cell is not None)
        return cls(
            id=str(data.get("id", "")),
            rank_level=int(data.get("rankLevel", 1)),
            rank_name=str(data.get("rankName", "")),
            pattern=pattern,
            reward=max(1, int(data.get("reward", 1))),
            cell_count=int(data.get("cellCount", cell_count)),
            created_at=int(data.get("createdAt", 0)),
        )


@dataclass
class ActionResult:
    """Outcome of a player-facing operation; ``reason`` is shown to the player on failure."""
    success: bool
    reason: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, **data: Any) -> "ActionResult":
        return cls(True, "", dict(data))

    @classmethod
    def fail(cls, reason: str) -> "ActionResult":
        return cls(False, reason)
