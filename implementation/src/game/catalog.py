"""Static reference data: colors, ranks and the curated pattern library.

Everything here is read-only after load. The JSON files ship next to this
module; a missing or unreadable file yields an empty catalog rather than
an exception, matching how the layout and upgrade loaders behave.
"""
from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from game.types import ColorInfo, Complexity, CuratedPattern, Pattern, Rank

DEFAULT_COLOR = "black"
STARTER_COLORS = ("black", "white")

_FALLBACK_RGB = (128, 128, 128)


def _data_path(name: str) -> Path:
    return Path(__file__).resolve().parent / name


def _read_json(path: Path) -> dict:
    if not path.exists():
        print(f"[catalog] Missing data file {path.name}")
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"[catalog] Could not read {path.name}: {e}")
        return {}
    return raw if isinstance(raw, dict) else {}


# ── Colors ───────────────────────────────────────────────────────────

def load_colors(path: Optional[Path] = None) -> Dict[str, ColorInfo]:
    raw = _read_json(path or _data_path("colors.json"))
    colors: Dict[str, ColorInfo] = {}
    for entry in raw.get("colors", []):
        try:
            info = ColorInfo(
                id=entry["id"],
                name=entry.get("name", entry["id"].title()),
                hex=entry.get("hex", "#000000"),
                cost=int(entry.get("cost", 0)),
                unlocked=bool(entry.get("unlocked", False)),
                special=bool(entry.get("special", False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            print(f"[catalog] Skipping bad color entry {entry!r}: {e}")
            continue
        colors[info.id] = info
    return colors


_COLORS: Optional[Dict[str, ColorInfo]] = None


def colors() -> Dict[str, ColorInfo]:
    global _COLORS
    if _COLORS is None:
        _COLORS = load_colors()
    return _COLORS


def get_color(color_id: str) -> Optional[ColorInfo]:
    return colors().get(color_id)


def all_colors() -> List[ColorInfo]:
    return sorted(colors().values(), key=lambda c: c.cost)


def purchasable_colors(unlocked: Iterable[str]) -> List[ColorInfo]:
    owned = set(unlocked)
    return [c for c in all_colors() if c.id not in owned and c.cost > 0]


def color_rgb(color_id: Optional[str]) -> Tuple[int, int, int]:
    """RGB for drawing; non-hex visual keys (e.g. rainbow) get a neutral grey."""
    info = get_color(color_id) if color_id else None
    if info is None:
        return _FALLBACK_RGB
    value = info.hex.lstrip("#")
    if len(value) != 6:
        return _FALLBACK_RGB
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError:
        return _FALLBACK_RGB


# ── Ranks ────────────────────────────────────────────────────────────

_COMPLEXITY_DEFAULTS = {
    Complexity.SIMPLE: (2, 4, 5),
    Complexity.BASIC: (4, 8, 8),
    Complexity.MEDIUM: (6, 12, 12),
    Complexity.COMPLEX: (10, 20, 18),
    Complexity.ADVANCED: (15, 30, 25),
    Complexity.EXPERT: (25, 50, 35),
    Complexity.MASTER: (40, 80, 50),
}


def load_ranks(path: Optional[Path] = None) -> Tuple[List[Rank], Dict[Complexity, Tuple[int, int, int]]]:
    raw = _read_json(path or _data_path("ranks.json"))
    ranks: List[Rank] = []
    for entry in raw.get("ranks", []):
        try:
            ranks.append(Rank(
                level=int(entry["level"]),
                name=entry.get("name", f"Rank {entry['level']}"),
                contracts_required=int(entry.get("contracts_required", 0)),
                min_grid_size=int(entry.get("min_grid_size", 4)),
                required_colors=tuple(entry.get("required_colors", STARTER_COLORS)),
                pattern_complexity=Complexity(entry.get("complexity", "simple")),
                reward_multiplier=float(entry.get("reward_multiplier", 1.0)),
                description=entry.get("description", ""),
                mix_colors=bool(entry.get("mix_colors", False)),
                use_curated=bool(entry.get("use_curated", False)),
            ))
        except (KeyError, TypeError, ValueError) as e:
            print(f"[catalog] Skipping bad rank entry {entry!r}: {e}")
    ranks.sort(key=lambda r: r.level)

    tiers = dict(_COMPLEXITY_DEFAULTS)
    for key, spec in raw.get("complexity", {}).items():
        try:
            tiers[Complexity(key)] = (int(spec["min"]), int(spec["max"]), int(spec["base_reward"]))
        except (KeyError, TypeError, ValueError):
            continue
    return ranks, tiers


_RANKS: Optional[List[Rank]] = None
_TIERS: Optional[Dict[Complexity, Tuple[int, int, int]]] = None


def _rank_data() -> Tuple[List[Rank], Dict[Complexity, Tuple[int, int, int]]]:
    global _RANKS, _TIERS
    if _RANKS is None or _TIERS is None:
        _RANKS, _TIERS = load_ranks()
    return _RANKS, _TIERS


def ranks() -> List[Rank]:
    return _rank_data()[0]


def get_rank(level: int) -> Optional[Rank]:
    for rank in ranks():
        if rank.level == level:
            return rank
    return None


def max_rank() -> int:
    all_ranks = ranks()
    return all_ranks[-1].level if all_ranks else 1


def can_access_rank(rank: Rank, completed_contracts: int, grid_size: int, unlocked: Iterable[str]) -> bool:
    if completed_contracts < rank.contracts_required:
        return False
    if grid_size < rank.min_grid_size:
        return False
    owned = set(unlocked)
    return all(color in owned for color in rank.required_colors)


def missing_requirements(rank: Rank, completed_contracts: int, grid_size: int, unlocked: Iterable[str]) -> dict:
    owned = set(unlocked)
    return {
        "contracts": max(0, rank.contracts_required - completed_contracts),
        "grid_size": rank.min_grid_size if grid_size < rank.min_grid_size else None,
        "colors": [c for c in rank.required_colors if c not in owned],
    }


def complexity_range(complexity: Complexity) -> Tuple[int, int]:
    low, high, _ = _rank_data()[1].get(complexity, _COMPLEXITY_DEFAULTS[Complexity.SIMPLE])
    return low, high


def base_reward(complexity: Complexity) -> int:
    return _rank_data()[1].get(complexity, _COMPLEXITY_DEFAULTS[Complexity.SIMPLE])[2]


# ── Curated patterns ─────────────────────────────────────────────────

def load_curated_patterns(path: Optional[Path] = None) -> List[CuratedPattern]:
    """Decode the legend-compressed pattern library into full colour grids."""
    raw = _read_json(path or _data_path("patterns.json"))
    legend: Dict[str, Optional[str]] = raw.get("legend", {})
    patterns: List[CuratedPattern] = []
    for entry in raw.get("patterns", []):
        rows = entry.get("rows", [])
        if not rows:
            continue
        try:
            grid: Pattern = [[legend[ch] for ch in row] for row in rows]
        except KeyError as e:
            print(f"[catalog] Pattern {entry.get('name')!r} uses unknown symbol {e}")
            continue
        size = int(entry.get("size", max(len(rows), len(rows[0]))))
        patterns.append(CuratedPattern(name=entry.get("name", ""), size=size, pattern=grid))
    return patterns


_PATTERNS: Optional[List[CuratedPattern]] = None


def curated_patterns() -> List[CuratedPattern]:
    global _PATTERNS
    if _PATTERNS is None:
        _PATTERNS = load_curated_patterns()
    return _PATTERNS


def _size_tiers_for(grid_size: int) -> Tuple[int, ...]:
    if grid_size >= 12:
        return (8, 10, 12)
    if grid_size >= 10:
        return (8, 10)
    return (8,)


def random_curated_pattern(
    grid_size: int,
    available_colors: Iterable[str],
    rng: Optional[random.Random] = None,
    library: Optional[List[CuratedPattern]] = None,
) -> Optional[CuratedPattern]:
    rng = rng or random.Random()
    allowed = set(available_colors)
    tiers = _size_tiers_for(grid_size)
    candidates = [
        p for p in (library if library is not None else curated_patterns())
        if p.size in tiers and p.colors() <= allowed
    ]
    if not candidates:
        return None
    return rng.choice(candidates)


def fit_pattern_to_grid(pattern: Pattern, width: int, height: int) -> Pattern:
    """Center *pattern* in a width x height grid, cropping whatever falls outside."""
    result: Pattern = [[None] * width for _ in range(height)]
    if not pattern or not pattern[0]:
        return result
    p_h, p_w = len(pattern), len(pattern[0])
    offset_x = (width - p_w) // 2
    offset_y = (height - p_h) // 2
    for y, row in enumerate(pattern):
        ty = y + offset_y
        if not 0 <= ty < height:
            continue
        for x, cell in enumerate(row):
            tx = x + offset_x
            if 0 <= tx < width:
                result[ty][tx] = cell
    return result
