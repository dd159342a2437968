from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, Iterator, List, Optional, Tuple

from game.events import CellChange, CellsChange, EventBus, EventType, GridSize

MAX_HISTORY = 50

Coord = Tuple[int, int]


@dataclass(frozen=True)
class HistoryEntry:
    x: int
    y: int
    old_color: Optional[str]
    new_color: Optional[str]


@dataclass
class Grid:
    """Sparse colour grid: only filled cells are stored, keyed by (x, y).

    Dimensions only ever grow. Every mutation that changes a cell pushes a
    reversible entry onto a bounded history (oldest evicted first).
    """
    width: int = 4
    height: int = 4
    max_history: int = MAX_HISTORY
    cells: Dict[Coord, str] = field(init=False, repr=False)
    history: Deque[HistoryEntry] = field(init=False, repr=False)
    events: EventBus = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.cells = {}
        self.history = deque()
        self.events = EventBus()

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    # Aliases for the public grid API names
    is_valid = in_bounds

    def get(self, x: int, y: int) -> Optional[str]:
        if not self.in_bounds(x, y):
            return None
        return self.cells.get((x, y))

    get_cell = get

    def _store(self, x: int, y: int, color: Optional[str]) -> None:
        if color is None:
            self.cells.pop((x, y), None)
        else:
            self.cells[(x, y)] = color

    def _push_history(self, entry: HistoryEntry) -> None:
        self.history.append(entry)
        while len(self.history) > self.max_history:
            self.history.popleft()

    def set_max_history(self, value: int) -> None:
        self.max_history = max(1, int(value))
        while len(self.history) > self.max_history:
            self.history.popleft()

    def set_cell(self, x: int, y: int, color: Optional[str], record_history: bool = True) -> bool:
        if not self.in_bounds(x, y):
            return False
        old_color = self.cells.get((x, y))
        if old_color == color:
            return False
        if record_history:
            self._push_history(HistoryEntry(x, y, old_color, color))
        self._store(x, y, color)
        self.events.emit(EventType.CELL_CHANGED, CellChange(x, y, color, old_color))
        return True

    def set_cells(self, changes: Iterable[Any], record_history: bool = True) -> int:
        """Apply a batch of (x, y, color) changes; returns how many cells actually changed."""
        applied: List[CellChange] = []
        for change in changes:
            if isinstance(change, CellChange):
                x, y, color = change.x, change.y, change.color
            else:
                x, y, color = change
            if not self.in_bounds(x, y):
                continue
            old_color = self.cells.get((x, y))
            if old_color == color:
                continue
            if record_history:
                self.history.append(HistoryEntry(x, y, old_color, color))
            self._store(x, y, color)
            applied.append(CellChange(x, y, color, old_color))

        while len(self.history) > self.max_history:
            self.history.popleft()

        if applied:
            self.events.emit(EventType.CELLS_CHANGED, CellsChange(tuple(applied)))
        return len(applied)

    def undo(self) -> bool:
        if not self.history:
            return False
        entry = self.history.pop()
        # Dimensions never shrink and history is dropped on expand, so the entry is always in bounds
        current = self.cells.get((entry.x, entry.y))
        self._store(entry.x, entry.y, entry.old_color)
        self.events.emit(
            EventType.CELL_CHANGED,
            CellChange(entry.x, entry.y, entry.old_color, current),
        )
        return True

    def expand(self, new_width: int, new_height: int) -> bool:
        if new_width < self.width or new_height < self.height:
            print(f"[grid] Refusing to shrink {self.width}x{self.height} -> {new_width}x{new_height}")
            return False
        self.width = new_width
        self.height = new_height
        self.history.clear()
        self.events.emit(EventType.GRID_RESIZED, GridSize(new_width, new_height))
        return True

    def clear(self) -> None:
        if not self.cells:
            return
        self.cells.clear()
        self.history.clear()
        self.events.emit(EventType.GRID_CLEARED)

    def get_cells_in_region(self, x0: float, y0: float, x1: float, y1: float) -> List[Tuple[int, int, str]]:
        """Filled cells inside [x0, x1) x [y0, y1), clamped to the grid."""
        sx = max(0, int(x0 // 1))
        sy = max(0, int(y0 // 1))
        ex = min(self.width, int(-(-x1 // 1)))
        ey = min(self.height, int(-(-y1 // 1)))
        if ex <= sx or ey <= sy:
            return []

        result: List[Tuple[int, int, str]] = []
        area = (ex - sx) * (ey - sy)
        if len(self.cells) < area / 2:
            for (x, y), color in self.cells.items():
                if sx <= x < ex and sy <= y < ey:
                    result.append((x, y, color))
            result.sort(key=lambda item: (item[1], item[0]))
        else:
            for y in range(sy, ey):
                for x in range(sx, ex):
                    color = self.cells.get((x, y))
                    if color is not None:
                        result.append((x, y, color))
        return result

    def count_color(self, color: str) -> int:
        return sum(1 for c in self.cells.values() if c == color)

    def filled_count(self) -> int:
        return len(self.cells)

    def filled_cells(self) -> List[Tuple[int, int, str]]:
        return [(x, y, color) for (x, y), color in self.cells.items()]

    def iter_cells(self) -> Iterator[Tuple[int, int, Optional[str]]]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, self.cells.get((x, y))

    # ── Persistence ──────────────────────────────────────────────

    def serialize(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "cells": [[x, y, color] for (x, y), color in sorted(self.cells.items(), key=lambda kv: (kv[0][1], kv[0][0]))],
        }

    def deserialize(self, data: Dict[str, Any]) -> None:
        """Load cells from the sparse triple list or the legacy dense row-major list."""
        self.width = int(data.get("width") or 4)
        self.height = int(data.get("height") or 4)
        self.cells.clear()
        self.history.clear()

        raw = data.get("cells")
        if isinstance(raw, list) and raw:
            if isinstance(raw[0], (list, tuple)):
                for entry in raw:
                    try:
                        x, y, color = int(entry[0]), int(entry[1]), entry[2]
                    except (IndexError, KeyError, TypeError, ValueError):
                        print(f"[grid] Skipping malformed cell entry {entry!r}")
                        continue
                    if color is None:
                        continue
                    if not self.in_bounds(x, y):
                        print(f"[grid] Skipping out-of-bounds cell ({x},{y})")
                        continue
                    self.cells[(x, y)] = str(color)
            else:
                for i, color in enumerate(raw):
                    if color is None:
                        continue
                    x, y = i % self.width, i // self.width
                    if self.in_bounds(x, y):
                        self.cells[(x, y)] = str(color)

        self.events.emit(EventType.GRID_LOADED)
