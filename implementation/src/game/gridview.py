"""Screen <-> cell mapping for the paint grid.

Cells shrink to fit the grid area down to ``min_cell``; past that the
grid keeps the minimum size and the viewport scrolls.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from game.layout import Layout


@dataclass
class GridView:
    origin_x: int
    origin_y: int
    viewport_w: int
    viewport_h: int
    min_cell: int = 6
    max_cell: int = 96
    cell_size: int = 32
    width: int = 4
    height: int = 4
    scroll_x: float = 0.0
    scroll_y: float = 0.0

    @classmethod
    def from_layout(cls, layout: Layout) -> "GridView":
        return cls(
            origin_x=layout.grid_area_x,
            origin_y=layout.grid_area_y,
            viewport_w=layout.grid_area_w,
            viewport_h=layout.grid_area_h,
            min_cell=layout.grid_min_cell,
            max_cell=layout.grid_max_cell,
        )

    def fit(self, width: int, height: int) -> None:
        """Resize cells for a width x height grid and clamp the scroll offsets."""
        self.width = width
        self.height = height
        fit = min(self.viewport_w // max(1, width), self.viewport_h // max(1, height))
        self.cell_size = max(self.min_cell, min(self.max_cell, fit))
        self.clamp_scroll()

    @property
    def needs_scroll(self) -> bool:
        return (self.width * self.cell_size > self.viewport_w or
                self.height * self.cell_size > self.viewport_h)

    def clamp_scroll(self) -> None:
        max_sx = max(0, self.width * self.cell_size - self.viewport_w)
        max_sy = max(0, self.height * self.cell_size - self.viewport_h)
        self.scroll_x = max(0.0, min(self.scroll_x, float(max_sx)))
        self.scroll_y = max(0.0, min(self.scroll_y, float(max_sy)))

    def cell_to_screen(self, x: int, y: int) -> Tuple[int, int]:
        return (
            int(self.origin_x + x * self.cell_size - self.scroll_x),
            int(self.origin_y + y * self.cell_size - self.scroll_y),
        )

    def screen_to_cell(self, sx: float, sy: float) -> Optional[Tuple[int, int]]:
        if not (self.origin_x <= sx < self.origin_x + self.viewport_w and
                self.origin_y <= sy < self.origin_y + self.viewport_h):
            return None
        return self.screen_to_cell_unbounded(sx, sy)

    def screen_to_cell_unbounded(self, sx: float, sy: float) -> Optional[Tuple[int, int]]:
        """Like screen_to_cell but ignores the viewport; used while a drag leaves the grid area."""
        x = int((sx - self.origin_x + self.scroll_x) // self.cell_size)
        y = int((sy - self.origin_y + self.scroll_y) // self.cell_size)
        if 0 <= x < self.width and 0 <= y < self.height:
            return x, y
        return None

    def visible_region(self) -> Tuple[float, float, float, float]:
        """(x0, y0, x1, y1) in cell units, suitable for Grid.get_cells_in_region."""
        x0 = self.scroll_x / self.cell_size
        y0 = self.scroll_y / self.cell_size
        return x0, y0, x0 + self.viewport_w / self.cell_size, y0 + self.viewport_h / self.cell_size

    def handle_scroll_input(
        self, mx: float, my: float,
        prev_mx: float, prev_my: float,
        middle_down: bool, wheel_move: float,
    ) -> None:
        """Middle-mouse drag pans; the wheel scrolls vertically while over the grid."""
        if not self.needs_scroll:
            return
        if middle_down:
            self.scroll_x += prev_mx - mx
            self.scroll_y += prev_my - my
            self.clamp_scroll()
        if wheel_move != 0.0:
            if (self.origin_x <= mx < self.origin_x + self.viewport_w and
                    self.origin_y <= my < self.origin_y + self.viewport_h):
                self.scroll_y -= wheel_move * self.cell_size * 2
                self.clamp_scroll()
