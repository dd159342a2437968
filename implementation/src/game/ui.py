from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Dict, List, Optional, Tuple

from raylib_compat import (
    Color,
    begin_scissor_mode,
    draw_rectangle,
    draw_rectangle_lines,
    draw_text,
    end_scissor_mode,
    measure_text,
)

from game import catalog
from game.gridview import GridView
from game.layout import Layout
from game.session import GameSession
from game.upgrades import AUTO_PAINTERS_TOGGLE

# (command name, keyword arguments) for CommandDispatcher.dispatch
Command = Tuple[str, Dict[str, Any]]

SHOP_TABS = ("upgrades", "automation", "colors", "grid")

_BG = Color(24, 26, 32, 255)
_PANEL = Color(34, 37, 46, 255)
_PANEL_EDGE = Color(58, 63, 78, 255)
_TEXT = Color(230, 232, 238, 255)
_TEXT_DIM = Color(150, 155, 170, 255)
_GOOD = Color(120, 210, 130, 255)
_BAD = Color(235, 110, 100, 255)
_ACCENT = Color(250, 200, 80, 255)
_GRID_BG = Color(245, 245, 240, 255)
_GRID_LINE = Color(200, 200, 195, 255)
_RAINBOW = ((231, 76, 60), (241, 196, 15), (46, 204, 113), (52, 152, 219), (155, 89, 182))


def _rgba(color_id: Optional[str], alpha: int = 255):
    r, g, b = catalog.color_rgb(color_id)
    return Color(r, g, b, alpha)


def _is_rainbow(color_id: Optional[str]) -> bool:
    info = catalog.get_color(color_id) if color_id else None
    return info is not None and info.hex == "rainbow"


def _fill_swatch(color_id: Optional[str], x: int, y: int, w: int, h: int, alpha: int = 255) -> None:
    if _is_rainbow(color_id):
        band = max(1, h // len(_RAINBOW))
        for i, (r, g, b) in enumerate(_RAINBOW):
            bh = band if i < len(_RAINBOW) - 1 else h - band * i
            draw_rectangle(x, y + band * i, w, bh, Color(r, g, b, alpha))
        return
    draw_rectangle(x, y, w, h, _rgba(color_id, alpha))


def _hit(mx: float, my: float, x: int, y: int, w: int, h: int) -> bool:
    return x <= mx <= x + w and y <= my <= y + h


@dataclass
class Ui:
    shop_tab: str = "upgrades"
    shop_scroll: int = 0
    status_message: str = ""
    status_good: bool = True
    status_until: float = 0.0

    def flash(self, message: str, good: bool, now: float, seconds: float = 2.5) -> None:
        self.status_message = message
        self.status_good = good
        self.status_until = now + seconds

    # ── Widgets ──────────────────────────────────────────────────

    @staticmethod
    def button(
        label: str, x: int, y: int, w: int, h: int,
        mx: float, my: float, pressed: bool, enabled: bool = True,
    ) -> bool:
        hovered = _hit(mx, my, x, y, w, h)
        if not enabled:
            fill = Color(44, 46, 54, 255)
        elif hovered:
            fill = Color(74, 82, 104, 255)
        else:
            fill = Color(56, 62, 80, 255)
        draw_rectangle(x, y, w, h, fill)
        draw_rectangle_lines(x, y, w, h, _PANEL_EDGE)
        size = _fit_font_size(label, w - 8, 14)
        tx = x + (w - _measure(label, size)) // 2
        draw_text(label, tx, y + (h - size) // 2, size, _TEXT if enabled else _TEXT_DIM)
        return enabled and hovered and pressed

    # ── Left column ──────────────────────────────────────────────

    def draw_background(self, layout: Layout) -> None:
        draw_rectangle(layout.left_panel_x, layout.left_panel_y, layout.left_panel_w, layout.left_panel_h, _PANEL)
        draw_rectangle(layout.shop_x - 6, 0, layout.window_width - layout.shop_x + 6, layout.window_height, _PANEL)

    def draw_hud(self, session: GameSession, layout: Layout) -> None:
        state = session.state
        x, y, step = layout.hud_x, layout.hud_y, layout.hud_line_spacing
        draw_text(f"${format_number_with_suffix(state.money, max_decimals=2)}", x, y, 24, _ACCENT)
        rank = catalog.get_rank(session.contracts.get_highest_accessible_rank())
        rank_name = rank.name if rank else "?"
        draw_text(f"Rank: {rank_name}", x, y + step + 10, 16, _TEXT)
        draw_text(f"Contracts done: {state.completed_contracts}", x, y + step * 2 + 10, 14, _TEXT_DIM)
        nxt = session.contracts.get_next_rank_requirements()
        if nxt is not None:
            next_rank, missing = nxt
            parts = []
            if missing["contracts"]:
                parts.append(f"{missing['contracts']} contracts")
            if missing["grid_size"]:
                parts.append(f"{missing['grid_size']}x{missing['grid_size']} grid")
            if missing["colors"]:
                parts.append(", ".join(missing["colors"]))
            label = f"Next: {next_rank.name} - " + ("; ".join(parts) if parts else "ready")
            for i, line in enumerate(_wrap_text(label, layout.left_panel_w - 2 * x, 12)[:2]):
                draw_text(line, x, y + step * 3 + 10 + i * 14, 12, _TEXT_DIM)

    def draw_palette(
        self, session: GameSession, layout: Layout, mx: float, my: float, pressed: bool,
    ) -> Optional[Command]:
        state = session.state
        command: Optional[Command] = None
        owned = [c for c in catalog.all_colors() if state.has_color(c.id)]
        s, gap = layout.palette_swatch, layout.palette_gap
        for i, info in enumerate(owned):
            col, row = i % layout.palette_cols, i // layout.palette_cols
            x = layout.palette_x + col * (s + gap)
            y = layout.palette_y + row * (s + gap)
            _fill_swatch(info.id, x, y, s, s)
            selected = info.id == state.selected_color
            draw_rectangle_lines(x - 1, y - 1, s + 2, s + 2, _ACCENT if selected else _PANEL_EDGE)
            if pressed and _hit(mx, my, x, y, s, s):
                command = ("select_color", {"color_id": info.id})
        return command

    def draw_contract_panel(
        self, session: GameSession, layout: Layout, mx: float, my: float, pressed: bool,
    ) -> Optional[Command]:
        state = session.state
        contracts = session.contracts
        x, y, w = layout.contract_x, layout.contract_y, layout.contract_w
        bw, bh = layout.button_w, layout.button_h
        draw_text("Contract", x, y, 18, _TEXT)
        y += 26

        contract = state.active_contract
        shown = contract or contracts.preview
        if shown is not None:
            self._draw_pattern_preview(shown.pattern, x, y, layout.contract_preview_size)
            info_x = x + layout.contract_preview_size + 8
            draw_text(shown.rank_name, info_x, y, 14, _TEXT)
            draw_text(f"${format_number_with_suffix(shown.reward)}", info_x, y + 18, 14, _ACCENT)
            draw_text(f"{shown.cell_count} cells", info_x, y + 36, 12, _TEXT_DIM)
            if contract is None:
                draw_text("(preview)", info_x, y + 54, 12, _TEXT_DIM)
        y += layout.contract_preview_size + 10

        progress = contracts.get_progress()
        if progress is not None:
            draw_rectangle(x, y, w, 10, _PANEL_EDGE)
            draw_rectangle(x, y, int(w * min(100, progress["percent"]) / 100), 10, _GOOD)
            label = f"{progress['correct']}/{progress['total']}"
            if progress["wrong"]:
                label += f"  ({progress['wrong']} wrong)"
            draw_text(label, x, y + 14, 12, _BAD if progress["wrong"] else _TEXT_DIM)
            y += 34
            if self.button("Abandon", x, y, bw, bh, mx, my, pressed):
                return ("abandon_contract", {})
            return None

        if contracts.auto_start_pending:
            draw_text("Next contract starting...", x, y, 12, _TEXT_DIM)
            y += 18

        # Rank picker: every accessible rank, selected one highlighted
        ranks = contracts.get_available_ranks()
        selected = contracts.selected_rank_level or contracts.get_highest_accessible_rank()
        for i, rank in enumerate(ranks):
            rx = x + (i % 5) * 44
            ry = y + (i // 5) * 24
            label = str(rank.level)
            if self.button(label, rx, ry, 40, 20, mx, my, pressed) and rank.level != selected:
                return ("select_rank", {"rank_level": rank.level})
            if rank.level == selected:
                draw_rectangle_lines(rx - 1, ry - 1, 42, 22, _ACCENT)
        y += ((len(ranks) + 4) // 5) * 24 + 6

        if self.button("Accept", x, y, bw, bh, mx, my, pressed):
            return ("accept_contract", {})
        if state.has_upgrade("contract_preview"):
            if self.button("Preview", x + bw + 10, y, bw, bh, mx, my, pressed):
                return ("preview_contract", {})
        return None

    @staticmethod
    def _draw_pattern_preview(pattern, x: int, y: int, size: int) -> None:
        h = len(pattern)
        w = len(pattern[0]) if h else 0
        if not w:
            return
        cell = max(1, size // max(w, h))
        draw_rectangle(x, y, cell * w, cell * h, _GRID_BG)
        for py, row in enumerate(pattern):
            for px, color in enumerate(row):
                if color is not None:
                    _fill_swatch(color, x + px * cell, y + py * cell, cell, cell)
        draw_rectangle_lines(x, y, cell * w, cell * h, _PANEL_EDGE)

    # ── Grid ─────────────────────────────────────────────────────

    def draw_grid(self, session: GameSession, view: GridView, hover: Optional[Tuple[int, int]]) -> None:
        state = session.state
        grid = state.grid
        cs = view.cell_size
        gw = min(view.viewport_w, grid.width * cs)
        gh = min(view.viewport_h, grid.height * cs)

        begin_scissor_mode(view.origin_x, view.origin_y, gw, gh)
        draw_rectangle(view.origin_x, view.origin_y, gw, gh, _GRID_BG)

        x0, y0, x1, y1 = view.visible_region()
        sx, sy = max(0, int(x0)), max(0, int(y0))
        ex, ey = min(grid.width, int(math.ceil(x1))), min(grid.height, int(math.ceil(y1)))

        # Precision hints: faint expected colour under cells that still need it
        if state.active_contract is not None and state.has_upgrade("precision_mode"):
            inset = max(1, cs // 4)
            for cy in range(sy, ey):
                for cx in range(sx, ex):
                    hint = session.contracts.precision_hint(cx, cy)
                    if hint is not None and grid.get(cx, cy) != hint:
                        px, py = view.cell_to_screen(cx, cy)
                        _fill_swatch(hint, px + inset, py + inset, cs - 2 * inset, cs - 2 * inset, 90)

        for cx, cy, color in grid.get_cells_in_region(x0, y0, x1, y1):
            px, py = view.cell_to_screen(cx, cy)
            _fill_swatch(color, px, py, cs, cs)

        if cs >= 8:
            for cx in range(sx, ex + 1):
                px, _ = view.cell_to_screen(cx, 0)
                draw_rectangle(px, view.origin_y, 1, gh, _GRID_LINE)
            for cy in range(sy, ey + 1):
                _, py = view.cell_to_screen(0, cy)
                draw_rectangle(view.origin_x, py, gw, 1, _GRID_LINE)

        if hover is not None:
            px, py = view.cell_to_screen(*hover)
            draw_rectangle_lines(px, py, cs, cs, _ACCENT)
        end_scissor_mode()
        draw_rectangle_lines(view.origin_x - 1, view.origin_y - 1, gw + 2, gh + 2, _PANEL_EDGE)

    def draw_status(self, session: GameSession, layout: Layout, now: float) -> None:
        state = session.state
        x, y, step = layout.status_x, layout.status_y, layout.status_line_spacing
        grid = state.grid
        draw_text(f"Grid {grid.width}x{grid.height}   Brush: {state.selected_color}", x, y, 14, _TEXT_DIM)
        painters = session.painters.status()
        if painters["painters"]:
            on = "on" if painters["enabled"] else "off"
            draw_text(f"Auto-painters ({on}): {len(painters['painters'])}", x, y + step, 14, _TEXT_DIM)
        draw_text("LMB paint  RMB erase  Z undo  C clear  S save  E export  I import", x, y + step * 2, 12, _TEXT_DIM)
        if self.status_message and now < self.status_until:
            draw_text(self.status_message, x, y + step * 3 + 4, 16, _GOOD if self.status_good else _BAD)

    # ── Shop ─────────────────────────────────────────────────────

    def shop_rows(self, session: GameSession) -> List[Tuple[str, str, Optional[Command], bool]]:
        """(title, detail, command, enabled) rows for the current shop tab."""
        shop = session.shop
        state = session.state
        rows: List[Tuple[str, str, Optional[Command], bool]] = []
        if self.shop_tab == "grid":
            nxt = shop.next_expansion()
            if nxt is None:
                rows.append(("Grid maxed", "", None, False))
            else:
                rows.append((nxt.name, f"${format_number_with_suffix(nxt.cost)}",
                             ("buy_grid_expansion", {}), shop.can_buy_grid_expansion()))
            return rows
        if self.shop_tab == "colors":
            for entry in shop.shop_data()["colors"]:
                c = entry["color"]
                rows.append((c.name, f"${format_number_with_suffix(c.cost)}",
                             ("buy_color", {"color_id": c.id}), entry["can_afford"]))
            return rows

        if self.shop_tab == "automation":
            master = state.is_automation_enabled(AUTO_PAINTERS_TOGGLE)
            rows.append((f"Auto-painters: {'ON' if master else 'OFF'}", "toggle",
                         ("set_automation_enabled", {"upgrade_id": AUTO_PAINTERS_TOGGLE, "enabled": not master}),
                         True))
        for entry in shop.available_upgrades():
            upgrade = entry["upgrade"]
            if upgrade.shop_tab != self.shop_tab:
                continue
            level = f"{entry['level']}/{upgrade.max_level}"
            cost = "MAX" if entry["maxed"] else f"${format_number_with_suffix(entry['next_cost'] or 0)}"
            rows.append((f"{upgrade.name} {level}", cost,
                         ("buy_upgrade", {"upgrade_id": upgrade.id}), entry["can_afford"]))
            if upgrade.can_toggle and entry["owned"]:
                enabled = state.is_automation_enabled(upgrade.id)
                rows.append((f"  {upgrade.name}: {'ON' if enabled else 'OFF'}", "toggle",
                             ("set_automation_enabled", {"upgrade_id": upgrade.id, "enabled": not enabled}),
                             True))
        return rows

    def draw_shop(
        self, session: GameSession, layout: Layout,
        mx: float, my: float, pressed: bool, wheel: float,
    ) -> Optional[Command]:
        x, y, w = layout.shop_x, layout.shop_y, layout.shop_w
        counts = session.shop.affordable_counts()
        tab_w = w // len(SHOP_TABS)
        badge = {"grid": counts["grid_expansion"], "colors": counts["colors"]}
        for i, tab in enumerate(SHOP_TABS):
            label = tab.title()
            if badge.get(tab):
                label += f" {badge[tab]}"
            tx = x + i * tab_w
            if self.button(label, tx, y, tab_w - 2, layout.shop_tab_h, mx, my, pressed):
                self.shop_tab = tab
                self.shop_scroll = 0
            if tab == self.shop_tab:
                draw_rectangle(tx, y + layout.shop_tab_h, tab_w - 2, 2, _ACCENT)
        y += layout.shop_tab_h + 8

        rows = self.shop_rows(session)
        row_step = layout.shop_row_h + layout.shop_sep_h
        visible = max(1, (layout.window_height - y - 10) // row_step)
        if wheel and _hit(mx, my, x, y, w, visible * row_step):
            self.shop_scroll -= int(wheel)
        self.shop_scroll = max(0, min(self.shop_scroll, max(0, len(rows) - visible)))

        command: Optional[Command] = None
        for i, (title, detail, row_cmd, enabled) in enumerate(rows[self.shop_scroll:self.shop_scroll + visible]):
            ry = y + i * row_step
            hovered = _hit(mx, my, x, ry, w, layout.shop_row_h)
            draw_rectangle(x, ry, w, layout.shop_row_h, Color(48, 52, 66, 255) if hovered else Color(40, 43, 54, 255))
            name_size = _fit_font_size(title, w - 70, 14, 9)
            draw_text(title, x + 6, ry + (layout.shop_row_h - name_size) // 2, name_size, _TEXT if enabled else _TEXT_DIM)
            dw = _measure(detail, 13)
            draw_text(detail, x + w - dw - 6, ry + (layout.shop_row_h - 13) // 2, 13, _GOOD if enabled else _TEXT_DIM)
            if hovered and pressed and row_cmd is not None:
                command = row_cmd
        return command


def _measure(text: str, font_size: int) -> int:
    if measure_text is not None:
        return measure_text(text, font_size)
    return int(len(text) * font_size * 0.6)


def _fit_font_size(text: str, max_width: int, base_size: int, min_size: int = 8) -> int:
    """Return the largest font size <= base_size that fits text within max_width."""
    size = base_size
    while size > min_size:
        if _measure(text, size) <= max_width:
            return size
        size -= 1
    return min_size


def _wrap_text(text: str, max_width: int, font_size: int) -> List[str]:
    if not text:
        return []
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = word if not current else f"{current} {word}"
        if _measure(candidate, font_size) <= max_width or not current:
            current = candidate
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


_SUFFIXES = ["", "K", "M", "B", "T", "Qa", "Qi", "Sx", "Sp", "O", "N", "D"]


def format_number_with_suffix(value: float, max_decimals: int = 1) -> str:
    """1234 -> '1.2K'; plain integers below 1000."""
    if not math.isfinite(value):
        return "0"
    abs_val = abs(value)
    if abs_val < 1000:
        return str(int(value)) if float(value).is_integer() else f"{value:.{max_decimals}f}"
    group = min(int(math.log10(abs_val)) // 3, len(_SUFFIXES) - 1)
    scaled = value / 10 ** (group * 3)
    if group < len(_SUFFIXES) - 1 and abs(scaled) >= 999.95:
        group += 1
        scaled = value / 10 ** (group * 3)
    out = f"{scaled:.{max_decimals}f}"
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    return f"{out}{_SUFFIXES[group]}"
