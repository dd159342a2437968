from __future__ import annotations

from dataclasses import asdict, dataclass
import json
from pathlib import Path


def _repo_root() -> Path:
    here = Path(__file__).resolve()
    return here.parents[2]


def default_layout_path() -> Path:
    return _repo_root() / "implementation" / "layout.json"


@dataclass
class Layout:
    window_width: int = 1000
    window_height: int = 660

    # Left column: money, rank, palette, contract controls
    left_panel_x: int = 0
    left_panel_y: int = 0
    left_panel_w: int = 250
    left_panel_h: int = 660

    hud_x: int = 14
    hud_y: int = 14
    hud_line_spacing: int = 20

    palette_x: int = 14
    palette_y: int = 120
    palette_swatch: int = 26
    palette_gap: int = 4
    palette_cols: int = 7

    contract_x: int = 14
    contract_y: int = 240
    contract_w: int = 222
    contract_preview_size: int = 120
    button_w: int = 106
    button_h: int = 26

    # Centre: the paintable grid
    grid_area_x: int = 262
    grid_area_y: int = 20
    grid_area_w: int = 480
    grid_area_h: int = 480
    grid_min_cell: int = 6
    grid_max_cell: int = 96

    status_x: int = 262
    status_y: int = 520
    status_line_spacing: int = 18

    # Right column: shop
    shop_x: int = 756
    shop_y: int = 14
    shop_w: int = 232
    shop_row_h: int = 30
    shop_sep_h: int = 4
    shop_tab_h: int = 24


def load_layout(path: Path | None = None) -> Layout:
    if path is None:
        path = default_layout_path()
    if not path.exists():
        return Layout()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"[layout] Could not read {path.name}: {e}")
        return Layout()
    if not isinstance(data, dict):
        return Layout()
    # Unknown keys are ignored so an older layout.json keeps working
    known = {k: v for k, v in data.items() if k in Layout.__dataclass_fields__}
    try:
        return Layout(**known)
    except TypeError:
        return Layout()


def save_layout(layout: Layout, path: Path | None = None) -> None:
    if path is None:
        path = default_layout_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(layout), indent=2), encoding="utf-8")
