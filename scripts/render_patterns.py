#!/usr/bin/env python3
"""Render contract patterns to PNG for eyeballing the catalog.

Default: every curated pattern from patterns.json on one labelled sheet.
With --save: the active contract of a save file (raw JSON or exported text).

Outputs (in --out, default scripts/):
  curated_patterns_sheet.png — one tile per curated pattern, name underneath
  active_contract.png        — with --save only
"""

import argparse
import json
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from game import catalog
from game.save import _try_import_data
from game.types import Contract, Pattern

OUT_DIR = Path(__file__).resolve().parent

SCALE = 12
PAD = 8
LABEL_H = 14
COLS = 4
BACKGROUND = (30, 30, 30, 255)
EMPTY_CELL = (245, 245, 240, 255)
GRID_LINE = (200, 200, 195, 255)


def _load_font():
    try:
        return ImageFont.truetype("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", 10)
    except (OSError, IOError):
        return ImageFont.load_default()


def render_pattern(pattern: Pattern, scale: int = SCALE) -> Image.Image:
    h = len(pattern)
    w = len(pattern[0]) if h else 0
    img = Image.new("RGBA", (max(1, w * scale), max(1, h * scale)), EMPTY_CELL)
    draw = ImageDraw.Draw(img)
    for y, row in enumerate(pattern):
        for x, color in enumerate(row):
            if color is None:
                continue
            r, g, b = catalog.color_rgb(color)
            draw.rectangle([x * scale, y * scale, (x + 1) * scale - 1, (y + 1) * scale - 1], fill=(r, g, b, 255))
    if scale >= 6:
        for x in range(w + 1):
            draw.line([(x * scale, 0), (x * scale, h * scale)], fill=GRID_LINE, width=1)
        for y in range(h + 1):
            draw.line([(0, y * scale), (w * scale, y * scale)], fill=GRID_LINE, width=1)
    return img


def build_sheet(entries: Sequence[Tuple[str, Pattern]], scale: int = SCALE, cols: int = COLS) -> Image.Image:
    tiles = [(name, render_pattern(pattern, scale)) for name, pattern in entries]
    if not tiles:
        return Image.new("RGBA", (1, 1), BACKGROUND)
    tile_w = max(t.width for _, t in tiles) + PAD
    tile_h = max(t.height for _, t in tiles) + PAD + LABEL_H
    cols = max(1, min(cols, len(tiles)))
    rows = (len(tiles) + cols - 1) // cols

    sheet = Image.new("RGBA", (cols * tile_w + PAD, rows * tile_h + PAD), BACKGROUND)
    draw = ImageDraw.Draw(sheet)
    font = _load_font()
    for idx, (name, tile) in enumerate(tiles):
        col, row = idx % cols, idx // cols
        ox = PAD + col * tile_w + (tile_w - PAD - tile.width) // 2
        oy = PAD + row * tile_h
        sheet.paste(tile, (ox, oy), tile)
        draw.text((PAD + col * tile_w, oy + tile.height + 2), name, fill=(200, 200, 200), font=font)
    return sheet


def _contract_from_save(path: Path) -> Optional[Contract]:
    data = _try_import_data(path.read_text(encoding="utf-8-sig"))
    if data is None:
        print(f"  {path} is not a readable save")
        return None
    raw = data.get("activeContract")
    if not isinstance(raw, dict):
        print(f"  {path} has no active contract")
        return None
    return Contract.from_dict(raw)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--save", type=Path, help="render the active contract from this save file")
    parser.add_argument("--out", type=Path, default=OUT_DIR, help="output directory")
    parser.add_argument("--scale", type=int, default=SCALE, help="pixels per cell")
    args = parser.parse_args(argv)
    args.out.mkdir(parents=True, exist_ok=True)

    if args.save is not None:
        contract = _contract_from_save(args.save)
        if contract is None:
            return 1
        out_path = args.out / "active_contract.png"
        render_pattern(contract.pattern, args.scale).save(out_path)
        print(f"Contract {contract.id} ({contract.rank_name}): {out_path}")
        return 0

    patterns = catalog.curated_patterns()
    print(f"Curated patterns: {len(patterns)}")
    sheet = build_sheet([(f"{p.name} {p.size}", p.pattern) for p in patterns], args.scale)
    out_path = args.out / "curated_patterns_sheet.png"
    sheet.save(out_path)
    print(f"Sheet: {out_path} ({sheet.width}x{sheet.height})")

    summary = {p.name: {"size": p.size, "colors": sorted(p.colors())} for p in patterns}
    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
