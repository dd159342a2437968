"""Tests for the pattern rendering script."""

import json

from PIL import Image

import render_patterns
from game.save import _encode_export
from game.state import GameState
from conftest import make_contract, pattern_with


def test_render_pattern_colors_cells():
    img = render_patterns.render_pattern([["black", None], [None, "white"]], scale=10)
    assert img.size == (20, 20)
    assert img.getpixel((5, 5)) == (0, 0, 0, 255)
    assert img.getpixel((15, 5)) == render_patterns.EMPTY_CELL
    assert img.getpixel((15, 15)) == (255, 255, 255, 255)


def test_build_sheet_lays_out_tiles():
    entries = [(f"p{i}", [["black"] * 4 for _ in range(4)]) for i in range(5)]
    sheet = render_patterns.build_sheet(entries, scale=5, cols=2)
    tile_w = 20 + render_patterns.PAD
    tile_h = 20 + render_patterns.PAD + render_patterns.LABEL_H
    assert sheet.size == (2 * tile_w + render_patterns.PAD, 3 * tile_h + render_patterns.PAD)
    assert render_patterns.build_sheet([]).size == (1, 1)


def test_main_writes_curated_sheet(tmp_path):
    assert render_patterns.main(["--out", str(tmp_path), "--scale", "4"]) == 0
    with Image.open(tmp_path / "curated_patterns_sheet.png") as sheet:
        assert sheet.width > 0


def test_main_renders_active_contract_from_export(tmp_path):
    state = GameState()
    state.set_active_contract(make_contract(pattern_with([(1, 2, "black")])))
    save = tmp_path / "export.txt"
    save.write_text(_encode_export(state.serialize()), encoding="utf-8")

    assert render_patterns.main(["--save", str(save), "--out", str(tmp_path), "--scale", "8"]) == 0
    with Image.open(tmp_path / "active_contract.png") as img:
        assert img.size == (32, 32)
        assert img.getpixel((12, 20))[:3] == (0, 0, 0)


def test_main_without_contract_fails(tmp_path):
    save = tmp_path / "save.json"
    save.write_text(json.dumps(GameState().serialize()), encoding="utf-8")
    assert render_patterns.main(["--save", str(save), "--out", str(tmp_path)]) == 1
