"""Tests for the static color, rank, pattern and upgrade catalogs."""

import json
import math
import random

from game import catalog
from game.types import Complexity, CuratedPattern
from game.upgrades import UpgradeCatalog, auto_painter_color, default_catalog, is_auto_painter


def test_color_catalog_loads():
    colors = catalog.colors()
    assert len(colors) == 16
    assert colors["black"].unlocked and colors["black"].cost == 0
    assert colors["red"].cost == 50
    assert catalog.get_color("nope") is None


def test_purchasable_colors_skip_owned_and_free():
    ids = [c.id for c in catalog.purchasable_colors({"black", "white", "red"})]
    assert "red" not in ids and "black" not in ids
    assert "blue" in ids
    costs = [c.cost for c in catalog.purchasable_colors(set())]
    assert costs == sorted(costs)


def test_color_rgb_falls_back_for_special_and_unknown():
    assert catalog.color_rgb("black") == (0, 0, 0)
    assert catalog.color_rgb("rainbow") == (128, 128, 128)
    assert catalog.color_rgb(None) == (128, 128, 128)


def test_ranks_sorted_and_first_is_open():
    ranks = catalog.ranks()
    assert [r.level for r in ranks] == list(range(1, 11))
    first = catalog.get_rank(1)
    assert first.name == "Novice"
    assert catalog.can_access_rank(first, 0, 4, {"black", "white"})
    assert catalog.get_rank(99) is None
    assert catalog.max_rank() == 10


def test_rank_access_is_monotonic_in_progress():
    colors = ["black", "white", "red", "blue", "green", "yellow", "purple", "orange", "cyan", "pink"]
    rng = random.Random(7)
    for _ in range(200):
        completed = rng.randint(0, 200)
        size = rng.choice([4, 6, 8, 10, 12, 16, 20, 25])
        owned = set(colors[: rng.randint(2, len(colors))])
        for rank in catalog.ranks():
            if catalog.can_access_rank(rank, completed, size, owned):
                assert catalog.can_access_rank(rank, completed + 10, size, owned)
                assert catalog.can_access_rank(rank, completed, size + 4, owned)
                assert catalog.can_access_rank(rank, completed, size, owned | {"gold"})


def test_missing_requirements_reports_each_gap():
    rank = catalog.get_rank(5)
    missing = catalog.missing_requirements(rank, 20, 6, {"black", "white", "red"})
    assert missing == {"contracts": 8, "grid_size": 8, "colors": ["blue"]}


def test_complexity_tiers():
    assert catalog.complexity_range(Complexity.SIMPLE) == (2, 4)
    assert catalog.base_reward(Complexity.MASTER) == 50


def test_curated_patterns_decode():
    patterns = catalog.curated_patterns()
    assert len(patterns) == 11
    for p in patterns:
        assert len(p.pattern) == p.size
        assert all(len(row) == p.size for row in p.pattern)


def test_random_curated_pattern_filters_by_size_and_colors():
    small = CuratedPattern("dot", 8, [["black"] * 8 for _ in range(8)])
    big = CuratedPattern("big", 12, [["black"] * 12 for _ in range(12)])
    red = CuratedPattern("red", 8, [["red"] * 8 for _ in range(8)])
    library = [small, big, red]
    rng = random.Random(0)

    for _ in range(20):
        assert catalog.random_curated_pattern(8, {"black"}, rng, library) is small
    assert catalog.random_curated_pattern(8, {"white"}, rng, library) is None
    picks = {catalog.random_curated_pattern(12, {"black"}, rng, library).name for _ in range(50)}
    assert picks == {"dot", "big"}


def test_fit_pattern_centers_and_crops():
    pattern = [["a", "b"], ["c", "d"]]
    fitted = catalog.fit_pattern_to_grid(pattern, 4, 4)
    assert fitted[1][1:3] == ["a", "b"]
    assert fitted[2][1:3] == ["c", "d"]
    assert sum(cell is not None for row in fitted for cell in row) == 4

    cropped = catalog.fit_pattern_to_grid([["x"] * 6 for _ in range(6)], 4, 4)
    assert all(cell == "x" for row in cropped for cell in row)


def test_missing_catalog_files_yield_empty(tmp_path):
    assert catalog.load_colors(tmp_path / "missing.json") == {}
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    ranks, tiers = catalog.load_ranks(bad)
    assert ranks == []
    assert tiers[Complexity.SIMPLE] == (2, 4, 5)


def test_upgrade_cost_grows_geometrically():
    upgrades = default_catalog()
    costs = [upgrades.cost("money_boost", level) for level in range(6)]
    assert costs == [40, 80, 160, 320, 640, 1280]
    assert all(a < b for a, b in zip(costs, costs[1:]))

    assert [upgrades.cost("hold_to_paint", level) for level in range(3)] == [25, 25, 25]
    assert upgrades.cost("undo_buffer", 1) == 112
    assert upgrades.cost("nonexistent", 0) == math.inf


def test_every_upgrade_cost_is_monotonic():
    upgrades = default_catalog()
    for upgrade in upgrades.all_upgrades():
        costs = [upgrades.cost(upgrade.id, level) for level in range(upgrade.max_level)]
        if upgrade.cost_multiplier > 1:
            assert all(a < b for a, b in zip(costs, costs[1:])), upgrade.id
        else:
            assert len(set(costs)) == 1, upgrade.id


def test_auto_painter_upgrades_are_synthesized():
    upgrades = default_catalog()
    assert is_auto_painter("auto_painter_red")
    assert not is_auto_painter("auto_painters")
    assert auto_painter_color("auto_painter_red") == "red"
    assert auto_painter_color("auto_painter_") is None

    painter = upgrades.get("auto_painter_red")
    assert painter.color_id == "red"
    assert painter.shop_tab == "automation"
    assert upgrades.cost("auto_painter_red", 0) == 75
    assert upgrades.cost("auto_painter_red", 1) == 112


def test_requirements_and_expansions():
    upgrades = default_catalog()
    assert upgrades.requirements_met("multi_brush", []) is False
    assert upgrades.requirements_met("multi_brush", ["hold_to_paint"]) is True
    assert upgrades.requirements_met("nonexistent", []) is False

    nxt = upgrades.next_grid_expansion(1)
    assert (nxt.level, nxt.size, nxt.cost) == (2, 6, 50)
    assert upgrades.next_grid_expansion(16) is None
    assert [u.id for u in upgrades.toggleable()] == ["auto_start_contract"]


def test_upgrade_catalog_custom_file(tmp_path):
    path = tmp_path / "upgrades.json"
    path.write_text(json.dumps({
        "upgrades": [{"id": "x", "name": "X", "base_cost": 10, "cost_multiplier": 3, "max_level": 2}],
        "auto_painter": {"base_cost": 5},
    }), encoding="utf-8")
    upgrades = UpgradeCatalog().load(path)
    assert upgrades.cost("x", 2) == 90
    assert upgrades.cost("auto_painter_blue", 0) == 5
    assert upgrades.grid_expansions == []
