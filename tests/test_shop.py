"""Tests for the shop: colors, grid expansions and upgrades."""

from game.shop import ShopSystem
from game.state import GameState


def _shop(money=0):
    state = GameState()
    state.add_money(money)
    return state, ShopSystem(state)


def test_buying_red_spends_and_unlocks():
    state, shop = _shop(100)
    result = shop.buy_color("red")
    assert result.success
    assert result.data == {"color_id": "red", "price": 50}
    assert state.money == 50
    assert state.has_color("red")


def test_color_failures_leave_state_alone():
    state, shop = _shop(40)
    assert shop.buy_color("red").reason == "Cannot afford"
    assert shop.buy_color("black").reason == "Already owned"
    assert shop.buy_color("plaid").reason == "Unknown color"
    assert state.money == 40
    assert not state.has_color("red")
    assert shop.can_buy_color("red") is False


def test_available_colors_excludes_owned():
    state, shop = _shop(1000)
    shop.buy_color("red")
    ids = [c.id for c in shop.available_colors()]
    assert "red" not in ids and "white" not in ids
    assert ids[0] in {"blue", "green"}


def test_grid_expansion_steps_through_tiers():
    state, shop = _shop(200)
    assert shop.can_buy_grid_expansion()
    result = shop.buy_grid_expansion()
    assert result.data == {"level": 2, "size": 6, "cost": 50}
    assert state.money == 150
    assert (state.grid.width, state.grid.height) == (6, 6)
    assert state.grid_level == 2

    result = shop.buy_grid_expansion()
    assert result.data["size"] == 8
    assert state.money == 0
    assert shop.buy_grid_expansion().reason == "Cannot afford"


def test_grid_expansion_stops_at_last_tier():
    state, shop = _shop(10)
    state.grid_level = 16
    assert shop.next_expansion() is None
    assert shop.buy_grid_expansion().reason == "Max grid size reached"


def test_grid_expansion_keeps_painted_cells():
    state, shop = _shop(50)
    state.grid.set_cell(3, 3, "white")
    shop.buy_grid_expansion()
    assert state.grid.get(3, 3) == "white"


def test_upgrade_purchase_levels_and_reprices():
    state, shop = _shop(1000)
    assert shop.upgrade_price("money_boost") == 40
    result = shop.buy_upgrade("money_boost")
    assert result.data == {"upgrade_id": "money_boost", "price": 40, "level": 1}
    assert shop.upgrade_price("money_boost") == 80
    assert state.money == 960


def test_upgrade_blockers_in_order():
    state, shop = _shop(10_000)
    assert shop.buy_upgrade("teleporter").reason == "Unknown upgrade"
    assert shop.buy_upgrade("auto_painter_plaid").reason == "Unknown color"
    assert shop.buy_upgrade("auto_painter_red").reason == "Color not unlocked"
    assert shop.buy_upgrade("multi_brush").reason == "Requires Hold to Paint"

    assert shop.buy_upgrade("hold_to_paint").success
    assert shop.buy_upgrade("hold_to_paint").reason == "Max level reached"
    assert shop.buy_upgrade("multi_brush").success


def test_cannot_afford_upgrade():
    state, shop = _shop(20)
    assert shop.buy_upgrade("hold_to_paint").reason == "Cannot afford"
    assert state.money == 20
    assert state.get_upgrade_level("hold_to_paint") == 0


def test_auto_painter_purchase():
    state, shop = _shop(500)
    result = shop.buy_upgrade("auto_painter_black")
    assert result.success and result.data["price"] == 75
    assert state.owned_auto_painters() == ["auto_painter_black"]
    assert shop.upgrade_price("auto_painter_black") == 112


def test_available_upgrades_lists_painters_for_owned_colors():
    state, shop = _shop(30)
    listing = {entry["id"]: entry for entry in shop.available_upgrades()}
    assert "auto_painter_black" in listing and "auto_painter_white" in listing
    assert "auto_painter_red" not in listing
    assert listing["hold_to_paint"]["can_afford"] is True
    assert listing["multi_brush"]["meets_requirements"] is False
    assert listing["multi_brush"]["can_afford"] is False

    state.unlock_color("red")
    assert any(entry["id"] == "auto_painter_red" for entry in shop.available_upgrades())


def test_maxed_upgrade_has_no_next_cost():
    state, shop = _shop(100)
    shop.buy_upgrade("hold_to_paint")
    entry = next(e for e in shop.available_upgrades() if e["id"] == "hold_to_paint")
    assert entry["maxed"] and entry["owned"]
    assert entry["next_cost"] is None
    assert entry["can_afford"] is False


def test_affordable_counts():
    state, shop = _shop(50)
    counts = shop.affordable_counts()
    assert counts["grid_expansion"] == 1
    assert counts["colors"] == 3  # red, blue, green
    # hold_to_paint 25, money_boost 40, auto_start_contract 50
    assert counts["upgrades"] == 3

    data = shop.shop_data()
    assert data["grid_level"] == 1 and data["grid_size"] == 4


def test_grid_expansion_refused_when_grid_already_larger():
    state, shop = _shop(200)
    state.grid.expand(10, 10)
    result = shop.buy_grid_expansion()
    assert not result.success
    assert result.reason == "Grid expansion failed"
    assert state.money == 200
    assert state.grid_level == 1
    assert (state.grid.width, state.grid.height) == (10, 10)
