"""Tests for auto-painter timing and cell selection."""

import pytest
from conftest import make_contract, pattern_with

from game.autopainter import MIN_INTERVAL_MS, AutoPainterSystem, compute_interval
from game.state import GameState


def _painting_state(cells, painters=("auto_painter_red",), colors=("red",)):
    state = GameState()
    for color in colors:
        state.unlock_color(color)
    for painter in painters:
        state.purchase_upgrade(painter)
    state.set_active_contract(make_contract(pattern_with(cells)))
    return state


def test_compute_interval_levels_and_floors():
    assert compute_interval(0) == 5000
    assert compute_interval(1) == pytest.approx(4250)
    assert compute_interval(5) == pytest.approx(1250)
    # Level reduction bottoms out at 20% of the base
    assert compute_interval(10) == pytest.approx(1000)
    assert compute_interval(0, 2) == pytest.approx(2500)
    assert compute_interval(5, 10) == MIN_INTERVAL_MS


def test_interval_is_monotonic():
    values = [compute_interval(level, boost) for level in range(8) for boost in range(6)]
    for level in range(7):
        for boost in range(5):
            assert compute_interval(level + 1, boost) <= compute_interval(level, boost)
            assert compute_interval(level, boost + 1) <= compute_interval(level, boost)
    assert min(values) >= MIN_INTERVAL_MS


def test_first_tick_sets_baseline_then_paints(clock):
    state = _painting_state([(0, 0, "red"), (3, 3, "red")])
    painters = AutoPainterSystem(state, clock=clock)

    assert painters.tick(0) == 0
    assert state.grid.get(0, 0) is None
    assert painters.tick(4000) == 0
    assert painters.tick(5000) == 1
    assert state.grid.get(0, 0) == "red"
    assert state.grid.get(3, 3) is None


def test_paint_is_undoable():
    state = _painting_state([(0, 0, "red"), (1, 0, "red")])
    painters = AutoPainterSystem(state)
    painters.tick(0)
    painters.tick(5000)
    assert state.grid.undo() is True
    assert state.grid.get(0, 0) is None


def test_painter_skips_correct_cells_and_ignores_other_colors():
    state = _painting_state([(0, 0, "red"), (1, 0, "white"), (2, 0, "red")])
    state.grid.set_cell(0, 0, "red")
    painters = AutoPainterSystem(state)
    painters.tick(0)
    painters.tick(5000)
    assert state.grid.get(1, 0) is None
    assert state.grid.get(2, 0) == "red"


def test_painter_overwrites_wrong_color():
    state = _painting_state([(0, 0, "red"), (1, 0, "red")])
    state.grid.set_cell(0, 0, "black")
    painters = AutoPainterSystem(state)
    painters.tick(0)
    painters.tick(5000)
    assert state.grid.get(0, 0) == "red"


def test_noop_paint_does_not_move_baseline():
    state = _painting_state([(0, 0, "white")])
    painters = AutoPainterSystem(state)
    painters.tick(100)
    assert painters.tick(10_000) == 0
    assert painters.last_paint["red"] == 100


def test_painter_completes_contract():
    state = _painting_state([(0, 0, "red")])
    painters = AutoPainterSystem(state)
    painters.tick(0)
    assert painters.tick(5000) == 1
    assert state.active_contract is None
    assert state.completed_contracts == 1
    assert painters.tick(20_000) == 0


def test_master_switch_and_missing_contract_stop_painting():
    state = _painting_state([(0, 0, "red")])
    painters = AutoPainterSystem(state)
    state.set_automation_enabled("auto_painters", False)
    painters.tick(0)
    assert painters.tick(10_000) == 0
    assert painters.last_paint == {}

    state.set_automation_enabled("auto_painters", True)
    state.clear_contract()
    assert painters.tick(20_000) == 0


def test_each_color_has_its_own_timer():
    state = _painting_state(
        [(0, 0, "red"), (1, 0, "white"), (2, 0, "red")],
        painters=("auto_painter_red", "auto_painter_white"),
    )
    state.purchase_upgrade("auto_painter_white")
    painters = AutoPainterSystem(state)
    painters.tick(0)

    # White is level 2 (3500 ms), red is level 1 (4250 ms)
    assert painters.tick(3600) == 1
    assert state.grid.get(1, 0) == "white"
    assert painters.tick(4300) == 1
    assert state.grid.get(0, 0) == "red"


def test_speed_boost_shortens_interval():
    state = _painting_state([(0, 0, "red")])
    painters = AutoPainterSystem(state)
    before = painters.interval_for("auto_painter_red")
    state.purchase_upgrade("speed_boost")
    assert painters.interval_for("auto_painter_red") == pytest.approx(before * 0.75)


def test_state_load_resets_baselines():
    state = _painting_state([(0, 0, "red")])
    painters = AutoPainterSystem(state)
    painters.tick(0)
    assert painters.last_paint
    state.deserialize(state.serialize())
    assert painters.last_paint == {}


def test_status_reports_owned_painters():
    state = _painting_state([(0, 0, "red")])
    status = AutoPainterSystem(state).status()
    assert status["enabled"] is True
    assert status["painters"] == [
        {"id": "auto_painter_red", "color_id": "red", "level": 1, "interval": compute_interval(1)}
    ]
