"""Tests for the sparse grid: mutation, history, expansion and persistence."""

from game.events import EventType
from game.grid import MAX_HISTORY, Grid


def test_set_then_get_and_erase():
    grid = Grid(4, 4)
    assert grid.set_cell(1, 2, "red") is True
    assert grid.get_cell(1, 2) == "red"
    assert grid.filled_count() == 1

    assert grid.set_cell(1, 2, None) is True
    assert grid.get_cell(1, 2) is None
    assert grid.filled_count() == 0
    assert (1, 2) not in grid.cells


def test_set_cell_rejects_invalid_and_unchanged():
    grid = Grid(4, 4)
    assert grid.set_cell(4, 0, "black") is False
    assert grid.set_cell(-1, 0, "black") is False
    grid.set_cell(0, 0, "black")
    assert grid.set_cell(0, 0, "black") is False
    assert len(grid.history) == 1
    assert grid.get_cell(99, 99) is None


def test_undo_restores_previous_color():
    grid = Grid(4, 4)
    grid.set_cell(0, 0, "black")
    grid.set_cell(0, 0, "white")

    assert grid.undo() is True
    assert grid.get(0, 0) == "black"
    assert grid.undo() is True
    assert grid.get(0, 0) is None
    assert grid.undo() is False


def test_undo_emits_cell_changed_with_restored_color():
    grid = Grid(4, 4)
    events = []
    grid.events.subscribe(EventType.CELL_CHANGED, events.append)
    grid.set_cell(2, 3, "red")
    grid.undo()

    assert events[-1].color is None
    assert events[-1].old_color == "red"
    assert (events[-1].x, events[-1].y) == (2, 3)


def test_history_is_bounded_oldest_first():
    grid = Grid(20, 20)
    for i in range(MAX_HISTORY + 25):
        grid.set_cell(i % 20, i // 20, "black")
    assert len(grid.history) == MAX_HISTORY
    # The oldest surviving entry is the 26th write
    assert (grid.history[0].x, grid.history[0].y) == (25 % 20, 25 // 20)


def test_lowering_max_history_trims():
    grid = Grid(10, 10)
    for x in range(10):
        grid.set_cell(x, 0, "black")
    grid.set_max_history(3)
    assert len(grid.history) == 3
    assert grid.history[-1].x == 9


def test_set_cells_reports_only_real_changes_in_one_event():
    grid = Grid(4, 4)
    grid.set_cell(0, 0, "black")
    batches = []
    grid.events.subscribe(EventType.CELLS_CHANGED, batches.append)

    count = grid.set_cells([(0, 0, "black"), (1, 0, "red"), (9, 9, "red"), (2, 0, "white")])

    assert count == 2
    assert len(batches) == 1
    assert [(c.x, c.y) for c in batches[0].changes] == [(1, 0), (2, 0)]


def test_set_cells_without_changes_emits_nothing():
    grid = Grid(4, 4)
    batches = []
    grid.events.subscribe(EventType.CELLS_CHANGED, batches.append)
    assert grid.set_cells([(5, 5, "red")]) == 0
    assert batches == []


def test_expand_never_shrinks_and_clears_history():
    grid = Grid(6, 6)
    grid.set_cell(5, 5, "black")
    assert grid.expand(4, 8) is False
    assert (grid.width, grid.height) == (6, 6)
    assert len(grid.history) == 1

    assert grid.expand(8, 8) is True
    assert (grid.width, grid.height) == (8, 8)
    assert len(grid.history) == 0
    assert grid.get(5, 5) == "black"


def test_clear_is_silent_when_empty():
    grid = Grid(4, 4)
    cleared = []
    grid.events.subscribe(EventType.GRID_CLEARED, cleared.append)
    grid.clear()
    assert cleared == []

    grid.set_cell(0, 0, "black")
    grid.clear()
    assert len(cleared) == 1
    assert grid.filled_count() == 0
    assert len(grid.history) == 0


def test_cells_in_region_sparse_and_dense_agree():
    grid = Grid(10, 10)
    grid.set_cell(1, 1, "red")
    grid.set_cell(3, 2, "blue")
    grid.set_cell(9, 9, "black")
    sparse = grid.get_cells_in_region(0, 0, 5, 5)

    for x in range(4):
        for y in range(4, 5):
            grid.set_cell(x, y, "white")
    dense = grid.get_cells_in_region(0, 0, 4, 3)

    assert sparse == [(1, 1, "red"), (3, 2, "blue")]
    assert dense == [(1, 1, "red"), (3, 2, "blue")]
    assert grid.get_cells_in_region(-5, -5, 100, 100)[-1] == (9, 9, "black")
    assert grid.get_cells_in_region(5, 5, 5, 5) == []


def test_serialize_round_trip():
    grid = Grid(5, 3)
    grid.set_cell(4, 2, "red")
    grid.set_cell(0, 0, "black")
    data = grid.serialize()
    assert data == {"width": 5, "height": 3, "cells": [[0, 0, "black"], [4, 2, "red"]]}

    restored = Grid()
    restored.deserialize(data)
    assert (restored.width, restored.height) == (5, 3)
    assert restored.cells == grid.cells
    assert len(restored.history) == 0


def test_deserialize_legacy_dense_format():
    grid = Grid()
    grid.deserialize({"width": 3, "height": 2, "cells": [None, "red", None, None, None, "blue"]})
    assert grid.get(1, 0) == "red"
    assert grid.get(2, 1) == "blue"
    assert grid.filled_count() == 2


def test_deserialize_skips_bad_entries():
    grid = Grid()
    loaded = []
    grid.events.subscribe(EventType.GRID_LOADED, loaded.append)
    grid.deserialize({"width": 2, "height": 2, "cells": [[0, 0, "red"], [5, 5, "red"], ["x"], [1, 1, None]]})
    assert grid.cells == {(0, 0): "red"}
    assert len(loaded) == 1


def test_count_color_and_iter_cells():
    grid = Grid(2, 2)
    grid.set_cells([(0, 0, "red"), (1, 1, "red"), (1, 0, "blue")])
    assert grid.count_color("red") == 2
    assert list(grid.iter_cells()) == [(0, 0, "red"), (1, 0, "blue"), (0, 1, None), (1, 1, "red")]
    assert sorted(grid.filled_cells()) == [(0, 0, "red"), (1, 0, "blue"), (1, 1, "red")]


def test_is_valid_matches_bounds():
    grid = Grid(3, 2)
    assert grid.is_valid(2, 1)
    assert not grid.is_valid(3, 0)
    assert not grid.is_valid(0, -1)


def test_deserialize_skips_mapping_entries():
    grid = Grid(4, 4)
    grid.deserialize({"width": 4, "height": 4, "cells": [[1, 1, "white"], {"x": 2}]})
    assert grid.cells == {(1, 1): "white"}
