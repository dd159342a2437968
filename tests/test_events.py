"""Tests for the typed event bus."""

import pytest

from game.events import CellChange, Empty, EventBus, EventType, MoneyChange


def test_emit_dispatches_in_subscription_order():
    bus = EventBus()
    seen = []
    bus.subscribe(EventType.MONEY_CHANGED, lambda e: seen.append(("a", e.delta)))
    bus.subscribe(EventType.MONEY_CHANGED, lambda e: seen.append(("b", e.delta)))

    bus.emit(EventType.MONEY_CHANGED, MoneyChange(money=15, delta=5))

    assert seen == [("a", 5), ("b", 5)]


def test_wrong_payload_type_raises():
    bus = EventBus()
    with pytest.raises(TypeError):
        bus.emit(EventType.CELL_CHANGED, MoneyChange(1, 1))


def test_missing_payload_becomes_empty_only_for_empty_events():
    bus = EventBus()
    got = []
    bus.subscribe(EventType.GRID_CLEARED, got.append)
    bus.emit(EventType.GRID_CLEARED)
    assert got == [Empty()]

    with pytest.raises(TypeError):
        bus.emit(EventType.CELL_CHANGED)


def test_unsubscribe_stops_delivery():
    bus = EventBus()
    got = []
    unsubscribe = bus.subscribe(EventType.CELL_CHANGED, got.append)
    bus.emit(EventType.CELL_CHANGED, CellChange(0, 0, "black"))
    unsubscribe()
    bus.emit(EventType.CELL_CHANGED, CellChange(1, 0, "black"))

    assert len(got) == 1
    assert bus.handler_count(EventType.CELL_CHANGED) == 0


def test_handler_may_unsubscribe_during_dispatch():
    bus = EventBus()
    got = []
    holder = {}

    def once(event):
        got.append(event)
        holder["off"]()

    holder["off"] = bus.subscribe(EventType.STATE_LOADED, once)
    bus.subscribe(EventType.STATE_LOADED, lambda e: got.append("second"))

    bus.emit(EventType.STATE_LOADED)
    bus.emit(EventType.STATE_LOADED)

    assert got == [Empty(), "second", "second"]
