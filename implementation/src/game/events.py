"""Typed publish/subscribe for grid and game-state notifications.

Every EventType is bound to exactly one payload dataclass. Emitting the
wrong payload type is a programming error and raises TypeError; dispatch
itself is synchronous and runs handlers in subscription order.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from game.types import Contract


class EventType(Enum):
    CELL_CHANGED = "cell_changed"
    CELLS_CHANGED = "cells_changed"
    GRID_CLEARED = "grid_cleared"
    GRID_RESIZED = "grid_resized"
    GRID_LOADED = "grid_loaded"
    GRID_EXPANDED = "grid_expanded"
    MONEY_CHANGED = "money_changed"
    COLOR_UNLOCKED = "color_unlocked"
    COLOR_SELECTED = "color_selected"
    UPGRADE_CHANGED = "upgrade_changed"
    AUTOMATION_TOGGLED = "automation_toggled"
    CONTRACT_STARTED = "contract_started"
    CONTRACT_CLEARED = "contract_cleared"
    CONTRACT_COMPLETED = "contract_completed"
    STATE_LOADED = "state_loaded"


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class CellChange:
    x: int
    y: int
    color: Optional[str]
    old_color: Optional[str] = None


@dataclass(frozen=True)
class CellsChange:
    changes: Tuple[CellChange, ...]

    def __len__(self) -> int:
        return len(self.changes)


@dataclass(frozen=True)
class GridSize:
    width: int
    height: int


@dataclass(frozen=True)
class GridExpansionEvent:
    width: int
    height: int
    level: int


@dataclass(frozen=True)
class MoneyChange:
    money: int
    delta: int


@dataclass(frozen=True)
class ColorEvent:
    color_id: str


@dataclass(frozen=True)
class UpgradeChange:
    upgrade_id: str
    level: int


@dataclass(frozen=True)
class AutomationToggle:
    upgrade_id: str
    enabled: bool


@dataclass(frozen=True)
class ContractEvent:
    contract: Optional["Contract"]


PAYLOAD_TYPES: Dict[EventType, type] = {
    EventType.CELL_CHANGED: CellChange,
    EventType.CELLS_CHANGED: CellsChange,
    EventType.GRID_CLEARED: Empty,
    EventType.GRID_RESIZED: GridSize,
    EventType.GRID_LOADED: Empty,
    EventType.GRID_EXPANDED: GridExpansionEvent,
    EventType.MONEY_CHANGED: MoneyChange,
    EventType.COLOR_UNLOCKED: ColorEvent,
    EventType.COLOR_SELECTED: ColorEvent,
    EventType.UPGRADE_CHANGED: UpgradeChange,
    EventType.AUTOMATION_TOGGLED: AutomationToggle,
    EventType.CONTRACT_STARTED: ContractEvent,
    EventType.CONTRACT_CLEARED: ContractEvent,
    EventType.CONTRACT_COMPLETED: ContractEvent,
    EventType.STATE_LOADED: Empty,
}

Handler = Callable[[Any], None]


class EventBus:
    def __init__(self) -> None:
        self._handlers: Dict[EventType, List[Handler]] = {}

    def subscribe(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """Register *handler* for *event_type*; returns a function that unsubscribes it."""
        self._handlers.setdefault(event_type, []).append(handler)

        def _unsubscribe() -> None:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def emit(self, event_type: EventType, payload: Any = None) -> None:
        expected = PAYLOAD_TYPES[event_type]
        if payload is None and expected is Empty:
            payload = Empty()
        if not isinstance(payload, expected):
            raise TypeError(
                f"{event_type.name} expects {expected.__name__}, got {type(payload).__name__}"
            )
        # Copy so handlers may unsubscribe while being dispatched
        for handler in list(self._handlers.get(event_type, ())):
            handler(payload)

    def handler_count(self, event_type: EventType) -> int:
        return len(self._handlers.get(event_type, ()))
