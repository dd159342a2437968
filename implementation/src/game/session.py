"""GameSession wires the systems together and owns the two periodic timers.

Everything is constructed here and handed down explicitly; nothing in
the game package reaches for a shared instance.
"""
from __future__ import annotations

import random
import time
from pathlib import Path
from typing import Callable, Optional

from game.autopainter import AutoPainterSystem
from game.contracts import ContractSystem
from game.save import SaveManager
from game.shop import ShopSystem
from game.state import GameState
from game.timers import PeriodicTimer

POLL_INTERVAL_MS = 100
AUTOSAVE_INTERVAL_MS = 30_000
STARTING_MONEY = 10


def _now_ms() -> int:
    return int(time.time() * 1000)


class GameSession:
    def __init__(
        self,
        save_path: Optional[Path] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.clock = clock or _now_ms
        self.state = GameState()
        self.contracts = ContractSystem(self.state, rng=rng, clock=self.clock)
        self.shop = ShopSystem(self.state)
        self.painters = AutoPainterSystem(self.state, clock=self.clock)
        self.saves = SaveManager(self.state, save_path, clock=self.clock)

        self.automation_timer = PeriodicTimer(POLL_INTERVAL_MS, self.automation_tick, name="automation")
        self.autosave_timer = PeriodicTimer(AUTOSAVE_INTERVAL_MS, self.autosave, name="autosave")

        self.started = False
        self.paused = False
        self._last_tick: Optional[int] = None

    # ── Lifecycle ────────────────────────────────────────────────

    def load_or_new(self) -> bool:
        """Restore the save file if there is a usable one; otherwise seed a new game. True if loaded."""
        if self.saves.load():
            print(f"[session] Loaded save from {self.saves.path}")
            return True
        self.state.add_money(STARTING_MONEY)
        print("[session] Starting a new game")
        return False

    def start(self) -> None:
        """Load state and start the timers; must be called with a running event loop."""
        if self.started:
            return
        self.load_or_new()
        self.started = True
        self.paused = False
        self._start_timers()

    def _start_timers(self) -> None:
        self._last_tick = self.clock()
        self.automation_timer.start()
        self.autosave_timer.start()

    def _stop_timers(self) -> None:
        self.automation_timer.stop()
        self.autosave_timer.stop()

    def pause(self) -> None:
        if not self.started or self.paused:
            return
        self.paused = True
        self._stop_timers()
        self.saves.save()

    def resume(self) -> None:
        if not self.started or not self.paused:
            return
        self.paused = False
        self._start_timers()

    def shutdown(self) -> bool:
        self._stop_timers()
        was_started = self.started
        self.started = False
        if not was_started:
            return False
        return self.saves.save()

    # ── Timer callbacks ──────────────────────────────────────────

    def automation_tick(self, now_ms: Optional[int] = None) -> None:
        now = self.clock() if now_ms is None else now_ms
        if self._last_tick is not None and now > self._last_tick:
            self.state.add_play_time((now - self._last_tick) / 1000)
        self._last_tick = now
        self.painters.tick(now)
        self.contracts.tick(now)

    def autosave(self) -> bool:
        return self.saves.save()
