from __future__ import annotations

import asyncio
from typing import Callable, Optional


class PeriodicTimer:
    """Runs ``callback`` every ``interval_ms`` on the running event loop.

    The callback is synchronous and runs to completion between awaits, so
    it never interleaves with other game mutations on the same loop.
    """

    def __init__(self, interval_ms: float, callback: Callable[[], None], name: str = "timer") -> None:
        self.interval_ms = interval_ms
        self.callback = callback
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_ms / 1000)
            try:
                self.callback()
            except Exception as e:  # logged; the timer keeps running
                print(f"[{self.name}] Callback failed: {e!r}")
