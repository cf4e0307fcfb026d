# =============================================================================
# skysense_core/services/timers.py
# Cancellable Event-Loop Timers
# =============================================================================
"""
Timers owned by the component that arms them.

Both timers must be armed from inside the running event loop and are
cancelled by their owner when the owning condition goes away.
"""

from __future__ import annotations
import asyncio
from typing import Awaitable, Callable, Optional

from skysense_core.logging import get_logger

logger = get_logger(__name__)


class DebounceTimer:
    """
    Runs an async callback once input activity pauses for ``delay`` seconds.

    Every ``trigger()`` restarts the wait; only the last trigger fires.
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]], name: str = "debounce"):
        self.delay = delay
        self.callback = callback
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire_later(), name=self.name)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _fire_later(self) -> None:
        await asyncio.sleep(self.delay)
        try:
            await self.callback()
        except Exception as e:
            logger.error(f"{self.name} callback failed: {e}", exc_info=True)


class PeriodicTask:
    """
    Calls ``callback`` immediately, then every ``interval`` seconds.

    A failing callback is logged and the loop keeps running.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "periodic"):
        self.interval = interval
        self.callback = callback
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        logger.debug(f"{self.name} started (every {self.interval}s)")

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug(f"{self.name} stopped")
        self._task = None

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while True:
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Error in {self.name}: {e}", exc_info=True)

            # Tick n is due at start + n * interval
            deadline += self.interval
            delay = deadline - loop.time()
            if delay < 0:
                logger.warning(f"{self.name} overran its interval by {-delay:.2f}s")
                deadline = loop.time()
                delay = 0
            await asyncio.sleep(delay)
