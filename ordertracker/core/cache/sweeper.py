"""Fixed-interval background sweep for one cache instance.

The sweeper does not decide what a sweep means: the owning facade binds a
callback (normally "clear everything and reset accounting"). The sweeper only
owns the timer task and its lifecycle.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 30 * 60

SleepFunc = Callable[[float], Awaitable[object]]


class PeriodicSweeper:
    """
    Runs a bound callback every ``interval_seconds`` until stopped.

    Args:
        interval_seconds: Delay between sweeps
        name: Label used in logs and as the asyncio task name
        sleep: Awaitable used to wait between sweeps; tests inject their own
    """

    def __init__(
        self,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        *,
        name: str = "cache",
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        if not math.isfinite(interval_seconds) or interval_seconds <= 0:
            raise ValueError("interval_seconds must be a positive finite number")
        self.interval_seconds = float(interval_seconds)
        self.name = name
        self._sleep = sleep
        self._action: Optional[Callable[[], object]] = None
        self._task: Optional[asyncio.Task] = None
        self.sweeps = 0

    def bind(self, action: Callable[[], object]) -> None:
        if self._action is not None and self._action != action:
            raise RuntimeError(f"Sweeper '{self.name}' is already bound")
        self._action = action

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Schedule the sweep loop on the running event loop."""
        if self._action is None:
            raise RuntimeError(f"Sweeper '{self.name}' has nothing to run; call bind() first")
        if self.running:
            return self._task  # type: ignore[return-value]
        self._task = asyncio.create_task(self._run(), name=f"cache_sweeper:{self.name}")
        logger.info(
            "Cache sweeper '%s' started (interval: %.0fs)",
            self.name,
            self.interval_seconds,
        )
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and wait for it. Safe to call more than once."""
        task, self._task = self._task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        logger.info("Cache sweeper '%s' stopped", self.name)

    def sweep(self) -> None:
        """Run one sweep now."""
        if self._action is None:
            return
        try:
            self._action()
        except Exception:
            logger.error("Cache sweep '%s' failed", self.name, exc_info=True)
            return
        self.sweeps += 1

    async def _run(self) -> None:
        while True:
            await self._sleep(self.interval_seconds)
            self.sweep()


__all__ = ["PeriodicSweeper", "DEFAULT_SWEEP_INTERVAL_SECONDS"]
