"""Event-loop error handling and background task bookkeeping."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Optional

logger = logging.getLogger(__name__)


def setup_global_exception_handler(loop: Optional[asyncio.AbstractEventLoop] = None) -> bool:
    """Log exceptions nobody awaited instead of letting asyncio print them.

    Returns:
        True if a handler was installed, False when there is no running loop
    """

    def handle_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
        exception = context.get("exception")
        message = context.get("message", "Unhandled exception in async task")
        if exception:
            logger.error("Asyncio exception handler caught: %s", message, exc_info=exception)
        else:
            logger.error("Asyncio exception handler caught: %s (context: %s)", message, context)

    if loop is None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop to install exception handler yet")
            return False
    loop.set_exception_handler(handle_exception)
    logger.info("Global asyncio exception handler installed")
    return True


def safe_background_task(
    task_name: str,
    task_coro: Coroutine[Any, Any, Any],
    *,
    shutdown: Optional["GracefulShutdown"] = None,
) -> asyncio.Task:
    """
    Schedule ``task_coro`` so that failures are logged with the task name.

    Args:
        task_name: Human-readable name, also used as the asyncio task name
        task_coro: The coroutine to run
        shutdown: Registry the task is added to, if any

    Returns:
        The created asyncio.Task
    """

    async def wrapped() -> Any:
        try:
            return await task_coro
        except asyncio.CancelledError:
            logger.info("Background task '%s' cancelled", task_name)
            raise
        except Exception:
            logger.exception("Background task '%s' failed with unhandled exception", task_name)
            raise

    task = asyncio.create_task(wrapped(), name=task_name)
    if shutdown is not None:
        shutdown.add_task(task)
    return task


class GracefulShutdown:
    """Tracks background tasks and cancels what is still running on shutdown."""

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self.tasks: set[asyncio.Task] = set()

    def add_task(self, task: asyncio.Task) -> None:
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)

    @property
    def pending(self) -> int:
        return sum(1 for task in self.tasks if not task.done())

    async def shutdown(self) -> None:
        tasks = [task for task in self.tasks if not task.done()]
        if not tasks:
            return

        logger.info("Gracefully shutting down %d background tasks...", len(tasks))
        for task in tasks:
            task.cancel()

        done, still_pending = await asyncio.wait(tasks, timeout=self.timeout)
        if still_pending:
            logger.warning(
                "Timeout waiting for %d background tasks after %.1fs: %s",
                len(still_pending),
                self.timeout,
                ", ".join(task.get_name() for task in still_pending),
            )
        else:
            logger.info("All background tasks shut down (%d)", len(done))


__all__ = ["GracefulShutdown", "safe_background_task", "setup_global_exception_handler"]
