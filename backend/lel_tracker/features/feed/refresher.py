"""
Periodic refresh runner.

Calls a coroutine at a fixed interval until stopped.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from .client import FeedUnavailable

logger = logging.getLogger(__name__)


class PeriodicRefresher:
    """
    Background task that re-runs `action` every `interval_seconds`.

    Call `start()` to begin.
    Call `stop()` when the consumer goes away; the task is cancelled
    and awaited so no periodic work leaks.

    Usage:
        refresher = PeriodicRefresher(service.refresh, 300)
        await refresher.start()
        # ... later ...
        await refresher.stop()
    """

    def __init__(
        self,
        action: Callable[[], Awaitable[Any]],
        interval_seconds: float,
        name: str = "refresh",
    ):
        self._action = action
        self.interval_seconds = interval_seconds
        self.name = name
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the refresh loop."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Periodic {self.name} started (every {self.interval_seconds}s)")

    async def stop(self):
        """Stop the refresh loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info(f"Periodic {self.name} stopped")

    async def _run_loop(self):
        """Main loop."""
        while self._running:
            try:
                await self._action()
            except FeedUnavailable as e:
                logger.warning(f"Periodic {self.name} failed, keeping last snapshot: {e}")
            except Exception as e:
                logger.error(f"Periodic {self.name} error: {e}")
            self.runs += 1

            await asyncio.sleep(self.interval_seconds)
