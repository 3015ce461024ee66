"""Periodic cache reset scheduler."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class CacheResetScheduler:
    """Runs a reset callback every ``interval_seconds`` until stopped."""

    # Granularity of the shutdown check while waiting
    POLL_INTERVAL = 1.0

    def __init__(
        self,
        interval_seconds: float,
        reset_callback: Callable[[], Awaitable[None]],
    ):
        """
        Initialize the reset scheduler.

        Args:
            interval_seconds: Delay between two resets
            reset_callback: Async callable performing the reset
        """
        self.interval_seconds = interval_seconds
        self.reset_callback = reset_callback

        self._is_running = False
        self._task: Optional[asyncio.Task] = None
        self._shutdown_event = asyncio.Event()
        self._next_reset: Optional[datetime] = None
        self.runs = 0

    @property
    def is_running(self) -> bool:
        return self._is_running

    async def start(self):
        """Start the reset loop."""
        if self._is_running:
            logger.warning("Cache reset scheduler is already running")
            return

        self._is_running = True
        self._shutdown_event.clear()
        self._task = asyncio.create_task(self._run(), name="cache_reset_scheduler")
        logger.info(f"Started cache reset scheduler (every {self.interval_seconds}s)")

    async def stop(self):
        """Stop the reset loop gracefully."""
        if not self._is_running:
            return

        logger.info("Stopping cache reset scheduler...")
        self._is_running = False
        self._shutdown_event.set()

        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        self._task = None
        self._next_reset = None
        logger.info("Cache reset scheduler stopped")

    async def _run(self):
        while self._is_running and not self._shutdown_event.is_set():
            try:
                now = datetime.now(timezone.utc)
                self._next_reset = now + timedelta(seconds=self.interval_seconds)
                logger.info(f"Next cache reset at {self._next_reset.isoformat()}")

                wait_seconds = self.interval_seconds
                while wait_seconds > 0 and self._is_running and not self._shutdown_event.is_set():
                    await asyncio.sleep(min(wait_seconds, self.POLL_INTERVAL))
                    wait_seconds = (self._next_reset - datetime.now(timezone.utc)).total_seconds()

                if self._is_running and not self._shutdown_event.is_set():
                    await self.reset_callback()
                    self.runs += 1

            except asyncio.CancelledError:
                logger.info("Cache reset scheduler was cancelled")
                raise
            except Exception as e:
                logger.error(f"Error in cache reset scheduler: {e}", exc_info=True)
                await asyncio.sleep(min(60.0, self.interval_seconds * 0.1))

    def get_status(self) -> dict:
        """
        Get the current status of the scheduler.

        Returns:
            dict: Running flag, interval, completed runs and next reset time
        """
        return {
            "running": self._is_running,
            "interval_seconds": self.interval_seconds,
            "runs": self.runs,
            "next_reset": self._next_reset.isoformat() if self._next_reset else None,
        }
