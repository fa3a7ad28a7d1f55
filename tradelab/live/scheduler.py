"""
Cancellable periodic task on the asyncio loop.

Overlap policy: if the previous tick is still running when the next one is
due, the due tick is skipped (counted and logged), never queued.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger("tradelab.live.scheduler")


class PeriodicTask:
    """Runs `callback` every `interval` seconds until stopped."""

    def __init__(self, name: str, interval: float, callback: Callable[[], Awaitable[None]]):
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self.name = name
        self.interval = interval
        self.callback = callback
        self.fired = 0
        self.skipped = 0
        self._task: Optional[asyncio.Task] = None
        self._current: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop on the running event loop. No-op if already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"periodic:{self.name}")
        logger.debug("[%s] started (every %.2fs)", self.name, self.interval)

    async def stop(self) -> None:
        """Cancel the loop and any in-flight tick. Safe to call before start or twice."""
        me = asyncio.current_task()
        for task in (self._task, self._current):
            if task is None or task.done():
                continue
            task.cancel()
            if task is me:
                continue
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._current = None
        logger.debug("[%s] stopped (fired=%d skipped=%d)", self.name, self.fired, self.skipped)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self._current is not None and not self._current.done():
                self.skipped += 1
                logger.debug("[%s] previous tick still running, skipping", self.name)
                continue
            self.fired += 1
            self._current = asyncio.create_task(self._invoke(), name=f"tick:{self.name}")

    async def _invoke(self) -> None:
        try:
            await self.callback()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("[%s] tick failed; will retry next interval", self.name)
