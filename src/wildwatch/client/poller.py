"""Periodic background refresh of dashboard data."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30.0

T = TypeVar("T")


class RefreshPoller(Generic[T]):
    """Call ``fetch`` every ``interval`` seconds and hand results to ``sink``.

    Manual refreshes may overlap with scheduled ones; whichever response
    resolves last is committed last. Results resolving after :meth:`stop`
    are dropped.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        sink: Callable[[T], None],
        *,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._fetch = fetch
        self._sink = sink
        self._interval = interval
        self._task: Optional[asyncio.Task[None]] = None
        self._paused = False
        self._stopped = False
        self.last_refreshed: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def paused(self) -> bool:
        return self._paused

    def start(self) -> None:
        if self._stopped:
            raise RuntimeError("Poller has been stopped")
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    async def stop(self) -> None:
        self._stopped = True
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def refresh_now(self) -> bool:
        """Fetch immediately; return ``True`` when the result was committed."""

        return await self._refresh()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if not self._paused:
                await self._refresh()

    async def _refresh(self) -> bool:
        try:
            value = await self._fetch()
        except Exception:
            logger.exception("Background refresh failed")
            return False
        if self._stopped:
            logger.debug("Dropping refresh result that resolved after stop")
            return False
        try:
            self._sink(value)
        except Exception:
            logger.exception("Failed to apply refreshed data")
            return False
        self.last_refreshed = datetime.now(UTC)
        return True


__all__ = ["DEFAULT_INTERVAL", "RefreshPoller"]
