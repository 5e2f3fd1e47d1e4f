"""
Simulated companion search.

There is no real peer discovery: once the user confirms a route, a counter goes up by
one every `interval_seconds` until it reaches `threshold`, then the search "completes".

The timer is an asyncio task. Each `start()` gets its own run token so a tick that
was already scheduled when `stop()` ran becomes a no-op.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], object]
CompleteCallback = Callable[[], object]
Sleep = Callable[[float], Awaitable[object]]


class MatchSimulator:
    """Counts up on a fixed cadence and signals completion once."""

    def __init__(
        self,
        interval_seconds: float = 3.0,
        threshold: int = 3,
        *,
        sleep: Sleep = asyncio.sleep,
    ):
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        self._interval = float(interval_seconds)
        self._threshold = int(threshold)
        self._sleep = sleep
        self._count = 0
        self._task: asyncio.Task[None] | None = None
        self._token: object | None = None

    @property
    def count(self) -> int:
        return self._count

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def running(self) -> bool:
        return self._token is not None

    def start(self, on_tick: TickCallback, on_complete: CompleteCallback) -> None:
        """Reset the counter and begin ticking. Must be called from inside the event loop."""
        if self.running:
            raise RuntimeError("MatchSimulator is already running; call stop() first.")
        self._count = 0
        token = object()
        self._token = token
        self._task = asyncio.get_running_loop().create_task(self._run(token, on_tick, on_complete))
        logger.debug("Match simulation started (interval=%ss threshold=%s)", self._interval, self._threshold)

    def stop(self) -> None:
        """Stop ticking. Safe to call when idle; `on_complete` never fires afterwards."""
        task, self._task = self._task, None
        was_running = self._token is not None
        self._token = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        if was_running:
            logger.debug("Match simulation stopped at count=%s", self._count)

    async def _run(self, token: object, on_tick: TickCallback, on_complete: CompleteCallback) -> None:
        while self._count < self._threshold:
            await self._sleep(self._interval)
            if self._token is not token:
                return
            self._count += 1
            on_tick(self._count)
            if self._token is not token:
                return
        self._token = None
        self._task = None
        logger.debug("Match simulation complete at count=%s", self._count)
        on_complete()
