"""Fixed-interval refresh scheduler with a single-flight guard."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"


class RefreshScheduler:
    """Drives ``refresh`` once immediately and then every ``interval`` seconds.

    At most one refresh cycle runs at a time. A tick that fires while a cycle
    is still in flight is dropped: it neither queues behind nor cancels the
    running cycle. Exceptions escaping ``refresh`` are logged and never stop
    the timer.

    Lifecycle:
        scheduler = RefreshScheduler(cache.refresh, interval=3.0)
        scheduler.start()
        # ... app runs ...
        await scheduler.stop()
    """

    def __init__(
        self,
        refresh: Callable[[], Awaitable[None]],
        interval: float = 3.0,
        name: str = "refresh",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._refresh = refresh
        self._interval = interval
        self._name = name
        self._state = SchedulerState.IDLE
        self._timer: asyncio.Task | None = None
        self._cycle: asyncio.Task | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self) -> None:
        """Fire the first cycle now and start the interval timer. No-op if running."""
        if self.running:
            return
        self._spawn_cycle()
        self._timer = asyncio.create_task(self._timer_loop(), name=f"{self._name}-timer")
        logger.info("Scheduler %s started: %.1fs interval", self._name, self._interval)

    async def stop(self) -> None:
        """Stop the timer and any in-flight cycle. Safe to call multiple times."""
        tasks = [t for t in (self._timer, self._cycle) if t is not None and not t.done()]
        self._timer = None
        self._cycle = None
        if not tasks:
            return
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Scheduler %s stopped", self._name)

    async def tick(self) -> bool:
        """Run one refresh cycle unless one is already in flight.

        Returns True if the cycle ran, False if it was dropped.
        """
        if self._state is SchedulerState.FETCHING:
            logger.debug("Scheduler %s: tick dropped, cycle in flight", self._name)
            return False
        self._state = SchedulerState.FETCHING
        try:
            await self._refresh()
        except Exception:
            logger.exception("Scheduler %s: refresh cycle failed", self._name)
        finally:
            self._state = SchedulerState.IDLE
        return True

    # --- Internal ---

    def _spawn_cycle(self) -> None:
        # Each cycle gets its own task; the timer loop never awaits it
        if self._state is SchedulerState.FETCHING:
            logger.debug("Scheduler %s: tick dropped, cycle in flight", self._name)
            return
        self._cycle = asyncio.create_task(self.tick(), name=f"{self._name}-cycle")

    async def _timer_loop(self) -> None:
        """Fire a tick every interval. First tick already happened in start()."""
        while True:
            await asyncio.sleep(self._interval)
            self._spawn_cycle()
