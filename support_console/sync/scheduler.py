"""
scheduler.py - Fixed-period asyncio tasks
Single responsibility: run a named tick coroutine every N seconds on the
event loop until stopped.
"""
import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

Tick = Callable[[], Awaitable[None]]
Sleep = Callable[[float], Awaitable[None]]

# Scheduled ticks allowed to be outstanding at once; further periods are skipped
MAX_TICKS_IN_FLIGHT = 2


class PeriodicTask:
    """
    Timer-driven tick runner.

    Each tick is started in its own task when the period elapses, so a slow
    tick delays only its own result and never the next one. Once
    ``max_in_flight`` scheduled ticks are pending, further periods are skipped
    until one of them finishes. ``sleep`` is injectable so tests can drive
    the schedule with a fake clock.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        tick: Tick,
        sleep: Sleep | None = None,
        max_in_flight: int = MAX_TICKS_IN_FLIGHT,
    ):
        self.name = name
        self.interval = interval
        self._tick = tick
        self._sleep = sleep or asyncio.sleep
        self.max_in_flight = max(1, max_in_flight)
        self._timer: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self) -> None:
        if self.running:
            return
        self._timer = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        logger.debug("Started %s (every %.1fs)", self.name, self.interval)

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Stopped %s", self.name)
        for task in list(self._in_flight):
            task.cancel()
        self._in_flight.clear()

    def tick_now(self) -> asyncio.Task:
        """Run one tick immediately, outside the regular cadence."""
        task = asyncio.get_running_loop().create_task(self._guarded_tick(), name=f"{self.name}-tick")
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _run(self) -> None:
        while True:
            await self._sleep(self.interval)
            if len(self._in_flight) >= self.max_in_flight:
                logger.warning("%s: %d ticks still pending, skipping this period", self.name, len(self._in_flight))
                continue
            self.tick_now()

    async def _guarded_tick(self) -> None:
        try:
            await self._tick()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("%s tick failed", self.name, exc_info=True)
