import asyncio
import logging
from typing import Awaitable, Callable, List, NamedTuple, Optional

from config import TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class ScheduleResult(NamedTuple):
    issued: int
    truncated: bool


class RateScheduler:
    """Fans executor calls out in waves and joins them before summarization.

    ``execute`` is called once per request; each call runs as its own task.
    Waves are fire-and-forget: a tick never waits for the previous tick's
    requests. The only wait is the final join, optionally bounded by
    ``deadline_s`` (counted from the moment the join starts).
    """

    def __init__(self, execute: Callable[[], Awaitable],
                 tick_interval_s: float = TICK_INTERVAL_SECONDS,
                 deadline_s: Optional[float] = None):
        self.execute = execute
        self.tick_interval_s = tick_interval_s
        self.deadline_s = deadline_s
        self._tasks: List[asyncio.Task] = []

    @property
    def issued(self) -> int:
        return len(self._tasks)

    def _spawn(self, count: int):
        for _ in range(count):
            self._tasks.append(asyncio.create_task(self.execute(), name=f"request-{len(self._tasks)}"))

    async def run_ticks(self, requests_per_tick: int, ticks: int) -> ScheduleResult:
        loop = asyncio.get_running_loop()
        start = loop.time()
        for tick in range(ticks):
            self._spawn(requests_per_tick)
            logger.info(f"Tick {tick + 1}/{ticks}: finished sending {self.issued}")
            # Next wave is due at start + k*interval, whatever the previous one cost.
            delay = start + (tick + 1) * self.tick_interval_s - loop.time()
            if delay < 0:
                logger.debug(f"Tick {tick + 1} running {-delay:.3f}s behind schedule")
            await asyncio.sleep(max(0.0, delay))
        truncated = await self.join()
        return ScheduleResult(self.issued, truncated)

    async def run_count(self, total: int) -> ScheduleResult:
        if total > 0:
            # Warm-up call primes the connection pool before the burst.
            self._spawn(1)
            await asyncio.wait(self._tasks)
            logger.info("Warm-up request finished")
            self._spawn(total - 1)
            logger.info(f"Sent remaining {total - 1} requests without pacing")
        truncated = await self.join()
        return ScheduleResult(self.issued, truncated)

    async def join(self) -> bool:
        """Wait for every spawned task. Returns True if the deadline cut the run short."""
        if not self._tasks:
            return False

        done, pending = await asyncio.wait(self._tasks, timeout=self.deadline_s)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.error(f"Request task {task.get_name()} crashed: {task.exception()!r}")

        if not pending:
            return False

        logger.warning(f"Deadline of {self.deadline_s}s reached; cancelling {len(pending)} in-flight requests.")
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        return True
