"""Poll scheduler.

Runs poll cycles in one sequential loop: wait the interval, run a cycle to
completion, wait again. The interval is measured from the end of the
previous cycle, so a slow cycle can never overlap the next one.

Example:
    >>> scheduler = PollScheduler(engine, timedelta(minutes=1))
    >>> scheduler.start()
    >>> ...
    >>> await scheduler.close()  # finishes the running cycle, then stops
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from feedrelay.engine.poll import CycleStats, PollCycleEngine

logger = logging.getLogger(__name__)


@dataclass
class ScheduleState:
    """Run history of the scheduler loop.

    Attributes:
        interval: Delay between the end of one cycle and the start of the next.
        run_count: Cycles started so far.
        consecutive_failures: Cycles in a row that raised out of the engine.
        last_started: When the most recent cycle started.
        last_finished: When the most recent cycle finished.
        last_stats: Stats of the most recent successful cycle.
    """

    interval: timedelta
    run_count: int = 0
    consecutive_failures: int = 0
    last_started: datetime | None = None
    last_finished: datetime | None = None
    last_stats: CycleStats | None = None

    @property
    def next_run(self) -> datetime | None:
        """Earliest start of the next cycle (None before the first one ends)."""
        if self.last_finished is None:
            return None
        return self.last_finished + self.interval


class PollScheduler:
    """Sequential loop that drives a :class:`PollCycleEngine`.

    Args:
        engine: The engine whose ``run_one_cycle`` is called.
        interval: Delay between cycles, as a timedelta or seconds.
        run_immediately: Run the first cycle without waiting.
    """

    def __init__(
        self,
        engine: PollCycleEngine,
        interval: timedelta | float,
        *,
        run_immediately: bool = False,
    ) -> None:
        if not isinstance(interval, timedelta):
            interval = timedelta(seconds=interval)
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        self._engine = engine
        self._run_immediately = run_immediately
        self._stopping = asyncio.Event()
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self.state = ScheduleState(interval=interval)

    @property
    def running(self) -> bool:
        """Whether the loop is active or a started task has yet to finish."""
        return self._running or (self._task is not None and not self._task.done())

    async def run_forever(self) -> None:
        """Run cycles until :meth:`stop` is called.

        Raises:
            RuntimeError: If the loop is already running.
        """
        if self._running:
            raise RuntimeError("Scheduler is already running")
        self._running = True
        logger.info("Scheduler started (interval %s)", self.state.interval)
        try:
            first = True
            while not self._stopping.is_set():
                if not (first and self._run_immediately):
                    if await self._wait_interval():
                        break
                first = False
                await self._run_cycle()
        finally:
            self._running = False
            logger.info("Scheduler stopped after %d cycles", self.state.run_count)

    async def _wait_interval(self) -> bool:
        """Sleep for the interval. Returns True if stop was requested."""
        try:
            await asyncio.wait_for(
                self._stopping.wait(),
                timeout=self.state.interval.total_seconds(),
            )
        except TimeoutError:
            return self._stopping.is_set()
        return True

    async def _run_cycle(self) -> None:
        self.state.run_count += 1
        self.state.last_started = datetime.now(UTC)
        try:
            self.state.last_stats = await self._engine.run_one_cycle()
        except Exception:
            self.state.consecutive_failures += 1
            logger.exception(
                "Poll cycle %d failed (%d in a row)",
                self.state.run_count,
                self.state.consecutive_failures,
            )
        else:
            self.state.consecutive_failures = 0
        finally:
            self.state.last_finished = datetime.now(UTC)

    def start(self) -> asyncio.Task[None]:
        """Run the loop as a background task.

        Raises:
            RuntimeError: If the loop is already running.
        """
        if self.running:
            raise RuntimeError("Scheduler is already running")
        self._stopping.clear()
        self._task = asyncio.create_task(self.run_forever(), name="feedrelay-scheduler")
        return self._task

    def stop(self) -> None:
        """Ask the loop to stop. A running cycle is allowed to finish."""
        self._stopping.set()

    async def wait_closed(self) -> None:
        """Wait for the background task started by :meth:`start`."""
        if self._task is not None:
            await self._task
            self._task = None

    async def close(self) -> None:
        """Stop and wait for the loop to finish."""
        self.stop()
        await self.wait_closed()
