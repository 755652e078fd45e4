"""Periodic refresh scheduling."""
import asyncio
import logging
import time
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from .models import CycleReport

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    """Scheduler state."""
    IDLE = "idle"
    REFRESHING = "refreshing"


class RefreshScheduler:
    """
    Runs the refresh cycle, then waits `interval` seconds before the next.

    Cycles never overlap: the timer for the next cycle is armed only after
    the current one settles. Keys queued with `enqueue` are ingested by the
    same task between cycles, so all store writes stay sequential.
    """

    def __init__(
        self,
        run_cycle: Callable[[], Awaitable[CycleReport]],
        interval: float = 60 * 60,
        ingest_key: Optional[Callable[[str], Awaitable[object]]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the scheduler.

        Args:
            run_cycle: Coroutine function running one full cycle
            interval: Seconds between the end of one cycle and the start of the next
            ingest_key: Coroutine function ingesting a single document key
            clock: Monotonic clock, injectable for tests
        """
        self._run_cycle = run_cycle
        self._ingest_key = ingest_key
        self.interval = interval
        self._clock = clock

        self.state = SchedulerState.IDLE
        self.cycles_completed = 0
        self.last_report: Optional[CycleReport] = None
        self.last_cycle_at: Optional[float] = None

        self._pending: List[str] = []
        self._wakeup: Optional[asyncio.Event] = None
        self._run_now = False
        self._stopped = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> List[str]:
        return list(self._pending)

    def _event(self) -> asyncio.Event:
        # created lazily so it binds to the running loop
        if self._wakeup is None:
            self._wakeup = asyncio.Event()
        return self._wakeup

    async def run_once(self) -> Optional[CycleReport]:
        """
        Run one cycle now unless one is already running.

        Returns:
            The cycle report, or None if skipped or the cycle failed
        """
        if self.state is SchedulerState.REFRESHING:
            logger.info("Refresh already in progress; skipping")
            return None

        self.state = SchedulerState.REFRESHING
        try:
            report = await self._run_cycle()
            self.last_report = report
            return report
        except Exception:
            logger.exception("Refresh cycle failed; retrying on the next tick")
            return None
        finally:
            self.state = SchedulerState.IDLE
            self.cycles_completed += 1
            self.last_cycle_at = self._clock()

    def enqueue(self, key: str) -> bool:
        """
        Queue a document key for on-demand ingestion.

        Returns:
            False if the key was already queued
        """
        if key in self._pending:
            return False
        self._pending.append(key)
        if self._wakeup is not None:
            self._wakeup.set()
        return True

    def trigger(self) -> bool:
        """
        Start the next cycle without waiting for the interval.

        Returns:
            False if a cycle is already running
        """
        if self.state is SchedulerState.REFRESHING:
            return False
        self._run_now = True
        if self._wakeup is not None:
            self._wakeup.set()
        return True

    async def drain_pending(self) -> int:
        """Ingest queued keys one at a time. Returns how many were processed."""
        processed = 0
        while self._pending:
            key = self._pending[0]
            if self._ingest_key is not None:
                try:
                    await self._ingest_key(key)
                except Exception:
                    logger.exception(f"On-demand ingestion of {key} failed")
            self._pending.pop(0)
            processed += 1
        return processed

    async def _wait_until(self, deadline: float) -> None:
        """Sleep until `deadline`, waking early for queued work or a trigger."""
        event = self._event()
        while not self._stopped and not self._run_now:
            await self.drain_pending()
            remaining = deadline - self._clock()
            if remaining <= 0:
                return
            event.clear()
            if self._pending or self._run_now or self._stopped:
                continue
            try:
                await asyncio.wait_for(event.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                pass

    async def _loop(self) -> None:
        self._event()
        while not self._stopped:
            self._run_now = False
            await self.run_once()
            if self._stopped:
                break
            await self._wait_until(self._clock() + self.interval)
        logger.info("Refresh scheduler stopped")

    def start(self) -> asyncio.Task:
        """Start the refresh loop; the first cycle runs immediately."""
        if self.running:
            return self._task
        self._stopped = False
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Refresh scheduler started (interval {self.interval:.0f}s)")
        return self._task

    async def stop(self) -> None:
        """
        Stop scheduling further cycles.

        A cycle in progress runs to completion first.
        """
        self._stopped = True
        if self._task is None:
            return
        if self._wakeup is not None:
            self._wakeup.set()
        try:
            await self._task
        finally:
            self._task = None
