"""Push scheduler background service.

Runs a push cycle (snapshot -> encoder -> flush) on a fixed interval.

Scheduling:
- The first cycle runs immediately on start.
- After each cycle the next wake time is advanced by whole intervals
  until it lies in the future. Ticks missed while a cycle overran are
  skipped, never replayed, so a slow collector sees fewer pushes rather
  than a burst.
- Stop is observed during the wait and before each cycle.

Note:
    This service should be started with the application lifecycle
    and stopped when the application shuts down.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Optional


from prombridge.domain.models.name_filter import NamePredicate
from prombridge.infrastructure.observability.logging import get_logger_for_service

if TYPE_CHECKING:
    from prombridge.application.ports.metric_snapshot_provider import (
        MetricSnapshotProvider,
    )
    from prombridge.infrastructure.monitoring.push_encoder import PushEncoder


def next_tick_after(target: float, now: float, interval: float) -> float:
    """Advance ``target`` by whole intervals until it is after ``now``.

    Args:
        target: Previously scheduled tick.
        now: Current time.
        interval: Tick interval, positive.

    Returns:
        The first tick strictly later than ``now``; ``target`` itself if
        it already is.
    """
    while now >= target:
        target += interval
    return target


class PushScheduler:
    """Background push loop for one push target.

    Attributes:
        running: Whether the loop is currently running.
        interval_seconds: The push interval in seconds.

    Example:
        >>> scheduler = PushScheduler(provider, encoder, interval_seconds=60)
        >>> await scheduler.start()
        >>> # ... application runs ...
        >>> await scheduler.stop()
    """

    def __init__(
        self,
        provider: "MetricSnapshotProvider",
        encoder: "PushEncoder",
        interval_seconds: float,
        name_filter: NamePredicate | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the scheduler.

        Args:
            provider: Source of metric snapshots.
            encoder: Encoder owned exclusively by this scheduler.
            interval_seconds: Push interval in seconds.
            name_filter: Optional restriction on pushed series names.
            clock: Time source in seconds.
        """
        if interval_seconds <= 0:
            raise ValueError(
                f"interval_seconds must be positive, got {interval_seconds}"
            )
        self._provider = provider
        self._encoder = encoder
        self._interval = interval_seconds
        self._filter = name_filter
        self._clock = clock
        self._running: bool = False
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None
        self._log = get_logger_for_service("push_scheduler", component="push")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval_seconds(self) -> float:
        return self._interval

    async def start(self) -> None:
        """Start the push loop.

        Note:
            Calling start multiple times is safe (idempotent).
        """
        if self._running:
            return

        self._running = True
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop())
        self._log.info(
            "push_scheduler_started",
            interval=self._interval,
            url=self._encoder.url,
        )

    async def stop(self) -> None:
        """Stop the push loop and wait for it to finish.

        A cycle already in progress is not interrupted; a waiting loop
        exits immediately.

        Note:
            Calling stop when not running is safe.
        """
        self._running = False
        self._stop_event.set()
        if self._task:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._log.info("push_scheduler_stopped")

    async def push_once(self) -> bool:
        """Run one push cycle.

        Returns:
            True if the final batch was acknowledged by the collector.
        """
        snapshot = self._provider.collect(self._filter)
        for family in snapshot:
            for sample in family.samples:
                self._encoder.add_sample(sample)
                if self._encoder.batch_full:
                    await self._encoder.flush()
        return await self._encoder.flush()

    async def _wait(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for a stop request.

        Returns:
            True if stop was requested.
        """
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def _run_loop(self) -> None:
        """Internal push loop."""
        next_tick = self._clock()
        while not self._stop_event.is_set():
            try:
                await self.push_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._log.error("push_cycle_failed", error=str(e), exc_info=True)

            now = self._clock()
            next_tick = next_tick_after(next_tick, now, self._interval)
            if await self._wait(next_tick - now):
                break
