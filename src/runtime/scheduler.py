"""Cancellable recurring ticks driven by the runtime loop thread."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional


class ScheduledTick:
    """Handle for one recurring callback; `cancel()` guarantees it never fires again."""
    def __init__(
        self,
        scheduler: "TickScheduler",
        interval_seconds: float,
        callback: Callable[[], None],
        next_due: float,
    ):
        self._scheduler = scheduler
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.next_due = next_due
        self.cancelled = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._scheduler._discard(self)


class TickScheduler:
    """Single-threaded scheduler; callbacks only run inside `run_due()`."""

    def __init__(
        self,
        *,
        now_fn: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        self._now_fn = now_fn
        self._logger = logger or logging.getLogger("runtime.scheduler")
        self._ticks: list[ScheduledTick] = []

    @property
    def pending(self) -> int:
        return len(self._ticks)

    def call_every(
        self,
        interval_seconds: float,
        callback: Callable[[], None],
    ) -> ScheduledTick:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        tick = ScheduledTick(
            self,
            interval_seconds,
            callback,
            next_due=self._now_fn() + interval_seconds,
        )
        self._ticks.append(tick)
        return tick

    def run_due(self) -> int:
        """Fire every tick whose deadline has passed; returns the number fired."""
        now = self._now_fn()
        fired = 0
        for tick in tuple(self._ticks):
            # An earlier callback in this pass may have cancelled this tick.
            if tick.cancelled or tick.next_due > now:
                continue
            tick.next_due += tick.interval_seconds
            if tick.next_due <= now:
                tick.next_due = now + tick.interval_seconds
            fired += 1
            tick.callback()
        return fired

    def seconds_until_next(self) -> Optional[float]:
        if not self._ticks:
            return None
        soonest = min(tick.next_due for tick in self._ticks)
        return max(0.0, soonest - self._now_fn())

    def cancel_all(self) -> None:
        for tick in tuple(self._ticks):
            tick.cancel()

    def _discard(self, tick: ScheduledTick) -> None:
        try:
            self._ticks.remove(tick)
        except ValueError:
            self._logger.debug("Tick already removed from scheduler")
