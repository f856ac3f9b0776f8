"""Break cadence: decide the kind of the next interval from a task's history."""

from __future__ import annotations

from typing import Sequence

from .constants import KIND_LONG_BREAK, KIND_SHORT_BREAK, KIND_WORK
from .models import Interval, IntervalKind


def next_interval_kind(
    timers: Sequence[Interval],
    *,
    long_break_every: int,
) -> IntervalKind:
    """Classify the interval that would start next for this history.

    A break only ever follows a work interval. Once `long_break_every` short
    breaks have happened since the most recent long break (or since the
    first interval), the next break is a long one.
    """
    if not timers:
        return KIND_WORK

    if timers[-1].is_break:
        return KIND_WORK

    if short_breaks_since_long_break(timers) >= long_break_every:
        return KIND_LONG_BREAK
    return KIND_SHORT_BREAK


def short_breaks_since_long_break(timers: Sequence[Interval]) -> int:
    count = 0
    for interval in reversed(timers):
        if interval.kind == KIND_LONG_BREAK:
            break
        if interval.kind == KIND_SHORT_BREAK:
            count += 1
    return count
