"""Human readable countdown and elapsed-time text."""

from __future__ import annotations

import math

from .constants import NOT_STARTED_TEXT

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR

_UNITS: tuple[tuple[str, int], ...] = (
    ("day", _DAY),
    ("hour", _HOUR),
    ("minute", _MINUTE),
    ("second", 1),
)


def split_countdown(remaining_seconds: float) -> tuple[int, int]:
    """Split remaining seconds (rounded up) into `(minutes, seconds)`."""
    total = max(0, int(math.ceil(remaining_seconds)))
    return divmod(total, 60)


def format_countdown(minutes: int, seconds: int) -> str:
    """Format a countdown as `MM:SS`."""
    return f"{max(0, minutes):02d}:{max(0, seconds):02d}"


def format_elapsed(seconds: float) -> str:
    """Render elapsed seconds as a strict single-unit distance.

    Zero renders as the "Not started" sentinel; otherwise the largest unit
    that fits is used and the value is rounded half up, e.g. `"25 minutes"`.
    """
    total = int(seconds)
    if total <= 0:
        return NOT_STARTED_TEXT

    for unit, size in _UNITS:
        if total >= size:
            value = math.floor(total / size + 0.5)
            return f"{value} {unit}" if value == 1 else f"{value} {unit}s"
    return NOT_STARTED_TEXT
