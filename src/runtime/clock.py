"""Wall-clock source injected into the timer controller."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        ...


class SystemClock:
    """Epoch seconds from `time.time()`."""
    def now(self) -> float:
        return time.time()
