"""Immutable task, interval, and application state values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from .constants import (
    BREAK_KINDS,
    DEFAULT_LONG_BREAK_EVERY,
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_SHORT_BREAK_SECONDS,
    DEFAULT_WORK_SECONDS,
    KIND_LONG_BREAK,
    KIND_SHORT_BREAK,
    KIND_WORK,
)

IntervalKind = Literal["work", "short_break", "long_break"]


@dataclass(frozen=True)
class Interval:
    """One contiguous work or break span belonging to a task."""
    start: float
    kind: IntervalKind = KIND_WORK
    finish: Optional[float] = None
    active: bool = False

    @property
    def is_break(self) -> bool:
        return self.kind in BREAK_KINDS

    @property
    def is_closed(self) -> bool:
        return self.finish is not None

    def seconds(self) -> int:
        if self.finish is None:
            return 0
        return max(0, int(self.finish - self.start))


@dataclass(frozen=True)
class Task:
    """Named task with its chronological interval history."""
    id: str
    name: str
    timers: tuple[Interval, ...] = ()
    elapsed: int = 0

    @property
    def last_interval(self) -> Optional[Interval]:
        if not self.timers:
            return None
        return self.timers[-1]

    @property
    def open_interval(self) -> Optional[Interval]:
        last = self.last_interval
        if last is not None and last.active:
            return last
        return None


@dataclass(frozen=True)
class AppState:
    """Full timer state: tasks in display order plus the active task pointer."""
    tasks: tuple[Task, ...] = ()
    active_task_id: Optional[str] = None


@dataclass(frozen=True)
class TimerPolicy:
    """Interval durations and long-break cadence applied by the engine."""
    work_seconds: int = DEFAULT_WORK_SECONDS
    short_break_seconds: int = DEFAULT_SHORT_BREAK_SECONDS
    long_break_seconds: int = DEFAULT_LONG_BREAK_SECONDS
    long_break_every: int = DEFAULT_LONG_BREAK_EVERY

    def __post_init__(self) -> None:
        for name in ("work_seconds", "short_break_seconds", "long_break_seconds"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be greater than zero")
        if self.long_break_every <= 0:
            raise ValueError("long_break_every must be greater than zero")

    def duration_for(self, kind: str) -> int:
        if kind == KIND_WORK:
            return self.work_seconds
        if kind == KIND_SHORT_BREAK:
            return self.short_break_seconds
        if kind == KIND_LONG_BREAK:
            return self.long_break_seconds
        raise ValueError(f"Unknown interval kind: {kind}")
