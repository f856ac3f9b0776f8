from .cadence import next_interval_kind
from .display import format_countdown, format_elapsed, split_countdown
from .engine import (
    TaskTimerEngine,
    active_interval,
    close_open_interval,
    compute_elapsed,
    find_task,
)
from .errors import InvalidTaskNameError, TaskNotFoundError, TimerEngineError
from .models import AppState, Interval, IntervalKind, Task, TimerPolicy

__all__ = [
    "AppState",
    "Interval",
    "IntervalKind",
    "InvalidTaskNameError",
    "Task",
    "TaskNotFoundError",
    "TaskTimerEngine",
    "TimerEngineError",
    "TimerPolicy",
    "active_interval",
    "close_open_interval",
    "compute_elapsed",
    "find_task",
    "format_countdown",
    "format_elapsed",
    "next_interval_kind",
    "split_countdown",
]
