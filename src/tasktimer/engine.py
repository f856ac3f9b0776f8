"""Pure task timer state machine: add, remove, and toggle over immutable state."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from .cadence import next_interval_kind
from .constants import KIND_WORK, MAX_TASK_NAME_LENGTH
from .errors import InvalidTaskNameError, TaskNotFoundError
from .models import AppState, Interval, Task, TimerPolicy


class TaskTimerEngine:
    """Deterministic transitions over `AppState`; every call takes an explicit `now`."""

    def __init__(
        self,
        policy: Optional[TimerPolicy] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._policy = policy or TimerPolicy()
        self._logger = logger or logging.getLogger("tasktimer")

    @property
    def policy(self) -> TimerPolicy:
        return self._policy

    def add_task(self, state: AppState, name: str, now: float) -> AppState:
        task_name = _sanitize_task_name(name)
        if not task_name:
            raise InvalidTaskNameError("Task name must not be empty")

        task = Task(id=_fresh_task_id(state.tasks, now), name=task_name)
        self._logger.debug("Task added: id=%s name=%s", task.id, task.name)
        return replace(state, tasks=(task, *state.tasks))

    def remove_task(self, state: AppState, task_id: str) -> AppState:
        find_task(state, task_id)

        tasks = tuple(task for task in state.tasks if task.id != task_id)
        active_task_id = state.active_task_id
        if active_task_id == task_id:
            active_task_id = None
        self._logger.debug("Task removed: id=%s", task_id)
        return AppState(tasks=tasks, active_task_id=active_task_id)

    def toggle_timer(self, state: AppState, task_id: str, now: float) -> AppState:
        target = find_task(state, task_id)
        was_active = state.active_task_id == task_id

        others: list[Task] = []
        for task in state.tasks:
            if task.id == task_id:
                continue
            if task.id == state.active_task_id:
                task = close_open_interval(task, now)
                self._logger.debug("Closed interval of previously active task %s", task.id)
            others.append(task)

        if was_active:
            target = close_open_interval(target, now)
            active_task_id = None
            self._logger.debug("Task paused: id=%s elapsed=%ss", target.id, target.elapsed)
        else:
            kind = next_interval_kind(
                target.timers,
                long_break_every=self._policy.long_break_every,
            )
            interval = Interval(start=now, kind=kind, active=True)
            target = replace(target, timers=(*target.timers, interval))
            active_task_id = target.id
            self._logger.debug("Task started: id=%s kind=%s", target.id, kind)

        return AppState(tasks=(target, *others), active_task_id=active_task_id)

    def duration_for(self, interval: Interval) -> int:
        return self._policy.duration_for(interval.kind)


def find_task(state: AppState, task_id: str) -> Task:
    for task in state.tasks:
        if task.id == task_id:
            return task
    raise TaskNotFoundError(task_id)


def active_interval(state: AppState) -> Optional[tuple[Task, Interval]]:
    """Return the active task and its running interval, if any."""
    if state.active_task_id is None:
        return None
    for task in state.tasks:
        if task.id == state.active_task_id:
            interval = task.open_interval
            if interval is None:
                return None
            return task, interval
    return None


def close_open_interval(task: Task, now: float) -> Task:
    """Finish the task's running interval and recompute its elapsed work."""
    timers = tuple(
        replace(interval, finish=now, active=False) if interval.active else interval
        for interval in task.timers
    )
    return replace(task, timers=timers, elapsed=compute_elapsed(timers))


def compute_elapsed(timers: Iterable[Interval]) -> int:
    return sum(
        interval.seconds()
        for interval in timers
        if interval.kind == KIND_WORK and interval.is_closed
    )


def _fresh_task_id(tasks: Iterable[Task], now: float) -> str:
    taken = {task.id for task in tasks}
    candidate = int(now * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def _sanitize_task_name(name: str) -> str:
    compact = " ".join((name or "").split())
    return compact[:MAX_TASK_NAME_LENGTH]
