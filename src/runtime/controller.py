"""Real-time wrapper around the task timer engine: countdown, expiry, persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from alerts import NotificationSink
from persistence import PersistenceError, PersistenceStore
from tasktimer import (
    AppState,
    Task,
    TaskTimerEngine,
    active_interval,
    find_task,
    format_countdown,
    format_elapsed,
    next_interval_kind,
    split_countdown,
)
from tasktimer.constants import IDLE_TITLE, KIND_LABELS, KIND_WORK

from .clock import Clock
from .scheduler import ScheduledTick, TickScheduler


@dataclass(frozen=True)
class ControllerDependencies:
    """Collaborators required by the timer controller."""
    engine: TaskTimerEngine
    store: PersistenceStore
    clock: Clock
    scheduler: TickScheduler
    notifier: Optional[NotificationSink] = None
    logger: Optional[logging.Logger] = None
    tick_seconds: float = 1.0


@dataclass(frozen=True)
class Countdown:
    """Display values for the running interval; zero when nothing runs."""
    minutes: int = 0
    seconds: int = 0
    task_id: Optional[str] = None
    kind: Optional[str] = None

    @property
    def text(self) -> str:
        return format_countdown(self.minutes, self.seconds)


@dataclass(frozen=True)
class IntervalCompleted:
    """Emitted when the running interval reaches its configured duration."""
    task_id: str
    task_name: str
    kind: str
    finished_at: float
    next_kind: str

    @property
    def title(self) -> str:
        return f"{KIND_LABELS[self.kind]} finished"

    @property
    def body(self) -> str:
        return f"{self.task_name}: next up is {KIND_LABELS[self.next_kind].lower()}."


@dataclass(frozen=True)
class TaskView:
    """Render-ready summary of one task for UI publishers."""
    id: str
    name: str
    elapsed_seconds: int
    elapsed_text: str
    active: bool
    history: tuple[tuple[str, bool], ...]


class TimerController:
    """Holds the latest `AppState` and drives the single recurring countdown tick."""

    def __init__(self, dependencies: ControllerDependencies):
        self._deps = dependencies
        self._engine = dependencies.engine
        self._clock = dependencies.clock
        self._logger = dependencies.logger or logging.getLogger("runtime.controller")

        self._tick: Optional[ScheduledTick] = None
        self._armed_for: Optional[tuple[str, float]] = None
        self._countdown = Countdown()
        self.last_persistence_error: Optional[PersistenceError] = None

        self._on_tick: Optional[Callable[[Countdown], None]] = None
        self._on_state_change: Optional[Callable[[AppState], None]] = None
        self._on_interval_complete: Optional[Callable[[IntervalCompleted], None]] = None
        self._on_persistence_failure: Optional[Callable[[PersistenceError], None]] = None

        self._state = self._load_initial_state()
        self._sync_tick()
        self._refresh_countdown(self._clock.now())

    # ----- Callbacks -----
    def set_on_tick(self, fn: Callable[[Countdown], None]) -> None:
        self._on_tick = fn

    def set_on_state_change(self, fn: Callable[[AppState], None]) -> None:
        self._on_state_change = fn

    def set_on_interval_complete(self, fn: Callable[[IntervalCompleted], None]) -> None:
        self._on_interval_complete = fn

    def set_on_persistence_failure(self, fn: Callable[[PersistenceError], None]) -> None:
        self._on_persistence_failure = fn

    # ----- Public API -----
    @property
    def state(self) -> AppState:
        return self._state

    @property
    def countdown(self) -> Countdown:
        return self._countdown

    @property
    def is_ticking(self) -> bool:
        return self._tick is not None and not self._tick.cancelled

    def add_task(self, name: str) -> AppState:
        state = self._engine.add_task(self._state, name, self._clock.now())
        self._logger.info("Task added: %s", state.tasks[0].name)
        return self._apply(state)

    def remove_task(self, task_id: str) -> AppState:
        state = self._engine.remove_task(self._state, task_id)
        self._logger.info("Task removed: %s", task_id)
        return self._apply(state)

    def toggle_task(self, task_id: str) -> AppState:
        state = self._engine.toggle_timer(self._state, task_id, self._clock.now())
        if state.active_task_id == task_id:
            current = active_interval(state)
            kind = current[1].kind if current else KIND_WORK
            self._logger.info("Task started: id=%s kind=%s", task_id, kind)
        else:
            self._logger.info("Task paused: id=%s", task_id)
        return self._apply(state)

    def tick(self) -> Countdown:
        """Advance the countdown; closes the interval once its duration has elapsed."""
        now = self._clock.now()
        current = active_interval(self._state)
        if current is None:
            self._sync_tick()
            return self._set_countdown(Countdown())

        task, interval = current
        remaining = self._engine.duration_for(interval) - (now - interval.start)
        if remaining > 0:
            return self._set_countdown(self._countdown_for(task.id, interval.kind, remaining))

        state = self._engine.toggle_timer(self._state, task.id, now)
        self._apply(state)
        updated = find_task(state, task.id)
        event = IntervalCompleted(
            task_id=task.id,
            task_name=task.name,
            kind=interval.kind,
            finished_at=now,
            next_kind=next_interval_kind(
                updated.timers,
                long_break_every=self._engine.policy.long_break_every,
            ),
        )
        self._logger.info(
            "Interval completed: task=%s kind=%s next=%s",
            task.id,
            event.kind,
            event.next_kind,
        )
        self._notify(event)
        if self._on_interval_complete:
            self._on_interval_complete(event)
        return self._countdown

    def elapsed_seconds(self, task: Task) -> int:
        total = task.elapsed
        # Only a running work interval adds live time; running breaks are excluded.
        current = active_interval(self._state)
        if current is not None and current[0].id == task.id and current[1].kind == KIND_WORK:
            total += max(0, int(self._clock.now() - current[1].start))
        return total

    def elapsed_display(self, task: Task) -> str:
        return format_elapsed(self.elapsed_seconds(task))

    def countdown_text(self) -> str:
        return self._countdown.text

    def title(self) -> str:
        current = active_interval(self._state)
        if current is None:
            return IDLE_TITLE
        return f"{self._countdown.text} | {current[0].name}"

    def task_views(self) -> list[TaskView]:
        return [
            TaskView(
                id=task.id,
                name=task.name,
                elapsed_seconds=self.elapsed_seconds(task),
                elapsed_text=self.elapsed_display(task),
                active=task.id == self._state.active_task_id,
                history=tuple((interval.kind, interval.active) for interval in task.timers),
            )
            for task in self._state.tasks
        ]

    def close(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
        self._tick = None
        self._armed_for = None

    # ----- Internals -----
    def _load_initial_state(self) -> AppState:
        try:
            loaded = self._deps.store.load()
        except PersistenceError as error:
            self._logger.warning("Stored snapshot unusable, starting empty: %s", error)
            return AppState()
        if loaded is None:
            return AppState()
        self._logger.info("Restored %d tasks", len(loaded.tasks))
        return loaded

    def _apply(self, state: AppState) -> AppState:
        self._state = state
        self._persist(state)
        self._sync_tick()
        self._refresh_countdown(self._clock.now())
        if self._on_state_change:
            self._on_state_change(state)
        return state

    def _persist(self, state: AppState) -> None:
        try:
            self._deps.store.save(state)
        except PersistenceError as error:
            self.last_persistence_error = error
            self._logger.warning("Failed to persist state: %s", error)
            if self._on_persistence_failure:
                self._on_persistence_failure(error)
            return
        self.last_persistence_error = None

    def _sync_tick(self) -> None:
        current = active_interval(self._state)
        key = (current[0].id, current[1].start) if current else None
        if key == self._armed_for and (key is None or self.is_ticking):
            return

        if self._tick is not None:
            self._tick.cancel()
            self._tick = None
        self._armed_for = key
        if key is not None:
            self._tick = self._deps.scheduler.call_every(self._deps.tick_seconds, self.tick)
            self._logger.debug("Countdown armed for task %s", key[0])

    def _refresh_countdown(self, now: float) -> None:
        current = active_interval(self._state)
        if current is None:
            self._set_countdown(Countdown())
            return
        task, interval = current
        remaining = self._engine.duration_for(interval) - (now - interval.start)
        self._set_countdown(self._countdown_for(task.id, interval.kind, remaining))

    def _set_countdown(self, countdown: Countdown) -> Countdown:
        self._countdown = countdown
        if self._on_tick:
            self._on_tick(countdown)
        return countdown

    @staticmethod
    def _countdown_for(task_id: str, kind: str, remaining: float) -> Countdown:
        minutes, seconds = split_countdown(remaining)
        return Countdown(minutes=minutes, seconds=seconds, task_id=task_id, kind=kind)

    def _notify(self, event: IntervalCompleted) -> None:
        notifier = self._deps.notifier
        if notifier is None:
            return
        try:
            notifier.notify(event.title, event.body)
        except Exception as error:
            self._logger.warning("Completion notification failed: %s", error)
