"""Controller event handlers that publish countdown, task, and completion updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from contracts.ui_protocol import REASON_PERSISTENCE_FAILURE
from persistence import PersistenceError
from tasktimer import AppState

from .controller import Countdown, IntervalCompleted, TimerController
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for publishing controller events."""
    controller: TimerController
    logger: logging.Logger
    ui: RuntimeUIPublisher


class TickProcessor:
    """Turns controller callbacks into UI events."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies
        self._last_countdown: Optional[Countdown] = None
        self._last_tasks: Optional[tuple[Any, ...]] = None

    def attach(self) -> None:
        controller = self._dependencies.controller
        controller.set_on_tick(self.handle_tick)
        controller.set_on_state_change(self.handle_state_change)
        controller.set_on_interval_complete(self.handle_interval_complete)
        controller.set_on_persistence_failure(self.handle_persistence_failure)

    def publish_snapshot(self) -> None:
        deps = self._dependencies
        self._publish_tasks(force=True)
        deps.ui.publish_countdown(deps.controller.countdown)
        self._last_countdown = deps.controller.countdown

    def handle_tick(self, countdown: Countdown) -> None:
        if countdown != self._last_countdown:
            self._last_countdown = countdown
            self._dependencies.ui.publish_countdown(countdown)
        # Live elapsed text and the title move with the running interval.
        self._publish_tasks()

    def handle_state_change(self, state: AppState) -> None:
        del state  # Views are rebuilt from the controller.
        self._publish_tasks()

    def handle_interval_complete(self, event: IntervalCompleted) -> None:
        # The task list was already republished by the state change that closed it.
        self._dependencies.ui.publish_interval_complete(event)

    def handle_persistence_failure(self, error: PersistenceError) -> None:
        deps = self._dependencies
        deps.logger.error("State not saved: %s", error)
        deps.ui.publish_error(REASON_PERSISTENCE_FAILURE, f"State not saved: {error}")

    def _publish_tasks(self, *, force: bool = False) -> None:
        controller = self._dependencies.controller
        views = tuple(controller.task_views())
        active_task_id = controller.state.active_task_id
        title = controller.title()
        key = (views, active_task_id, title)
        if not force and key == self._last_tasks:
            return
        self._last_tasks = key
        self._dependencies.ui.publish_tasks(
            views,
            active_task_id=active_task_id,
            title=title,
        )
