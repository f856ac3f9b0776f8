from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from contracts.ui_protocol import (
    EVENT_COUNTDOWN,
    EVENT_ERROR,
    EVENT_INTERVAL_COMPLETE,
    EVENT_TASKS,
)

from .controller import Countdown, IntervalCompleted, TaskView


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def forget(self, event_type: str) -> None:
        ...

    def stop(self, timeout_seconds: float = 5.0) -> None:
        ...


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_tasks(
        self,
        views: Sequence[TaskView],
        *,
        active_task_id: Optional[str],
        title: str,
    ) -> None:
        self.publish(
            EVENT_TASKS,
            title=title,
            active_task_id=active_task_id,
            tasks=[
                {
                    "id": view.id,
                    "name": view.name,
                    "elapsed_seconds": view.elapsed_seconds,
                    "elapsed": view.elapsed_text,
                    "active": view.active,
                    "history": [
                        {"kind": kind, "active": active} for kind, active in view.history
                    ],
                }
                for view in views
            ],
        )

    def publish_countdown(self, countdown: Countdown) -> None:
        self.publish(
            EVENT_COUNTDOWN,
            minutes=countdown.minutes,
            seconds=countdown.seconds,
            text=countdown.text,
            task_id=countdown.task_id,
            kind=countdown.kind,
        )

    def publish_interval_complete(self, event: IntervalCompleted) -> None:
        self.publish(
            EVENT_INTERVAL_COMPLETE,
            task_id=event.task_id,
            task_name=event.task_name,
            kind=event.kind,
            next_kind=event.next_kind,
            finished_at=event.finished_at,
            title=event.title,
            body=event.body,
        )

    def publish_error(self, reason: str, message: str) -> None:
        self.publish(EVENT_ERROR, reason=reason, message=message)

    def clear_error(self) -> None:
        if self._ui_server:
            self._ui_server.forget(EVENT_ERROR)
