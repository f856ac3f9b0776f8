"""Runtime orchestration loop: command queue, countdown ticks, and shutdown."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, Callable, Optional

from contracts.ui_protocol import REASON_INVALID_INPUT, REASON_NOT_FOUND
from tasktimer import InvalidTaskNameError, TaskNotFoundError

from .commands import (
    AddTaskCommand,
    ListTasksCommand,
    RemoveTaskCommand,
    ShutdownCommand,
    ToggleTaskCommand,
)
from .console import ConsoleCommandSource
from .controller import TimerController
from .scheduler import TickScheduler
from .ticks import TickDependencies, TickProcessor
from .ui import RuntimeUIPublisher, UIServerLike

_MAX_POLL_SECONDS = 0.25


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup."""
    setup_signal_handlers: Callable[[Callable[[], None]], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    controller: TimerController
    scheduler: TickScheduler
    command_queue: Queue[Any]
    ui_server: Optional[UIServerLike]
    console: Optional[ConsoleCommandSource]
    hooks: RuntimeHooks


class RuntimeEngine:
    """Main loop: every state mutation happens here, on one thread."""
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._controller = bootstrap.controller
        self._scheduler = bootstrap.scheduler
        self._queue = bootstrap.command_queue

        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._tick_processor = TickProcessor(
            TickDependencies(
                controller=self._controller,
                logger=self._logger,
                ui=self._ui,
            )
        )
        self._tick_processor.attach()

    def request_stop(self) -> None:
        """Thread-safe stop request; handled on the loop thread."""
        self._queue.put(ShutdownCommand(reason="signal"))

    def run(self) -> int:
        self._tick_processor.publish_snapshot()

        try:
            self._bootstrap.hooks.setup_signal_handlers(self.request_stop)

            console = self._bootstrap.console
            if console is not None:
                console.start()

            self._logger.info(
                "Ready with %d tasks (%s)",
                len(self._controller.state.tasks),
                self._controller.title(),
            )

            while True:
                self._scheduler.run_due()

                command = self._poll_command()
                if command is None:
                    continue

                exit_code = self.handle_command(command)
                if exit_code is not None:
                    return exit_code

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def handle_command(self, command: Any) -> Optional[int]:
        """Apply one queued command; returns an exit code when the loop should stop."""
        if isinstance(command, ShutdownCommand):
            self._logger.info("Shutdown requested (%s)", command.reason)
            return 0

        try:
            if isinstance(command, AddTaskCommand):
                self._controller.add_task(command.name)
                self._clear_stale_error()
            elif isinstance(command, RemoveTaskCommand):
                self._controller.remove_task(command.task_id)
                self._clear_stale_error()
            elif isinstance(command, ToggleTaskCommand):
                self._controller.toggle_task(command.task_id)
                self._clear_stale_error()
            elif isinstance(command, ListTasksCommand):
                self._log_tasks()
                self._tick_processor.publish_snapshot()
            else:
                self._logger.warning("Ignoring unknown command type: %s", type(command).__name__)
        except TaskNotFoundError as error:
            self._logger.warning("Command rejected: %s", error)
            self._ui.publish_error(REASON_NOT_FOUND, str(error))
        except InvalidTaskNameError as error:
            self._logger.warning("Command rejected: %s", error)
            self._ui.publish_error(REASON_INVALID_INPUT, str(error))
        return None

    def _clear_stale_error(self) -> None:
        if self._controller.last_persistence_error is None:
            self._ui.clear_error()

    def _poll_command(self) -> Optional[Any]:
        timeout = _MAX_POLL_SECONDS
        until_tick = self._scheduler.seconds_until_next()
        if until_tick is not None:
            timeout = min(timeout, until_tick)
        try:
            return self._queue.get(timeout=timeout)
        except Empty:
            return None

    def _log_tasks(self) -> None:
        views = self._controller.task_views()
        if not views:
            self._logger.info("No tasks yet.")
            return
        for view in views:
            marker = f" <- {self._controller.countdown_text()}" if view.active else ""
            self._logger.info("%s  %s  [%s]%s", view.id, view.name, view.elapsed_text, marker)

    def _shutdown(self) -> None:
        console = self._bootstrap.console
        if console is not None:
            console.stop()

        self._controller.close()
        self._scheduler.cancel_all()

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
