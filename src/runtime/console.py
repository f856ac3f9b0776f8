"""Line-oriented stdin command source running on a daemon thread."""

from __future__ import annotations

import logging
import sys
import threading
from typing import Optional, TextIO

from .commands import CommandParseError, CommandPublisher, parse_console_line

CONSOLE_HELP = "Commands: add <name> | toggle <id> | remove <id> | list | quit"


class ConsoleCommandSource:
    """Reads commands from a text stream and publishes them to the runtime queue."""

    def __init__(
        self,
        publisher: CommandPublisher,
        *,
        stream: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._publisher = publisher
        self._stream = stream if stream is not None else sys.stdin
        self._logger = logger or logging.getLogger("runtime.console")
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            self._logger.warning("Console command source is already running")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run,
            daemon=True,
            name="console-commands",
        )
        self._thread.start()
        self._logger.info(CONSOLE_HELP)

    def stop(self) -> None:
        # Blocking readline() cannot be interrupted; the daemon thread exits with the process.
        self._stop_event.set()
        self._thread = None

    def run(self) -> None:
        for line in self._stream:
            if self._stop_event.is_set():
                return
            if not line.strip():
                continue
            try:
                command = parse_console_line(line)
            except CommandParseError as error:
                self._logger.warning("%s (%s)", error, CONSOLE_HELP)
                continue
            self._publisher.publish(command)
        self._logger.debug("Console input closed")
