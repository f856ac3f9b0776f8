"""Logging, UI-event, and fan-out notification sinks."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from contracts.ui_protocol import EVENT_NOTIFICATION

from .contracts import EventPublisherLike, NotificationSink


class LoggingNotifier:
    """Writes alerts to the application log."""
    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("alerts")

    def notify(self, title: str, body: str) -> None:
        self._logger.info("%s: %s", title, body)


class UINotifier:
    """Publishes alerts as websocket notification events."""
    def __init__(self, publisher: EventPublisherLike):
        self._publisher = publisher

    def notify(self, title: str, body: str) -> None:
        self._publisher.publish(EVENT_NOTIFICATION, title=title, body=body)


class CompositeNotifier:
    """Delivers each alert to every sink; one failing sink never blocks the rest."""
    def __init__(
        self,
        sinks: Iterable[NotificationSink],
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._sinks = list(sinks)
        self._logger = logger or logging.getLogger("alerts")

    def notify(self, title: str, body: str) -> None:
        for sink in self._sinks:
            try:
                sink.notify(title, body)
            except Exception as error:
                self._logger.warning(
                    "Notification sink %s failed: %s",
                    type(sink).__name__,
                    error,
                )
