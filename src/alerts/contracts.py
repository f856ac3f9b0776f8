"""Notification sink contracts for interval completion alerts."""

from __future__ import annotations

from typing import Any, Protocol


class AlertError(Exception):
    """Raised when a notification sink fails to deliver an alert."""


class NotificationSink(Protocol):
    """Fire-and-forget alert target; callers never depend on delivery."""
    def notify(self, title: str, body: str) -> None:
        ...


class EventPublisherLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...
