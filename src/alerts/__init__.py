"""Interval completion alerts.

`alerts.bell` is imported on demand because sounddevice needs PortAudio.
"""

from .contracts import AlertError, EventPublisherLike, NotificationSink
from .sinks import CompositeNotifier, LoggingNotifier, UINotifier

__all__ = [
    "AlertError",
    "CompositeNotifier",
    "EventPublisherLike",
    "LoggingNotifier",
    "NotificationSink",
    "UINotifier",
]
