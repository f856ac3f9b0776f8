"""Interval kinds, timing defaults, and display labels used by the task timer."""

from __future__ import annotations

KIND_WORK = "work"
KIND_SHORT_BREAK = "short_break"
KIND_LONG_BREAK = "long_break"

BREAK_KINDS: frozenset[str] = frozenset({KIND_SHORT_BREAK, KIND_LONG_BREAK})
INTERVAL_KINDS: frozenset[str] = frozenset({KIND_WORK, *BREAK_KINDS})

DEFAULT_WORK_SECONDS = 25 * 60
DEFAULT_SHORT_BREAK_SECONDS = 5 * 60
DEFAULT_LONG_BREAK_SECONDS = 30 * 60
DEFAULT_LONG_BREAK_EVERY = 4

MAX_TASK_NAME_LENGTH = 200

NOT_STARTED_TEXT = "Not started"
IDLE_TITLE = "taskspill"

KIND_LABELS: dict[str, str] = {
    KIND_WORK: "Work",
    KIND_SHORT_BREAK: "Short break",
    KIND_LONG_BREAK: "Long break",
}
