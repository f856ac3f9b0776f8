"""Web UI websocket event, command, and state constants."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_TASKS = "tasks"
EVENT_COUNTDOWN = "countdown"
EVENT_INTERVAL_COMPLETE = "interval_complete"
EVENT_NOTIFICATION = "notification"
EVENT_ERROR = "error"

# Inbound websocket commands
COMMAND_ADD_TASK = "add_task"
COMMAND_REMOVE_TASK = "remove_task"
COMMAND_TOGGLE_TASK = "toggle_task"
COMMAND_LIST_TASKS = "list_tasks"

# Error reasons published with EVENT_ERROR
REASON_NOT_FOUND = "not_found"
REASON_INVALID_INPUT = "invalid_input"
REASON_INVALID_COMMAND = "invalid_command"
REASON_PERSISTENCE_FAILURE = "persistence_failure"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_TASKS,
        EVENT_COUNTDOWN,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_TASKS,
    EVENT_COUNTDOWN,
    EVENT_ERROR,
)
