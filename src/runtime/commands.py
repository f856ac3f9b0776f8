"""User command values, parsers for console/websocket input, and the queue publisher."""

from __future__ import annotations

import json
import shlex
from dataclasses import dataclass
from queue import Queue
from typing import Any, Mapping, Protocol

from contracts.ui_protocol import (
    COMMAND_ADD_TASK,
    COMMAND_LIST_TASKS,
    COMMAND_REMOVE_TASK,
    COMMAND_TOGGLE_TASK,
)


class CommandParseError(Exception):
    """Raised when console or websocket input is not a valid command."""


@dataclass(frozen=True)
class AddTaskCommand:
    name: str


@dataclass(frozen=True)
class RemoveTaskCommand:
    task_id: str


@dataclass(frozen=True)
class ToggleTaskCommand:
    task_id: str


@dataclass(frozen=True)
class ListTasksCommand:
    pass


@dataclass(frozen=True)
class ShutdownCommand:
    """Stops the runtime loop (console `quit` or a process signal)."""
    reason: str = "requested"


Command = (
    AddTaskCommand
    | RemoveTaskCommand
    | ToggleTaskCommand
    | ListTasksCommand
    | ShutdownCommand
)


class CommandPublisher(Protocol):
    def publish(self, command: Command) -> None: ...


class QueueCommandPublisher:
    """Command publisher that pushes commands to the runtime queue."""

    def __init__(self, queue: Queue):
        self._queue = queue

    def publish(self, command: Command) -> None:
        self._queue.put(command)


_CONSOLE_ALIASES: dict[str, str] = {
    "add": COMMAND_ADD_TASK,
    "new": COMMAND_ADD_TASK,
    "remove": COMMAND_REMOVE_TASK,
    "rm": COMMAND_REMOVE_TASK,
    "delete": COMMAND_REMOVE_TASK,
    "toggle": COMMAND_TOGGLE_TASK,
    "t": COMMAND_TOGGLE_TASK,
    "list": COMMAND_LIST_TASKS,
    "ls": COMMAND_LIST_TASKS,
}
_QUIT_WORDS = frozenset({"quit", "exit"})


def parse_console_line(line: str) -> Command:
    """Parse `add <name>`, `remove <id>`, `toggle <id>`, `list`, or `quit`."""
    text = line.strip()
    if not text:
        raise CommandParseError("Empty command.")

    verb, _, rest = text.partition(" ")
    verb = verb.lower()
    rest = rest.strip()
    if verb in _QUIT_WORDS:
        return ShutdownCommand(reason="console")

    command = _CONSOLE_ALIASES.get(verb)
    if command is None:
        raise CommandParseError(f"Unknown command: {verb}")

    if command == COMMAND_ADD_TASK:
        return AddTaskCommand(name=rest)
    if command == COMMAND_LIST_TASKS:
        return ListTasksCommand()

    try:
        args = shlex.split(rest)
    except ValueError as error:
        raise CommandParseError(f"Invalid arguments: {error}") from error
    if len(args) != 1:
        raise CommandParseError(f"{verb} expects exactly one task id.")
    if command == COMMAND_REMOVE_TASK:
        return RemoveTaskCommand(task_id=args[0])
    return ToggleTaskCommand(task_id=args[0])


def parse_ws_message(message: str | bytes) -> Command:
    """Parse a websocket JSON command such as `{"command": "toggle_task", "task_id": "1"}`."""
    try:
        raw = json.loads(message)
    except (TypeError, ValueError) as error:
        raise CommandParseError(f"Command must be JSON: {error}") from error

    if not isinstance(raw, Mapping):
        raise CommandParseError("Command must be a JSON object.")

    name = raw.get("command")
    if name == COMMAND_ADD_TASK:
        return AddTaskCommand(name=_str_field(raw, "name"))
    if name == COMMAND_REMOVE_TASK:
        return RemoveTaskCommand(task_id=_id_field(raw))
    if name == COMMAND_TOGGLE_TASK:
        return ToggleTaskCommand(task_id=_id_field(raw))
    if name == COMMAND_LIST_TASKS:
        return ListTasksCommand()
    raise CommandParseError(f"Unsupported command: {name!r}")


def _str_field(raw: Mapping[str, Any], field: str) -> str:
    value = raw.get(field)
    if not isinstance(value, str):
        raise CommandParseError(f"{field} must be a string.")
    return value


def _id_field(raw: Mapping[str, Any]) -> str:
    value = raw.get("task_id")
    # Ids are numeric strings; accept bare JSON integers from simple clients.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise CommandParseError("task_id must be a non-empty string.")
