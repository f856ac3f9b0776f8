"""Versioned plain-dict encoding of `AppState` snapshots."""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from tasktimer import AppState, Interval, Task, active_interval, compute_elapsed
from tasktimer.constants import INTERVAL_KINDS

from .errors import SnapshotFormatError

SNAPSHOT_VERSION = 1


def encode_state(state: AppState) -> dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "tasks": [_encode_task(task) for task in state.tasks],
        "active_task_id": state.active_task_id,
    }


def decode_state(raw: Any) -> AppState:
    """Decode a snapshot mapping, rejecting unknown versions and broken shapes."""
    if not isinstance(raw, Mapping):
        raise SnapshotFormatError("Snapshot root must be an object.")

    version = raw.get("version")
    if version != SNAPSHOT_VERSION:
        raise SnapshotFormatError(f"Unsupported snapshot version: {version!r}")

    raw_tasks = raw.get("tasks", [])
    if not isinstance(raw_tasks, list):
        raise SnapshotFormatError("tasks must be a list.")

    tasks = tuple(_decode_task(item, index) for index, item in enumerate(raw_tasks))
    ids = [task.id for task in tasks]
    if len(set(ids)) != len(ids):
        raise SnapshotFormatError("Task ids must be unique.")

    active_task_id = _as_optional_str(raw.get("active_task_id"), "active_task_id")
    state = AppState(tasks=tasks, active_task_id=active_task_id)

    running = [task.id for task in tasks for interval in task.timers if interval.active]
    if active_task_id is None:
        if running:
            raise SnapshotFormatError("Active interval present without active_task_id.")
    elif active_interval(state) is None or running != [active_task_id]:
        raise SnapshotFormatError(
            f"active_task_id {active_task_id!r} has no single running interval."
        )
    return state


def _encode_task(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "name": task.name,
        "elapsed": task.elapsed,
        "timers": [
            {
                "start": interval.start,
                "finish": interval.finish,
                "active": interval.active,
                "kind": interval.kind,
            }
            for interval in task.timers
        ],
    }


def _decode_task(raw: Any, index: int) -> Task:
    field = f"tasks[{index}]"
    if not isinstance(raw, Mapping):
        raise SnapshotFormatError(f"{field} must be an object.")

    task_id = _as_optional_str(raw.get("id"), f"{field}.id")
    name = _as_optional_str(raw.get("name"), f"{field}.name")
    if not task_id or not name:
        raise SnapshotFormatError(f"{field} requires non-empty id and name.")

    raw_timers = raw.get("timers", [])
    if not isinstance(raw_timers, list):
        raise SnapshotFormatError(f"{field}.timers must be a list.")
    timers = tuple(
        _decode_interval(item, f"{field}.timers[{position}]")
        for position, item in enumerate(raw_timers)
    )
    if any(interval.active for interval in timers[:-1]):
        raise SnapshotFormatError(f"{field} has a running interval that is not the last one.")

    # elapsed is derived; the stored value is informational only.
    return Task(id=task_id, name=name, timers=timers, elapsed=compute_elapsed(timers))


def _decode_interval(raw: Any, field: str) -> Interval:
    if not isinstance(raw, Mapping):
        raise SnapshotFormatError(f"{field} must be an object.")

    kind = raw.get("kind")
    if kind not in INTERVAL_KINDS:
        raise SnapshotFormatError(f"{field}.kind must be one of {sorted(INTERVAL_KINDS)}.")

    start = _as_timestamp(raw.get("start"), f"{field}.start")
    if start is None:
        raise SnapshotFormatError(f"{field}.start is required.")
    finish = _as_timestamp(raw.get("finish"), f"{field}.finish")
    if finish is not None and finish < start:
        raise SnapshotFormatError(f"{field}.finish must not precede start.")

    active = raw.get("active", False)
    if not isinstance(active, bool):
        raise SnapshotFormatError(f"{field}.active must be a boolean.")
    if active == (finish is not None):
        raise SnapshotFormatError(f"{field} must be either running or finished.")

    return Interval(start=start, kind=kind, finish=finish, active=active)


def _as_timestamp(value: Any, field: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotFormatError(f"{field} must be a number.")
    if not math.isfinite(value):
        raise SnapshotFormatError(f"{field} must be finite.")
    return float(value)


def _as_optional_str(value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    raise SnapshotFormatError(f"{field} must be a string.")
