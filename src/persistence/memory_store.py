"""In-process snapshot store used when on-disk storage is disabled."""

from __future__ import annotations

from typing import Any, Optional

from tasktimer import AppState

from .codec import decode_state, encode_state


class MemoryStore:
    """Keeps the last encoded snapshot in memory, round-tripping through the codec."""

    def __init__(self, initial: Optional[AppState] = None):
        self._snapshot: Optional[dict[str, Any]] = None
        self.save_count = 0
        if initial is not None:
            self._snapshot = encode_state(initial)

    def load(self) -> Optional[AppState]:
        if self._snapshot is None:
            return None
        return decode_state(self._snapshot)

    def save(self, state: AppState) -> None:
        self._snapshot = encode_state(state)
        self.save_count += 1
