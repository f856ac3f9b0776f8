"""Protocol describing the snapshot store used by the timer controller."""

from __future__ import annotations

from typing import Optional, Protocol

from tasktimer import AppState


class PersistenceStore(Protocol):
    """Loads and saves full `AppState` snapshots; failures raise `PersistenceError`."""
    def load(self) -> Optional[AppState]:
        ...

    def save(self, state: AppState) -> None:
        ...
