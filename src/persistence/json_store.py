"""JSON file snapshot store with atomic replacement on save."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from tasktimer import AppState

from .codec import decode_state, encode_state
from .errors import PersistenceError, SnapshotFormatError


class JsonFileStore:
    """Persists the full app state as one JSON document on disk."""

    def __init__(
        self,
        path: str | Path,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._path = Path(path).expanduser()
        self._logger = logger or logging.getLogger("persistence")

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[AppState]:
        if not self._path.exists():
            self._logger.info("No snapshot at %s; starting empty", self._path)
            return None

        try:
            raw_text = self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as error:
            raise SnapshotFormatError(
                f"Snapshot {self._path} is not valid UTF-8: {error}"
            ) from error
        except OSError as error:
            raise PersistenceError(f"Failed to read snapshot {self._path}: {error}") from error

        if not raw_text.strip():
            return None

        try:
            raw = json.loads(raw_text)
        except json.JSONDecodeError as error:
            raise SnapshotFormatError(
                f"Snapshot {self._path} is not valid JSON: {error}"
            ) from error

        state = decode_state(raw)
        self._logger.debug("Loaded %d tasks from %s", len(state.tasks), self._path)
        return state

    def save(self, state: AppState) -> None:
        payload = json.dumps(encode_state(state), indent=2, ensure_ascii=False)
        tmp_name: Optional[str] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as error:
            raise PersistenceError(f"Failed to write snapshot {self._path}: {error}") from error
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
