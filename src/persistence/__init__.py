"""Snapshot persistence for task timer state."""

from .codec import SNAPSHOT_VERSION, decode_state, encode_state
from .contracts import PersistenceStore
from .errors import PersistenceError, SnapshotFormatError
from .json_store import JsonFileStore
from .memory_store import MemoryStore

__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "PersistenceError",
    "PersistenceStore",
    "SNAPSHOT_VERSION",
    "SnapshotFormatError",
    "decode_state",
    "encode_state",
]
