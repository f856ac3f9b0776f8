class PersistenceError(Exception):
    """Base exception for snapshot load/save failures."""


class SnapshotFormatError(PersistenceError):
    """Raised when a stored snapshot cannot be decoded into app state."""
