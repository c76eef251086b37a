"""Domain layer definitions."""

from .sync import ImportOutcome, Snapshot, SyncStatus

__all__ = [
    "ImportOutcome",
    "Snapshot",
    "SyncStatus",
]
