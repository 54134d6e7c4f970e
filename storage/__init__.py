from .snapshots import Snapshot, SnapshotNotFoundError, SnapshotStorageError, SnapshotStore

__all__ = [
    "Snapshot",
    "SnapshotNotFoundError",
    "SnapshotStorageError",
    "SnapshotStore",
]
