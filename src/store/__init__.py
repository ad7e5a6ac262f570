"""Persistence layer for snapshot files."""

from store.disk import IOFailure, SnapshotStore

__all__ = ["IOFailure", "SnapshotStore"]
