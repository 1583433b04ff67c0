"""Persistent stores for docmap outputs."""

from .snapshots import SnapshotChanges, SnapshotStore, compare_snapshots

__all__ = ["SnapshotChanges", "SnapshotStore", "compare_snapshots"]
