"""Persistence layer for snapshots and published stats."""

from .snapshots import (
    CreateResult,
    RedisSnapshotStore,
    SnapshotPage,
    SnapshotStore,
)

__all__ = ["CreateResult", "RedisSnapshotStore", "SnapshotPage", "SnapshotStore"]
