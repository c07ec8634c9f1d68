"""Celery tasks re-exported for discovery."""

from __future__ import annotations

from .capture_tasks import capture_match_snapshots_task

__all__ = [
    "capture_match_snapshots_task",
]
