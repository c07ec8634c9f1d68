"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Ensure the scraper package and test factories are importable
REPO_ROOT = Path(__file__).resolve().parents[2]
SCRAPER_ROOT = REPO_ROOT / "scraper"
if str(SCRAPER_ROOT) not in sys.path:
    sys.path.insert(0, str(SCRAPER_ROOT))
TESTS_ROOT = Path(__file__).resolve().parent
if str(TESTS_ROOT) not in sys.path:
    sys.path.insert(0, str(TESTS_ROOT))

# Set required environment variables before any imports
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("ENVIRONMENT", "development")

from factories import InMemorySnapshotStore  # noqa: E402


@pytest.fixture
def memory_store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def raw_match():
    """A raw /v2/wvw/matches entry."""
    return {
        "id": "1-2",
        "start_time": "2025-01-17T02:00:00Z",
        "end_time": "2025-01-24T02:00:00Z",
        "worlds": {"red": 1008, "blue": 1017, "green": 1003},
        "kills": {"red": 1200, "blue": 900, "green": 300},
        "deaths": {"red": 600, "blue": 900, "green": 0},
        "victory_points": {"red": 250, "blue": 200, "green": 150},
        "skirmishes": [
            {"id": 1, "scores": {"red": 300, "blue": 200, "green": 100}},
            {"id": 2, "scores": {"red": 250, "blue": 280, "green": 120}},
        ],
    }
