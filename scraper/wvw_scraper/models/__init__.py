"""Typed models shared across the snapshot pipeline."""

from .schemas import (
    TEAM_COLORS,
    LiveMatchesRecord,
    MatchHistoryRecord,
    MatchMetrics,
    PrimeTimeStatsRecord,
    Snapshot,
    StoredRecord,
    TeamColor,
    TeamMetrics,
    TeamSnapshot,
    TeamStats,
    WindowStats,
    dump_record,
    parse_record,
)

__all__ = [
    "TEAM_COLORS",
    "TeamColor",
    "TeamMetrics",
    "TeamSnapshot",
    "MatchMetrics",
    "Snapshot",
    "TeamStats",
    "WindowStats",
    "MatchHistoryRecord",
    "LiveMatchesRecord",
    "PrimeTimeStatsRecord",
    "StoredRecord",
    "parse_record",
    "dump_record",
]
