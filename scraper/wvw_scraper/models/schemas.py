"""Pydantic models for match metrics, snapshots, window stats and stored records.

Stored records form a tagged union on ``kind`` so a malformed or unexpected
record fails validation at the deserialization boundary instead of leaking
missing values into delta arithmetic.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from ..utils.datetime_utils import to_utc_datetime

TeamColor = Literal["red", "blue", "green"]
TEAM_COLORS: tuple[TeamColor, ...] = ("red", "blue", "green")
METRIC_FIELDS = ("kills", "deaths", "victory_points", "total_score")

RecordKind = Literal["match-history", "matches", "prime-time-stats"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TeamMetrics(CamelModel):
    """Cumulative-since-match-start counters for one team."""

    kills: int = 0
    deaths: int = 0
    victory_points: int = 0
    total_score: int = 0


class TeamSnapshot(TeamMetrics):
    skirmish_score: int = 0
    ratio: float = 0.0
    activity: int = 0
    world_id: int = 0
    world_name: str = ""
    world_population: str = "Unknown"


class MatchMetrics(CamelModel):
    id: str
    region: str | None = None
    tier: int | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    red: TeamSnapshot = Field(default_factory=TeamSnapshot)
    blue: TeamSnapshot = Field(default_factory=TeamSnapshot)
    green: TeamSnapshot = Field(default_factory=TeamSnapshot)

    def team(self, color: TeamColor) -> TeamSnapshot:
        return getattr(self, color)


class Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    per_match: dict[str, MatchMetrics]


class TeamStats(CamelModel):
    kills: int = 0
    deaths: int = 0
    kd_ratio: str = "0.00"
    victory_points: int = 0
    score: int = 0


class WindowStats(CamelModel):
    window_id: str
    window_name: str
    per_team: dict[TeamColor, TeamStats]
    data_points: int
    duration_hours: float


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------
class MatchHistoryRecord(CamelModel):
    """One immutable snapshot of a match family, written once per interval."""

    kind: Literal["match-history"] = "match-history"
    key: str
    interval_id: int
    timestamp: int
    data: dict[str, MatchMetrics]
    expires_after: int

    def to_snapshot(self) -> Snapshot:
        return Snapshot(timestamp=to_utc_datetime(self.timestamp), per_match=self.data)


class LiveMatchesRecord(CamelModel):
    """Current state of every match, overwritten on each capture."""

    kind: Literal["matches"] = "matches"
    key: Literal["all"] = "all"
    data: dict[str, MatchMetrics]
    updated_at: int


class PrimeTimeStatsRecord(CamelModel):
    kind: Literal["prime-time-stats"] = "prime-time-stats"
    key: str
    windows: list[WindowStats]
    updated_at: int
    expires_after: int


StoredRecord = Annotated[
    Union[MatchHistoryRecord, LiveMatchesRecord, PrimeTimeStatsRecord],
    Field(discriminator="kind"),
]

_RECORD_ADAPTER: TypeAdapter[StoredRecord] = TypeAdapter(StoredRecord)


def parse_record(payload: str | bytes) -> StoredRecord:
    """Validate a stored JSON document into its record type.

    Raises pydantic.ValidationError for unknown kinds or malformed fields.
    """
    return _RECORD_ADAPTER.validate_json(payload)


def dump_record(record: MatchHistoryRecord | LiveMatchesRecord | PrimeTimeStatsRecord) -> str:
    return record.model_dump_json(by_alias=True)
