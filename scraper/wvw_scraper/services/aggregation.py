"""Per-window match statistics from cumulative snapshots.

Snapshots hold totals since match start, so activity inside a window is the
sum of deltas between chronologically consecutive snapshots, each delta
credited to the window of the later snapshot. Differencing the first and
last snapshot of a window is wrong whenever the window is not contiguous:
the off-hours window would absorb everything that happened during the prime
times in between.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from ..models import TEAM_COLORS, Snapshot, TeamColor, TeamMetrics, TeamStats, WindowStats
from ..utils.intervals import DEFAULT_KEYER, IntervalKeyer
from ..utils.rounding import round_half_up
from ..windows import DEFAULT_SCHEDULE, WindowSchedule

# (metric on TeamMetrics, field on TeamStats)
_STAT_FIELDS = (
    ("kills", "kills"),
    ("deaths", "deaths"),
    ("victory_points", "victory_points"),
    ("total_score", "score"),
)


@dataclass(frozen=True)
class MatchPoint:
    """One snapshot reduced to a single match."""

    timestamp: datetime
    teams: dict[TeamColor, TeamMetrics]


@dataclass(frozen=True)
class CounterRegression:
    timestamp: datetime
    color: TeamColor
    metric: str
    delta: int


def format_kd_ratio(kills: int, deaths: int) -> str:
    ratio = kills / deaths if deaths > 0 else kills
    return f"{round_half_up(ratio, 2):.2f}"


def extract_match_history(match_id: str, snapshots: Iterable[Snapshot]) -> list[MatchPoint]:
    """Reduce snapshots to one match, dropping snapshots that lack it."""
    history: list[MatchPoint] = []
    for snapshot in snapshots:
        match = snapshot.per_match.get(match_id)
        if match is None:
            continue
        history.append(
            MatchPoint(
                timestamp=snapshot.timestamp,
                teams={color: match.team(color) for color in TEAM_COLORS},
            )
        )
    return history


def attribute_deltas(
    history: Sequence[MatchPoint],
    schedule: WindowSchedule = DEFAULT_SCHEDULE,
    keyer: IntervalKeyer = DEFAULT_KEYER,
) -> list[WindowStats]:
    """Compute per-window stats for one match's history.

    Returns ``[]`` for an empty history, otherwise one entry per window of
    the schedule (default window last), present even when empty.
    """
    if not history:
        return []

    ordered = sorted(history, key=lambda p: p.timestamp)
    windows = schedule.all_windows()

    totals = {
        w.id: {color: dict.fromkeys((m for m, _ in _STAT_FIELDS), 0) for color in TEAM_COLORS}
        for w in windows
    }
    data_points = dict.fromkeys((w.id for w in windows), 0)

    for point in ordered:
        data_points[schedule.classify(point.timestamp)] += 1

    # Index 0 has no predecessor: its cumulative totals belong to no window
    for previous, current in zip(ordered, ordered[1:]):
        window_totals = totals[schedule.classify(current.timestamp)]
        for color in TEAM_COLORS:
            before = previous.teams[color]
            after = current.teams[color]
            for metric, _ in _STAT_FIELDS:
                delta = getattr(after, metric) - getattr(before, metric)
                window_totals[color][metric] += max(0, delta)

    results: list[WindowStats] = []
    for window in windows:
        per_team: dict[TeamColor, TeamStats] = {}
        for color in TEAM_COLORS:
            sums = totals[window.id][color]
            per_team[color] = TeamStats(
                **{stat: sums[metric] for metric, stat in _STAT_FIELDS},
                kd_ratio=format_kd_ratio(sums["kills"], sums["deaths"]),
            )
        count = data_points[window.id]
        results.append(
            WindowStats(
                window_id=window.id,
                window_name=window.name,
                per_team=per_team,
                data_points=count,
                duration_hours=float(round_half_up(count * keyer.width_hours, 1)),
            )
        )
    return results


def find_counter_regressions(history: Sequence[MatchPoint]) -> list[CounterRegression]:
    """Every negative consecutive delta, e.g. from a counter reset upstream.

    Aggregation clamps these to zero; this only reports them.
    """
    ordered = sorted(history, key=lambda p: p.timestamp)
    regressions: list[CounterRegression] = []
    for previous, current in zip(ordered, ordered[1:]):
        for color in TEAM_COLORS:
            for metric, _ in _STAT_FIELDS:
                delta = getattr(current.teams[color], metric) - getattr(previous.teams[color], metric)
                if delta < 0:
                    regressions.append(
                        CounterRegression(
                            timestamp=current.timestamp,
                            color=color,
                            metric=metric,
                            delta=delta,
                        )
                    )
    return regressions


class DeltaAggregator:
    def __init__(
        self,
        schedule: WindowSchedule = DEFAULT_SCHEDULE,
        keyer: IntervalKeyer = DEFAULT_KEYER,
    ) -> None:
        self.schedule = schedule
        self.keyer = keyer

    def aggregate(self, match_id: str, snapshots: Iterable[Snapshot]) -> list[WindowStats]:
        return attribute_deltas(extract_match_history(match_id, snapshots), self.schedule, self.keyer)

    def regressions(self, match_id: str, snapshots: Iterable[Snapshot]) -> list[CounterRegression]:
        return find_counter_regressions(extract_match_history(match_id, snapshots))
