"""Coverage windows: recurring daily UTC hour ranges used to bucket activity.

A schedule is a priority-ordered list of explicit windows plus a catch-all
default. With the default regional prime times the default window is
fragmented (00:00, 06:00, 12:00 and 22:00-23:59 UTC), which is why activity
must never be attributed by differencing the first and last snapshot of a
window.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeVar

from .utils.datetime_utils import to_utc_datetime

T = TypeVar("T")

DEFAULT_WINDOW_ID = "off-hours"
DEFAULT_WINDOW_NAME = "Off Hours"
HOURS_PER_DAY = 24


@dataclass(frozen=True)
class CoverageWindow:
    """A named window covering one or more ``[start, end)`` UTC hour ranges."""

    id: str
    name: str
    utc_hour_ranges: tuple[tuple[int, int], ...] = ()

    def contains_hour(self, hour: int) -> bool:
        return any(start <= hour < end for start, end in self.utc_hour_ranges)

    def hours(self) -> set[int]:
        return {h for start, end in self.utc_hour_ranges for h in range(start, end)}


@dataclass(frozen=True)
class WindowSchedule:
    windows: tuple[CoverageWindow, ...]
    default_id: str = DEFAULT_WINDOW_ID
    default_name: str = DEFAULT_WINDOW_NAME
    _default: CoverageWindow = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        default = CoverageWindow(
            id=self.default_id,
            name=self.default_name,
            utc_hour_ranges=tuple(_runs(sorted(self._uncovered_hours()))),
        )
        object.__setattr__(self, "_default", default)

    def classify(self, timestamp: datetime | int | float | str) -> str:
        """Return the id of the window the timestamp's UTC hour falls into."""
        return self.classify_hour(to_utc_datetime(timestamp).hour)

    def classify_hour(self, hour: int) -> str:
        for window in self.windows:
            if window.contains_hour(hour):
                return window.id
        return self.default_id

    def all_windows(self) -> list[CoverageWindow]:
        """Configured windows in priority order, followed by the default window."""
        return [*self.windows, self._default]

    def get(self, window_id: str) -> CoverageWindow:
        for window in self.all_windows():
            if window.id == window_id:
                return window
        raise KeyError(f"Unknown window id: {window_id}")

    def default_ranges(self) -> list[tuple[int, int]]:
        """Continuous UTC hour ranges that no explicit window covers."""
        return list(self._default.utc_hour_ranges)

    def group_by_window(
        self,
        items: Iterable[T],
        timestamp_of: Callable[[T], datetime | int | float | str],
    ) -> dict[str, list[T]]:
        grouped: dict[str, list[T]] = {w.id: [] for w in self.all_windows()}
        for item in items:
            grouped[self.classify(timestamp_of(item))].append(item)
        return grouped

    def window_coverage(self, timestamps: Iterable[datetime | int | float | str]) -> dict[str, float]:
        """Percentage (0-100) of the given timestamps falling in each window."""
        points = list(timestamps)
        grouped = self.group_by_window(points, lambda ts: ts)
        total = len(points)
        return {
            window_id: (len(members) / total) * 100 if total else 0.0
            for window_id, members in grouped.items()
        }

    def validate(self) -> None:
        """Raise ValueError unless the explicit windows are disjoint and in range.

        Together with the default window a valid schedule partitions the day.
        """
        seen: dict[int, str] = {}
        ids = {self.default_id}
        for window in self.windows:
            if window.id in ids:
                raise ValueError(f"Duplicate window id: {window.id}")
            ids.add(window.id)
            for start, end in window.utc_hour_ranges:
                if not 0 <= start < end <= HOURS_PER_DAY:
                    raise ValueError(
                        f"Window {window.id} has invalid range [{start}, {end})"
                    )
                for hour in range(start, end):
                    if hour in seen:
                        raise ValueError(
                            f"Hour {hour} is covered by both {seen[hour]} and {window.id}"
                        )
                    seen[hour] = window.id

    def _uncovered_hours(self) -> set[int]:
        covered: set[int] = set()
        for window in self.windows:
            covered |= window.hours()
        return set(range(HOURS_PER_DAY)) - covered


def _runs(hours: list[int]) -> Iterable[tuple[int, int]]:
    start = prev = None
    for hour in hours:
        if start is None:
            start = prev = hour
        elif hour == prev + 1:
            prev = hour
        else:
            yield (start, prev + 1)
            start = prev = hour
    if start is not None:
        yield (start, prev + 1)


# Regional prime times in UTC. NA 01-06 is 5-10 PM PST, OCX 07-12 is
# 5-10 PM AEST, SEA 13-18 is 9 PM-2 AM SGT, EU 18-22 is evening CET.
DEFAULT_SCHEDULE = WindowSchedule(
    windows=(
        CoverageWindow(id="na-prime", name="NA Prime Time", utc_hour_ranges=((1, 6),)),
        CoverageWindow(id="eu-prime", name="EU Prime Time", utc_hour_ranges=((18, 22),)),
        CoverageWindow(id="ocx", name="OCX Prime Time", utc_hour_ranges=((7, 12),)),
        CoverageWindow(id="sea", name="SEA Prime Time", utc_hour_ranges=((13, 18),)),
    )
)


def classify(timestamp: datetime | int | float | str, schedule: WindowSchedule = DEFAULT_SCHEDULE) -> str:
    """Module-level shortcut for ``schedule.classify``."""
    return schedule.classify(timestamp)


__all__ = [
    "DEFAULT_SCHEDULE",
    "DEFAULT_WINDOW_ID",
    "CoverageWindow",
    "WindowSchedule",
    "classify",
]
