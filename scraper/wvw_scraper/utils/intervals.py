"""Fixed-width interval keys.

An interval id is ``floor(epoch_ms / width_ms)``. It is the idempotency key
suffix for history snapshots and the sortable ordinal used by range queries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from .datetime_utils import to_epoch_ms

MS_PER_MINUTE = 60 * 1000
DEFAULT_INTERVAL_MINUTES = 15


@dataclass(frozen=True)
class IntervalKeyer:
    width_minutes: int = DEFAULT_INTERVAL_MINUTES

    def __post_init__(self) -> None:
        if self.width_minutes <= 0:
            raise ValueError("width_minutes must be positive")

    @property
    def width_ms(self) -> int:
        return self.width_minutes * MS_PER_MINUTE

    @property
    def width_hours(self) -> float:
        return self.width_minutes / 60

    def interval_of(self, timestamp: datetime | int) -> int:
        """Interval id for a datetime or an epoch-millisecond integer."""
        epoch_ms = timestamp if isinstance(timestamp, int) else to_epoch_ms(timestamp)
        return epoch_ms // self.width_ms

    def start_of(self, interval_id: int) -> datetime:
        return datetime.fromtimestamp(interval_id * self.width_ms / 1000, tz=timezone.utc)


DEFAULT_KEYER = IntervalKeyer()
