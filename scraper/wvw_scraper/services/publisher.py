"""Publish per-match window stats as ``prime-time-stats`` records."""

from __future__ import annotations

from datetime import datetime, timedelta

from ..logging import logger
from ..models import PrimeTimeStatsRecord, WindowStats
from ..persistence import SnapshotStore
from ..utils.datetime_utils import now_utc, to_epoch_ms, to_epoch_seconds


class StatsPublisher:
    def __init__(self, store: SnapshotStore, ttl: timedelta) -> None:
        self.store = store
        self.ttl = ttl

    def publish(
        self,
        match_id: str,
        windows: list[WindowStats],
        now: datetime | None = None,
    ) -> PrimeTimeStatsRecord:
        """Overwrite the stats record for a match; never merged with the old one."""
        now = now or now_utc()
        record = PrimeTimeStatsRecord(
            key=match_id,
            windows=windows,
            updated_at=to_epoch_ms(now),
            expires_after=to_epoch_seconds(now + self.ttl),
        )
        self.store.put_stats(record)
        logger.debug("prime_time_stats_published", match_id=match_id, windows=len(windows))
        return record
