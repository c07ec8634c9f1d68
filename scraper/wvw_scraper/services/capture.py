"""Snapshot capture job: fetch, store live state, log history, refresh stats.

Invocations are stateless and may overlap (beat runs more often than the
interval width, Celery may retry). The only coordination is the store's
conditional create: the invocation that creates a family's snapshot for the
current interval recomputes that family's stats, every other invocation for
the same interval skips aggregation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta

from ..exceptions import FeedError
from ..live import GW2Client
from ..logging import logger
from ..models import LiveMatchesRecord, MatchHistoryRecord, MatchMetrics
from ..normalization import format_matches, group_by_family
from ..persistence import SnapshotStore
from ..utils.datetime_utils import now_utc, to_epoch_ms, to_epoch_seconds
from ..utils.intervals import IntervalKeyer
from .aggregation import DeltaAggregator
from .publisher import StatsPublisher


@dataclass
class CaptureResult:
    interval_id: int
    matches: int = 0
    created_families: list[str] = field(default_factory=list)
    skipped_families: list[str] = field(default_factory=list)
    published: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return asdict(self)


class SnapshotCaptureJob:
    def __init__(
        self,
        feed: GW2Client,
        store: SnapshotStore,
        aggregator: DeltaAggregator,
        publisher: StatsPublisher,
        keyer: IntervalKeyer,
        history_ttl: timedelta,
    ) -> None:
        self.feed = feed
        self.store = store
        self.aggregator = aggregator
        self.publisher = publisher
        self.keyer = keyer
        self.history_ttl = history_ttl

    def run(self, now: datetime | None = None) -> CaptureResult:
        now = now or now_utc()
        interval_id = self.keyer.interval_of(now)
        result = CaptureResult(interval_id=interval_id)

        try:
            raw_matches = self.feed.fetch_matches()
        except FeedError as exc:
            logger.error("capture_fetch_failed", interval_id=interval_id, error=str(exc))
            raise

        # Without the world directory teams are named "World {id}"
        try:
            worlds = self.feed.fetch_worlds()
        except FeedError as exc:
            logger.warning("capture_worlds_fetch_failed", interval_id=interval_id, error=str(exc))
            worlds = []

        matches = format_matches(raw_matches, worlds)
        result.matches = len(matches)

        # Live pointer first; a failure here aborts before any history write
        self.store.put_live(LiveMatchesRecord(data=matches, updated_at=to_epoch_ms(now)))

        for family, family_matches in sorted(group_by_family(matches).items()):
            record = MatchHistoryRecord(
                key=family,
                interval_id=interval_id,
                timestamp=to_epoch_ms(now),
                data=family_matches,
                expires_after=to_epoch_seconds(now + self.history_ttl),
            )
            if not self.store.try_create_snapshot(record).created:
                logger.debug("capture_snapshot_exists", family=family, interval_id=interval_id)
                result.skipped_families.append(family)
                continue

            logger.info(
                "capture_snapshot_created",
                family=family,
                interval_id=interval_id,
                matches=len(family_matches),
            )
            result.created_families.append(family)
            self._refresh_family_stats(family, family_matches, now, result)

        logger.info(
            "capture_complete",
            interval_id=interval_id,
            interval_start=self.keyer.start_of(interval_id).isoformat(),
            matches=result.matches,
            created=result.created_families,
            skipped=result.skipped_families,
            published=len(result.published),
            failed=len(result.failed),
        )
        return result

    def _refresh_family_stats(
        self,
        family: str,
        matches: dict[str, MatchMetrics],
        now: datetime,
        result: CaptureResult,
    ) -> None:
        for match_id, match in sorted(matches.items()):
            if match.start_time is None:
                logger.debug("prime_time_stats_no_start_time", match_id=match_id)
                continue
            try:
                snapshots = self.store.query_since(family, self.keyer.interval_of(match.start_time))
                for regression in self.aggregator.regressions(match_id, snapshots):
                    logger.warning(
                        "counter_regression_detected",
                        match_id=match_id,
                        timestamp=regression.timestamp.isoformat(),
                        color=regression.color,
                        metric=regression.metric,
                        delta=regression.delta,
                    )
                windows = self.aggregator.aggregate(match_id, snapshots)
                if not windows:
                    logger.debug("prime_time_stats_no_history", match_id=match_id)
                    continue
                self.publisher.publish(match_id, windows, now=now)
                result.published.append(match_id)
            except Exception as exc:
                logger.exception("prime_time_stats_failed", match_id=match_id, error=str(exc))
                result.failed.append(match_id)
