"""Celery task for the interval snapshot capture.

Beat triggers this more often than the snapshot interval. There is no Redis
lock around it: overlapping runs are expected and the conditional history
write decides which run recomputes stats.
"""

from __future__ import annotations

from datetime import timedelta

from celery import shared_task

from ..logging import logger


def build_capture_job():
    """Wire a SnapshotCaptureJob from settings."""
    from ..config import settings
    from ..live import GW2Client
    from ..persistence import RedisSnapshotStore
    from ..services import DeltaAggregator, SnapshotCaptureJob, StatsPublisher

    config = settings.snapshot_config
    keyer = settings.interval_keyer()
    store = RedisSnapshotStore(keyer=keyer)
    return SnapshotCaptureJob(
        feed=GW2Client(),
        store=store,
        aggregator=DeltaAggregator(settings.window_schedule(), keyer),
        publisher=StatsPublisher(store, ttl=timedelta(days=config.stats_ttl_days)),
        keyer=keyer,
        history_ttl=timedelta(days=config.history_ttl_days),
    )


@shared_task(name="capture_match_snapshots")
def capture_match_snapshots_task() -> dict:
    """Capture the current match state and refresh window stats on a new interval.

    Failures to fetch the feed or write the live record propagate so the
    invocation is reported as failed; the next scheduled run retries.
    """
    job = build_capture_job()
    try:
        result = job.run()
    except Exception as exc:
        logger.exception("capture_match_snapshots_failed", error=str(exc))
        raise
    return result.as_dict()
