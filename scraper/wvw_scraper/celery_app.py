"""Celery app configuration for the WvW snapshot worker."""

from __future__ import annotations

from celery import Celery, signals
from celery.schedules import crontab

from .config import settings
from .logging import logger

SCRAPER_QUEUE = "wvw-scraper"

celery_config = {
    "task_serializer": "json",
    "accept_content": ["json"],
    "result_serializer": "json",
    "timezone": "UTC",
    "enable_utc": True,
    "task_track_started": True,
    "worker_prefetch_multiplier": 1,
    # A hung feed request fails the run; the next beat tick retries
    "task_time_limit": 240,
    "task_soft_time_limit": 200,
    "task_default_queue": SCRAPER_QUEUE,
}

app = Celery(
    "wvw-scraper",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["wvw_scraper.jobs.tasks"],
)
app.conf.update(**celery_config)
app.conf.task_routes = {
    "capture_match_snapshots": {"queue": SCRAPER_QUEUE, "routing_key": SCRAPER_QUEUE},
}
# Capture every 5 minutes against 15-minute history intervals: each interval
# gets at least one attempt even if a run fails, and the extra runs only
# refresh the live record.
app.conf.beat_schedule = {
    "capture-match-snapshots-every-5-min": {
        "task": "capture_match_snapshots",
        "schedule": crontab(minute="*/5"),
        "options": {"queue": SCRAPER_QUEUE, "routing_key": SCRAPER_QUEUE},
    },
}


@signals.worker_ready.connect
def on_worker_ready(sender=None, **kwargs):
    worker_name = getattr(sender, "hostname", None) or str(sender) if sender else "unknown"
    logger.info(
        "celery_worker_ready",
        worker=worker_name,
        interval_minutes=settings.snapshot_config.interval_minutes,
        windows=[w.id for w in settings.window_schedule().all_windows()],
    )
