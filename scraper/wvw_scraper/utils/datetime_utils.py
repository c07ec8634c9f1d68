"""
Low-level timezone and timestamp utilities.

Everything in the snapshot pipeline is UTC. Stored records carry epoch
milliseconds; expiry fields carry epoch seconds.
"""

from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc_datetime(value: datetime | int | float | str) -> datetime:
    """Coerce a datetime, epoch-millisecond number or ISO string to aware UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        return to_utc_datetime(datetime.fromisoformat(value.replace("Z", "+00:00")))
    raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")


def to_epoch_ms(value: datetime) -> int:
    return int(to_utc_datetime(value).timestamp() * 1000)


def to_epoch_seconds(value: datetime) -> int:
    return int(to_utc_datetime(value).timestamp())
