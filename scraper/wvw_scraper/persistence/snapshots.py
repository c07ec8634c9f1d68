"""Snapshot persistence: the conditional history log, live record and stats.

``SnapshotStore`` is the capability the capture job depends on. Its one
coordination primitive is ``try_create_snapshot``: a create-if-absent write
whose condition is enforced by the backend, so concurrent or retried
captures for the same interval produce exactly one ``created=True``.

Range queries are paginated. ``query_since`` keeps requesting pages while
the backend returns a continuation cursor; a short page is never taken to
mean "done" on its own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import redis
from pydantic import ValidationError

from ..config import settings
from ..exceptions import SnapshotStoreError
from ..logging import logger
from ..models import (
    LiveMatchesRecord,
    MatchHistoryRecord,
    PrimeTimeStatsRecord,
    Snapshot,
    dump_record,
    parse_record,
)
from ..utils.compression import compress_payload, decompress_payload
from ..utils.intervals import IntervalKeyer


@dataclass(frozen=True)
class CreateResult:
    created: bool


@dataclass(frozen=True)
class SnapshotPage:
    items: list[MatchHistoryRecord] = field(default_factory=list)
    next_cursor: int | None = None


class SnapshotStore(ABC):
    """Storage capability consumed by the capture job and aggregator."""

    @abstractmethod
    def put_live(self, record: LiveMatchesRecord) -> None:
        """Unconditionally overwrite the live ``matches/all`` record."""

    @abstractmethod
    def get_live(self) -> LiveMatchesRecord | None:
        ...

    @abstractmethod
    def try_create_snapshot(self, record: MatchHistoryRecord) -> CreateResult:
        """Persist the record unless one already exists for (key, interval_id)."""

    @abstractmethod
    def query_page(
        self,
        family: str,
        from_interval: int,
        to_interval: int | None = None,
    ) -> SnapshotPage:
        """Return one page of history records with interval >= from_interval."""

    @abstractmethod
    def put_stats(self, record: PrimeTimeStatsRecord) -> None:
        ...

    @abstractmethod
    def get_stats(self, match_id: str) -> PrimeTimeStatsRecord | None:
        ...

    def query_since(
        self,
        family: str,
        from_interval: int,
        to_interval: int | None = None,
    ) -> list[Snapshot]:
        """All snapshots of a family from ``from_interval`` (inclusive), oldest first."""
        records: list[MatchHistoryRecord] = []
        cursor = from_interval
        pages = 0
        while True:
            page = self.query_page(family, cursor, to_interval)
            pages += 1
            records.extend(page.items)
            if page.next_cursor is None:
                break
            if page.next_cursor <= cursor:
                raise SnapshotStoreError(
                    f"Pagination cursor did not advance past {cursor}",
                    key=family,
                )
            cursor = page.next_cursor

        records.sort(key=lambda r: r.timestamp)
        logger.debug(
            "snapshot_history_queried",
            family=family,
            from_interval=from_interval,
            to_interval=to_interval,
            pages=pages,
            count=len(records),
        )
        return [r.to_snapshot() for r in records]


# SET NX and the index update run as one script so the condition is checked
# server-side and an indexed interval always has a value key.
_CREATE_SNAPSHOT_LUA = """
if redis.call('SET', KEYS[1], ARGV[1], 'NX', 'EXAT', ARGV[2]) then
    redis.call('ZADD', KEYS[2], ARGV[3], ARGV[3])
    redis.call('ZREMRANGEBYSCORE', KEYS[2], '-inf', '(' .. ARGV[4])
    redis.call('EXPIREAT', KEYS[2], ARGV[2])
    return 1
end
return 0
"""


def get_redis_client() -> redis.Redis:
    return redis.Redis.from_url(settings.redis_url)


class RedisSnapshotStore(SnapshotStore):
    """Redis-backed snapshot store.

    Layout (``prefix`` defaults to ``wvw``):
        {prefix}:matches:all                         live record
        {prefix}:match-history:{family}:{interval}   history record (gzip JSON)
        {prefix}:match-history:{family}:index        sorted set of interval ids
        {prefix}:prime-time-stats:{match_id}         published window stats
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        keyer: IntervalKeyer | None = None,
        *,
        page_size: int | None = None,
        compress: bool | None = None,
        prefix: str | None = None,
    ) -> None:
        config = settings.snapshot_config
        self.r = client or get_redis_client()
        self.keyer = keyer or settings.interval_keyer()
        self.page_size = page_size or config.page_size
        self.compress = config.compress_history if compress is None else compress
        self.prefix = prefix or config.key_prefix
        self._create_script = self.r.register_script(_CREATE_SNAPSHOT_LUA)

    # Keys
    def live_key(self) -> str:
        return f"{self.prefix}:matches:all"

    def history_key(self, family: str, interval_id: int) -> str:
        return f"{self.prefix}:match-history:{family}:{interval_id}"

    def index_key(self, family: str) -> str:
        return f"{self.prefix}:match-history:{family}:index"

    def stats_key(self, match_id: str) -> str:
        return f"{self.prefix}:prime-time-stats:{match_id}"

    # Live
    def put_live(self, record: LiveMatchesRecord) -> None:
        self.r.set(self.live_key(), dump_record(record))

    def get_live(self) -> LiveMatchesRecord | None:
        return self._get(self.live_key(), LiveMatchesRecord)

    # History
    def try_create_snapshot(self, record: MatchHistoryRecord) -> CreateResult:
        payload = dump_record(record)
        value = compress_payload(payload) if self.compress else payload
        retention_ms = record.expires_after * 1000 - record.timestamp
        oldest_kept = self.keyer.interval_of(max(0, record.timestamp - retention_ms))
        created = self._create_script(
            keys=[self.history_key(record.key, record.interval_id), self.index_key(record.key)],
            args=[value, record.expires_after, record.interval_id, oldest_kept],
        )
        return CreateResult(created=bool(created))

    def query_page(
        self,
        family: str,
        from_interval: int,
        to_interval: int | None = None,
    ) -> SnapshotPage:
        max_score = "+inf" if to_interval is None else to_interval
        members = self.r.zrangebyscore(
            self.index_key(family),
            from_interval,
            max_score,
            start=0,
            num=self.page_size,
        )
        if not members:
            return SnapshotPage()

        intervals = [int(m) for m in members]
        keys = [self.history_key(family, i) for i in intervals]
        items: list[MatchHistoryRecord] = []
        for key, raw in zip(keys, self.r.mget(keys)):
            if raw is None:
                # Expired between the index read and the fetch
                logger.debug("snapshot_history_missing", key=key)
                continue
            items.append(self._decode(key, raw, MatchHistoryRecord))

        next_cursor = intervals[-1] + 1 if len(intervals) >= self.page_size else None
        return SnapshotPage(items=items, next_cursor=next_cursor)

    # Stats
    def put_stats(self, record: PrimeTimeStatsRecord) -> None:
        self.r.set(self.stats_key(record.key), dump_record(record), exat=record.expires_after)

    def get_stats(self, match_id: str) -> PrimeTimeStatsRecord | None:
        return self._get(self.stats_key(match_id), PrimeTimeStatsRecord)

    # Internals
    def _get(self, key: str, expected: type):
        raw = self.r.get(key)
        if raw is None:
            return None
        return self._decode(key, raw, expected)

    def _decode(self, key: str, raw: bytes | str, expected: type):
        try:
            record = parse_record(decompress_payload(raw))
        except ValidationError as exc:
            raise SnapshotStoreError(f"Malformed record at {key}: {exc}", key=key) from exc
        if not isinstance(record, expected):
            raise SnapshotStoreError(
                f"Expected {expected.__name__} at {key}, found kind={record.kind}",
                key=key,
            )
        return record
