"""Tests for interval keys, timestamp coercion and payload compression."""

from __future__ import annotations

import gzip
from datetime import datetime, timezone

import pytest

from wvw_scraper.utils.compression import compress_payload, decompress_payload
from wvw_scraper.utils.datetime_utils import (
    now_utc,
    to_epoch_ms,
    to_epoch_seconds,
    to_utc_datetime,
)
from wvw_scraper.utils.intervals import DEFAULT_KEYER, IntervalKeyer


class TestIntervalKeyer:
    def test_default_width_is_fifteen_minutes(self):
        assert DEFAULT_KEYER.width_ms == 15 * 60 * 1000
        assert DEFAULT_KEYER.width_hours == 0.25

    def test_same_interval_within_width(self):
        a = datetime(2025, 1, 20, 10, 0, tzinfo=timezone.utc)
        b = datetime(2025, 1, 20, 10, 14, 59, tzinfo=timezone.utc)
        c = datetime(2025, 1, 20, 10, 15, tzinfo=timezone.utc)
        assert DEFAULT_KEYER.interval_of(a) == DEFAULT_KEYER.interval_of(b)
        assert DEFAULT_KEYER.interval_of(c) == DEFAULT_KEYER.interval_of(a) + 1

    def test_interval_of_epoch_ms(self):
        assert DEFAULT_KEYER.interval_of(900_000) == 1
        assert DEFAULT_KEYER.interval_of(899_999) == 0

    def test_start_of_round_trips_to_interval_boundary(self):
        ts = datetime(2025, 1, 20, 10, 7, tzinfo=timezone.utc)
        start = DEFAULT_KEYER.start_of(DEFAULT_KEYER.interval_of(ts))
        assert start == datetime(2025, 1, 20, 10, 0, tzinfo=timezone.utc)

    def test_custom_width(self):
        keyer = IntervalKeyer(width_minutes=60)
        assert keyer.width_hours == 1.0
        assert keyer.interval_of(3_600_000 * 5 + 1) == 5

    @pytest.mark.parametrize("width", [0, -15])
    def test_rejects_non_positive_width(self, width):
        with pytest.raises(ValueError):
            IntervalKeyer(width_minutes=width)


class TestDatetimeUtils:
    def test_now_utc_is_aware(self):
        assert now_utc().tzinfo is not None

    def test_iso_string_with_z(self):
        assert to_utc_datetime("2025-01-17T02:00:00Z") == datetime(2025, 1, 17, 2, tzinfo=timezone.utc)

    def test_epoch_conversions(self):
        ts = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert to_epoch_seconds(ts) == 1735689600
        assert to_epoch_ms(ts) == 1735689600000
        assert to_utc_datetime(1735689600000) == ts


class TestCompression:
    def test_compressed_payload_is_gzip(self):
        blob = compress_payload('{"kind": "matches"}')
        assert blob[:2] == b"\x1f\x8b"
        assert gzip.decompress(blob) == b'{"kind": "matches"}'

    def test_decompress_accepts_plain_bytes_and_str(self):
        assert decompress_payload(b'{"a": 1}') == '{"a": 1}'
        assert decompress_payload('{"a": 1}') == '{"a": 1}'

    def test_decompress_gzip(self):
        assert decompress_payload(compress_payload("hello")) == "hello"
