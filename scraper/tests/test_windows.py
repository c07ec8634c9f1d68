"""Tests for coverage window classification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from wvw_scraper.windows import (
    DEFAULT_SCHEDULE,
    DEFAULT_WINDOW_ID,
    CoverageWindow,
    WindowSchedule,
    classify,
)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, 20, hour, minute, tzinfo=timezone.utc)


class TestClassify:
    @pytest.mark.parametrize(
        "hour,expected",
        [
            (0, "off-hours"),
            (1, "na-prime"),
            (5, "na-prime"),
            (6, "off-hours"),
            (7, "ocx"),
            (11, "ocx"),
            (12, "off-hours"),
            (13, "sea"),
            (17, "sea"),
            (18, "eu-prime"),
            (21, "eu-prime"),
            (22, "off-hours"),
            (23, "off-hours"),
        ],
    )
    def test_default_schedule_boundaries(self, hour, expected):
        assert DEFAULT_SCHEDULE.classify(_at(hour, 30)) == expected

    def test_end_hour_is_exclusive(self):
        assert DEFAULT_SCHEDULE.classify(_at(5, 59)) == "na-prime"
        assert DEFAULT_SCHEDULE.classify(_at(6, 0)) == "off-hours"

    def test_every_hour_maps_to_exactly_one_window(self):
        ids = {w.id for w in DEFAULT_SCHEDULE.all_windows()}
        for hour in range(24):
            assert DEFAULT_SCHEDULE.classify_hour(hour) in ids

    def test_uses_utc_hour_of_aware_datetime(self):
        # 20:30 at UTC-5 is 01:30 UTC the next day
        ts = datetime(2025, 1, 20, 20, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert DEFAULT_SCHEDULE.classify(ts) == "na-prime"

    def test_naive_datetime_is_treated_as_utc(self):
        assert DEFAULT_SCHEDULE.classify(datetime(2025, 1, 20, 19, 0)) == "eu-prime"

    def test_accepts_epoch_ms_and_iso_strings(self):
        epoch_ms = int(_at(14).timestamp() * 1000)
        assert DEFAULT_SCHEDULE.classify(epoch_ms) == "sea"
        assert DEFAULT_SCHEDULE.classify("2025-01-20T08:15:00Z") == "ocx"

    def test_rejects_unsupported_types(self):
        with pytest.raises(TypeError):
            DEFAULT_SCHEDULE.classify(None)

    def test_module_shortcut(self):
        assert classify(_at(3)) == "na-prime"


class TestDefaultWindow:
    def test_default_window_is_listed_last(self):
        ids = [w.id for w in DEFAULT_SCHEDULE.all_windows()]
        assert ids == ["na-prime", "eu-prime", "ocx", "sea", DEFAULT_WINDOW_ID]

    def test_default_ranges_are_fragmented(self):
        assert DEFAULT_SCHEDULE.default_ranges() == [(0, 1), (6, 7), (12, 13), (22, 24)]

    def test_get_default_window(self):
        window = DEFAULT_SCHEDULE.get("off-hours")
        assert window.name == "Off Hours"
        assert window.hours() == {0, 6, 12, 22, 23}

    def test_get_unknown_window(self):
        with pytest.raises(KeyError):
            DEFAULT_SCHEDULE.get("moon-prime")

    def test_schedule_without_windows_is_all_default(self):
        schedule = WindowSchedule(windows=())
        assert schedule.default_ranges() == [(0, 24)]
        assert schedule.classify(_at(12)) == DEFAULT_WINDOW_ID


class TestGrouping:
    def test_group_by_window_includes_empty_windows(self):
        grouped = DEFAULT_SCHEDULE.group_by_window([_at(2), _at(3), _at(19)], lambda ts: ts)
        assert len(grouped["na-prime"]) == 2
        assert len(grouped["eu-prime"]) == 1
        assert grouped["sea"] == []
        assert set(grouped) == {w.id for w in DEFAULT_SCHEDULE.all_windows()}

    def test_window_coverage_percentages(self):
        coverage = DEFAULT_SCHEDULE.window_coverage([_at(2), _at(3), _at(19), _at(23)])
        assert coverage["na-prime"] == 50.0
        assert coverage["eu-prime"] == 25.0
        assert coverage["off-hours"] == 25.0
        assert coverage["ocx"] == 0.0

    def test_window_coverage_empty(self):
        coverage = DEFAULT_SCHEDULE.window_coverage([])
        assert all(value == 0.0 for value in coverage.values())


class TestValidate:
    def test_default_schedule_is_valid(self):
        DEFAULT_SCHEDULE.validate()

    def test_overlapping_windows(self):
        schedule = WindowSchedule(
            windows=(
                CoverageWindow("a", "A", ((1, 6),)),
                CoverageWindow("b", "B", ((5, 8),)),
            )
        )
        with pytest.raises(ValueError, match="Hour 5"):
            schedule.validate()

    @pytest.mark.parametrize("bad_range", [(6, 6), (20, 25), (-1, 3), (8, 4)])
    def test_invalid_ranges(self, bad_range):
        schedule = WindowSchedule(windows=(CoverageWindow("a", "A", (bad_range,)),))
        with pytest.raises(ValueError, match="invalid range"):
            schedule.validate()

    def test_duplicate_ids(self):
        schedule = WindowSchedule(
            windows=(
                CoverageWindow("a", "A", ((1, 2),)),
                CoverageWindow("a", "Again", ((3, 4),)),
            )
        )
        with pytest.raises(ValueError, match="Duplicate"):
            schedule.validate()

    def test_window_id_may_not_shadow_default(self):
        schedule = WindowSchedule(windows=(CoverageWindow("off-hours", "X", ((1, 2),)),))
        with pytest.raises(ValueError, match="Duplicate"):
            schedule.validate()

    def test_multi_range_window(self):
        schedule = WindowSchedule(
            windows=(CoverageWindow("split", "Split", ((0, 2), (22, 24))),)
        )
        schedule.validate()
        assert schedule.classify(_at(23)) == "split"
        assert schedule.classify(_at(1)) == "split"
        assert schedule.default_ranges() == [(2, 22)]
