"""
Tests for range token resolution.
"""
from datetime import datetime, timedelta

import pytest

from jobboard.schemas.schemas import DateRange
from jobboard.services.periods import (
    InvalidRangeError, PeriodWindow, parse_range, resolve_period, subtract_months
)

NOW = datetime(2024, 3, 31, 15, 30)


class TestResolvePeriod:

    @pytest.mark.parametrize("token", ["7d", "30d", "90d", "6m", "1y"])
    def test_windows_are_adjacent_and_equal_length(self, token):
        current, previous = resolve_period(token, NOW)

        assert current.end == NOW
        assert previous.end == current.start
        assert previous.end - previous.start == current.end - current.start

    def test_day_ranges(self):
        current, previous = resolve_period("7d", NOW)
        assert current.start == NOW - timedelta(days=7)
        assert previous.start == NOW - timedelta(days=14)

        current, previous = resolve_period("30d", NOW)
        assert current.start == NOW - timedelta(days=30)
        assert previous.start == NOW - timedelta(days=60)

    def test_month_range_steps_back_calendar_months(self):
        current, _ = resolve_period("6m", NOW)
        # September has 30 days, so the 31st clamps to the 30th
        assert current.start == datetime(2023, 9, 30, 15, 30)

        current, _ = resolve_period("1y", NOW)
        assert current.start == datetime(2023, 3, 31, 15, 30)

    def test_accepts_enum_member(self):
        current, _ = resolve_period(DateRange.last_90_days, NOW)
        assert current.start == NOW - timedelta(days=90)

    def test_unknown_token_raises(self):
        with pytest.raises(InvalidRangeError) as exc_info:
            resolve_period("2w", NOW)
        assert exc_info.value.token == "2w"
        assert "7d" in str(exc_info.value)


class TestParseRange:

    def test_valid_token(self):
        resolution = parse_range("90d")
        assert resolution.ok
        assert resolution.range is DateRange.last_90_days

    def test_invalid_token_is_tagged_not_raised(self):
        resolution = parse_range("bogus")
        assert not resolution.ok
        assert resolution.range is None
        assert isinstance(resolution.error, InvalidRangeError)

    def test_none_is_invalid(self):
        assert not parse_range(None).ok


class TestHelpers:

    def test_subtract_months_across_year(self):
        assert subtract_months(datetime(2024, 2, 15), 3) == datetime(2023, 11, 15)

    def test_subtract_months_clamps_leap_day(self):
        assert subtract_months(datetime(2024, 2, 29), 12) == datetime(2023, 2, 28)

    def test_window_rejects_empty_interval(self):
        with pytest.raises(ValueError):
            PeriodWindow(start=NOW, end=NOW)

    def test_window_is_half_open(self):
        window = PeriodWindow(start=NOW - timedelta(days=1), end=NOW)
        assert window.contains(NOW - timedelta(days=1))
        assert not window.contains(NOW)
