from datetime import date

import pytest

from logcache.services.date_utils import (
    DAY_MS,
    day_bounds,
    day_range,
    format_timestamp,
    parse_time,
    to_utc_date,
)

# 2025-01-15T00:00:00Z
JAN15 = 1736899200000


class TestDayBounds:
    def test_bounds(self):
        start, end = day_bounds(date(2025, 1, 15))
        assert start == JAN15
        assert end == JAN15 + DAY_MS - 1

    def test_to_utc_date(self):
        assert to_utc_date(JAN15) == date(2025, 1, 15)
        assert to_utc_date(JAN15 - 1) == date(2025, 1, 14)


class TestDayRange:
    def test_inclusive(self):
        days = day_range(JAN15 + 1000, JAN15 + 2 * DAY_MS + 5)
        assert days == [date(2025, 1, 15), date(2025, 1, 16), date(2025, 1, 17)]

    def test_same_day(self):
        assert day_range(JAN15, JAN15 + DAY_MS - 1) == [date(2025, 1, 15)]

    def test_reversed_is_empty(self):
        assert day_range(JAN15 + 1, JAN15) == []

    def test_crosses_month(self):
        start = day_bounds(date(2025, 1, 31))[0]
        days = day_range(start, start + DAY_MS)
        assert days == [date(2025, 1, 31), date(2025, 2, 1)]


class TestParseTime:
    def test_epoch_millis(self):
        assert parse_time("1736899200000") == JAN15

    def test_iso_date_is_utc_midnight(self):
        assert parse_time("2025-01-15") == JAN15

    def test_iso_with_z(self):
        assert parse_time("2025-01-15T00:00:01Z") == JAN15 + 1000

    def test_iso_with_offset(self):
        assert parse_time("2025-01-15T09:00:00+09:00") == JAN15

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_time("yesterday")


class TestFormatTimestamp:
    def test_format(self):
        assert format_timestamp(JAN15 + 1500) == "2025-01-15T00:00:01.500Z"
