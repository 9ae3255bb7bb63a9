"""Unit tests for date utilities."""
from datetime import datetime, time

import pytest

from workshop_registration.utils.date_utils import (
    DEFAULT_DEADLINE_TIME,
    parse_date,
    parse_deadline,
    parse_time_of_day,
)


class TestParseDate:
    """Test date parsing."""

    def test_parse_valid_date(self):
        result = parse_date("2025-11-15")
        assert isinstance(result, datetime)
        assert (result.year, result.month, result.day) == (2025, 11, 15)

    def test_parse_invalid_format_raises_error(self):
        with pytest.raises(ValueError):
            parse_date("11/15/2025")

    def test_parse_invalid_date_value_raises_error(self):
        with pytest.raises(ValueError):
            parse_date("2025-02-30")


class TestParseTimeOfDay:
    """Test time-of-day parsing."""

    def test_parse_valid_time(self):
        assert parse_time_of_day("18:45") == time(18, 45)

    def test_parse_time_with_spaces(self):
        assert parse_time_of_day(" 07:05 ") == time(7, 5)

    @pytest.mark.parametrize("value", ["25:00", "noon", "", None])
    def test_parse_invalid_time_raises(self, value):
        with pytest.raises(ValueError, match="Invalid time format"):
            parse_time_of_day(value)


class TestParseDeadline:
    """Test deadline instant construction."""

    def test_default_time_is_last_millisecond_of_day(self):
        assert parse_deadline("2025-11-11") == datetime(2025, 11, 11, 23, 59, 59, 999000)
        assert DEFAULT_DEADLINE_TIME == time(23, 59, 59, 999000)

    def test_configured_time_keeps_whole_minute(self):
        assert parse_deadline("2025-11-11", "17:00") == datetime(2025, 11, 11, 17, 0, 59, 999000)

    def test_midnight_time_is_respected(self):
        assert parse_deadline("2025-11-11", "00:00") == datetime(2025, 11, 11, 0, 0, 59, 999000)

    def test_empty_time_uses_default(self):
        assert parse_deadline("2025-11-11", "") == datetime(2025, 11, 11, 23, 59, 59, 999000)
