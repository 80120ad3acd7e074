"""
Unit tests for calendar date arithmetic.
"""

from datetime import date

import pytest

from conference_backend.src.services.date_shift import (
    add_days,
    compute_day_offset,
    earliest_day_date,
    parse_date_prefix,
    shift_calendar_date,
    try_shift_calendar_date,
)


class TestComputeDayOffset:

    def test_offset_across_months(self):
        assert compute_day_offset("2024-03-01", "2024-01-10") == 51

    def test_negative_offset(self):
        assert compute_day_offset("2024-01-01", "2024-01-10") == -9

    def test_ignores_time_suffix(self):
        assert compute_day_offset("2024-03-01T23:59:00Z", "2024-01-10T00:00:00+01:00") == 51

    def test_invalid_input(self):
        with pytest.raises(ValueError):
            compute_day_offset("not-a-date", "2024-01-10")


class TestShiftCalendarDate:

    def test_suffix_preserved_byte_for_byte(self):
        assert shift_calendar_date("2024-01-10T18:30:00.123+01:00", 51) == "2024-03-01T18:30:00.123+01:00"

    def test_zulu_suffix(self):
        assert shift_calendar_date("2024-01-12T09:00:00Z", 51) == "2024-03-03T09:00:00Z"

    def test_date_only(self):
        assert shift_calendar_date("2024-02-28", 1) == "2024-02-29"

    def test_zero_offset_returns_input(self):
        assert shift_calendar_date("whatever", 0) == "whatever"

    def test_empty_value(self):
        assert shift_calendar_date("", 5) == ""

    @pytest.mark.parametrize("value", ["10/01/2024 18:00", "2024-13-45T10:00", "T10:00"])
    def test_invalid_input_unchanged_and_flagged(self, value):
        shifted, ok = try_shift_calendar_date(value, 3)

        assert shifted == value
        assert ok is False
        assert shift_calendar_date(value, 3) == value

    def test_valid_input_flagged_ok(self):
        assert try_shift_calendar_date("2024-01-10T10:00", -10) == ("2023-12-31T10:00", True)

    @pytest.mark.parametrize("value, offset", [("9999-12-31T10:00:00Z", 1), ("0001-01-01", -1)])
    def test_out_of_range_unchanged_and_flagged(self, value, offset):
        assert try_shift_calendar_date(value, offset) == (value, False)


class TestHelpers:

    def test_parse_date_prefix(self):
        assert parse_date_prefix("2024-01-10T10:00") == date(2024, 1, 10)
        assert parse_date_prefix(None) is None
        assert parse_date_prefix("2024-02-30") is None

    def test_add_days(self):
        assert add_days(date(2024, 12, 31), 1) == date(2025, 1, 1)

    def test_earliest_day_date_ignores_invalid(self):
        days = [
            {"date": "2024-01-12"},
            {"date": "bad"},
            {"date": "2024-01-10"},
            {},
            "not-a-day",
        ]
        assert earliest_day_date(days) == "2024-01-10"

    def test_earliest_day_date_none(self):
        assert earliest_day_date([]) is None
        assert earliest_day_date(None) is None
