"""
Unit tests for recurrence date helpers.
"""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from src.services.recurrence.dates import (
    advance_month,
    select_month_boundary,
    select_positional_weekday,
    localize,
    is_excepted,
    is_valid_occurrence,
    push_if_in_range,
)

MONDAY, TUESDAY, FRIDAY, SUNDAY = 0, 1, 4, 6


class TestAdvanceMonth:
    """Test advance_month function."""

    def test_simple_step(self):
        """Test stepping inside a year."""
        assert advance_month(date(2026, 1, 15), 1) == date(2026, 2, 15)

    def test_year_rollover(self):
        """Test carry into the next year."""
        assert advance_month(date(2026, 11, 10), 3) == date(2027, 2, 10)
        assert advance_month(date(2026, 12, 1), 1) == date(2027, 1, 1)

    def test_multi_year_interval(self):
        """Test intervals longer than a year."""
        assert advance_month(date(2026, 5, 5), 25) == date(2028, 6, 5)

    @pytest.mark.parametrize("day", [29, 30, 31])
    def test_day_clamped_to_28(self, day):
        """Test late days are clamped so the result always exists."""
        assert advance_month(date(2026, 1, day), 1) == date(2026, 2, 28)
        assert advance_month(date(2026, 3, day), 1) == date(2026, 4, 28)

    def test_out_of_range_year_falls_back_to_30_days(self):
        """Test the +30 day fallback when the target year cannot be built."""
        assert advance_month(date(9999, 12, 1), 1) == date(9999, 12, 31)


class TestSelectMonthBoundary:
    """Test select_month_boundary function."""

    def test_first_day(self):
        """Test flag 1 selects the first of the month."""
        assert select_month_boundary(date(2026, 3, 17), 1) == date(2026, 3, 1)

    @pytest.mark.parametrize(
        "current, expected",
        [
            (date(2026, 1, 15), date(2026, 1, 31)),
            (date(2026, 2, 3), date(2026, 2, 28)),
            (date(2024, 2, 10), date(2024, 2, 29)),
            (date(2026, 4, 28), date(2026, 4, 30)),
            (date(2026, 12, 5), date(2026, 12, 31)),
        ],
    )
    def test_last_day(self, current, expected):
        """Test flag -1 selects the last day, including leap Februaries."""
        assert select_month_boundary(current, -1) == expected

    def test_other_values_keep_date(self):
        """Test any other flag leaves the date unchanged."""
        assert select_month_boundary(date(2026, 3, 17), 15) == date(2026, 3, 17)


class TestSelectPositionalWeekday:
    """Test select_positional_weekday function."""

    def test_first_tuesday(self):
        """Test position 1."""
        assert select_positional_weekday(date(2026, 2, 20), 1, TUESDAY) == date(2026, 2, 3)

    def test_first_weekday_on_the_first(self):
        """Test the first of the month matching the weekday."""
        # 2026-01-01 is a Thursday
        assert select_positional_weekday(date(2026, 1, 20), 1, 3) == date(2026, 1, 1)

    def test_last_friday(self):
        """Test position -1."""
        assert select_positional_weekday(date(2026, 1, 2), -1, FRIDAY) == date(2026, 1, 30)
        assert select_positional_weekday(date(2026, 2, 2), -1, FRIDAY) == date(2026, 2, 27)

    def test_last_weekday_on_the_last(self):
        """Test the last day of the month matching the weekday."""
        # 2026-05-31 is a Sunday
        assert select_positional_weekday(date(2026, 5, 1), -1, SUNDAY) == date(2026, 5, 31)

    @pytest.mark.parametrize("position", [0, 2, -2, 5])
    def test_unsupported_positions(self, position):
        """Test positions other than +-1 give no date."""
        assert select_positional_weekday(date(2026, 1, 1), position, MONDAY) is None


class TestLocalize:
    """Test localize function."""

    def test_regular_time(self, local_tz):
        """Test an ordinary wall time."""
        result = localize(date(2026, 1, 5), time(9, 0), local_tz)
        assert result == datetime(2026, 1, 5, 9, 0, tzinfo=local_tz)

    def test_dst_gap_is_skipped(self, local_tz):
        """Test a wall time skipped by spring-forward gives None."""
        assert localize(date(2026, 3, 8), time(2, 30), local_tz) is None

    def test_ambiguous_time_is_skipped(self, local_tz):
        """Test a wall time repeated by fall-back gives None."""
        assert localize(date(2026, 11, 1), time(1, 30), local_tz) is None

    def test_fixed_offset(self):
        """Test fixed-offset zones never skip."""
        result = localize(date(2026, 3, 8), time(2, 30), timezone.utc)
        assert result == datetime(2026, 3, 8, 2, 30, tzinfo=timezone.utc)


class TestOccurrenceFilters:
    """Test is_excepted and is_valid_occurrence functions."""

    def test_exception_matches_by_date(self, at, make_event):
        """Test exceptions compare calendar dates, not timestamps."""
        event = make_event(at(2026, 1, 1, 9), "FREQ=DAILY", exceptions=[at(2026, 1, 3, 0)])

        assert is_excepted(event, at(2026, 1, 3, 9)) is True
        assert is_excepted(event, at(2026, 1, 4, 9)) is False

    def test_exception_in_other_timezone(self, at, make_event):
        """Test exceptions are compared in the occurrence's local date."""
        # 02:00 UTC on Jan 4 is still Jan 3 in New York
        exception = datetime(2026, 1, 4, 2, 0, tzinfo=timezone.utc)
        event = make_event(at(2026, 1, 1, 9), "FREQ=DAILY", exceptions=[exception])

        assert is_excepted(event, at(2026, 1, 3, 9)) is True
        assert is_excepted(event, at(2026, 1, 4, 9)) is False

    def test_before_original_start_is_invalid(self, at, make_event):
        """Test no occurrence may precede the base start."""
        event = make_event(at(2026, 1, 5, 9), "FREQ=DAILY")

        assert is_valid_occurrence(event, at(2026, 1, 5, 8)) is False
        assert is_valid_occurrence(event, at(2026, 1, 5, 9)) is True


class TestPushIfInRange:
    """Test push_if_in_range function."""

    def test_window_is_inclusive(self, at, make_event):
        """Test both window edges accept an occurrence."""
        event = make_event(at(2026, 1, 1, 9), "FREQ=DAILY")
        occurrences = []

        for start in (at(2026, 1, 2, 9), at(2026, 1, 3, 9), at(2026, 1, 3, 10)):
            push_if_in_range(occurrences, event, start, timedelta(hours=1), at(2026, 1, 2, 9), at(2026, 1, 3, 9))

        assert [o.start_time for o in occurrences] == [at(2026, 1, 2, 9), at(2026, 1, 3, 9)]

    def test_clone_keeps_fields_and_duration(self, at, make_event):
        """Test the occurrence is a shifted clone of the base event."""
        event = make_event(at(2026, 1, 1, 9), "FREQ=DAILY", id=42, location="Room 1")
        occurrences = []

        push_if_in_range(occurrences, event, at(2026, 1, 8, 9), timedelta(minutes=45), at(2026, 1, 1), at(2026, 2, 1))

        [occurrence] = occurrences
        assert occurrence.id == 42
        assert occurrence.location == "Room 1"
        assert occurrence.end_time - occurrence.start_time == timedelta(minutes=45)
        assert event.start_time == at(2026, 1, 1, 9)
