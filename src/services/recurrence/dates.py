"""
Date helpers shared by the recurrence generators.
"""

from dataclasses import replace
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from dateutil import tz

from src.models.calendar_event import CalendarEvent


def advance_month(current: date, interval: int) -> date:
    """
    Move a date forward by whole months using carry arithmetic.

    The day is clamped to 28 so the result always exists; a date that still
    cannot be built (year out of range) falls back to +30 days.
    """
    months = current.month + interval
    year = current.year + (months - 1) // 12
    month = (months - 1) % 12 + 1

    try:
        return date(year, month, min(current.day, 28))
    except ValueError:
        return current + timedelta(days=30)


def _last_day_of_month(current: date) -> date:
    return advance_month(current.replace(day=1), 1) - timedelta(days=1)


def select_month_boundary(current: date, flag: int) -> date:
    """
    Resolve a BYMONTHDAY value within the month of current.

    1 selects the first day, -1 the last day; any other value keeps current.
    """
    if flag == 1:
        return current.replace(day=1)
    if flag == -1:
        return _last_day_of_month(current)
    return current


def select_positional_weekday(current: date, position: int, weekday: int) -> Optional[date]:
    """
    Find the first (position 1) or last (position -1) given weekday in the
    month of current. Other positions are not supported and give None.
    """
    if position == 1:
        first = current.replace(day=1)
        return first + timedelta(days=(weekday - first.weekday()) % 7)
    if position == -1:
        last = _last_day_of_month(current)
        return last - timedelta(days=(last.weekday() - weekday) % 7)
    return None


def localize(day: date, at: time, zone: Optional[tzinfo]) -> Optional[datetime]:
    """
    Combine a date and wall-clock time in zone.

    Returns None when the wall time falls in a DST gap or is ambiguous.
    """
    candidate = datetime.combine(day, at, tzinfo=zone)
    if zone is None:
        return candidate
    if not tz.datetime_exists(candidate) or tz.datetime_ambiguous(candidate):
        return None
    return candidate


def is_excepted(event: CalendarEvent, start: datetime) -> bool:
    """Check whether start falls on one of the event's exception dates."""
    day = start.date()
    for exception in event.recurrence_exceptions:
        if exception.tzinfo is not None and start.tzinfo is not None:
            exception = exception.astimezone(start.tzinfo)
        if exception.date() == day:
            return True
    return False


def is_valid_occurrence(event: CalendarEvent, start: datetime) -> bool:
    """An occurrence may not precede the base event or land on an exception."""
    if start < event.start_time:
        return False
    return not is_excepted(event, start)


def push_if_in_range(
    occurrences: list[CalendarEvent],
    event: CalendarEvent,
    start: datetime,
    duration: timedelta,
    range_start: datetime,
    range_end: datetime,
) -> None:
    """Append a shifted clone of event when start lies inside the window."""
    if range_start <= start <= range_end:
        occurrences.append(replace(event, start_time=start, end_time=start + duration))
