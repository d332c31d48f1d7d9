"""
Occurrence generators, one per frequency.

Each generator walks forward from the base event's start, counts every
valid occurrence toward COUNT (including ones outside the window), and
emits clones only for starts inside [range_start, range_end]. Walking stops
at COUNT, at UNTIL, or once past range_end + horizon.
"""

from datetime import datetime, timedelta
from typing import Callable

from src.models.calendar_event import CalendarEvent
from src.services.recurrence.dates import (
    advance_month,
    is_valid_occurrence,
    localize,
    push_if_in_range,
    select_month_boundary,
    select_positional_weekday,
)
from src.services.recurrence.rules import Frequency, RecurrenceRule

# Hard termination bound past the window end
SAFETY_HORIZON = timedelta(days=365)

Generator = Callable[..., list[CalendarEvent]]


def _count_reached(rule: RecurrenceRule, count: int) -> bool:
    return rule.count is not None and count >= rule.count


def generate_daily(
    event: CalendarEvent,
    rule: RecurrenceRule,
    range_start: datetime,
    range_end: datetime,
    duration: timedelta,
    horizon: timedelta = SAFETY_HORIZON,
) -> list[CalendarEvent]:
    """
    Step by rule.interval days from the event start.

    Steps keep the wall-clock time; a day on which that time does not exist
    or is ambiguous is skipped and not counted.
    """
    occurrences: list[CalendarEvent] = []
    step = timedelta(days=rule.interval)
    limit = max(event.end_time, range_end)
    current = event.start_time
    count = 0

    while current <= limit:
        if _count_reached(rule, count):
            break
        if rule.until is not None and current.date() > rule.until:
            break

        candidate = localize(current.date(), current.time(), current.tzinfo)
        if candidate is not None and is_valid_occurrence(event, candidate):
            count += 1
            push_if_in_range(occurrences, event, candidate, duration, range_start, range_end)

        current = current + step
        if current > range_end + horizon:
            break

    return occurrences


def generate_weekly(
    event: CalendarEvent,
    rule: RecurrenceRule,
    range_start: datetime,
    range_end: datetime,
    duration: timedelta,
    horizon: timedelta = SAFETY_HORIZON,
) -> list[CalendarEvent]:
    """
    Emit the selected weekdays of every rule.interval-th week.

    COUNT counts weeks that produced at least one valid occurrence, not
    individual occurrences.
    """
    occurrences: list[CalendarEvent] = []
    if not rule.weekdays:
        return occurrences

    start = event.start_time
    at = start.time()
    week_start = start.date() - timedelta(days=start.weekday())
    stop_after = range_end.date() + horizon
    weeks = 0

    while True:
        if _count_reached(rule, weeks):
            break
        if rule.until is not None and week_start > rule.until:
            break

        week_has_occurrence = False
        for weekday in rule.weekdays:
            day = week_start + timedelta(days=weekday)
            if rule.until is not None and day > rule.until:
                continue

            candidate = localize(day, at, start.tzinfo)
            if candidate is None or not is_valid_occurrence(event, candidate):
                continue

            week_has_occurrence = True
            push_if_in_range(occurrences, event, candidate, duration, range_start, range_end)

        if week_has_occurrence:
            weeks += 1

        week_start = week_start + timedelta(weeks=rule.interval)
        if week_start > stop_after:
            break

    return occurrences


def generate_monthly(
    event: CalendarEvent,
    rule: RecurrenceRule,
    range_start: datetime,
    range_end: datetime,
    duration: timedelta,
    horizon: timedelta = SAFETY_HORIZON,
) -> list[CalendarEvent]:
    """
    Emit one occurrence per rule.interval-th month.

    The target day comes from BYMONTHDAY, then positional BYDAY, then the
    carried day of the month. The carried day is clamped to 28 after the
    first step, so an event on the 31st lands on the 28th from then on.
    """
    occurrences: list[CalendarEvent] = []
    start = event.start_time
    at = start.time()
    current = start.date()
    stop_after = range_end.date() + horizon
    count = 0

    while True:
        if _count_reached(rule, count):
            break
        if rule.until is not None and current > rule.until:
            break

        if rule.month_day is not None:
            target = select_month_boundary(current, rule.month_day)
        elif rule.position is not None:
            target = select_positional_weekday(current, *rule.position)
        else:
            target = current

        if target is not None:
            if rule.until is not None and target > rule.until:
                break

            candidate = localize(target, at, start.tzinfo)
            if candidate is not None and is_valid_occurrence(event, candidate):
                count += 1
                push_if_in_range(occurrences, event, candidate, duration, range_start, range_end)

        current = advance_month(current, rule.interval)
        if current > stop_after:
            break

    return occurrences


def generate_yearly(
    event: CalendarEvent,
    rule: RecurrenceRule,
    range_start: datetime,
    range_end: datetime,
    duration: timedelta,
    horizon: timedelta = SAFETY_HORIZON,
) -> list[CalendarEvent]:
    """
    Step by rule.interval years.

    When the same month/day does not exist in the target year (Feb 29) the
    walk advances by 365 * interval days instead, and keeps the shifted day
    from then on. Anniversaries whose wall-clock time does not exist or is
    ambiguous are skipped.
    """
    occurrences: list[CalendarEvent] = []
    current = event.start_time
    count = 0

    while True:
        if _count_reached(rule, count):
            break
        if rule.until is not None and current.date() > rule.until:
            break

        candidate = localize(current.date(), current.time(), current.tzinfo)
        if candidate is not None and is_valid_occurrence(event, candidate):
            count += 1
            push_if_in_range(occurrences, event, candidate, duration, range_start, range_end)

        try:
            current = current.replace(year=current.year + rule.interval)
        except ValueError:
            current = current + timedelta(days=365 * rule.interval)

        if current > range_end + horizon:
            break

    return occurrences


GENERATORS: dict[Frequency, Generator] = {
    Frequency.DAILY: generate_daily,
    Frequency.WEEKLY: generate_weekly,
    Frequency.MONTHLY: generate_monthly,
    Frequency.YEARLY: generate_yearly,
}
