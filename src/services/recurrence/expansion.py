"""
Recurrence expansion.

Turns base events into the concrete occurrences that start inside a window.
Expansion is a pure function of (events, window): nothing is cached and the
inputs are never mutated.
"""

import logging
from datetime import datetime, timedelta
from operator import attrgetter
from typing import Callable, Iterable, Optional, Sequence

from src.models.calendar_event import CalendarEvent
from src.services.recurrence.generators import GENERATORS, SAFETY_HORIZON
from src.services.recurrence.rules import Frequency, RecurrenceRule, parse_rule

logger = logging.getLogger(__name__)

EventSource = Callable[[datetime, datetime], Sequence[CalendarEvent]]

# Longest possible gap between occurrences, per unit of INTERVAL
_PERIOD_DAYS = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
    Frequency.MONTHLY: 31,
    Frequency.YEARLY: 366,
}


def _period(rule: RecurrenceRule) -> timedelta:
    return timedelta(days=_PERIOD_DAYS[rule.frequency] * rule.interval)


def generate_occurrences(
    event: CalendarEvent,
    range_start: datetime,
    range_end: datetime,
    horizon: timedelta = SAFETY_HORIZON,
) -> list[CalendarEvent]:
    """
    Expand one recurring event into occurrences within a window.

    Args:
        event: Base event carrying a recurrence rule
        range_start: Window start (inclusive)
        range_end: Window end (inclusive)
        horizon: How far past range_end generators may walk

    Returns:
        Occurrences in generation order, or [] if the event does not recur
    """
    if not event.is_recurring:
        return []

    rule = parse_rule(event.recurrence_rule, event.start_time.weekday())
    generate = GENERATORS[rule.frequency]

    occurrences = generate(
        event,
        rule,
        range_start,
        range_end,
        event.duration,
        horizon=horizon,
    )
    logger.debug(
        f"Expanded event {event.id} ({rule.frequency.value}) "
        f"into {len(occurrences)} occurrence(s)"
    )
    return occurrences


def expand_events(
    events: Iterable[CalendarEvent],
    range_start: datetime,
    range_end: datetime,
    horizon: timedelta = SAFETY_HORIZON,
) -> list[CalendarEvent]:
    """
    Expand base events into a start-ordered list for a window.

    Non-recurring events are passed through unchanged. Sorting is stable, so
    occurrences with equal starts keep their input order.
    """
    expanded: list[CalendarEvent] = []

    for event in events:
        if event.is_recurring:
            expanded.extend(generate_occurrences(event, range_start, range_end, horizon))
        else:
            expanded.append(event)

    expanded.sort(key=attrgetter("start_time"))
    return expanded


def expand_recurring_events(
    range_start: datetime,
    range_end: datetime,
    find_events: EventSource,
    horizon: timedelta = SAFETY_HORIZON,
) -> list[CalendarEvent]:
    """
    Load base events for a window and expand them.

    Args:
        range_start: Window start (inclusive)
        range_end: Window end (inclusive)
        find_events: Returns base events overlapping the window, plus
            recurring events that started before it
        horizon: How far past range_end generators may walk

    Returns:
        Occurrences and one-off events ordered by start time
    """
    return expand_events(find_events(range_start, range_end), range_start, range_end, horizon)


def get_next_occurrence(
    event: CalendarEvent,
    after: datetime,
    horizon: timedelta = SAFETY_HORIZON,
) -> Optional[CalendarEvent]:
    """
    Find the first occurrence starting at or after a moment.

    Used by countdown cards. Looks one horizon ahead of after, widened to
    two periods of the rule so long intervals and a single suppressed
    occurrence do not hide the next one.

    Returns:
        The occurrence, the event itself if it is a future one-off, or None
    """
    if not event.is_recurring:
        return event if event.start_time >= after else None

    rule = parse_rule(event.recurrence_rule, event.start_time.weekday())
    lookahead = max(horizon, 2 * _period(rule))

    occurrences = generate_occurrences(event, after, after + lookahead, horizon)
    return min(occurrences, key=attrgetter("start_time"), default=None)
