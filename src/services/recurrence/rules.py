"""
Recurrence rule parsing.

Reads the subset of iCalendar RRULE used by the event dialog:

    FREQ=DAILY|WEEKLY|MONTHLY|YEARLY
    INTERVAL=<n>        COUNT=<n>        UNTIL=<YYYYMMDD>[THHMMSS[Z]]
    BYDAY=MO,WE,FR      (weekly)
    BYDAY=-1FR          (monthly, positional)
    BYMONTHDAY=<n>      (monthly)

Every parser is total: missing or malformed values fall back to a default
instead of raising. Keys are case-sensitive and matched by substring, the
value running up to the next ';'.
"""

import enum
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from dateutil.rrule import rrulestr

logger = logging.getLogger(__name__)

WEEKDAY_CODES = {
    "MO": 0,
    "TU": 1,
    "WE": 2,
    "TH": 3,
    "FR": 4,
    "SA": 5,
    "SU": 6,
}
CODES_BY_WEEKDAY = {index: code for code, index in WEEKDAY_CODES.items()}

_SIGNED_INT = re.compile(r"[+-]?\d+")
_UNSIGNED_INT = re.compile(r"\+?\d+")
_UNTIL = re.compile(r"(\d{4})(\d{2})(\d{2})(?:T\d{6}Z?)?")


class Frequency(str, enum.Enum):
    """Recurrence frequency. Anything unrecognized is treated as DAILY."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


@dataclass(frozen=True)
class RecurrenceRule:
    """Parsed view of a rule string."""

    frequency: Frequency
    interval: int = 1
    count: Optional[int] = None
    until: Optional[date] = None
    weekdays: tuple[int, ...] = ()
    month_day: Optional[int] = None
    position: Optional[tuple[int, int]] = None


def _value(rule: str, key: str) -> Optional[str]:
    """Return the text following KEY= up to the next ';', or None."""
    marker = f"{key}="
    idx = rule.find(marker)
    if idx == -1:
        return None
    return rule[idx + len(marker):].split(";", 1)[0]


def detect_frequency(rule: str) -> Frequency:
    """Classify a rule string, defaulting to DAILY."""
    for frequency in (Frequency.WEEKLY, Frequency.MONTHLY, Frequency.YEARLY):
        if f"FREQ={frequency.value}" in rule:
            return frequency
    return Frequency.DAILY


def parse_interval(rule: str, default: int = 1) -> int:
    """
    Parse INTERVAL.

    Any integer is accepted, including zero and negatives; clamping is left
    to parse_rule().
    """
    value = _value(rule, "INTERVAL")
    if value is None or not _SIGNED_INT.fullmatch(value):
        return default
    return int(value)


def parse_count(rule: str) -> Optional[int]:
    """Parse COUNT as an unsigned integer."""
    value = _value(rule, "COUNT")
    if value is None or not _UNSIGNED_INT.fullmatch(value):
        return None
    return int(value)


def parse_until(rule: str) -> Optional[date]:
    """
    Parse UNTIL into an inclusive end date.

    Accepts YYYYMMDD and YYYYMMDDTHHMMSS with or without a trailing Z. Only
    the date part is kept.
    """
    value = _value(rule, "UNTIL")
    if value is None:
        return None

    match = _UNTIL.fullmatch(value)
    if not match:
        return None

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_weekly_byday(rule: str, fallback: int) -> tuple[int, ...]:
    """
    Parse a weekly BYDAY list into weekday numbers (Monday = 0).

    Unknown codes are dropped. If nothing usable remains, the event's own
    weekday (fallback) is used.
    """
    value = _value(rule, "BYDAY")
    if value is None:
        return (fallback,)

    days = tuple(
        WEEKDAY_CODES[code.strip()]
        for code in value.split(",")
        if code.strip() in WEEKDAY_CODES
    )
    return days or (fallback,)


def parse_bymonthday(rule: str) -> Optional[int]:
    """Parse BYMONTHDAY as a signed integer."""
    value = _value(rule, "BYMONTHDAY")
    if value is None or not _SIGNED_INT.fullmatch(value):
        return None
    return int(value)


def parse_positional_byday(rule: str) -> Optional[tuple[int, int]]:
    """
    Parse a positional BYDAY such as '2SA' or '-1FR'.

    Returns:
        (position, weekday) or None. A bare code like 'FR' does not match.
    """
    value = _value(rule, "BYDAY")
    if value is None or len(value) <= 2:
        return None

    position, code = value[:-2], value[-2:]
    if code not in WEEKDAY_CODES or not _SIGNED_INT.fullmatch(position):
        return None
    return int(position), WEEKDAY_CODES[code]


def parse_rule(rule: str, fallback_weekday: int) -> RecurrenceRule:
    """
    Parse a rule string into a RecurrenceRule.

    Args:
        rule: Rule string (e.g. 'FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE')
        fallback_weekday: Weekday of the event start, used when a weekly
            rule names no days

    Returns:
        RecurrenceRule with an interval of at least 1
    """
    frequency = detect_frequency(rule)

    interval = parse_interval(rule, 1)
    if interval < 1:
        logger.warning(f"Clamping non-positive INTERVAL={interval} to 1 in rule {rule!r}")
        interval = 1

    return RecurrenceRule(
        frequency=frequency,
        interval=interval,
        count=parse_count(rule),
        until=parse_until(rule),
        weekdays=parse_weekly_byday(rule, fallback_weekday),
        month_day=parse_bymonthday(rule),
        position=parse_positional_byday(rule),
    )


def build_rule(rule: RecurrenceRule) -> str:
    """
    Serialize a RecurrenceRule back to a rule string.

    Weekday lists are only written for weekly rules; monthly rules write
    BYMONTHDAY or a positional BYDAY. INTERVAL is omitted when it is 1.

    Example:
        >>> build_rule(RecurrenceRule(Frequency.MONTHLY, position=(1, 1)))
        'FREQ=MONTHLY;BYDAY=1TU'
    """
    parts = [f"FREQ={rule.frequency.value}"]

    if rule.interval != 1:
        parts.append(f"INTERVAL={rule.interval}")

    if rule.frequency is Frequency.WEEKLY and rule.weekdays:
        parts.append("BYDAY=" + ",".join(CODES_BY_WEEKDAY[day] for day in rule.weekdays))
    elif rule.frequency is Frequency.MONTHLY:
        if rule.month_day is not None:
            parts.append(f"BYMONTHDAY={rule.month_day}")
        elif rule.position is not None:
            position, weekday = rule.position
            parts.append(f"BYDAY={position}{CODES_BY_WEEKDAY[weekday]}")

    if rule.count is not None:
        parts.append(f"COUNT={rule.count}")

    if rule.until is not None:
        parts.append(f"UNTIL={rule.until:%Y%m%d}")

    return ";".join(parts)


def validate_rule(rule: Optional[str]) -> tuple[bool, Optional[str]]:
    """
    Validate a rule string before it is stored.

    The expansion engine never rejects a rule; this is a stricter check for
    the write path. After the subset checks the rule is parsed with
    dateutil and must produce at least one occurrence, which catches unknown
    BYDAY codes and non-numeric BY* values.

    Args:
        rule: Rule string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not rule:
        return False, "RRULE string is empty"

    if not rule.strip():
        return False, "RRULE string is blank"

    freq = _value(rule, "FREQ")
    if freq is None:
        return False, "RRULE must contain FREQ component"

    if freq not in Frequency.__members__:
        return False, f"Unsupported FREQ value: {freq}"

    interval = _value(rule, "INTERVAL")
    if interval is not None and (not _UNSIGNED_INT.fullmatch(interval) or int(interval) < 1):
        return False, f"INTERVAL must be a positive integer, got {interval!r}"

    count = _value(rule, "COUNT")
    if count is not None and not _UNSIGNED_INT.fullmatch(count):
        return False, f"COUNT must be a non-negative integer, got {count!r}"

    if _value(rule, "UNTIL") is not None and parse_until(rule) is None:
        return False, "UNTIL must be YYYYMMDD or YYYYMMDDTHHMMSS[Z]"

    # Spaces are trimmed by the parsers; UNTIL is read without its timezone
    dummy_start = datetime(1970, 1, 1, 12, 0, 0)
    try:
        parsed = rrulestr(rule.replace(" ", ""), dtstart=dummy_start, ignoretz=True)
        if parsed.after(dummy_start, inc=True) is None:
            return False, "RRULE generates no occurrences"
    except (ValueError, TypeError, KeyError, OverflowError) as e:
        return False, f"Invalid RRULE: {e}"

    return True, None
