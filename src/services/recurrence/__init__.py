"""
Recurrence expansion engine.

Expands events carrying an RRULE string into concrete occurrences for a
date window. See expansion.expand_recurring_events for the entry point.
"""

from src.services.recurrence.rules import (
    Frequency,
    RecurrenceRule,
    detect_frequency,
    parse_interval,
    parse_count,
    parse_until,
    parse_weekly_byday,
    parse_bymonthday,
    parse_positional_byday,
    parse_rule,
    build_rule,
    validate_rule,
)
from src.services.recurrence.generators import (
    GENERATORS,
    SAFETY_HORIZON,
    generate_daily,
    generate_weekly,
    generate_monthly,
    generate_yearly,
)
from src.services.recurrence.expansion import (
    generate_occurrences,
    expand_events,
    expand_recurring_events,
    get_next_occurrence,
)

__all__ = [
    # Rules
    "Frequency",
    "RecurrenceRule",
    "detect_frequency",
    "parse_interval",
    "parse_count",
    "parse_until",
    "parse_weekly_byday",
    "parse_bymonthday",
    "parse_positional_byday",
    "parse_rule",
    "build_rule",
    "validate_rule",
    # Generators
    "GENERATORS",
    "SAFETY_HORIZON",
    "generate_daily",
    "generate_weekly",
    "generate_monthly",
    "generate_yearly",
    # Expansion
    "generate_occurrences",
    "expand_events",
    "expand_recurring_events",
    "get_next_occurrence",
]
