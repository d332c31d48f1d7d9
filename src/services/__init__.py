"""
Service layer for Desk Calendar.

Provides:
- Recurrence expansion (RRULE handling)
- Event storage and window queries
"""

from src.services.recurrence import (
    Frequency,
    RecurrenceRule,
    SAFETY_HORIZON,
    parse_rule,
    build_rule,
    validate_rule,
    generate_occurrences,
    expand_events,
    expand_recurring_events,
    get_next_occurrence,
)

from src.services.exceptions import (
    EventServiceError,
    EventNotFoundError,
    EventValidationError,
    NotRecurringError,
)

from src.services.events import EventService

__all__ = [
    # Recurrence
    "Frequency",
    "RecurrenceRule",
    "SAFETY_HORIZON",
    "parse_rule",
    "build_rule",
    "validate_rule",
    "generate_occurrences",
    "expand_events",
    "expand_recurring_events",
    "get_next_occurrence",
    # Errors
    "EventServiceError",
    "EventNotFoundError",
    "EventValidationError",
    "NotRecurringError",
    # Event service
    "EventService",
]
