"""
Exceptions raised by the event service.
"""


class EventServiceError(Exception):
    """Base exception for event service operations."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class EventNotFoundError(EventServiceError):
    """No stored event has the requested id."""

    def __init__(self, event_id: int):
        super().__init__(f"Event with id {event_id} not found")
        self.event_id = event_id


class EventValidationError(EventServiceError):
    """
    Event failed validation before being written.

    Causes:
    - Blank title
    - End time not after start time
    - Color not in #RGB / #RRGGBB form
    - Recurrence rule rejected by validate_rule()
    """


class NotRecurringError(EventServiceError):
    """A single-occurrence operation was requested on a one-off event."""
