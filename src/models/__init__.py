"""
Models for Desk Calendar.

This module exports the database models and the in-memory event type.
"""

# Import base classes
from src.models.base import Base, BaseModel, UTCDateTime, get_json_type

# Import all models (must be imported before create_all)
from src.models.events import Event
from src.models.calendar_event import CalendarEvent, NO_RECURRENCE

# Export all for easy importing
__all__ = [
    # Base classes
    "Base",
    "BaseModel",
    "UTCDateTime",
    "get_json_type",
    # Event models
    "Event",
    "CalendarEvent",
    "NO_RECURRENCE",
]
