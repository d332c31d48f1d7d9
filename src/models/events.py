"""
Event model.

Stores one row per base event. Recurring events keep their RRULE string and
exception dates on the row; individual occurrences are never stored and are
expanded on demand by src.services.recurrence.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import BaseModel, UTCDateTime, get_json_type


class Event(BaseModel):
    """
    Represents a stored calendar event.

    Events can be:
    - One-time or recurring (via RRULE)
    - All-day or timed
    - Tagged with a category and display color
    """

    __tablename__ = "events"

    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        doc="Event title/summary"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Detailed event description"
    )

    location: Mapped[Optional[str]] = mapped_column(
        String(200),
        nullable=True,
        doc="Event location (address, room name, etc.)"
    )

    # Timing
    start_time: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        doc="Event start time"
    )

    end_time: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        doc="Event end time"
    )

    all_day: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        doc="Whether this is an all-day event"
    )

    # Presentation
    category: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        doc="Free-form category name"
    )

    color: Mapped[Optional[str]] = mapped_column(
        String(7),
        nullable=True,
        doc="Display color (#RGB or #RRGGBB)"
    )

    # Recurrence
    recurrence_rule: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        doc="iCalendar RRULE format (e.g., 'FREQ=WEEKLY;BYDAY=MO,WE,FR')"
    )

    recurrence_exceptions: Mapped[Optional[list]] = mapped_column(
        get_json_type(),
        nullable=True,
        doc="ISO-8601 timestamps of suppressed occurrences"
    )

    __table_args__ = (
        Index("idx_event_start_time", "start_time"),
        Index("idx_event_end_time", "end_time"),
    )

    def __repr__(self) -> str:
        """String representation showing title and time."""
        return f"<Event(title='{self.title}', start='{self.start_time}')>"
