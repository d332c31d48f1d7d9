"""
Calendar event domain type.

CalendarEvent is the in-memory representation handed to the recurrence
engine and returned to callers. Occurrences of a recurring event are
CalendarEvent clones with shifted start/end times.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

_HEX_COLOR = re.compile(r"#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})")

# Stored rule value the event dialog writes for "does not repeat"
NO_RECURRENCE = "None"


@dataclass
class CalendarEvent:
    """
    Normalized event representation.

    Timestamps are timezone-aware and expressed in local calendar time.
    Occurrences share the id of the event they were expanded from.
    """

    id: Optional[int]
    title: str
    start_time: datetime
    end_time: datetime
    description: Optional[str] = None
    location: Optional[str] = None
    all_day: bool = False
    category: Optional[str] = None
    color: Optional[str] = None
    recurrence_rule: Optional[str] = None
    recurrence_exceptions: list[datetime] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def duration(self) -> timedelta:
        """Length of the event (end_time - start_time)."""
        return self.end_time - self.start_time

    @property
    def is_recurring(self) -> bool:
        """Whether the event carries a usable recurrence rule."""
        return bool(self.recurrence_rule) and self.recurrence_rule != NO_RECURRENCE

    def validate(self) -> None:
        """
        Check the event before it is stored.

        Raises:
            ValueError: If the title is blank, the end is not after the
                start, or the color is not a hex color
        """
        if not self.title or not self.title.strip():
            raise ValueError("Event title cannot be empty")

        if self.end_time <= self.start_time:
            raise ValueError("Event end time must be after start time")

        if self.color is not None and not _HEX_COLOR.fullmatch(self.color):
            raise ValueError("Color must be in hex format (#RRGGBB or #RGB)")
