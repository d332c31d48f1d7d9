"""
Event service - storage operations and window expansion for events.

Wraps a SQLAlchemy session and converts between stored Event rows and
CalendarEvent values in local time. The session's transaction is owned by
the caller (see src.database.get_db_context); the service only flushes.
"""

import logging
from datetime import datetime, time, tzinfo
from typing import Optional, Sequence

from dateutil.parser import isoparse
from sqlalchemy import select, and_, or_
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.models.calendar_event import CalendarEvent, NO_RECURRENCE
from src.models.events import Event
from src.services.exceptions import (
    EventNotFoundError,
    EventValidationError,
    NotRecurringError,
)
from src.services.recurrence import expand_recurring_events, validate_rule
from src.services.recurrence.dates import localize

logger = logging.getLogger(__name__)


def serialize_exceptions(exceptions: Sequence[datetime]) -> Optional[list[str]]:
    """Store exception timestamps as ISO-8601 strings."""
    if not exceptions:
        return None
    return [exception.isoformat() for exception in exceptions]


def deserialize_exceptions(values: Optional[list], zone: tzinfo) -> list[datetime]:
    """
    Parse stored exception strings into local timestamps.

    Values that fail to parse are skipped; naive values are read as local.
    """
    parsed = []
    for value in values or []:
        try:
            moment = isoparse(value)
        except (TypeError, ValueError):
            logger.warning(f"Skipping unparsable recurrence exception {value!r}")
            continue

        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=zone)
        parsed.append(moment.astimezone(zone))
    return parsed


class EventService:
    """
    Event storage and expansion over a database session.

    Usage:
        with get_db_context() as db:
            service = EventService(db)
            week = service.expand_recurring_events(monday, sunday)
    """

    def __init__(self, session: Session, settings: Optional[Settings] = None):
        self._session = session
        self._settings = settings or get_settings()
        self._timezone = self._settings.local_timezone

    # =========================================================================
    # Conversion
    # =========================================================================

    def _to_local(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return value.astimezone(self._timezone)

    def _to_calendar_event(self, row: Event) -> CalendarEvent:
        return CalendarEvent(
            id=row.id,
            title=row.title,
            description=row.description,
            location=row.location,
            start_time=self._to_local(row.start_time),
            end_time=self._to_local(row.end_time),
            all_day=row.all_day,
            category=row.category,
            color=row.color,
            recurrence_rule=row.recurrence_rule,
            recurrence_exceptions=deserialize_exceptions(row.recurrence_exceptions, self._timezone),
            created_at=self._to_local(row.created_at),
            updated_at=self._to_local(row.updated_at),
        )

    @staticmethod
    def _apply(row: Event, event: CalendarEvent) -> None:
        row.title = event.title
        row.description = event.description
        row.location = event.location
        row.start_time = event.start_time
        row.end_time = event.end_time
        row.all_day = event.all_day
        row.category = event.category
        row.color = event.color
        row.recurrence_rule = event.recurrence_rule
        row.recurrence_exceptions = serialize_exceptions(event.recurrence_exceptions)

    @staticmethod
    def _validate(event: CalendarEvent) -> None:
        try:
            event.validate()
        except ValueError as e:
            raise EventValidationError(str(e), original_error=e) from e

        if event.is_recurring:
            is_valid, error = validate_rule(event.recurrence_rule)
            if not is_valid:
                raise EventValidationError(f"Invalid recurrence rule: {error}")

    def _get_row(self, event_id: int) -> Event:
        row = self._session.get(Event, event_id)
        if row is None:
            raise EventNotFoundError(event_id)
        return row

    # =========================================================================
    # CRUD
    # =========================================================================

    def create(self, event: CalendarEvent) -> CalendarEvent:
        """
        Store a new event.

        Args:
            event: Event to create (its id is ignored)

        Returns:
            The stored event with its database-assigned id

        Raises:
            EventValidationError: If the event fails validation
        """
        self._validate(event)

        row = Event()
        self._apply(row, event)
        self._session.add(row)
        self._session.flush()

        logger.info(f"Created event {row.id}: {row.title!r}")
        return self._to_calendar_event(row)

    def get(self, event_id: int) -> Optional[CalendarEvent]:
        """Retrieve an event by id, or None."""
        row = self._session.get(Event, event_id)
        if row is None:
            return None
        return self._to_calendar_event(row)

    def update(self, event: CalendarEvent) -> CalendarEvent:
        """
        Overwrite a stored event with new values.

        Raises:
            EventValidationError: If the event has no id or fails validation
            EventNotFoundError: If no event has that id
        """
        if event.id is None:
            raise EventValidationError("Event id is required for update")

        self._validate(event)

        row = self._get_row(event.id)
        self._apply(row, event)
        self._session.flush()

        logger.info(f"Updated event {row.id}")
        return self._to_calendar_event(row)

    def delete(self, event_id: int) -> None:
        """
        Delete an event and, if recurring, all of its occurrences.

        Raises:
            EventNotFoundError: If no event has that id
        """
        row = self._get_row(event_id)
        self._session.delete(row)
        self._session.flush()
        logger.info(f"Deleted event {event_id}")

    def delete_occurrence(self, event_id: int, occurrence_date: datetime) -> CalendarEvent:
        """
        Suppress one occurrence of a recurring event.

        Adds occurrence_date to the event's exceptions. For all-day events the
        exception is normalized to local midnight. Adding an exception that is
        already present is a no-op.

        Raises:
            EventNotFoundError: If no event has that id
            NotRecurringError: If the event has no recurrence rule
        """
        event = self._to_calendar_event(self._get_row(event_id))

        if not event.is_recurring:
            raise NotRecurringError("Event is not recurring, use delete() instead")

        exception = occurrence_date.astimezone(self._timezone)
        if event.all_day:
            exception = localize(exception.date(), time(0, 0), self._timezone) or exception

        if exception in event.recurrence_exceptions:
            return event

        event.recurrence_exceptions = [*event.recurrence_exceptions, exception]
        logger.info(f"Adding exception {exception.isoformat()} to event {event_id}")
        return self.update(event)

    # =========================================================================
    # Queries
    # =========================================================================

    def list_all(self) -> list[CalendarEvent]:
        """List every event ordered by start time."""
        stmt = select(Event).order_by(Event.start_time)
        return [self._to_calendar_event(row) for row in self._session.scalars(stmt)]

    def search(self, query: str) -> list[CalendarEvent]:
        """
        Find events whose title, description, location or category contains
        query (case-insensitive). A blank query matches nothing.
        """
        if not query.strip():
            return []

        pattern = f"%{query.lower()}%"
        stmt = (
            select(Event)
            .where(
                or_(
                    Event.title.ilike(pattern),
                    Event.description.ilike(pattern),
                    Event.location.ilike(pattern),
                    Event.category.ilike(pattern),
                )
            )
            .order_by(Event.start_time)
        )
        return [self._to_calendar_event(row) for row in self._session.scalars(stmt)]

    def find_by_date_range(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """
        Get base events relevant to a window.

        Returns events whose [start_time, end_time] overlaps the window, plus
        every recurring event that starts on or before the window end, since
        its occurrences may land inside the window.

        Args:
            start: Window start (inclusive)
            end: Window end (inclusive)

        Returns:
            Base events (not expanded) ordered by start time
        """
        stmt = (
            select(Event)
            .where(
                or_(
                    and_(
                        Event.start_time <= end,
                        Event.end_time >= start,
                    ),
                    and_(
                        Event.recurrence_rule.is_not(None),
                        Event.recurrence_rule != "",
                        Event.recurrence_rule != NO_RECURRENCE,
                        Event.start_time <= end,
                    ),
                )
            )
            .order_by(Event.start_time)
        )
        return [self._to_calendar_event(row) for row in self._session.scalars(stmt)]

    def expand_recurring_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """
        Get every event and occurrence starting in a window, ordered by start.

        Non-recurring events overlapping the window are returned as stored.
        """
        return expand_recurring_events(
            start,
            end,
            self.find_by_date_range,
            horizon=self._settings.recurrence_horizon,
        )
