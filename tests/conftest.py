"""
Pytest configuration and fixtures for Desk Calendar tests.

Provides database session fixtures, settings, and event factories.
"""

from datetime import datetime, timedelta
from typing import Callable, Generator, Optional

import pytest
import sqlalchemy as sa
from dateutil import tz
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.config import Settings
from src.models.base import Base
from src.models.calendar_event import CalendarEvent

LOCAL_TZ_NAME = "America/New_York"


@pytest.fixture
def local_tz():
    """Timezone used as local calendar time throughout the tests."""
    return tz.gettz(LOCAL_TZ_NAME)


@pytest.fixture
def at(local_tz) -> Callable[..., datetime]:
    """
    Build local timestamps.

    Usage:
        at(2026, 1, 5, 9)  # 2026-01-05 09:00 local
    """
    def _at(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
        return datetime(year, month, day, hour, minute, tzinfo=local_tz)

    return _at


@pytest.fixture
def make_event() -> Callable[..., CalendarEvent]:
    """
    Factory for base events.

    Defaults to a one-hour event with id 1.
    """
    def _make(
        start: datetime,
        rule: Optional[str] = None,
        end: Optional[datetime] = None,
        exceptions: Optional[list[datetime]] = None,
        **kwargs,
    ) -> CalendarEvent:
        kwargs.setdefault("id", 1)
        kwargs.setdefault("title", "Standup")
        return CalendarEvent(
            start_time=start,
            end_time=end or start + timedelta(hours=1),
            recurrence_rule=rule,
            recurrence_exceptions=list(exceptions or []),
            **kwargs,
        )

    return _make


@pytest.fixture
def settings() -> Settings:
    """Settings with the test timezone and no .env file."""
    return Settings(_env_file=None, timezone=LOCAL_TZ_NAME)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a clean database session for each test.

    Uses an in-memory SQLite database that is torn down after each test.
    All changes are rolled back, ensuring test isolation.

    Yields:
        Session: SQLAlchemy session for database operations
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as connection:
            connection.execute(sa.text("PRAGMA foreign_keys=OFF"))
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
