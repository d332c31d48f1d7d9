"""
Base model definitions for SQLAlchemy.

Provides:
- UTCDateTime TypeDecorator for timezone-aware timestamps across SQLite and PostgreSQL
- BaseModel declarative base with common fields
- JSON/JSONB column factory function
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, JSON, TypeDecorator, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.config import get_settings


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored as UTC.

    SQLite drops tzinfo on storage, so values are normalized to UTC on the
    way in and naive values read back are marked as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """
        Convert an aware datetime to UTC.

        Naive datetimes are rejected: their wall time is ambiguous.
        """
        if value is None:
            return value

        if value.tzinfo is None:
            raise ValueError(f"Naive datetime cannot be stored: {value!r}")

        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        """Return an aware UTC datetime."""
        if value is None:
            return value

        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def get_json_type():
    """
    Get database-appropriate JSON column type.

    Returns:
        JSONB for PostgreSQL (with indexing support)
        JSON for SQLite (basic JSON support)
    """
    settings = get_settings()
    db_url = settings.database_url

    if "postgres" in db_url.lower():
        return JSONB
    return JSON


class Base(DeclarativeBase):
    """Declarative base for all models."""


class BaseModel(Base):
    """
    Base model with common fields for all entities.

    Provides:
    - id: auto-incrementing integer primary key
    - created_at: Timestamp of record creation
    - updated_at: Timestamp of last update (auto-updates)
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Row identifier"
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        server_default=func.now(),
        nullable=False,
        doc="Timestamp of record creation"
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=True,
        doc="Timestamp of last update"
    )

    def to_dict(self) -> dict:
        """
        Convert model instance to dictionary.

        Returns:
            Dictionary with all column values (excludes relationships)
        """
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        """String representation showing class name and ID."""
        return f"<{self.__class__.__name__}(id={self.id})>"
