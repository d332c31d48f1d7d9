"""
Configuration management for Desk Calendar.

Uses Pydantic Settings for type-safe environment variable loading.
Configured via .env file in project root.
"""

from datetime import timedelta, tzinfo
from functools import lru_cache
from typing import Literal

from dateutil import tz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via .env file or environment variables.
    """

    # Python & Application
    python_env: Literal["development", "production"] = Field(
        default="development",
        description="Application environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./data/calendar.db",
        description="Database connection URL"
    )

    # Timezone Configuration
    timezone: str = Field(
        default="UTC",
        description="Local calendar timezone (IANA timezone name, e.g., Europe/London)"
    )

    # Recurrence expansion
    recurrence_horizon_days: int = Field(
        default=365,
        gt=0,
        description="Days past the window end after which recurrence generators stop walking"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        if tz.gettz(value) is None:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.python_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.python_env == "production"

    @property
    def uses_sqlite(self) -> bool:
        """Check if SQLite is the configured database."""
        return "sqlite" in self.database_url.lower()

    @property
    def local_timezone(self) -> tzinfo:
        """Resolve the configured timezone name to a tzinfo."""
        return tz.gettz(self.timezone)

    @property
    def recurrence_horizon(self) -> timedelta:
        """Safety horizon handed to the recurrence generators."""
        return timedelta(days=self.recurrence_horizon_days)

    @property
    def sql_echo(self) -> bool:
        """Log SQL statements only when debugging in development."""
        return self.is_development and self.log_level == "DEBUG"

    def validate_production_config(self) -> None:
        """
        Validate configuration for production environment.

        Raises:
            ValueError: If required production settings are missing or invalid
        """
        if not self.is_production:
            return

        errors = []

        # Calendar data must outlive the process
        if self.uses_sqlite and ":memory:" in self.database_url:
            errors.append(
                "Production requires a persistent database. "
                "Set DATABASE_URL to a SQLite file or PostgreSQL connection string."
            )

        if self.log_level == "DEBUG":
            errors.append("LOG_LEVEL=DEBUG is not allowed in production.")

        if errors:
            raise ValueError("Production configuration errors:\n- " + "\n- ".join(errors))


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure we only load settings once.
    Use this function throughout the application to access settings.

    Returns:
        Settings instance loaded from environment

    Example:
        >>> from src.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.database_url)
    """
    return Settings()
