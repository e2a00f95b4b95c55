"""
Logger Configuration.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core import Logger, create_logger, create_sentry_logger
from .formatters import DEFAULT_TIME_FORMAT
from .levels import Level, parse_level


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class LoggerSettings(BaseSettings):
    """Logger configuration, read from ``ROTALOG_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ROTALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    filename: str = Field(default="", description="Log file path; empty writes to stderr")
    max_size: int = Field(default=0, ge=0, description="Rotation threshold in MB (0 = 100 MB)")
    max_backups: int = Field(default=0, ge=0, description="Rotated files to keep (0 = all)")
    color: bool = Field(default=True, description="Colored level labels")
    format: LogFormat = Field(default=LogFormat.CONSOLE, description="Output format")
    level: Level = Field(default=Level.TRACE, description="Minimum level written")
    time_format: str = Field(default=DEFAULT_TIME_FORMAT, description="Console timestamp format")

    sentry_dsn: str | None = Field(default=None, description="Sentry DSN; enables remote reporting")
    sentry_release: str = Field(default="", description="Release reported to Sentry")
    sentry_environment: str = Field(default="", description="Environment reported to Sentry")

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: object) -> Level:
        return parse_level(value)  # type: ignore[arg-type]


def create_logger_from_settings(settings: LoggerSettings | None = None) -> Logger:
    """Create a logger from settings (loaded from the environment when omitted)."""
    settings = settings or LoggerSettings()
    options = {
        "fmt": settings.format.value,
        "level": settings.level.value,
        "time_format": settings.time_format,
    }
    if settings.sentry_dsn:
        return create_sentry_logger(
            settings.filename,
            settings.max_size,
            settings.max_backups,
            settings.color,
            settings.sentry_dsn,
            settings.sentry_release,
            settings.sentry_environment,
            **options,
        )
    return create_logger(settings.filename, settings.max_size, settings.max_backups, settings.color, **options)
