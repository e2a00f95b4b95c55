"""
Rotalog: a leveled logging facade.

Provides one Logger object built from a few parameters:
- stderr or a size-rotated, gzip-compressed log file
- colored console lines (or JSON)
- optional mirroring of error-level records to Sentry

Library: structlog for the record pipeline, orjson for JSON output,
sentry-sdk for remote reporting.
"""

from .config import LoggerSettings, create_logger_from_settings
from .core import Logger, create_logger, create_sentry_logger, create_stderr_logger
from .exceptions import LoggerPanic, RemoteReportingError, RotalogError
from .interceptors import RedirectStdLibHandler, intercept_stdlib_logging
from .interfaces import MultiLevelLogger, SimpleLogger
from .levels import Level

__all__ = [
    "Level",
    "Logger",
    "LoggerPanic",
    "LoggerSettings",
    "MultiLevelLogger",
    "RedirectStdLibHandler",
    "RemoteReportingError",
    "RotalogError",
    "SimpleLogger",
    "create_logger",
    "create_logger_from_settings",
    "create_sentry_logger",
    "create_stderr_logger",
    "intercept_stdlib_logging",
]
