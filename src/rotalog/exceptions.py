"""
Exceptions raised by the logging facade.
"""

from __future__ import annotations


class RotalogError(Exception):
    """Base class for all rotalog errors."""


class RemoteReportingError(RotalogError):
    """The Sentry log adapter could not be created."""


class LoggerPanic(RotalogError):
    """Raised by ``Logger.panic`` after the record has been written."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
