"""
Interceptors for capturing standard library logs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from .levels import Level

if TYPE_CHECKING:
    from .core import Logger

# Never forwarded: these log from inside the facade's own pipeline.
_SKIPPED_PREFIXES = ("structlog", "sentry_sdk", "rotalog")


def _level_for(levelno: int) -> Level:
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    if levelno >= logging.DEBUG:
        return Level.DEBUG
    return Level.TRACE


class RedirectStdLibHandler(logging.Handler):
    """
    Redirect standard library logging records to a Logger facade.

    CRITICAL records are logged at error level: a third-party library must
    not be able to exit or panic the process through the bridge.
    """

    def __init__(self, logger: Logger, level: int = logging.NOTSET):
        super().__init__(level)
        self.logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.name.startswith(_SKIPPED_PREFIXES):
                return

            fields = {"logger": record.name}
            if record.exc_info and record.exc_info[0] is not None:
                fields["exc_info"] = record.exc_info  # type: ignore[assignment]

            self.logger.log(_level_for(record.levelno), record.getMessage(), **fields)
        except Exception:
            self.handleError(record)


def intercept_stdlib_logging(logger: Logger, level: int | str = logging.INFO, names: Iterable[str] = ()) -> None:
    """Route stdlib logging into ``logger``.

    The root logger's handlers are replaced by a RedirectStdLibHandler; the
    loggers in ``names`` lose their own handlers and propagate to root.
    """
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.addHandler(RedirectStdLibHandler(logger))
    root_logger.setLevel(level)

    for name in names:
        lg = logging.getLogger(name)
        lg.handlers = []
        lg.propagate = True
