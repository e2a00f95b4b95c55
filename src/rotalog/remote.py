"""
Sentry integration: client construction and the log-event adapter.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

import sentry_sdk
from sentry_sdk.utils import event_from_exception
from structlog.typing import EventDict

from .exceptions import RemoteReportingError
from .formatters import normalize_exc_info
from .levels import Level, parse_level
from .sinks import BaseSink

DEFAULT_FLUSH_TIMEOUT = 3.0

DEFAULT_REPORTED_LEVELS = (Level.ERROR, Level.FATAL, Level.PANIC)

SENTRY_LEVELS = {
    Level.TRACE: "debug",
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warning",
    Level.ERROR: "error",
    Level.FATAL: "fatal",
    Level.PANIC: "fatal",
}

_RESERVED_KEYS = {"event", "message", "level", "timestamp", "logger", "exc_info", "exception", "stack"}


def create_sentry_client(dsn: str, release: str = "", environment: str = "") -> sentry_sdk.Client:
    """Create a standalone Sentry client (no global hub is touched).

    Raises ``sentry_sdk.utils.BadDsn`` for malformed DSNs.
    """
    return sentry_sdk.Client(
        dsn=dsn,
        release=release or None,
        environment=environment or None,
        debug=True,
        attach_stacktrace=True,
    )


class SentrySink(BaseSink):
    """Forwards log events at the configured levels to Sentry.

    Every event is offered to the sink; only ``levels`` (error, fatal and
    panic by default) are captured. Fatal and panic events flush the client
    before returning since the process is about to stop.
    """

    def __init__(
        self,
        client: sentry_sdk.Client | None,
        levels: Iterable[Level | str] = DEFAULT_REPORTED_LEVELS,
        flush_timeout: float = DEFAULT_FLUSH_TIMEOUT,
    ):
        if client is None:
            raise RemoteReportingError("a Sentry client is required")
        self.client = client
        self.levels = frozenset(parse_level(level) for level in levels)
        self.flush_timeout = flush_timeout

    def _to_sentry_event(self, event_dict: EventDict, level: Level) -> tuple[dict[str, Any], dict[str, Any] | None]:
        hint = None
        exc_info = normalize_exc_info(event_dict.get("exc_info"))
        if exc_info is not None:
            event, hint = event_from_exception(exc_info, client_options=self.client.options)
        else:
            event = {}

        timestamp = event_dict.get("timestamp")
        if not isinstance(timestamp, datetime):
            timestamp = datetime.now(timezone.utc)

        event.update(
            {
                "message": str(event_dict.get("event", "")),
                "level": SENTRY_LEVELS[level],
                "logger": str(event_dict.get("logger", "rotalog")),
                "timestamp": timestamp,
            }
        )
        extra = {k: v for k, v in event_dict.items() if k not in _RESERVED_KEYS}
        if extra:
            event["extra"] = extra
        return event, hint

    def emit(self, event_dict: EventDict) -> None:
        try:
            level = parse_level(event_dict.get("level", Level.INFO))
        except ValueError:
            return
        if level not in self.levels:
            return

        event, hint = self._to_sentry_event(event_dict, level)
        self.client.capture_event(event, hint=hint)

        if level in (Level.FATAL, Level.PANIC):
            self.client.flush(timeout=self.flush_timeout)

    def flush(self, timeout: float | None = None) -> None:
        self.client.flush(timeout=self.flush_timeout if timeout is None else timeout)

    def close(self) -> None:
        self.client.close(timeout=self.flush_timeout)
