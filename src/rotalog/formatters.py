"""
Record formatters and color utilities.
"""

from __future__ import annotations

import sys
import traceback
from datetime import datetime
from typing import Any, Mapping

import orjson
from structlog.typing import EventDict

from .levels import RESET, resolve_label

DEFAULT_TIME_FORMAT = "%Y/%d/%m %H:%M:%S"

COLORS = {
    "reset": RESET,
    "bold": "\x1b[1m",
    "dim": "\x1b[2m",
    "timestamp": "\x1b[90m",
    "logger": "\x1b[35m",
    "key": "\x1b[36m",
    "error": "\x1b[31m",
}


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text."""
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


def orjson_dumps(v: Any, *, default: Any = None) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC).decode()


def format_exception(exc_info: Any) -> str | None:
    """Render ``exc_info`` (True, an exception or a sys.exc_info() tuple) as a traceback."""
    exc_info = normalize_exc_info(exc_info)
    if exc_info is None:
        return None
    return "".join(traceback.format_exception(*exc_info)).rstrip("\n")


def normalize_exc_info(exc_info: Any) -> tuple[Any, Any, Any] | None:
    """Turn the accepted ``exc_info`` spellings into a sys.exc_info() tuple."""
    if not exc_info:
        return None
    if isinstance(exc_info, BaseException):
        return (type(exc_info), exc_info, exc_info.__traceback__)
    if exc_info is True:
        exc_info = sys.exc_info()
    if not isinstance(exc_info, tuple) or exc_info[0] is None:
        return None
    return exc_info


# =============================================================================
# Console Formatter
# =============================================================================


class ConsoleFormatter:
    """Renders an event dict as one human-readable line.

    Layout: ``<timestamp> <level label> <message> key=value ...`` with extra
    fields sorted by key. A traceback, if any, follows on the next lines.
    """

    EXCLUDED_KEYS = {"level", "event", "message", "timestamp", "exc_info", "exception", "stack"}

    def __init__(
        self,
        labels: Mapping[str, str],
        *,
        time_format: str = DEFAULT_TIME_FORMAT,
        use_color: bool = True,
    ) -> None:
        self._labels = labels
        self._time_format = time_format
        self._use_color = use_color

    def _maybe_color(self, text: str, color: str) -> str:
        if not self._use_color:
            return text
        return colorize(text, color)

    def _format_timestamp(self, value: Any) -> str:
        if isinstance(value, datetime):
            return value.strftime(self._time_format)
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00")).astimezone().strftime(self._time_format)
            except ValueError:
                return value
        return datetime.now().strftime(self._time_format)

    def format(self, event_dict: EventDict) -> str:
        """Format an event dict into a single console line."""
        parts = [self._maybe_color(self._format_timestamp(event_dict.get("timestamp")), "timestamp")]

        label = resolve_label(self._labels, event_dict.get("level"))
        if label:
            parts.append(label)

        message = event_dict.get("event", event_dict.get("message", ""))
        if message is not None and message != "":
            parts.append(str(message))

        for key in sorted(k for k in event_dict if k not in self.EXCLUDED_KEYS):
            color = "error" if key == "error" else "dim"
            key_text = self._maybe_color(f"{key}=", "key")
            parts.append(f"{key_text}{self._maybe_color(str(event_dict[key]), color)}")

        line = " ".join(parts)

        extra_lines = [
            text
            for text in (
                event_dict.get("stack"),
                event_dict.get("exception") or format_exception(event_dict.get("exc_info")),
            )
            if text
        ]
        if extra_lines:
            line = "\n".join([line, *extra_lines])
        return line


# =============================================================================
# JSON Formatter
# =============================================================================


class JsonFormatter:
    """Renders an event dict as one JSON object."""

    def format(self, event_dict: EventDict) -> str:
        payload = {k: v for k, v in event_dict.items() if k not in {"event", "exc_info"}}
        payload["message"] = event_dict.get("event", event_dict.get("message", ""))
        exception = event_dict.get("exception") or format_exception(event_dict.get("exc_info"))
        if exception:
            payload["exception"] = exception
        return orjson_dumps(payload, default=str)
