"""
The Logger facade and its constructors.
"""

from __future__ import annotations

import contextvars
import copy
import os
import sys
import threading
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal

import structlog
from structlog.typing import EventDict, WrappedLogger

from .exceptions import LoggerPanic
from .formatters import DEFAULT_TIME_FORMAT, ConsoleFormatter, JsonFormatter, normalize_exc_info
from .levels import Level, build_level_labels, parse_level
from .remote import DEFAULT_FLUSH_TIMEOUT, SentrySink, create_sentry_client
from .sinks import BaseSink, FanOutSink, WriterSink
from .writers import RotatingFileWriter, StreamWriter, Writer

LogFormat = Literal["console", "json"]


# =============================================================================
# Message Construction
# =============================================================================


def context_fields(ctx: contextvars.Context) -> dict[str, Any]:
    """Structlog context variables bound in ``ctx``, read without entering it."""
    prefix = structlog.contextvars.STRUCTLOG_KEY_PREFIX
    return {
        var.name[len(prefix) :]: value
        for var, value in ctx.items()
        if var.name.startswith(prefix) and value is not Ellipsis
    }


def sprint(*args: Any) -> str:
    """Concatenate operands, adding a space between two operands when neither is a string."""
    parts: list[str] = []
    for i, arg in enumerate(args):
        if i > 0 and not isinstance(arg, str) and not isinstance(args[i - 1], str):
            parts.append(" ")
        parts.append(str(arg))
    return "".join(parts)


def sprintln(*args: Any) -> str:
    """Join operands with single spaces."""
    return " ".join(str(arg) for arg in args)


def sprintf(template: str, *args: Any) -> str:
    """printf-style interpolation. Errors end up in the message, never raised."""
    values: Any = args
    if len(args) == 1 and isinstance(args[0], Mapping):
        values = args[0]
    try:
        return template % values
    except (TypeError, ValueError, KeyError) as exc:
        return f"{template} %!(BADFORMAT {exc}; args={args!r})"


# =============================================================================
# Structlog Processors
# =============================================================================


def add_log_level(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Use the called method name as the record level."""
    event_dict.setdefault("level", method_name)
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add a local, timezone-aware timestamp to the event."""
    event_dict["timestamp"] = datetime.now().astimezone()
    return event_dict


def capture_exc_info(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Resolve ``exc_info=True`` while still inside the ``except`` block."""
    if "exc_info" in event_dict:
        exc_info = normalize_exc_info(event_dict.pop("exc_info"))
        if exc_info is not None:
            event_dict["exc_info"] = exc_info
    return event_dict


class LevelFilter:
    """Drops events below a minimum level. Unknown levels always pass."""

    def __init__(self, minimum: Level):
        self.minimum = minimum

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        try:
            level = parse_level(event_dict["level"])
        except ValueError:
            return event_dict
        if level.severity < self.minimum.severity:
            raise structlog.DropEvent
        return event_dict


class _NopLogger:
    """Wrapped logger for structlog; output goes through sinks instead."""

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        return self._nop

    @staticmethod
    def _nop(*args: Any, **kwargs: Any) -> None:
        pass


# =============================================================================
# Logger Facade
# =============================================================================


class Logger:
    """Leveled logger writing to stderr or a rotating file, optionally mirrored to Sentry.

    Use :func:`create_logger`, :func:`create_stderr_logger` or
    :func:`create_sentry_logger` rather than instantiating this directly.
    """

    def __init__(
        self,
        writer: Writer,
        *,
        color: bool = True,
        fmt: LogFormat = "console",
        level: Level | str = Level.TRACE,
        time_format: str = DEFAULT_TIME_FORMAT,
    ) -> None:
        self._labels = build_level_labels(color)
        self._file_writer = writer if isinstance(writer, RotatingFileWriter) else None
        self._sentry_client: Any = None

        formatter = (
            JsonFormatter()
            if fmt == "json"
            else ConsoleFormatter(self._labels, time_format=time_format, use_color=color)
        )
        self._primary_sink = WriterSink(writer, formatter)
        self._sink: BaseSink = self._primary_sink

        self._logger: structlog.BoundLogger = structlog.wrap_logger(
            _NopLogger(),
            processors=[
                structlog.contextvars.merge_contextvars,
                add_log_level,
                LevelFilter(parse_level(level)),
                add_timestamp,
                capture_exc_info,
                structlog.processors.StackInfoRenderer(),
                self._render_to_sink,
            ],
            wrapper_class=structlog.BoundLogger,
            context_class=dict,
        ).bind()

    def _render_to_sink(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        """Emit to the active sink and drop the event afterwards."""
        try:
            self._sink.emit(event_dict)
        except Exception as exc:
            (sys.__stderr__ or sys.stderr).write(f"rotalog: failed to write event: {exc}\n")
        raise structlog.DropEvent

    def _attach_sink(self, sink: BaseSink) -> None:
        self._sink = FanOutSink(sink, self._primary_sink)

    # -------------------------------------------------------------------------
    # Properties and accessors
    # -------------------------------------------------------------------------

    @property
    def labels(self) -> Mapping[str, str]:
        return self._labels

    @property
    def filename(self) -> str | None:
        return self._file_writer.filename if self._file_writer else None

    @property
    def sentry_client(self) -> Any:
        return self._sentry_client

    def get_logger(self) -> structlog.BoundLogger:
        """The wrapped structlog logger, e.g. for ``.bind(...)``."""
        return self._logger

    def with_fields(self, **fields: Any) -> Logger:
        """A facade sharing this one's outputs whose records carry ``fields``."""
        clone = copy.copy(self)
        clone._logger = self._logger.bind(**fields)
        return clone

    # -------------------------------------------------------------------------
    # Output lifecycle
    # -------------------------------------------------------------------------

    def rotate(self) -> None:
        """Rotate the log file now. No-op when logging to stderr."""
        if self._file_writer is not None:
            self._file_writer.rotate()

    def flush(self, timeout: float = DEFAULT_FLUSH_TIMEOUT) -> None:
        """Flush local output and wait up to ``timeout`` seconds for Sentry delivery."""
        self._sink.flush(timeout)

    def close(self) -> None:
        self.flush()
        self._sink.close()

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    def log(self, level: Level | str, *args: Any, **fields: Any) -> None:
        """Emit one record at ``level`` without any terminal side effect."""
        getattr(self._logger, parse_level(level).value)(sprint(*args), **fields)

    def _log_in(self, ctx: contextvars.Context | None, level: Level, message: str) -> None:
        logger = self._logger if ctx is None else self._logger.bind(**context_fields(ctx))
        getattr(logger, level.value)(message)

    def _terminate(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            self.flush()
            os._exit(1)
        sys.exit(1)

    def trace(self, *args: Any) -> None:
        self._logger.trace(sprint(*args))

    def debug(self, *args: Any) -> None:
        self._logger.debug(sprint(*args))

    def info(self, *args: Any) -> None:
        self._logger.info(sprint(*args))

    def warn(self, *args: Any) -> None:
        self._logger.warn(sprint(*args))

    def error(self, *args: Any) -> None:
        self._logger.error(sprint(*args))

    def tracef(self, template: str, *args: Any) -> None:
        self._logger.trace(sprintf(template, *args))

    def debugf(self, template: str, *args: Any) -> None:
        self._logger.debug(sprintf(template, *args))

    def infof(self, template: str, *args: Any) -> None:
        self._logger.info(sprintf(template, *args))

    def warnf(self, template: str, *args: Any) -> None:
        self._logger.warn(sprintf(template, *args))

    def errorf(self, template: str, *args: Any) -> None:
        self._logger.error(sprintf(template, *args))

    warning = warn
    warningf = warnf

    def debug_ctx(self, ctx: contextvars.Context | None, *args: Any) -> None:
        """Log at debug level with the context variables bound in ``ctx``."""
        self._log_in(ctx, Level.DEBUG, sprint(*args))

    def info_ctx(self, ctx: contextvars.Context | None, *args: Any) -> None:
        self._log_in(ctx, Level.INFO, sprint(*args))

    def warn_ctx(self, ctx: contextvars.Context | None, *args: Any) -> None:
        self._log_in(ctx, Level.WARN, sprint(*args))

    def error_ctx(self, ctx: contextvars.Context | None, *args: Any) -> None:
        self._log_in(ctx, Level.ERROR, sprint(*args))

    def fatal(self, *args: Any) -> None:
        """Log at fatal level, then exit the process with status 1.

        Off the main thread the outputs are flushed and the process ends via
        ``os._exit``, since ``SystemExit`` would only stop the calling thread.
        """
        self._logger.fatal(sprint(*args))
        self._terminate()

    def fatalf(self, template: str, *args: Any) -> None:
        self._logger.fatal(sprintf(template, *args))
        self._terminate()

    def panic(self, *args: Any) -> None:
        """Log at panic level, then raise :class:`LoggerPanic`."""
        message = sprint(*args)
        self._logger.panic(message)
        raise LoggerPanic(message)

    def panicf(self, template: str, *args: Any) -> None:
        message = sprintf(template, *args)
        self._logger.panic(message)
        raise LoggerPanic(message)

    # stdlib ``log`` style helpers, logged at debug level

    def print(self, *args: Any) -> None:
        self._logger.debug(sprint(*args))

    def printf(self, template: str, *args: Any) -> None:
        self._logger.debug(sprintf(template, *args))

    def println(self, *args: Any) -> None:
        self._logger.debug(sprintln(*args))


# =============================================================================
# Constructors
# =============================================================================


def _primary_writer(filename: str, max_size: int, max_backups: int) -> Writer:
    if filename:
        return RotatingFileWriter(filename, max_size=max_size, max_backups=max_backups, compress=True)
    return StreamWriter()


def create_logger(
    filename: str = "",
    max_size: int = 0,
    max_backups: int = 0,
    color: bool = True,
    *,
    fmt: LogFormat = "console",
    level: Level | str = Level.TRACE,
    time_format: str = DEFAULT_TIME_FORMAT,
) -> Logger:
    """
    Create a console logger with automatic file rotation.

    Args:
        filename: File to write to. If empty, stderr is used.
        max_size: Size in MB before the file is rotated (0 means 100 MB).
        max_backups: Number of rotated files to keep (0 keeps all).
        color: Use ANSI colors for level labels and fields.
        fmt: "console" for human-readable lines, "json" for one JSON object per line.
        level: Minimum level written.
        time_format: strftime format for console timestamps.
    """
    return Logger(
        _primary_writer(filename, max_size, max_backups),
        color=color,
        fmt=fmt,
        level=level,
        time_format=time_format,
    )


def create_stderr_logger() -> Logger:
    """Create a colored logger on stderr, for tests and diagnostics."""
    return create_logger("", 0, 0, True)


def create_sentry_logger(
    filename: str,
    max_size: int,
    max_backups: int,
    color: bool,
    dsn: str,
    release: str = "",
    environment: str = "",
    **options: Any,
) -> Logger:
    """
    Create a logger like :func:`create_logger` whose records are also sent to Sentry.

    If the Sentry client or its log adapter cannot be created, a warning is
    logged and the console-only logger is returned. Call ``flush()`` before
    exiting so buffered Sentry events are delivered.

    Args:
        filename, max_size, max_backups, color: See :func:`create_logger`.
        dsn: Sentry DSN.
        release: Release identifier reported to Sentry.
        environment: Deployment environment reported to Sentry.
        **options: Passed through to :func:`create_logger`.
    """
    logger = create_logger(filename, max_size, max_backups, color, **options)

    try:
        client = create_sentry_client(dsn, release, environment)
        sink = SentrySink(client)
    except Exception as exc:
        logger.get_logger().warn("Sentry reporting disabled", error=str(exc))
        return logger

    logger._sentry_client = client
    logger._attach_sink(sink)
    return logger
