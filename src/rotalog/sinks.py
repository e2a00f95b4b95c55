"""
Log sink abstractions and concrete implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from structlog.typing import EventDict

from .writers import Writer


class Formatter(Protocol):
    def format(self, event_dict: EventDict) -> str: ...


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks."""

    @abstractmethod
    def emit(self, event_dict: EventDict) -> None:
        """Emit a log event to the sink."""
        ...

    def flush(self, timeout: float | None = None) -> None:
        """Deliver anything still buffered."""

    @abstractmethod
    def close(self) -> None:
        """Close the sink and release resources."""
        ...


class WriterSink(BaseSink):
    """Formats each event as one line and hands it to a writer."""

    def __init__(self, writer: Writer, formatter: Formatter):
        self.writer = writer
        self.formatter = formatter

    def emit(self, event_dict: EventDict) -> None:
        self.writer.write(self.formatter.format(event_dict) + "\n")

    def flush(self, timeout: float | None = None) -> None:
        self.writer.flush()

    def close(self) -> None:
        self.writer.close()


class FanOutSink(BaseSink):
    """Duplicates every event to all child sinks, in order.

    Every sink gets the event even when an earlier one fails; the first
    failure is re-raised afterwards.
    """

    def __init__(self, *sinks: BaseSink):
        self.sinks = list(sinks)

    def _each(self, action: str, *args: object) -> None:
        error: Exception | None = None
        for sink in self.sinks:
            try:
                getattr(sink, action)(*args)
            except Exception as exc:
                if error is None:
                    error = exc
        if error is not None:
            raise error

    def emit(self, event_dict: EventDict) -> None:
        self._each("emit", event_dict)

    def flush(self, timeout: float | None = None) -> None:
        self._each("flush", timeout)

    def close(self) -> None:
        self._each("close")
