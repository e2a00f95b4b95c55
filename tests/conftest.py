import logging
import typing as t
from types import SimpleNamespace

import pytest
import structlog

from rotalog.remote import SentrySink


class FakeSentryClient:
    """Stands in for sentry_sdk.Client; records instead of sending."""

    options = None

    def __init__(self) -> None:
        self.events: list[dict[str, t.Any]] = []
        self.hints: list[t.Any] = []
        self.flushes: list[float | None] = []
        self.closed = False

    def capture_event(self, event: dict[str, t.Any], hint: t.Any = None, scope: t.Any = None) -> str:
        self.events.append(event)
        self.hints.append(hint)
        return "event-id"

    def flush(self, timeout: float | None = None, callback: t.Any = None) -> None:
        self.flushes.append(timeout)

    def close(self, timeout: float | None = None, callback: t.Any = None) -> None:
        self.closed = True


class RecordingSentrySink(SentrySink):
    """SentrySink that also remembers every event offered to it."""

    offered: list[dict[str, t.Any]] = []

    def emit(self, event_dict):
        RecordingSentrySink.offered.append(dict(event_dict))
        super().emit(event_dict)


@pytest.fixture
def fake_sentry_client() -> FakeSentryClient:
    return FakeSentryClient()


@pytest.fixture
def patch_sentry(monkeypatch, fake_sentry_client):
    """Make create_sentry_logger use the fake client and the recording sink."""
    from rotalog import core

    RecordingSentrySink.offered = []
    monkeypatch.setattr(core, "create_sentry_client", lambda dsn, release, environment: fake_sentry_client)
    monkeypatch.setattr(core, "SentrySink", RecordingSentrySink)
    return SimpleNamespace(client=fake_sentry_client, offered=RecordingSentrySink.offered)


@pytest.fixture(autouse=True)
def clear_contextvars():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    root_logger.handlers = handlers
    root_logger.setLevel(level)
