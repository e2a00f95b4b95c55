"""
Severity levels and their console labels.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class Level(str, Enum):
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"
    PANIC = "panic"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {level: rank for rank, level in enumerate(Level)}

_ALIASES = {
    "warning": Level.WARN,
    "critical": Level.FATAL,
}

# =============================================================================
# ANSI Styles
# =============================================================================

RESET = "\x1b[0m"

LEVEL_STYLES: Mapping[Level, str] = MappingProxyType(
    {
        Level.TRACE: "",
        Level.DEBUG: "\x1b[94m",  # Bright blue
        Level.INFO: "\x1b[34m",  # Blue
        Level.WARN: "\x1b[33m",  # Yellow
        Level.ERROR: "\x1b[31m",  # Red
        Level.FATAL: "\x1b[41;37m",  # White on red
        Level.PANIC: "\x1b[101;30m",  # Black on bright red
    }
)


def parse_level(value: Level | str) -> Level:
    """Parse a level name (case-insensitive, stdlib aliases accepted)."""
    if isinstance(value, Level):
        return value
    name = str(value).strip().lower()
    if name in _ALIASES:
        return _ALIASES[name]
    try:
        return Level(name)
    except ValueError:
        raise ValueError(f"unknown log level: {value!r}") from None


def build_level_labels(color: bool) -> Mapping[str, str]:
    """Build the read-only level → label table.

    Without color every label is the plain bracketed name, e.g. ``[WARN]``.
    With color the same text is wrapped in the level's ANSI style; the
    bracketed text itself is never altered.
    """
    labels: dict[str, str] = {}
    for level in Level:
        text = f"[{level.value.upper()}]"
        style = LEVEL_STYLES[level] if color else ""
        labels[level.value] = f"{style}{text}{RESET}" if style else text
    return MappingProxyType(labels)


def resolve_label(labels: Mapping[str, str], value: Any) -> str:
    """Resolve a record's level value to its display label."""
    if value is None:
        return ""
    if isinstance(value, Level):
        value = value.value
    label = labels.get(value) if isinstance(value, str) else None
    if label is not None:
        return label
    return f"[{value}]".upper()
