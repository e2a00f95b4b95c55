"""
Structural logger interfaces implemented by :class:`rotalog.core.Logger`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SimpleLogger(Protocol):
    """The stdlib ``log`` package style: print, printf, println."""

    def print(self, *args: Any) -> None: ...

    def printf(self, template: str, *args: Any) -> None: ...

    def println(self, *args: Any) -> None: ...


@runtime_checkable
class MultiLevelLogger(Protocol):
    """Leveled logging with plain and printf-style variants."""

    def debug(self, *args: Any) -> None: ...

    def info(self, *args: Any) -> None: ...

    def warn(self, *args: Any) -> None: ...

    def error(self, *args: Any) -> None: ...

    def fatal(self, *args: Any) -> None: ...

    def panic(self, *args: Any) -> None: ...

    def debugf(self, template: str, *args: Any) -> None: ...

    def infof(self, template: str, *args: Any) -> None: ...

    def warnf(self, template: str, *args: Any) -> None: ...

    def errorf(self, template: str, *args: Any) -> None: ...

    def fatalf(self, template: str, *args: Any) -> None: ...

    def panicf(self, template: str, *args: Any) -> None: ...
