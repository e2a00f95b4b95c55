"""
Byte-stream writers: standard error and size-rotated files.
"""

from __future__ import annotations

import gzip
import logging
import os
import re
import shutil
import sys
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, TextIO

MEGABYTE = 1024 * 1024
DEFAULT_MAX_SIZE_MB = 100
BACKUP_TIME_FORMAT = "%Y-%m-%dT%H-%M-%S.%f"


class Writer(ABC):
    """Abstract base class for text writers."""

    @abstractmethod
    def write(self, data: str) -> None:
        """Write already-formatted text."""
        ...

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


class StreamWriter(Writer):
    """Writes to a text stream.

    Args:
        stream: Output stream. Defaults to whatever ``sys.stderr`` is at write time.
    """

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def write(self, data: str) -> None:
        stream = self.stream
        stream.write(data)
        stream.flush()

    def flush(self) -> None:
        self.stream.flush()


# =============================================================================
# Rotating File Writer
# =============================================================================


def _gzip_rotator(source: str, dest: str) -> None:
    with open(source, "rb") as sf, gzip.open(dest, "wb") as df:
        shutil.copyfileobj(sf, df)
    os.remove(source)


def _gzip_namer(name: str) -> str:
    return name + ".gz"


class _TimestampedRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that names backups ``<stem>-<UTC time><ext>``.

    A ``backupCount`` of 0 keeps every backup instead of disabling rotation.
    """

    def __init__(self, filename: str, max_bytes: int, backup_count: int, compress: bool):
        super().__init__(
            filename,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
            delay=True,
        )
        self.terminator = ""
        self.setFormatter(logging.Formatter("%(message)s"))
        if compress:
            self.namer = _gzip_namer
            self.rotator = _gzip_rotator

        base = Path(self.baseFilename)
        self._stem = base.stem
        self._suffix = base.suffix
        self._backup_pattern = re.compile(
            rf"^{re.escape(self._stem)}-\d{{4}}-\d{{2}}-\d{{2}}T\d{{2}}-\d{{2}}-\d{{2}}\.\d{{6}}"
            rf"{re.escape(self._suffix)}(\.gz)?$"
        )

    def _open(self) -> Any:
        Path(self.baseFilename).parent.mkdir(parents=True, exist_ok=True)
        return super()._open()

    def _backup_name(self) -> str:
        directory = os.path.dirname(self.baseFilename)
        moment = datetime.now(timezone.utc)
        while True:
            name = os.path.join(directory, f"{self._stem}-{moment.strftime(BACKUP_TIME_FORMAT)}{self._suffix}")
            if not os.path.exists(name) and not os.path.exists(self.rotation_filename(name)):
                return name
            moment += timedelta(microseconds=1)

    def backups(self) -> list[Path]:
        """Existing backup files, oldest first."""
        directory = Path(self.baseFilename).parent
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.iterdir() if self._backup_pattern.match(p.name))

    def _remove_old_backups(self) -> None:
        if self.backupCount <= 0:
            return
        backups = self.backups()
        for path in backups[: max(len(backups) - self.backupCount, 0)]:
            path.unlink(missing_ok=True)

    def doRollover(self) -> None:
        if self.stream:
            self.stream.close()
            self.stream = None  # type: ignore[assignment]
        if os.path.exists(self.baseFilename):
            self.rotate(self.baseFilename, self.rotation_filename(self._backup_name()))
        self._remove_old_backups()
        self.stream = self._open()


class RotatingFileWriter(Writer):
    """File writer with size-based rotation.

    Args:
        filename: Path of the active log file. Opened on first write.
        max_size: Rotation threshold in MB (0 means 100 MB).
        max_backups: Number of rotated files to keep (0 keeps all).
        compress: gzip rotated files.
    """

    def __init__(self, filename: str | Path, max_size: int = 0, max_backups: int = 0, compress: bool = True):
        self.filename = str(filename)
        self.max_size = max_size if max_size > 0 else DEFAULT_MAX_SIZE_MB
        self.max_backups = max(max_backups, 0)
        self._handler = _TimestampedRotatingFileHandler(
            self.filename,
            max_bytes=self.max_size * MEGABYTE,
            backup_count=self.max_backups,
            compress=compress,
        )

    def write(self, data: str) -> None:
        record = logging.LogRecord(
            name="rotalog",
            level=logging.INFO,
            pathname=self.filename,
            lineno=0,
            msg=data,
            args=None,
            exc_info=None,
        )
        self._handler.handle(record)

    def rotate(self) -> None:
        """Rotate now, regardless of the current file size. Raises OSError on failure."""
        self._handler.acquire()
        try:
            self._handler.doRollover()
        finally:
            self._handler.release()

    def backups(self) -> list[Path]:
        return self._handler.backups()

    def flush(self) -> None:
        self._handler.flush()

    def close(self) -> None:
        self._handler.close()
