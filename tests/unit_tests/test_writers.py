"""
Stream and rotating file writer tests.
"""

from __future__ import annotations

import gzip
import io
from pathlib import Path

import pytest

from rotalog.writers import DEFAULT_MAX_SIZE_MB, MEGABYTE, RotatingFileWriter, StreamWriter


class TestStreamWriter:
    def test_writes_to_given_stream(self) -> None:
        stream = io.StringIO()
        StreamWriter(stream).write("line\n")
        assert stream.getvalue() == "line\n"

    def test_defaults_to_current_stderr(self, capsys) -> None:
        StreamWriter().write("to stderr\n")
        captured = capsys.readouterr()
        assert captured.err == "to stderr\n"
        assert captured.out == ""


class TestRotatingFileWriterSetup:
    def test_file_is_not_created_before_first_write(self, tmp_path: Path) -> None:
        path = tmp_path / "logs" / "app.log"
        writer = RotatingFileWriter(path)
        assert not path.exists()
        writer.write("first\n")
        writer.close()
        assert path.read_text() == "first\n"

    def test_zero_max_size_uses_default(self, tmp_path: Path) -> None:
        writer = RotatingFileWriter(tmp_path / "app.log", max_size=0)
        assert writer.max_size == DEFAULT_MAX_SIZE_MB

    def test_appends_to_existing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        path.write_text("old\n")
        writer = RotatingFileWriter(path)
        writer.write("new\n")
        writer.close()
        assert path.read_text() == "old\nnew\n"


class TestManualRotation:
    def test_rotate_moves_current_file_to_compressed_backup(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        writer = RotatingFileWriter(path, max_size=10)
        writer.write("before rotation\n")
        writer.rotate()
        writer.write("after rotation\n")
        writer.close()

        backups = writer.backups()
        assert len(backups) == 1
        assert backups[0].name.startswith("app-")
        assert backups[0].name.endswith(".log.gz")
        with gzip.open(backups[0], "rt") as fh:
            assert fh.read() == "before rotation\n"
        assert path.read_text() == "after rotation\n"

    def test_rotate_without_compression_keeps_plain_backup(self, tmp_path: Path) -> None:
        writer = RotatingFileWriter(tmp_path / "app.log", compress=False)
        writer.write("x\n")
        writer.rotate()
        writer.close()
        backups = writer.backups()
        assert [b.suffix for b in backups] == [".log"]
        assert backups[0].read_text() == "x\n"

    def test_rotate_without_existing_file_creates_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        writer = RotatingFileWriter(path)
        writer.rotate()
        writer.close()
        assert path.exists()
        assert writer.backups() == []

    def test_max_backups_keeps_newest(self, tmp_path: Path) -> None:
        writer = RotatingFileWriter(tmp_path / "app.log", max_backups=2)
        for i in range(4):
            writer.write(f"generation {i}\n")
            writer.rotate()
        writer.close()

        backups = writer.backups()
        assert len(backups) == 2
        contents = []
        for backup in backups:
            with gzip.open(backup, "rt") as fh:
                contents.append(fh.read())
        assert contents == ["generation 2\n", "generation 3\n"]

    def test_zero_max_backups_keeps_all(self, tmp_path: Path) -> None:
        writer = RotatingFileWriter(tmp_path / "app.log", max_backups=0)
        for i in range(5):
            writer.write(f"{i}\n")
            writer.rotate()
        writer.close()
        assert len(writer.backups()) == 5

    def test_unrelated_files_are_not_pruned(self, tmp_path: Path) -> None:
        other = tmp_path / "app-server.log"
        other.write_text("keep me")
        writer = RotatingFileWriter(tmp_path / "app.log", max_backups=1)
        for _ in range(3):
            writer.write("x\n")
            writer.rotate()
        writer.close()
        assert other.read_text() == "keep me"

    def test_rotate_reports_io_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        writer = RotatingFileWriter(blocker / "app.log")
        with pytest.raises(OSError):
            writer.rotate()


@pytest.mark.slow
class TestAutomaticRotation:
    def test_exceeding_threshold_rotates(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        writer = RotatingFileWriter(path, max_size=1, max_backups=1)
        line = "x" * 1023 + "\n"
        for _ in range(int(1.5 * MEGABYTE / len(line))):
            writer.write(line)
        writer.close()

        assert len(writer.backups()) == 1
        assert path.stat().st_size < MEGABYTE
