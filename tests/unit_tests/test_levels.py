"""
Level label table tests.
"""

from __future__ import annotations

import pytest

from rotalog.levels import Level, build_level_labels, parse_level, resolve_label

ALL_LEVELS = ["trace", "debug", "info", "warn", "error", "fatal", "panic"]


class TestPlainLabels:
    """Labels without color"""

    @pytest.mark.parametrize("name", ALL_LEVELS)
    def test_label_is_bracketed_uppercase(self, name: str) -> None:
        labels = build_level_labels(False)
        assert labels[name] == f"[{name.upper()}]"

    def test_no_escape_sequences(self) -> None:
        labels = build_level_labels(False)
        assert all("\x1b" not in label for label in labels.values())

    def test_table_is_fully_populated(self) -> None:
        assert set(build_level_labels(False)) == set(ALL_LEVELS)


class TestColoredLabels:
    """Labels with color"""

    @pytest.mark.parametrize("name", ALL_LEVELS)
    def test_colored_label_wraps_plain_text(self, name: str) -> None:
        labels = build_level_labels(True)
        assert f"[{name.upper()}]" in labels[name]

    def test_styled_levels_carry_escape_codes(self) -> None:
        labels = build_level_labels(True)
        for name in ("debug", "info", "warn", "error", "fatal", "panic"):
            assert labels[name].startswith("\x1b[")
            assert labels[name].endswith("\x1b[0m")

    def test_trace_is_unstyled(self) -> None:
        assert build_level_labels(True)["trace"] == "[TRACE]"

    def test_levels_are_visually_distinct(self) -> None:
        labels = build_level_labels(True)
        styles = {labels[name].split("[", 2)[1] for name in ALL_LEVELS if name != "trace"}
        assert len(styles) == 6

    def test_table_is_read_only(self) -> None:
        labels = build_level_labels(True)
        with pytest.raises(TypeError):
            labels["info"] = "[NOPE]"  # type: ignore[index]


class TestResolveLabel:
    def test_known_level(self) -> None:
        labels = build_level_labels(False)
        assert resolve_label(labels, "error") == "[ERROR]"
        assert resolve_label(labels, Level.WARN) == "[WARN]"

    def test_missing_level_renders_empty(self) -> None:
        assert resolve_label(build_level_labels(False), None) == ""

    def test_unknown_level_renders_uppercase_brackets(self) -> None:
        assert resolve_label(build_level_labels(True), "notice") == "[NOTICE]"


class TestParseLevel:
    def test_case_insensitive(self) -> None:
        assert parse_level("WARN") is Level.WARN

    def test_stdlib_aliases(self) -> None:
        assert parse_level("warning") is Level.WARN
        assert parse_level("CRITICAL") is Level.FATAL

    def test_unknown_level_raises(self) -> None:
        with pytest.raises(ValueError, match="unknown log level"):
            parse_level("loud")

    def test_severity_order(self) -> None:
        severities = [Level(name).severity for name in ALL_LEVELS]
        assert severities == sorted(severities)
