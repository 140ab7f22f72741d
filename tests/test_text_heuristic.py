"""Tests for the printable-text fallback classifier."""

from pathlib import Path

import pytest

from sigrepair.analysis import FileAnalyzer, TextHeuristicClassifier
from sigrepair.catalog import SignatureCatalog


def test_printable_ascii_with_whitespace_is_text(tmp_path: Path) -> None:
    target = tmp_path / "notes"
    target.write_text("hello world\n\tindented line\r\n\x0b\x0c", encoding="utf-8")

    assert TextHeuristicClassifier().classify(target)


def test_control_characters_are_not_text() -> None:
    classifier = TextHeuristicClassifier()

    assert not classifier.is_text_content(b"abc\x00def")
    assert not classifier.is_text_content(b"\x1b[0m")


@pytest.mark.parametrize("ascii_only", [True, False])
@pytest.mark.parametrize("separator", ["\x1c", "\x1d", "\x1e", "\x1f", "\x85", " "])
def test_non_ascii_whitespace_is_not_text(ascii_only: bool, separator: str) -> None:
    content = f"abc{separator}def".encode("utf-8")

    assert not TextHeuristicClassifier(ascii_only=ascii_only).is_text_content(content)


def test_separator_bytes_are_undetermined(tmp_path: Path) -> None:
    target = tmp_path / "records.bin"
    target.write_bytes(b"abc\x1c\x1d\x1e\x1fdef")

    assert FileAnalyzer(SignatureCatalog()).analyze(target) is None


def test_invalid_utf8_is_not_text() -> None:
    assert not TextHeuristicClassifier().is_text_content(b"\xff\xfe\xfd")


def test_empty_content_is_not_text() -> None:
    assert not TextHeuristicClassifier().is_text_content(b"")


def test_unicode_text_requires_opt_in() -> None:
    content = "café … naïve\n".encode("utf-8")

    assert not TextHeuristicClassifier().is_text_content(content)
    assert TextHeuristicClassifier(ascii_only=False).is_text_content(content)
    assert TextHeuristicClassifier().is_text_content(b"plain ascii ~!\n")


def test_unicode_file_is_undetermined_by_default(tmp_path: Path) -> None:
    target = tmp_path / "notes.md"
    target.write_text("café … naïve\n", encoding="utf-8")

    assert FileAnalyzer(SignatureCatalog()).analyze(target) is None


def test_unreadable_file_is_not_text(tmp_path: Path) -> None:
    assert not TextHeuristicClassifier().classify(tmp_path / "missing.txt")
