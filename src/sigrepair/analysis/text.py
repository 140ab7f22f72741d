"""Printable-content fallback classifier."""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER = logging.getLogger(__name__)

_ASCII_PRINTABLE = frozenset(chr(code) for code in range(0x20, 0x7F))
# ASCII whitespace only; str.isspace() also accepts \x1c-\x1f and \x85.
_WHITESPACE = frozenset(" \t\n\r\x0b\x0c")


class TextHeuristicClassifier:
    """Decide whether a file is plain text from its full contents.

    The whole file is read and decoded as UTF-8. It counts as text only when
    it is non-empty and every character is printable or ASCII whitespace.
    Printable means ASCII 0x20-0x7E unless ``ascii_only`` is disabled, in
    which case any Unicode printable character is accepted.
    """

    def __init__(self, *, ascii_only: bool = True) -> None:
        self.ascii_only = ascii_only

    def classify(self, path: Path) -> bool:
        """Return True when ``path`` holds only printable text."""
        try:
            content = path.read_bytes()
        except OSError:
            LOGGER.exception("Error reading the file when checking the text content: %s", path.name)
            return False
        return self.is_text_content(content)

    def is_text_content(self, content: bytes) -> bool:
        """Return True when ``content`` decodes to printable or whitespace characters only."""
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError:
            LOGGER.debug("The content could not be decoded as UTF-8")
            return False
        if not text:
            return False
        return all(self._is_printable(char) for char in text)

    def _is_printable(self, char: str) -> bool:
        if char in _WHITESPACE:
            return True
        if self.ascii_only:
            return char in _ASCII_PRINTABLE
        return char.isprintable()


__all__ = ["TextHeuristicClassifier"]
