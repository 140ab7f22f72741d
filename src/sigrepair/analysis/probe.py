"""Byte-prefix probing helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .models import FileProbe

LOGGER = logging.getLogger(__name__)


def read_hex_prefix(path: Path, size: int) -> Optional[str]:
    """Return up to ``size`` leading bytes of ``path`` as uppercase hex.

    Short files yield a shorter string; nothing is padded. Unreadable or empty
    files yield None.
    """
    if size <= 0:
        return None
    try:
        with path.open("rb") as fh:
            head = fh.read(size)
    except OSError as exc:
        LOGGER.debug("Unable to read leading bytes of %s: %s", path, exc)
        return None
    if not head:
        return None
    return head.hex().upper()


def current_extension(path: Path) -> str:
    """Return the text after the last dot of the file name, lower-cased."""
    name = path.name
    index = name.rfind(".")
    if index == -1:
        return ""
    return name[index + 1 :].lower()


def probe_file(path: Path, size: int) -> FileProbe:
    """Build a fresh probe for ``path`` reading ``size`` bytes."""
    return FileProbe(path=path, hex_prefix=read_hex_prefix(path, size), extension=current_extension(path))


__all__ = ["current_extension", "probe_file", "read_hex_prefix"]
