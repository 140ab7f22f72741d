"""Extension recovery: filename rewriting and renames."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_EXTENSION_LENGTH = 10


def compute_renamed_name(
    original_name: str,
    new_extension: str,
    max_extension_length: int = DEFAULT_MAX_EXTENSION_LENGTH,
) -> str:
    """Return ``original_name`` with its extension replaced by ``new_extension``.

    The text after the last dot is replaced. Names without a dot, or whose
    trailing segment is longer than ``max_extension_length`` characters, keep
    their full name and get the new extension appended.

    Examples:
        >>> compute_renamed_name("archive.tar.gz", "ZIP")
        'archive.tar.zip'
        >>> compute_renamed_name("README", "md")
        'README.md'
        >>> compute_renamed_name("data.veryverylongsuffix", "csv")
        'data.veryverylongsuffix.csv'
    """
    extension = new_extension.lower()
    index = original_name.rfind(".")
    if index == -1:
        return f"{original_name}.{extension}"

    current = original_name[index + 1 :]
    if len(current) > max_extension_length:
        return f"{original_name}.{extension}"

    return f"{original_name[:index]}.{extension}"


def rename_with_extension(
    path: Path,
    new_extension: str,
    *,
    max_extension_length: int = DEFAULT_MAX_EXTENSION_LENGTH,
) -> Optional[Path]:
    """Rename ``path`` in place so it carries ``new_extension``.

    Args:
        path: File to rename.
        new_extension: Extension to apply, without the leading dot.
        max_extension_length: Longest trailing segment treated as an extension.

    Returns:
        Optional[Path]: Absolute path of the renamed file, or None when the
            rename failed. The original file is untouched on failure.
    """
    target = path.with_name(compute_renamed_name(path.name, new_extension, max_extension_length))
    if target == path:
        return path.absolute()

    try:
        if target.exists() and not target.samefile(path):
            LOGGER.error("Cannot rename %s: destination already exists: %s", path.name, target)
            return None
        path.rename(target)
    except OSError:
        LOGGER.exception("The file could not be renamed: %s -> %s", path.name, target.name)
        return None
    return target.absolute()


__all__ = ["DEFAULT_MAX_EXTENSION_LENGTH", "compute_renamed_name", "rename_with_extension"]
