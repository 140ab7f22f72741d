"""Signature catalog data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class FileType(str, Enum):
    """Broad family a file format belongs to."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    ARCHIVE = "archive"
    DOCUMENT = "document"
    EXECUTABLE = "executable"
    FONT = "font"
    DATABASE = "database"
    OTHER = "other"


class SignatureRecord(BaseModel):
    """Describes one known file format and its magic number.

    Attributes:
        extension: Canonical extension without the leading dot, lower-cased.
        mime_type: MIME type reported for the format.
        hex_signature: Hex rendering of the magic bytes with whitespace removed and
            case kept as written. May be empty for formats that are only
            reachable by extension (plain text).
        description: Human-readable name of the format.
        file_type: Broad family of the format.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    extension: str
    mime_type: str = "application/octet-stream"
    hex_signature: str = ""
    description: str = ""
    file_type: FileType = FileType.OTHER

    @field_validator("extension")
    @classmethod
    def _normalize_extension(cls, value: str) -> str:
        value = value.strip().lstrip(".").lower()
        if not value:
            raise ValueError("extension must not be empty")
        return value

    @field_validator("hex_signature")
    @classmethod
    def _normalize_hex(cls, value: str) -> str:
        compact = "".join(value.split())
        if len(compact) % 2 or any(char not in _HEX_DIGITS for char in compact):
            raise ValueError(f"hex_signature {value!r} is not a sequence of hex byte pairs")
        return compact


__all__ = ["FileType", "SignatureRecord"]
