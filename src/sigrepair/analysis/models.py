"""Transient models produced while analyzing a file."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from sigrepair.catalog.models import SignatureRecord


class FileProbe(BaseModel):
    """Byte prefix and extension observed for a single file.

    Attributes:
        path: File the probe was taken from.
        hex_prefix: Uppercase hex rendering of the leading bytes, or None when
            nothing could be read.
        extension: Current extension, lower-cased, empty when the name has none.
    """

    path: Path
    hex_prefix: Optional[str] = None
    extension: str = ""


class AnalysisResult(BaseModel):
    """Outcome of inspecting a file for presentation.

    Attributes:
        path: Inspected file.
        matched_record: Catalog record the file was identified as, if any.
        hex_prefix_observed: Magic numbers shown to the user.
        current_extension: Extension the file currently carries.
        needs_extension_recovery: Whether the extension should be repaired.
    """

    path: Path
    matched_record: Optional[SignatureRecord] = None
    hex_prefix_observed: Optional[str] = None
    current_extension: str = ""
    needs_extension_recovery: bool = False

    @property
    def determined(self) -> bool:
        """Return True when a catalog record was matched."""
        return self.matched_record is not None


__all__ = ["AnalysisResult", "FileProbe"]
