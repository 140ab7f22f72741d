"""File analysis orchestration.

``FileAnalyzer`` ties the probe, matcher, text heuristic and recovery helpers
together behind two calls used by the CLI: ``analyze`` identifies a file and
``recover`` renames it to a new extension. Neither call raises for I/O or
catalog problems; failures are logged and reported as ``None`` or ``False``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from sigrepair.catalog import CatalogError, SignatureCatalog, SignatureRecord
from sigrepair.config.models import SigrepairConfig

from .matcher import match_signature
from .models import AnalysisResult
from .probe import probe_file
from .recovery import DEFAULT_MAX_EXTENSION_LENGTH, rename_with_extension
from .text import TextHeuristicClassifier

LOGGER = logging.getLogger(__name__)

DEFAULT_MATCH_BYTES = 32
DEFAULT_DISPLAY_BYTES = 16


def needs_extension_recovery(detected_extension: str, current: str) -> bool:
    """Return True when ``current`` is empty or not contained in ``detected_extension``.

    The comparison is case-insensitive substring containment, so ``jpeg`` is
    not compatible with a detected ``jpg`` while ``jp`` would be.
    """
    return not current or current.lower() not in detected_extension.lower()


class FileAnalyzer:
    """Identify files by their magic numbers and repair their extensions."""

    def __init__(
        self,
        catalog: SignatureCatalog,
        *,
        text_classifier: TextHeuristicClassifier | None = None,
        match_bytes: int = DEFAULT_MATCH_BYTES,
        display_bytes: int = DEFAULT_DISPLAY_BYTES,
        text_fallback_extension: str | None = "txt",
        max_extension_length: int = DEFAULT_MAX_EXTENSION_LENGTH,
    ) -> None:
        self.catalog = catalog
        self.text_classifier = text_classifier or TextHeuristicClassifier()
        self.match_bytes = match_bytes
        self.display_bytes = display_bytes
        self.text_fallback_extension = text_fallback_extension
        self.max_extension_length = max_extension_length

    @classmethod
    def from_config(
        cls, config: SigrepairConfig, catalog: SignatureCatalog | None = None
    ) -> "FileAnalyzer":
        """Build an analyzer using the probe, text and recovery settings of ``config``."""
        if catalog is None:
            catalog = SignatureCatalog.from_path(config.catalog.path)
        return cls(
            catalog,
            text_classifier=TextHeuristicClassifier(ascii_only=config.text.ascii_only),
            match_bytes=config.probe.match_bytes,
            display_bytes=config.probe.display_bytes,
            text_fallback_extension=config.text.fallback_extension if config.text.enabled else None,
            max_extension_length=config.recovery.max_extension_length,
        )

    def analyze(self, path: Path | None) -> Optional[SignatureRecord]:
        """Return the catalog record describing ``path``, or None when undetermined."""
        if path is None or not path.exists() or not path.is_file():
            LOGGER.error("Invalid file for analysis: %s", path)
            return None

        probe = probe_file(path, self.match_bytes)
        fingerprint = probe.hex_prefix
        if not fingerprint:
            LOGGER.warning("Failed to get the hex signature of the file: %s", path.name)
            return None

        try:
            record = match_signature(fingerprint, self.catalog.list_all())
        except CatalogError:
            LOGGER.exception("Error analyzing the file: %s", path.name)
            return None

        if record is not None:
            LOGGER.info(
                "The signature for the file was found: %s, type: %s",
                path.name,
                record.file_type.value,
            )
            return record

        if self.text_fallback_extension and self.text_classifier.classify(path):
            text_record = self.catalog.find_by_extension(self.text_fallback_extension)
            if text_record is not None:
                LOGGER.info("The file is defined as a text file: %s", path.name)
                return text_record

        LOGGER.warning("The file type could not be determined: %s", path.name)
        return None

    def inspect(self, path: Path) -> AnalysisResult:
        """Analyze ``path`` and decide whether its extension needs recovery."""
        shown = probe_file(path, self.display_bytes if path.is_file() else 0)
        record = self.analyze(path)
        needs_recovery = record is not None and needs_extension_recovery(record.extension, shown.extension)
        return AnalysisResult(
            path=path,
            matched_record=record,
            hex_prefix_observed=shown.hex_prefix,
            current_extension=shown.extension,
            needs_extension_recovery=needs_recovery,
        )

    def recover(self, path: Path | None, new_extension: str | None) -> bool:
        """Rename ``path`` so it carries ``new_extension``; return True on success."""
        if path is None or not path.exists() or not new_extension or not new_extension.strip():
            LOGGER.error("Invalid parameters for restoring the extension: %s, %r", path, new_extension)
            return False

        renamed = rename_with_extension(
            path, new_extension.strip(), max_extension_length=self.max_extension_length
        )
        if renamed is None:
            LOGGER.warning("The file could not be renamed: %s", path.name)
            return False
        LOGGER.info("The file extension has been successfully restored: %s -> %s", path.name, renamed)
        return True


__all__ = [
    "DEFAULT_DISPLAY_BYTES",
    "DEFAULT_MATCH_BYTES",
    "FileAnalyzer",
    "needs_extension_recovery",
]
