"""YAML-backed storage for signature records."""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Any, List

import yaml
from pydantic import ValidationError

from .errors import CatalogError
from .models import SignatureRecord

DEFAULT_CATALOG_RESOURCE = "signatures.yaml"


class YamlSignatureStore:
    """Read signature records from a YAML document.

    The document holds a top-level ``signatures`` list. Each entry maps onto
    :class:`SignatureRecord`; the list order is preserved because it decides
    which record wins when several patterns match the same file.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path.expanduser() if path is not None else None

    @property
    def source(self) -> str:
        """Return a human-readable description of where records come from."""
        if self._path is None:
            return f"builtin:{DEFAULT_CATALOG_RESOURCE}"
        return str(self._path)

    def load(self) -> List[SignatureRecord]:
        """Parse and validate every record in the store.

        Returns:
            List[SignatureRecord]: Records in document order.

        Raises:
            CatalogError: If the document is missing, unparsable, or invalid.
        """
        raw = self._read_text()
        try:
            yaml_data = yaml.safe_load(raw) or {}
        except yaml.YAMLError as exc:
            raise CatalogError(f"Failed to parse signature catalog {self.source}: {exc}") from exc

        if not isinstance(yaml_data, dict):
            raise CatalogError("Signature catalog must contain a mapping at the top level.")

        entries = yaml_data.get("signatures", [])
        if not isinstance(entries, list):
            raise CatalogError("Signature catalog 'signatures' entry must be a list.")

        records: List[SignatureRecord] = []
        for position, entry in enumerate(entries):
            records.append(self._parse_entry(position, entry))
        return records

    def _read_text(self) -> str:
        try:
            if self._path is None:
                return (
                    resources.files("sigrepair.catalog")
                    .joinpath(DEFAULT_CATALOG_RESOURCE)
                    .read_text(encoding="utf-8")
                )
            return self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CatalogError(f"Unable to read signature catalog {self.source}: {exc}") from exc

    def _parse_entry(self, position: int, entry: Any) -> SignatureRecord:
        if not isinstance(entry, dict):
            raise CatalogError(f"Signature entry #{position} must be a mapping.")
        try:
            return SignatureRecord.model_validate(entry)
        except ValidationError as exc:
            raise CatalogError(f"Invalid signature entry #{position}: {exc}") from exc


__all__ = ["YamlSignatureStore", "DEFAULT_CATALOG_RESOURCE"]
