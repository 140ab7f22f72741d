"""Signature catalog access for sigrepair."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Sequence, Tuple

from .cache import CatalogCache
from .errors import CatalogError
from .models import FileType, SignatureRecord
from .store import DEFAULT_CATALOG_RESOURCE, YamlSignatureStore

LOGGER = logging.getLogger(__name__)


class SignatureStore(Protocol):
    """Source of signature records."""

    @property
    def source(self) -> str: ...

    def load(self) -> Sequence[SignatureRecord]: ...


class SignatureCatalog:
    """Read-only view over a signature store with read-through caching."""

    def __init__(
        self,
        store: SignatureStore | None = None,
        *,
        cache: CatalogCache | None = None,
    ) -> None:
        self._store = store if store is not None else YamlSignatureStore()
        self._cache = cache if cache is not None else CatalogCache()

    @classmethod
    def from_path(cls, path: Path | str | None) -> "SignatureCatalog":
        """Build a catalog over a YAML file, or the packaged catalog when ``path`` is None."""
        return cls(YamlSignatureStore(Path(path) if path is not None else None))

    @property
    def source(self) -> str:
        """Return the description of the underlying store."""
        return self._store.source

    def list_all(self) -> Tuple[SignatureRecord, ...]:
        """Return every record in catalog order.

        Raises:
            CatalogError: If the underlying store cannot be loaded.
        """
        return self._cache.get("all", self._load_all)

    def find_by_extension(self, extension: str) -> Optional[SignatureRecord]:
        """Return the first record registered for ``extension`` (case-insensitive)."""
        key = extension.strip().lstrip(".").lower()
        try:
            record = self._cache.get(("extension", key), lambda: self._first_by_extension(key))
        except CatalogError:
            LOGGER.exception("Error when searching for an extension signature: %s", extension)
            return None
        if record is None:
            LOGGER.warning("The signature for the extension %s was not found", extension)
        else:
            LOGGER.info("The signature for the extension was found: %s", extension)
        return record

    def find_by_hex_signature(self, hex_signature: str) -> Optional[SignatureRecord]:
        """Return the first record whose stored pattern equals ``hex_signature``."""
        key = "".join(hex_signature.split()).upper()
        try:
            record = self._cache.get(("hex", key), lambda: self._first_by_hex(key))
        except CatalogError:
            LOGGER.exception("Error when searching for a signature using hex %s", hex_signature)
            return None
        if record is None:
            LOGGER.warning("The signature for the hex signature %s was not found", hex_signature)
        else:
            LOGGER.info("The signature for the hex signature was found: %s", hex_signature)
        return record

    def invalidate(self) -> None:
        """Forget cached results so the next query reloads the store."""
        self._cache.invalidate()

    def _load_all(self) -> Tuple[SignatureRecord, ...]:
        records = tuple(self._store.load())
        LOGGER.info("All file signatures have been loaded from %s: %d records", self.source, len(records))
        return records

    def _first_by_extension(self, extension: str) -> Optional[SignatureRecord]:
        return next((record for record in self.list_all() if record.extension == extension), None)

    def _first_by_hex(self, hex_signature: str) -> Optional[SignatureRecord]:
        if not hex_signature:
            return None
        return next(
            (record for record in self.list_all() if record.hex_signature.upper() == hex_signature),
            None,
        )


__all__ = [
    "CatalogCache",
    "CatalogError",
    "DEFAULT_CATALOG_RESOURCE",
    "FileType",
    "SignatureCatalog",
    "SignatureRecord",
    "SignatureStore",
    "YamlSignatureStore",
]
