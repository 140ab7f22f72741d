"""Signature catalog errors."""


class CatalogError(Exception):
    """Raised when signature catalog data cannot be loaded or validated."""
