"""Read-through cache used by the signature catalog."""

from __future__ import annotations

from typing import Callable, Dict, Hashable, TypeVar

T = TypeVar("T")


class CatalogCache:
    """Memoize catalog queries until explicitly invalidated.

    Values are computed by the loader passed to :meth:`get` on the first
    request for a key and returned unchanged afterwards. Nothing expires on
    its own; callers decide when to call :meth:`invalidate`.
    """

    def __init__(self) -> None:
        self._entries: Dict[Hashable, object] = {}

    def get(self, key: Hashable, loader: Callable[[], T]) -> T:
        """Return the cached value for ``key``, loading it on first access.

        Args:
            key: Cache key for the query.
            loader: Callable producing the value when it is not cached.

        Returns:
            T: Cached or freshly loaded value.
        """
        if key in self._entries:
            return self._entries[key]  # type: ignore[return-value]
        value = loader()
        self._entries[key] = value
        return value

    def invalidate(self) -> None:
        """Drop every cached entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CatalogCache"]
