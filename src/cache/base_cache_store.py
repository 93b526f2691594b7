# src/cache/base_cache_store.py — v2
"""Abstract cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from protobuild.cache.models import CacheEntry


class BaseCacheStore(ABC):
    """Persists the single entry describing the last successful generation.

    Implementations never raise on unreadable or malformed data: ``load``
    logs a warning and returns None, which forces a full recompile.
    """

    @abstractmethod
    def load(self) -> CacheEntry | None:
        """Return the stored entry, or None when absent or unreadable."""

    @abstractmethod
    def save(self, entry: CacheEntry) -> None:
        """Replace the stored entry."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored entry."""
