# src/cache/cache_factory.py — v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from protobuild.cache.base_cache_store import BaseCacheStore

if TYPE_CHECKING:
    from protobuild.core.models import BuildConfig

DEFAULT_CACHE_DIR = Path("target/streams/cache/protobuf")


def create_cache_store(config: BuildConfig | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        config: Resolved build configuration. Defaults to the JSON backend
            under ``target/streams/cache/protobuf``.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "json" if config is None else config.cache_backend
    cache_dir = DEFAULT_CACHE_DIR if config is None else config.cache_directory

    if backend == "json":
        from protobuild.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_dir=cache_dir)

    if backend == "sqlite":
        from protobuild.cache.sqlite_store import CACHE_FILENAME, SqliteCacheStore
        return SqliteCacheStore(db_path=cache_dir / CACHE_FILENAME)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
