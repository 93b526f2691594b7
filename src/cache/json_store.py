# src/cache/json_store.py — v2
"""JSON file-based cache store (default cache_backend=json).

Stores the entry as ``cache.json`` under the protobuf cache directory.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from protobuild.cache.base_cache_store import BaseCacheStore
from protobuild.cache.models import CacheEntry

logger = logging.getLogger(__name__)

CACHE_FILENAME = "cache.json"


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using a single JSON document."""

    def __init__(self, cache_dir: Path | str) -> None:
        self._root = Path(cache_dir).expanduser()

    @property
    def path(self) -> Path:
        return self._root / CACHE_FILENAME

    def load(self) -> CacheEntry | None:
        """Read the entry; corrupt or unreadable files count as a miss."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return CacheEntry.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", self.path, e)
            return None

    def save(self, entry: CacheEntry) -> None:
        """Write the entry, replacing any previous one."""
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            self.path.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to write cache file %s: %s", self.path, e)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
