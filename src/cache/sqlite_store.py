# src/cache/sqlite_store.py — v2
"""SQLite-based cache store (cache_backend=sqlite).

Uses stdlib sqlite3, no external dependency. The entry lives in a
single-row table; a database file that sqlite cannot open is discarded
and recreated on the next save.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from pathlib import Path

from pydantic import ValidationError

from protobuild.cache.base_cache_store import BaseCacheStore
from protobuild.cache.models import CacheEntry

logger = logging.getLogger(__name__)

CACHE_FILENAME = "cache.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entry (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    data TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()

    @property
    def path(self) -> Path:
        return self._db_path

    def load(self) -> CacheEntry | None:
        """Read the entry; any sqlite or decoding error counts as a miss."""
        if not self._db_path.exists():
            return None
        try:
            with closing(self._connect()) as conn:
                row = conn.execute(
                    "SELECT data FROM cache_entry WHERE id = 1"
                ).fetchone()
        except sqlite3.Error as e:
            logger.warning("Ignoring unreadable cache database %s: %s", self._db_path, e)
            return None
        if row is None:
            return None
        try:
            return CacheEntry.model_validate_json(row[0])
        except ValidationError as e:
            logger.warning("Failed to deserialize cache entry: %s", e)
            return None

    def save(self, entry: CacheEntry) -> None:
        """Store the entry (upsert). Failures are logged, never raised."""
        try:
            self._write(entry)
            return
        except sqlite3.DatabaseError as e:
            logger.warning("Recreating corrupt cache database %s: %s", self._db_path, e)
        except (sqlite3.Error, OSError) as e:
            logger.warning("Failed to write cache database %s: %s", self._db_path, e)
            return
        try:
            self._db_path.unlink(missing_ok=True)
            self._write(entry)
        except (sqlite3.Error, OSError) as e:
            logger.warning("Failed to write cache database %s: %s", self._db_path, e)

    def clear(self) -> None:
        self._db_path.unlink(missing_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        try:
            conn.executescript(_SCHEMA)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def _write(self, entry: CacheEntry) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO cache_entry (id, data) VALUES (1, ?)",
                (entry.model_dump_json(),),
            )
            conn.commit()
