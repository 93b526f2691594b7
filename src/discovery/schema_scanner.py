# src/discovery/schema_scanner.py — v1
"""Schema discovery: recursive scan of source directories."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


def discover_schemas(
    source_directories: Sequence[Path],
    pattern: str = "*.proto",
) -> set[Path]:
    """Find every file matching ``pattern`` below the given directories.

    Missing directories are skipped. Returned paths are absolute and
    deduplicated across overlapping directories.
    """
    schemas: set[Path] = set()
    for directory in source_directories:
        if not directory.is_dir():
            logger.debug("Skipping missing source directory %s", directory)
            continue
        found = {p.absolute() for p in directory.rglob(pattern) if p.is_file()}
        logger.debug("Found %d schema files in %s", len(found), directory)
        schemas.update(found)

    logger.info(
        "Discovered %d schema files in %d directories",
        len(schemas), len(source_directories),
    )
    return schemas
