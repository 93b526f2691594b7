# src/dependencies/unpacker.py — v1
"""Extract schema files embedded in dependency archives.

Archives are read as zip files (jars included). Only entries whose
archive-internal path matches the schema pattern are written, at the same
relative path under the external include directory. Existing files are
overwritten; files from dependencies that went away are left in place.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import shutil
import time
import zipfile
import zlib
from collections.abc import Sequence
from pathlib import Path

from protobuild.core.errors import ExtractionError

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATTERN = "*.proto"


def unpack(
    archives: Sequence[Path],
    target: Path,
    pattern: str = DEFAULT_SCHEMA_PATTERN,
) -> list[Path]:
    """Extract matching entries of every archive into ``target``.

    Args:
        archives: Dependency archives, processed in order.
        target: External include directory, created if missing.
        pattern: Glob matched against each entry's full internal path.

    Returns:
        Paths of all extracted files.

    Raises:
        ExtractionError: If an archive is missing, unreadable or corrupt.
    """
    target.mkdir(parents=True, exist_ok=True)
    extracted: list[Path] = []
    for archive in archives:
        files = _extract_matching(archive, target, pattern)
        if files:
            logger.debug(
                "Extracted %s", "".join(f"\n * {f}" for f in files),
            )
        extracted.extend(files)
    return extracted


def _extract_matching(archive: Path, target: Path, pattern: str) -> list[Path]:
    files: list[Path] = []
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                if info.is_dir() or not fnmatch.fnmatchcase(info.filename, pattern):
                    continue
                dest = _safe_destination(target, info.filename)
                if dest is None:
                    logger.warning(
                        "Skipping entry %s of %s: outside %s",
                        info.filename, archive, target,
                    )
                    continue
                dest.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, dest.open("wb") as out:
                    shutil.copyfileobj(src, out)
                _preserve_mtime(dest, info)
                files.append(dest)
    except (
        OSError, zipfile.BadZipFile, zlib.error,
        EOFError, NotImplementedError, RuntimeError,
    ) as exc:
        raise ExtractionError(archive, str(exc)) from exc
    return files


def _safe_destination(target: Path, name: str) -> Path | None:
    root = target.resolve()
    dest = (root / name).resolve()
    if not dest.is_relative_to(root) or dest == root:
        return None
    return target / dest.relative_to(root)


def _preserve_mtime(dest: Path, info: zipfile.ZipInfo) -> None:
    # Keep the archive timestamp so re-extraction does not invalidate the cache.
    ts = time.mktime(info.date_time + (0, 0, -1))
    os.utime(dest, (ts, ts))
