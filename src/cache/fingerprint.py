# src/cache/fingerprint.py — v3
"""Last-modified fingerprinting of schema files.

Timestamps are compared, contents are never hashed. Two edits within the
filesystem's mtime granularity can therefore look unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from protobuild.cache.models import CacheCheck, CacheEntry, FileFingerprint


def last_modified(path: Path) -> int:
    """Return the file's mtime in nanoseconds, 0 if it cannot be read."""
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return 0


def compute_fingerprints(paths: Iterable[Path]) -> list[FileFingerprint]:
    """Fingerprint every path, sorted by path for stable persistence."""
    fingerprints = [
        FileFingerprint(path=str(p), last_modified=last_modified(p))
        for p in set(paths)
    ]
    return sorted(fingerprints, key=lambda fp: fp.path)


def check_entry(
    entry: CacheEntry | None,
    current: list[FileFingerprint],
) -> CacheCheck:
    """Decide whether a stored entry is still valid for ``current`` inputs.

    Fresh iff the set of input paths is identical, every timestamp matches,
    and every recorded output file still exists.
    """
    if entry is None:
        return CacheCheck(reason="no_entry")

    recorded = {fp.path: fp.last_modified for fp in entry.inputs}
    observed = {fp.path: fp.last_modified for fp in current}
    if recorded != observed:
        return CacheCheck(reason="inputs_changed", entry=entry)

    for output in entry.outputs:
        if not Path(output).exists():
            return CacheCheck(
                reason="output_missing", entry=entry, missing_output=output,
            )

    return CacheCheck(reason="fresh", entry=entry)
