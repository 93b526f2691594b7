# src/cache/incremental.py — v1
"""Incremental evaluation gated by input and output fingerprints.

Workflow:
    1. Fingerprint the current input files (path + last-modified time)
    2. Load the stored entry and compare
    3. Fresh: return the recorded outputs without computing
    4. Stale: compute, persist the new fingerprints and outputs, return them

If ``compute`` raises, nothing is persisted and the previous entry stays.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path

from protobuild.cache.base_cache_store import BaseCacheStore
from protobuild.cache.fingerprint import check_entry, compute_fingerprints
from protobuild.cache.models import CacheEntry
from protobuild.version import __version__

logger = logging.getLogger(__name__)

ComputeFn = Callable[[set[Path]], Iterable[Path]]


class IncrementalCache:
    """Re-run a file transformation only when its inputs or outputs changed."""

    def __init__(self, store: BaseCacheStore) -> None:
        self._store = store

    def evaluate(self, input_files: Iterable[Path], compute: ComputeFn) -> set[Path]:
        """Return the outputs for ``input_files``, computing them if stale."""
        inputs = set(input_files)
        current = compute_fingerprints(inputs)
        status = check_entry(self._store.load(), current)

        if status.is_fresh and status.entry is not None:
            logger.info("Protobuf sources up to date (%d files)", len(inputs))
            return {Path(p) for p in status.entry.outputs}

        if status.reason == "output_missing":
            logger.info("Generated file missing, regenerating: %s", status.missing_output)
        else:
            logger.info("Protobuf cache stale (%s), regenerating", status.reason)

        outputs = set(compute(inputs))
        self._store.save(
            CacheEntry(
                inputs=current,
                outputs=sorted(str(p) for p in outputs),
                created_at=datetime.now(timezone.utc),
                protobuild_version=__version__,
            )
        )
        return outputs
