# src/pipeline/clean.py — v1
"""Clean lifecycle: remove directories owned by the generation step."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from protobuild.core.models import BuildConfig

logger = logging.getLogger(__name__)


def clean_targets(config: BuildConfig) -> list[Path]:
    """Directories removed by ``clean``: target dirs, then the include dir."""
    paths = list(dict.fromkeys(config.target_directories))
    if config.external_include_path not in paths:
        paths.append(config.external_include_path)
    return paths


def clean(config: BuildConfig) -> list[Path]:
    """Delete generated-target directories and the external include directory.

    The cache is left in place; it goes stale on its own once the recorded
    outputs no longer exist.

    Returns:
        Directories that existed and were removed.
    """
    removed: list[Path] = []
    for path in clean_targets(config):
        if not path.exists():
            continue
        shutil.rmtree(path)
        logger.info("Removed %s", path)
        removed.append(path)
    return removed
