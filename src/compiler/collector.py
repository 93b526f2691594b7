# src/compiler/collector.py — v1
"""Collect generated files by globbing every target directory.

The glob is the authority: any matching file in a target directory is
reported, including files protoc did not write during this run.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from protobuild.core.models import GeneratedTarget


def collect_outputs(targets: Iterable[GeneratedTarget]) -> set[Path]:
    """Union of files matching each target's pattern below its directory."""
    generated: set[Path] = set()
    for target in targets:
        if not target.directory.is_dir():
            continue
        generated.update(
            p.absolute()
            for p in target.directory.rglob(target.pattern)
            if p.is_file()
        )
    return generated
