# src/compiler/options.py — v1
"""Compiler options derived from generated targets."""

from __future__ import annotations

from collections.abc import Iterable

from protobuild.core.models import GeneratedTarget

# File extension recognized in a target pattern -> protoc output kind
OUTPUT_KINDS: dict[str, str] = {
    ".java": "java",
    ".py": "python",
    ".cc": "cpp",
    ".h": "cpp",
    ".cs": "csharp",
    ".rb": "ruby",
    ".js": "js",
    ".php": "php",
    ".m": "objc",
}


def output_kind(pattern: str) -> str | None:
    """Return the protoc output kind a target pattern produces, if known."""
    for ext, kind in OUTPUT_KINDS.items():
        if pattern.endswith(ext):
            return kind
    return None


def target_options(targets: Iterable[GeneratedTarget]) -> list[str]:
    """Emit one ``--<kind>_out=<dir>`` flag per known output kind.

    Only the first target of each kind contributes a flag.
    """
    options: list[str] = []
    seen: set[str] = set()
    for target in targets:
        kind = output_kind(target.pattern)
        if kind is None or kind in seen:
            continue
        seen.add(kind)
        options.append(f"--{kind}_out={target.directory.absolute()}")
    return options
