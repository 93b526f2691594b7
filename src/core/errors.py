# src/core/errors.py — v1
"""Failures that abort the protobuf generation step.

Every fatal condition derives from BuildStepError. Cache corruption is not
represented here: stores treat it as a miss and never raise.
"""

from __future__ import annotations

from pathlib import Path


class BuildStepError(Exception):
    """Base class for fatal generation-step failures."""

    kind: str = "build_failure"


class ProtocLaunchError(BuildStepError):
    """protoc could not be started (missing binary, permissions)."""

    kind = "launch_failure"

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"error occurred while compiling protobuf files: {reason}"
        )


class ProtocCompileError(BuildStepError):
    """protoc ran and returned a nonzero exit code."""

    kind = "compile_failure"

    def __init__(self, exit_code: int) -> None:
        self.exit_code = exit_code
        super().__init__(f"protoc returned exit code: {exit_code}")


class ExtractionError(BuildStepError):
    """A dependency archive could not be read."""

    kind = "extraction_failure"

    def __init__(self, archive: Path, reason: str) -> None:
        self.archive = archive
        super().__init__(f"failed to extract {archive}: {reason}")
