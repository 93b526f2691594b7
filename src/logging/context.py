# src/logging/context.py — v2
"""Contextual logging support: attach build_id and step to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_build_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "build_id", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Snapshot of the current logging context."""

    build_id: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    return LogContext(build_id=_build_id.get(), step=_step.get())


def set_build_context(build_id: str) -> None:
    """Set build-level context (once per generation step)."""
    _build_id.set(build_id)
    _step.set(None)


def set_step_context(step: str | None) -> None:
    """Set the pipeline step currently running (unpack, generate, clean)."""
    _step.set(step)


def clear_context() -> None:
    _build_id.set(None)
    _step.set(None)
