# src/cache/models.py — v2
"""Cache domain models: FileFingerprint, CacheEntry, CacheCheck."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FileFingerprint(BaseModel):
    """Path and last-modified time (ns) of a tracked input file."""

    model_config = ConfigDict(frozen=True)

    path: str
    last_modified: int


class CacheEntry(BaseModel):
    """Inputs of the last successful generation and the files it produced."""

    inputs: list[FileFingerprint] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)
    created_at: datetime
    protobuild_version: str


class CacheCheck(BaseModel):
    """Result of comparing the current inputs against a stored entry."""

    reason: Literal["fresh", "no_entry", "inputs_changed", "output_missing"]
    entry: CacheEntry | None = None
    missing_output: str | None = None

    @property
    def is_fresh(self) -> bool:
        return self.reason == "fresh"
