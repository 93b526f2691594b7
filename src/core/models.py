# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from protobuild.core.errors import BuildStepError


# === GENERATION TARGETS ===


class GeneratedTarget(BaseModel):
    """Output directory plus the glob recognizing the files protoc writes there."""

    model_config = ConfigDict(frozen=True)

    directory: Path
    pattern: str

    @model_validator(mode="before")
    @classmethod
    def _accept_pair(cls, data: Any) -> Any:
        # Allow ("dir", "*.java") pairs as well as mappings.
        if isinstance(data, (list, tuple)) and len(data) == 2:
            return {"directory": data[0], "pattern": data[1]}
        return data

    @field_validator("pattern")
    @classmethod
    def _pattern_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("generated target pattern must not be empty")
        return v

    @classmethod
    def parse(cls, value: str) -> GeneratedTarget:
        """Parse a ``DIR:GLOB`` string (the last colon separates the glob)."""
        directory, sep, pattern = value.rpartition(":")
        if not sep or not directory:
            raise ValueError(f"Invalid generated target {value!r}, expected DIR:GLOB")
        return cls(directory=Path(directory), pattern=pattern)


class UnpackedDependencies(BaseModel):
    """External include directory and the schema files extracted into it."""

    directory: Path
    files: list[Path] = Field(default_factory=list)


# === BUILD CONFIGURATION ===


class BuildConfig(BaseModel):
    """Fully resolved inputs of one generation step.

    Built from Settings by ``Settings.to_build_config()``. All paths are
    absolute and ``protoc_options`` already holds the flags derived from
    the generated targets followed by the user-supplied options.
    """

    model_config = ConfigDict(frozen=True)

    base_directory: Path
    source_directories: list[Path]
    include_paths: list[Path]
    external_include_path: Path
    generated_targets: list[GeneratedTarget]
    protoc: str = "protoc"
    protoc_options: list[str] = Field(default_factory=list)
    dependencies: list[Path] = Field(default_factory=list)
    schema_pattern: str = "*.proto"
    cache_directory: Path
    cache_backend: Literal["json", "sqlite"] = "json"

    @property
    def schema_directories(self) -> list[Path]:
        """Source directories followed by the external include directory."""
        directories = list(self.source_directories)
        if self.external_include_path not in directories:
            directories.append(self.external_include_path)
        return directories

    @property
    def target_directories(self) -> list[Path]:
        return [t.directory for t in self.generated_targets]


# === BUILD RESULT ===


class BuildError(BaseModel):
    """Tagged failure of a generation step."""

    kind: Literal["launch_failure", "compile_failure", "extraction_failure"]
    message: str
    exit_code: int | None = None

    @classmethod
    def from_exception(cls, exc: BuildStepError) -> BuildError:
        return cls(
            kind=exc.kind,
            message=str(exc),
            exit_code=getattr(exc, "exit_code", None),
        )


class BuildResult(BaseModel):
    """Outcome of ``run_build``: generated files or a tagged error."""

    generated_files: list[Path] = Field(default_factory=list)
    unpacked: UnpackedDependencies | None = None
    error: BuildError | None = None

    @property
    def success(self) -> bool:
        return self.error is None
