# src/config/settings.py — v2
"""Typed configuration loaded from .env and PROTOBUILD_* variables.

Settings mirrors the knobs a host build exposes. It is turned once into an
immutable BuildConfig by ``to_build_config()``; nothing downstream reads
settings or the environment directly.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from protobuild.compiler.options import target_options
from protobuild.core.models import BuildConfig, GeneratedTarget


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Protobuf generation settings."""

    model_config = SettingsConfigDict(
        env_prefix="PROTOBUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Layout ===
    base_directory: Path = Path(".")
    target_directory: Path = Path("target")
    source_directory: Path = Path("src/main/protobuf")
    # None = derived from the fields above
    source_directories: list[Path] | None = None
    java_source: Path | None = None
    external_include_path: Path | None = None

    # === Compiler ===
    protoc: str = "protoc"
    protoc_options: list[str] = []
    include_paths: list[Path] | None = None
    extra_include_paths: list[Path] = []
    generated_targets: list[GeneratedTarget] | None = None
    extra_generated_targets: list[GeneratedTarget] = []
    schema_pattern: str = "*.proto"

    # === Dependencies ===
    dependencies: list[Path] = []

    # === Cache ===
    cache_root: Path | None = None
    cache_backend: Literal["json", "sqlite"] = "json"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("protoc", "schema_pattern")
    @classmethod
    def validate_not_blank(cls, v: str, info) -> str:  # noqa: N805
        if not v.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        errors: list[str] = []

        if self.generated_targets == [] and not self.extra_generated_targets:
            errors.append("GENERATED_TARGETS must declare at least one target")

        if self.log_retention < 0:
            errors.append("LOG_RETENTION must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Resolution ---

    def to_build_config(self) -> BuildConfig:
        """Resolve derived defaults and relative paths into a BuildConfig."""
        base = self.base_directory.expanduser().absolute()

        def resolve(path: Path) -> Path:
            path = path.expanduser()
            return path if path.is_absolute() else base / path

        target = resolve(self.target_directory)
        source_directory = resolve(self.source_directory)
        java_source = (
            resolve(self.java_source) if self.java_source is not None
            else target / "src_managed" / "main" / "compiled_protobuf"
        )
        external = (
            resolve(self.external_include_path)
            if self.external_include_path is not None
            else target / "protobuf_external"
        )

        if self.source_directories is not None:
            source_dirs = [resolve(p) for p in self.source_directories]
        else:
            source_dirs = [source_directory]

        if self.include_paths is not None:
            include_paths = [resolve(p) for p in self.include_paths]
        else:
            include_paths = [*source_dirs, external]
        include_paths += [resolve(p) for p in self.extra_include_paths]

        if self.generated_targets is not None:
            targets = list(self.generated_targets)
        else:
            targets = [GeneratedTarget(directory=java_source, pattern="*.java")]
        targets += self.extra_generated_targets
        targets = [
            GeneratedTarget(directory=resolve(t.directory), pattern=t.pattern)
            for t in targets
        ]

        cache_root = (
            resolve(self.cache_root) if self.cache_root is not None
            else target / "streams" / "cache"
        )

        return BuildConfig(
            base_directory=base,
            source_directories=source_dirs,
            include_paths=include_paths,
            external_include_path=external,
            generated_targets=targets,
            protoc=self._resolve_protoc(resolve),
            protoc_options=target_options(targets) + list(self.protoc_options),
            dependencies=[resolve(p) for p in self.dependencies],
            schema_pattern=self.schema_pattern,
            cache_directory=cache_root / "protobuf",
            cache_backend=self.cache_backend,
        )

    def _resolve_protoc(self, resolve) -> str:
        # Bare names are looked up on PATH by the OS, paths are project-relative.
        if "/" in self.protoc or os.sep in self.protoc:
            return str(resolve(Path(self.protoc)))
        return self.protoc


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
