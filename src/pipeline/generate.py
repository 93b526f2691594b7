# src/pipeline/generate.py — v1
"""Protobuf generation step: unpack, discover, cached compile, collect.

Usage:
    from protobuild.pipeline.generate import run_build
    result = run_build(settings.to_build_config())

Everything runs sequentially on the calling thread; protoc blocks until it
exits. ``generate`` raises BuildStepError subclasses, ``run_build`` turns
them into a BuildResult.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from pathlib import Path

from protobuild.cache.base_cache_store import BaseCacheStore
from protobuild.cache.cache_factory import create_cache_store
from protobuild.cache.incremental import IncrementalCache
from protobuild.compiler.collector import collect_outputs
from protobuild.compiler.invoker import ProtocRunner, SubprocessProtocRunner, execute_protoc
from protobuild.core.errors import BuildStepError, ProtocCompileError
from protobuild.core.models import (
    BuildConfig,
    BuildError,
    BuildResult,
    GeneratedTarget,
    UnpackedDependencies,
)
from protobuild.dependencies.unpacker import unpack
from protobuild.discovery.schema_scanner import discover_schemas
from protobuild.logging.context import clear_context, set_build_context, set_step_context

logger = logging.getLogger(__name__)


def unpack_dependencies(config: BuildConfig) -> UnpackedDependencies:
    """Extract schema files from dependency archives into the include dir."""
    files = unpack(
        config.dependencies, config.external_include_path, config.schema_pattern,
    )
    return UnpackedDependencies(directory=config.external_include_path, files=files)


def compile_schemas(
    runner: ProtocRunner,
    schemas: set[Path],
    include_paths: Sequence[Path],
    options: Sequence[str],
    targets: Sequence[GeneratedTarget],
) -> set[Path]:
    """Run protoc over ``schemas`` and return every file the targets match.

    Raises:
        ProtocLaunchError: If protoc could not be started.
        ProtocCompileError: If protoc exits with a nonzero code.
    """
    target_dirs = [t.directory for t in targets]
    for directory in target_dirs:
        directory.mkdir(parents=True, exist_ok=True)

    logger.info(
        "Compiling %d protobuf files to %s",
        len(schemas), ",".join(str(d) for d in target_dirs),
    )
    for schema in sorted(schemas):
        logger.info("Compiling schema %s", schema)

    exit_code = execute_protoc(runner, schemas, include_paths, options)
    if exit_code != 0:
        raise ProtocCompileError(exit_code)

    for directory in target_dirs:
        logger.info("Protoc target directory: %s", directory)

    return collect_outputs(targets)


def generate(
    config: BuildConfig,
    runner: ProtocRunner | None = None,
    store: BaseCacheStore | None = None,
) -> list[Path]:
    """Regenerate sources if the schema set or outputs changed.

    Args:
        config: Resolved build configuration.
        runner: protoc executor. Defaults to a subprocess running
            ``config.protoc`` from the project directory.
        store: Cache backend. Defaults to the one named in ``config``.

    Returns:
        Sorted generated file paths (from cache when up to date).
    """
    runner = runner or SubprocessProtocRunner(config.protoc, cwd=config.base_directory)
    store = store or create_cache_store(config)

    schemas = discover_schemas(config.schema_directories, config.schema_pattern)

    def _compile(inputs: set[Path]) -> set[Path]:
        if not inputs:
            logger.info("No protobuf files found, skipping protoc")
            return set()
        return compile_schemas(
            runner,
            inputs,
            config.include_paths,
            config.protoc_options,
            config.generated_targets,
        )

    outputs = IncrementalCache(store).evaluate(schemas, _compile)
    return sorted(outputs)


def run_build(
    config: BuildConfig,
    runner: ProtocRunner | None = None,
    store: BaseCacheStore | None = None,
) -> BuildResult:
    """Full step: unpack dependencies, then cached generation.

    Fatal failures stop the step immediately and come back as
    ``BuildResult.error``; nothing is retried.
    """
    set_build_context(uuid.uuid4().hex[:12])
    try:
        set_step_context("unpack")
        unpacked = unpack_dependencies(config)

        set_step_context("generate")
        files = generate(config, runner=runner, store=store)
    except BuildStepError as exc:
        logger.error("Protobuf generation failed: %s", exc)
        return BuildResult(error=BuildError.from_exception(exc))
    finally:
        clear_context()

    logger.info("Protobuf generation produced %d files", len(files))
    return BuildResult(generated_files=files, unpacked=unpacked)
