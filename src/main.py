# src/main.py — v2
"""CLI entry point: generate, unpack, clean commands.

Usage:
    protobuild generate [options]
    protobuild unpack [options]
    protobuild clean [options]

Command-line values override settings from .env / PROTOBUILD_* variables.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from protobuild.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from protobuild.config.settings import ConfigurationError, load_settings
    from protobuild.logging.logger import setup_logging

    try:
        settings = load_settings(**_settings_overrides(args))
    except (ConfigurationError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )

    try:
        return args.func(settings.to_build_config())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="protobuild",
        description=f"protobuild v{__version__}: incremental protoc driver",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    common.add_argument(
        "--base-dir", type=Path, default=None,
        help="Project directory relative paths resolve against (default: .)",
    )
    common.add_argument(
        "--source-dir", dest="source_dirs", type=Path, action="append",
        help="Schema source directory (repeatable)",
    )
    common.add_argument(
        "-I", "--include", dest="includes", type=Path, action="append",
        help="Extra protoc include path (repeatable)",
    )
    common.add_argument("--protoc", default=None, help="protoc executable")
    common.add_argument(
        "--protoc-option", dest="protoc_options", action="append",
        help="Option passed through to protoc, as --protoc-option=--flag (repeatable)",
    )
    common.add_argument(
        "--target", dest="targets", action="append",
        help="Generated target as DIR:GLOB, e.g. gen/py:*.py (repeatable)",
    )
    common.add_argument(
        "--dependency", dest="dependencies", type=Path, action="append",
        help="Dependency archive containing .proto files (repeatable)",
    )
    common.add_argument("--cache-root", type=Path, default=None)
    common.add_argument(
        "--cache-backend", choices=["json", "sqlite"], default=None,
    )

    subparsers = parser.add_subparsers(dest="command")

    p_generate = subparsers.add_parser(
        "generate", parents=[common],
        help="Unpack dependencies and compile changed schemas",
    )
    p_generate.set_defaults(func=_cmd_generate)

    p_unpack = subparsers.add_parser(
        "unpack", parents=[common],
        help="Only extract .proto files from dependencies",
    )
    p_unpack.set_defaults(func=_cmd_unpack)

    p_clean = subparsers.add_parser(
        "clean", parents=[common],
        help="Remove generated sources and extracted dependencies",
    )
    p_clean.set_defaults(func=_cmd_clean)

    return parser


def _settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Map parsed CLI options onto Settings field overrides."""
    from protobuild.core.models import GeneratedTarget

    overrides: dict[str, Any] = {}
    if args.base_dir is not None:
        overrides["base_directory"] = args.base_dir
    if args.source_dirs:
        overrides["source_directories"] = args.source_dirs
    if args.includes:
        overrides["extra_include_paths"] = args.includes
    if args.protoc:
        overrides["protoc"] = args.protoc
    if args.protoc_options:
        overrides["protoc_options"] = args.protoc_options
    if args.targets:
        overrides["generated_targets"] = [GeneratedTarget.parse(t) for t in args.targets]
    if args.dependencies:
        overrides["dependencies"] = args.dependencies
    if args.cache_root is not None:
        overrides["cache_root"] = args.cache_root
    if args.cache_backend:
        overrides["cache_backend"] = args.cache_backend
    return overrides


def _cmd_generate(config) -> int:
    """Run the full generation step."""
    from protobuild.pipeline.generate import run_build

    result = run_build(config)
    if not result.success:
        return 1
    for path in result.generated_files:
        print(path)
    return 0


def _cmd_unpack(config) -> int:
    """Extract dependency schemas only."""
    from protobuild.core.errors import ExtractionError
    from protobuild.pipeline.generate import unpack_dependencies

    try:
        unpacked = unpack_dependencies(config)
    except ExtractionError as exc:
        logger.error("%s", exc)
        return 1
    for path in unpacked.files:
        print(path)
    return 0


def _cmd_clean(config) -> int:
    """Remove directories owned by the generation step."""
    from protobuild.pipeline.clean import clean

    removed = clean(config)
    logger.info("Clean removed %d directories", len(removed))
    return 0


if __name__ == "__main__":
    sys.exit(main())
