# tests/conftest.py — v2
"""Shared test fixtures for unit and integration tests.

Provides a sample project tree, resolved BuildConfig, an in-process fake
protoc and a dependency-archive builder. No real protoc is ever needed.
"""

from __future__ import annotations

import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from protobuild.config.settings import Settings
from protobuild.core.models import BuildConfig

PERSON_PROTO = 'syntax = "proto3";\npackage demo;\nmessage Person { string name = 1; }\n'
ADDRESS_PROTO = 'syntax = "proto3";\npackage demo;\nmessage Address { string street = 1; }\n'

_OUTPUT_SUFFIX = {"java": ".java", "python": "_pb2.py"}


class FakeProtoc:
    """In-process protoc stand-in.

    Records every argument vector and, on success, writes one file per
    schema into each ``--<kind>_out`` directory.
    """

    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.calls: list[list[str]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def __call__(self, args: list[str]) -> int:
        self.calls.append(list(args))
        if self.exit_code != 0:
            return self.exit_code

        out_dirs: dict[str, Path] = {}
        for arg in args:
            if arg.startswith("--") and "_out=" in arg:
                kind, _, directory = arg[2:].partition("_out=")
                out_dirs[kind] = Path(directory)

        schemas = [Path(a) for a in args if a.endswith(".proto")]
        for kind, directory in out_dirs.items():
            suffix = _OUTPUT_SUFFIX.get(kind, ".out")
            directory.mkdir(parents=True, exist_ok=True)
            for schema in schemas:
                (directory / f"{schema.stem}{suffix}").write_text("// generated\n")
        return 0


# === FIXTURES: Project layout ===


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Project root with two schemas under src/main/protobuf."""
    source = tmp_path / "src" / "main" / "protobuf"
    (source / "nested").mkdir(parents=True)
    (source / "person.proto").write_text(PERSON_PROTO)
    (source / "nested" / "address.proto").write_text(ADDRESS_PROTO)
    (source / "README.md").write_text("not a schema\n")
    return tmp_path


@pytest.fixture
def source_dir(project: Path) -> Path:
    return project / "src" / "main" / "protobuf"


@pytest.fixture
def build_config(project: Path) -> BuildConfig:
    """Default configuration resolved against the sample project."""
    return Settings(_env_file=None, base_directory=project).to_build_config()


@pytest.fixture
def fake_protoc() -> FakeProtoc:
    return FakeProtoc()


@pytest.fixture
def failing_protoc() -> FakeProtoc:
    """protoc that always exits with code 3."""
    return FakeProtoc(exit_code=3)


# === FIXTURES: Dependency archives ===


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[[str, dict[str, str]], Path]:
    """Build a zip/jar under tmp_path/libs from {entry name: content}."""
    libs = tmp_path / "libs"
    libs.mkdir(exist_ok=True)

    def _make(name: str, entries: dict[str, str]) -> Path:
        archive = libs / name
        with zipfile.ZipFile(archive, "w") as zf:
            for entry, content in entries.items():
                zf.writestr(entry, content)
        return archive

    return _make


@pytest.fixture
def corrupt_deflated_archive(tmp_path: Path) -> Path:
    """Jar whose deflated ``damaged.proto`` payload has been overwritten.

    The central directory stays intact, so the archive opens fine and the
    failure only surfaces while decompressing the entry.
    """
    libs = tmp_path / "libs"
    libs.mkdir(exist_ok=True)
    archive = libs / "damaged.jar"
    payload = "".join(
        f"message M{i} {{ string field_{i} = {i % 7 + 1}; }}\n" for i in range(400)
    )
    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("damaged.proto", payload)
    with zipfile.ZipFile(archive) as zf:
        info = zf.getinfo("damaged.proto")
    # Local header is 30 bytes plus the name; writestr adds no extra field.
    start = info.header_offset + 30 + len(info.filename.encode())
    data = bytearray(archive.read_bytes())
    for i in range(start + 2, start + min(info.compress_size - 2, 40)):
        data[i] ^= 0xFF
    archive.write_bytes(bytes(data))
    return archive
