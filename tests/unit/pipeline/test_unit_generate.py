# tests/unit/pipeline/test_unit_generate.py — v1
"""Tests for pipeline/generate.py: cached generation and build results."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from protobuild.cache.json_store import JsonCacheStore
from protobuild.cache.sqlite_store import SqliteCacheStore
from protobuild.config.settings import Settings
from protobuild.core.errors import ProtocCompileError, ProtocLaunchError
from protobuild.pipeline.generate import (
    compile_schemas,
    generate,
    run_build,
    unpack_dependencies,
)


def _bump_mtime(path: Path, seconds: int = 5) -> None:
    st = path.stat()
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))


@pytest.fixture
def store(build_config) -> JsonCacheStore:
    return JsonCacheStore(build_config.cache_directory)


class TestGenerate:
    def test_first_run_compiles(self, build_config, fake_protoc, store):
        files = generate(build_config, runner=fake_protoc, store=store)
        assert fake_protoc.call_count == 1
        assert {f.name for f in files} == {"person.java", "address.java"}
        assert files == sorted(files)

    def test_idempotent(self, build_config, fake_protoc, store):
        first = generate(build_config, runner=fake_protoc, store=store)
        second = generate(build_config, runner=fake_protoc, store=store)
        assert fake_protoc.call_count == 1
        assert first == second

    def test_touch_invalidates(self, build_config, fake_protoc, store, source_dir):
        generate(build_config, runner=fake_protoc, store=store)
        _bump_mtime(source_dir / "person.proto")
        generate(build_config, runner=fake_protoc, store=store)
        assert fake_protoc.call_count == 2

    def test_added_schema_invalidates(self, build_config, fake_protoc, store, source_dir):
        generate(build_config, runner=fake_protoc, store=store)
        (source_dir / "extra.proto").write_text('syntax = "proto3";\n')
        files = generate(build_config, runner=fake_protoc, store=store)
        assert fake_protoc.call_count == 2
        assert "extra.java" in {f.name for f in files}

    def test_removed_schema_invalidates(self, build_config, fake_protoc, store, source_dir):
        generate(build_config, runner=fake_protoc, store=store)
        (source_dir / "nested" / "address.proto").unlink()
        generate(build_config, runner=fake_protoc, store=store)
        assert fake_protoc.call_count == 2

    def test_deleted_output_invalidates(self, build_config, fake_protoc, store):
        files = generate(build_config, runner=fake_protoc, store=store)
        files[0].unlink()
        regenerated = generate(build_config, runner=fake_protoc, store=store)
        assert fake_protoc.call_count == 2
        assert regenerated == files

    def test_argument_layout(self, build_config, fake_protoc, store, source_dir):
        generate(build_config, runner=fake_protoc, store=store)
        (args,) = fake_protoc.calls
        assert args[0] == f"-I{source_dir}"
        assert args[1] == f"-I{build_config.external_include_path}"
        assert args[2].startswith("--java_out=")
        assert args[3:] == sorted([
            str(source_dir / "nested" / "address.proto"),
            str(source_dir / "person.proto"),
        ])

    def test_compile_failure_keeps_cache(self, build_config, fake_protoc, failing_protoc, store, source_dir):
        generate(build_config, runner=fake_protoc, store=store)
        before = store.load()
        _bump_mtime(source_dir / "person.proto")

        with pytest.raises(ProtocCompileError) as exc_info:
            generate(build_config, runner=failing_protoc, store=store)
        assert exc_info.value.exit_code == 3
        assert store.load() == before

    def test_no_schemas_skips_protoc(self, tmp_path, fake_protoc):
        config = Settings(_env_file=None, base_directory=tmp_path).to_build_config()
        assert generate(config, runner=fake_protoc) == []
        assert fake_protoc.call_count == 0

    def test_unpacked_schemas_are_sources(self, build_config, fake_protoc, store):
        external = build_config.external_include_path / "lib"
        external.mkdir(parents=True)
        (external / "lib.proto").write_text('syntax = "proto3";\n')
        files = generate(build_config, runner=fake_protoc, store=store)
        assert "lib.java" in {f.name for f in files}


class TestCompileSchemas:
    def test_creates_target_dirs(self, build_config, tmp_path):
        seen = []
        compile_schemas(
            lambda args: seen.append(args) or 0,
            {tmp_path / "a.proto"}, [], [], build_config.generated_targets,
        )
        assert all(d.is_dir() for d in build_config.target_directories)
        assert len(seen) == 1

    def test_stray_output_adopted(self, build_config, fake_protoc, tmp_path):
        java_dir = build_config.target_directories[0]
        java_dir.mkdir(parents=True)
        (java_dir / "Stray.java").write_text("")
        outputs = compile_schemas(
            fake_protoc, {tmp_path / "a.proto"}, [], build_config.protoc_options,
            build_config.generated_targets,
        )
        assert {p.name for p in outputs} == {"a.java", "Stray.java"}


class TestRunBuild:
    def test_success(self, build_config, fake_protoc, store, make_archive):
        jar = make_archive("dep.jar", {"dep/shared.proto": 'syntax = "proto3";\n'})
        config = build_config.model_copy(update={"dependencies": [jar]})

        result = run_build(config, runner=fake_protoc, store=store)

        assert result.success
        assert result.unpacked.files == [config.external_include_path / "dep" / "shared.proto"]
        assert {f.name for f in result.generated_files} == {
            "person.java", "address.java", "shared.java",
        }

    def test_compile_failure_reports_exit_code(self, build_config, failing_protoc, store):
        result = run_build(build_config, runner=failing_protoc, store=store)
        assert not result.success
        assert result.error.kind == "compile_failure"
        assert result.error.exit_code == 3
        assert "3" in result.error.message
        assert store.load() is None

    def test_extraction_failure_stops_before_compile(self, build_config, fake_protoc, store, tmp_path):
        broken = tmp_path / "broken.jar"
        broken.write_bytes(b"not a zip")
        config = build_config.model_copy(update={"dependencies": [broken]})

        result = run_build(config, runner=fake_protoc, store=store)

        assert result.error.kind == "extraction_failure"
        assert fake_protoc.call_count == 0

    def test_damaged_entry_is_extraction_failure(
        self, build_config, fake_protoc, store, corrupt_deflated_archive,
    ):
        config = build_config.model_copy(update={"dependencies": [corrupt_deflated_archive]})

        result = run_build(config, runner=fake_protoc, store=store)

        assert result.error.kind == "extraction_failure"
        assert "damaged.jar" in result.error.message
        assert fake_protoc.call_count == 0

    def test_unwritable_sqlite_cache_keeps_build_successful(self, build_config, fake_protoc):
        db = build_config.cache_directory / "cache.db"
        db.mkdir(parents=True)

        result = run_build(build_config, runner=fake_protoc, store=SqliteCacheStore(db))

        assert result.success
        assert {f.name for f in result.generated_files} == {"person.java", "address.java"}

    def test_launch_failure(self, build_config, store):
        def missing(_args):
            raise FileNotFoundError(2, "No such file or directory", "protoc")

        result = run_build(build_config, runner=missing, store=store)
        assert result.error.kind == "launch_failure"
        assert "No such file or directory" in result.error.message

    def test_launch_failure_raised_from_generate(self, build_config, store):
        def denied(_args):
            raise PermissionError(13, "Permission denied")

        with pytest.raises(ProtocLaunchError):
            generate(build_config, runner=denied, store=store)


class TestUnpackDependencies:
    def test_returns_directory_and_files(self, build_config, make_archive):
        jar = make_archive("dep.jar", {"a.proto": "", "b.txt": ""})
        config = build_config.model_copy(update={"dependencies": [jar]})
        unpacked = unpack_dependencies(config)
        assert unpacked.directory == config.external_include_path
        assert [f.name for f in unpacked.files] == ["a.proto"]
