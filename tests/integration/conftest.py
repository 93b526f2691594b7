# tests/integration/conftest.py — v8
"""Fixtures for end-to-end tests against a real child process.

A POSIX shell script plays protoc: it writes one ``<stem>.java`` per schema
into the ``--java_out`` directory, appends a line to ``invocations`` next to
itself, and exits with $FAKE_PROTOC_EXIT (default 0).
"""

from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

FAKE_PROTOC = """#!/bin/sh
out=""
for arg in "$@"; do
  case "$arg" in
    --java_out=*) out="${arg#--java_out=}" ;;
  esac
done
echo "$*" >> "$(dirname "$0")/invocations"
if [ "${FAKE_PROTOC_EXIT:-0}" != "0" ]; then
  echo "fake protoc failing" >&2
  exit "$FAKE_PROTOC_EXIT"
fi
for arg in "$@"; do
  case "$arg" in
    *.proto)
      name=$(basename "$arg" .proto)
      echo "// generated from $arg" > "$out/$name.java"
      ;;
  esac
done
echo "fake protoc compiled $# arguments"
exit 0
"""


def pytest_collection_modifyitems(config, items):
    if sys.platform.startswith("win"):
        skip = pytest.mark.skip(reason="fake protoc is a POSIX shell script")
        here = Path(__file__).parent
        for item in items:
            if here in item.path.parents:
                item.add_marker(skip)


@pytest.fixture
def protoc_script(tmp_path: Path) -> Path:
    """Executable fake protoc under tmp_path/bin."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "protoc"
    script.write_text(FAKE_PROTOC)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def invocation_count(protoc_script: Path):
    """Callable returning how many times the fake protoc has run."""
    log = protoc_script.parent / "invocations"

    def _count() -> int:
        if not log.exists():
            return 0
        return len(log.read_text().splitlines())

    return _count


@pytest.fixture(autouse=True)
def _no_exit_override(monkeypatch):
    monkeypatch.delenv("FAKE_PROTOC_EXIT", raising=False)
