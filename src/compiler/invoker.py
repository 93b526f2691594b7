# src/compiler/invoker.py — v1
"""protoc invocation: argument vector construction and process execution.

argv = [protoc] [-I<include>]* [<options>]* [<schema>]*

Include flags keep their input order. Schema paths are sorted so repeated
runs over the same set hand protoc identical arguments. A nonzero exit code
is returned, not raised; the caller decides what it means.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import IO

from protobuild.core.errors import ProtocLaunchError

logger = logging.getLogger(__name__)

# Takes protoc's arguments (without the binary), returns its exit code.
ProtocRunner = Callable[[list[str]], int]


def build_protoc_args(
    include_paths: Sequence[Path],
    options: Sequence[str],
    schemas: Iterable[Path],
) -> list[str]:
    """Assemble include flags, pass-through options, then schema paths."""
    args = [f"-I{p.absolute()}" for p in include_paths]
    args.extend(options)
    args.extend(sorted(str(s.absolute()) for s in schemas))
    return args


class SubprocessProtocRunner:
    """Run protoc as a child process and relay its output to the build log.

    Output is streamed line by line while protoc runs: stdout at INFO,
    stderr at WARNING. There is no timeout.
    """

    def __init__(self, protoc: str = "protoc", cwd: Path | None = None) -> None:
        self._protoc = protoc
        self._cwd = cwd

    @property
    def protoc(self) -> str:
        return self._protoc

    def __call__(self, args: list[str]) -> int:
        command = [self._protoc, *args]
        with subprocess.Popen(
            command,
            cwd=str(self._cwd) if self._cwd else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        ) as proc:
            # stderr gets its own reader so neither pipe can fill up and stall protoc.
            stderr_relay = threading.Thread(
                target=_relay, args=(proc.stderr, logging.WARNING), daemon=True,
            )
            stderr_relay.start()
            _relay(proc.stdout, logging.INFO)
            stderr_relay.join()
            return proc.wait()


def _relay(stream: IO[str], level: int) -> None:
    for line in stream:
        logger.log(level, "protoc: %s", line.rstrip("\r\n"))


def execute_protoc(
    runner: ProtocRunner,
    schemas: Iterable[Path],
    include_paths: Sequence[Path],
    options: Sequence[str],
) -> int:
    """Invoke ``runner`` with the assembled arguments and return its exit code.

    Raises:
        ProtocLaunchError: If the process could not be started at all.
    """
    logger.debug("protoc options:")
    for option in options:
        logger.debug("\t%s", option)

    args = build_protoc_args(include_paths, options, schemas)
    try:
        return runner(args)
    except (OSError, subprocess.SubprocessError, ValueError) as exc:
        raise ProtocLaunchError(str(exc)) from exc
