"""Run OS diagnostic commands as asyncio subprocesses."""

from __future__ import annotations

import asyncio
import logging
import shlex
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

logger = logging.getLogger(__name__)

_OUTPUT_ENCODING = "utf-8"


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one external command."""

    argv: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def command(self) -> str:
        return shlex.join(self.argv)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def has_output(self) -> bool:
        return bool(self.stdout.strip())

    @property
    def combined_output(self) -> str:
        return f"{self.stdout}\n{self.stderr}"


CommandRunner = Callable[[Sequence[str]], Awaitable[CommandResult]]


async def run_command(argv: Sequence[str]) -> CommandResult:
    """
    Execute *argv* without a shell and capture its output.

    A non-zero exit status is reported in the result, not raised.

    Raises:
        FileNotFoundError: If the executable does not exist
        OSError: If the process cannot be spawned
    """
    args = tuple(str(arg) for arg in argv)
    logger.debug("Running command: %s", shlex.join(args))
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    exit_code = process.returncode if process.returncode is not None else -1
    logger.debug("Command %s exited with status %s", args[0], exit_code)
    return CommandResult(
        argv=args,
        exit_code=exit_code,
        stdout=stdout.decode(_OUTPUT_ENCODING, errors="replace"),
        stderr=stderr.decode(_OUTPUT_ENCODING, errors="replace"),
    )


__all__ = ["CommandResult", "CommandRunner", "run_command"]
