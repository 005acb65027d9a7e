"""Platform adapter contract and the shared termination sequence."""

from __future__ import annotations

import asyncio
import logging
import platform
import shlex
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, ClassVar, FrozenSet, List, Optional, Sequence

from ..exceptions import PortKillError, SystemCommandError
from ..models.process import Process
from .command_runner import CommandResult, CommandRunner, run_command

logger = logging.getLogger(__name__)

DEFAULT_GRACEFUL_WAIT_SECONDS = 1.0
DEFAULT_FORCE_WAIT_SECONDS = 0.5


@dataclass(frozen=True)
class TerminationTiming:
    """Pauses between a termination signal and the following liveness poll."""

    graceful_wait_seconds: float = DEFAULT_GRACEFUL_WAIT_SECONDS
    force_wait_seconds: float = DEFAULT_FORCE_WAIT_SECONDS

    def __post_init__(self) -> None:
        if self.graceful_wait_seconds < 0 or self.force_wait_seconds < 0:
            raise ValueError("Termination wait times must be non-negative")


@dataclass(frozen=True)
class ProcessDetails:
    pid: int
    user: str
    name: str
    command: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class PlatformAdapter(ABC):
    """
    OS-family specific discovery, inspection and termination of processes.

    Subclasses provide the command lines and output parsing; the graceful
    then forced termination sequence is shared.
    """

    compatible_systems: ClassVar[FrozenSet[str]] = frozenset()
    missing_tool_hint: ClassVar[str] = "Ensure the required system tools are installed."

    def __init__(
        self,
        *,
        timing: Optional[TerminationTiming] = None,
        command_runner: Optional[CommandRunner] = None,
    ) -> None:
        self.timing = timing or TerminationTiming()
        self._command_runner = command_runner or run_command

    @abstractmethod
    async def find_process_by_port(self, port: int) -> List[Process]:
        """Return the processes bound to *port*, one entry per PID."""

    @abstractmethod
    async def get_process_details(self, pid: int) -> ProcessDetails:
        """Return user, name and command line for *pid*."""

    @abstractmethod
    async def _send_termination(self, pid: int, *, force: bool) -> None:
        """Send a graceful or forced termination request to *pid*."""

    @abstractmethod
    def _liveness_command(self, pid: int) -> Sequence[str]:
        """Command whose output reveals whether *pid* still exists."""

    @abstractmethod
    def _output_shows_process(self, result: CommandResult) -> bool:
        """Interpret the output of :meth:`_liveness_command`."""

    async def kill_process(self, pid: int) -> bool:
        """
        Terminate *pid*, escalating to a forced kill if it survives.

        Returns:
            True if the process is gone afterwards, False if it is still running

        Raises:
            PermissionDeniedError: If either signal is refused
            SystemCommandError: If a termination command fails unexpectedly
        """
        await self._send_termination(pid, force=False)
        await asyncio.sleep(self.timing.graceful_wait_seconds)
        if not await self._is_process_running(pid):
            logger.debug("Process %s exited after graceful termination", pid)
            return True

        logger.debug("Process %s still running; forcing termination", pid)
        await self._send_termination(pid, force=True)
        await asyncio.sleep(self.timing.force_wait_seconds)
        still_running = await self._is_process_running(pid)
        if still_running:
            logger.warning("Process %s survived forced termination", pid)
        return not still_running

    def is_compatible(self) -> bool:
        return platform.system() in self.compatible_systems

    async def _is_process_running(self, pid: int) -> bool:
        argv = self._liveness_command(pid)
        try:
            result = await self._run(argv, tool=argv[0])
        except PortKillError as exc:
            logger.debug("Liveness check for %s failed; assuming it exited: %s", pid, exc)
            return False
        if not result.ok:
            return False
        return self._output_shows_process(result)

    async def _run(self, argv: Sequence[str], *, tool: str) -> CommandResult:
        """Run *argv*, converting spawn failures into :class:`SystemCommandError`."""
        try:
            return await self._command_runner(argv)
        except FileNotFoundError as exc:
            raise SystemCommandError.tool_missing(tool, self.missing_tool_hint, shlex.join(argv)) from exc
        except OSError as exc:
            raise SystemCommandError(f"Failed to run {tool}: {exc}", command=shlex.join(argv)) from exc


__all__ = [
    "DEFAULT_FORCE_WAIT_SECONDS",
    "DEFAULT_GRACEFUL_WAIT_SECONDS",
    "PlatformAdapter",
    "ProcessDetails",
    "TerminationTiming",
]
