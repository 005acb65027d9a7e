"""Unix (Linux/macOS) adapter built on lsof, ps and kill."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..exceptions import (
    NetworkError,
    PermissionDeniedError,
    SystemCommandError,
    ValidationError,
)
from ..models.process import Process, TransportProtocol
from .base import PlatformAdapter, ProcessDetails
from .command_runner import CommandResult
from .failure_classifier import (
    UNIX_GONE_MARKERS,
    UNIX_PERMISSION_MARKERS,
    contains_any,
    mentions_invalid_argument,
    mentions_network,
)

logger = logging.getLogger(__name__)

# COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME [STATE]
_LSOF_MIN_FIELDS = 9
_LSOF_NO_MATCH_EXIT_CODE = 1
_PS_NOT_FOUND_EXIT_CODE = 1
_RELEVANT_STATES = ("(LISTEN)", "(ESTABLISHED)")


def _parse_pid(raw: str) -> Optional[int]:
    try:
        pid = int(raw)
    except ValueError:
        return None
    return pid if pid > 0 else None


def _lsof_protocol(fields: Sequence[str]) -> TransportProtocol:
    node = fields[7].upper()
    tail = " ".join(fields[8:]).upper()
    if node == TransportProtocol.UDP.value or TransportProtocol.UDP.value in tail:
        return TransportProtocol.UDP
    return TransportProtocol.TCP


def parse_lsof_output(stdout: str, port: int) -> List[Process]:
    """
    Parse ``lsof -i :PORT -P -n`` output into processes.

    Only listening or established TCP sockets and all UDP sockets are kept,
    and each PID is reported once.
    """
    processes: Dict[int, Process] = {}
    for line in stdout.strip().splitlines()[1:]:
        fields = line.split()
        if len(fields) < _LSOF_MIN_FIELDS:
            continue

        pid = _parse_pid(fields[1])
        if pid is None or pid in processes:
            continue

        protocol = _lsof_protocol(fields)
        connection = " ".join(fields[8:])
        if protocol is not TransportProtocol.UDP and not any(state in connection for state in _RELEVANT_STATES):
            continue

        name = fields[0]
        try:
            processes[pid] = Process(pid=pid, name=name, user=fields[2], protocol=protocol, port=port, command=name)
        except ValidationError as exc:
            logger.debug("Skipping unusable lsof line %r: %s", line, exc)
    return list(processes.values())


class UnixAdapter(PlatformAdapter):
    """Adapter for Linux and macOS hosts."""

    compatible_systems = frozenset({"Linux", "Darwin"})
    missing_tool_hint = "Please install lsof to use this tool."

    async def find_process_by_port(self, port: int) -> List[Process]:
        argv = ["lsof", "-i", f":{port}", "-P", "-n"]
        result = await self._run(argv, tool="lsof")
        if result.ok:
            return parse_lsof_output(result.stdout, port)

        error = self._classify_lookup_failure(result, port)
        if error is None:
            return []
        raise error

    def _classify_lookup_failure(self, result: CommandResult, port: int) -> Optional[Exception]:
        """Map a failed lsof run to an error; ``None`` means no socket matched."""
        stderr = result.stderr
        if "Permission denied" in stderr:
            return PermissionDeniedError.for_port_lookup()
        if result.exit_code == _LSOF_NO_MATCH_EXIT_CODE and not result.has_output:
            return None
        if mentions_network(stderr):
            return NetworkError(
                f"Network error while checking port {port}: {stderr.strip()}",
                port=port,
                operation="lsof lookup",
            )
        if mentions_invalid_argument(stderr):
            return ValidationError(f"Invalid port number {port} for lsof command")
        return SystemCommandError(
            f"Failed to find processes on port {port}: {stderr.strip() or 'lsof failed'}",
            command=result.command,
            exit_code=result.exit_code,
        )

    async def get_process_details(self, pid: int) -> ProcessDetails:
        argv = ["ps", "-p", str(pid), "-o", "pid=,user=,comm=,args="]
        result = await self._run(argv, tool="ps")

        if not result.ok:
            if contains_any(result.combined_output, UNIX_PERMISSION_MARKERS):
                raise PermissionDeniedError.for_details(pid)
            if result.exit_code == _PS_NOT_FOUND_EXIT_CODE:
                raise SystemCommandError.process_not_found(pid, result.command, result.exit_code)
            raise SystemCommandError(
                f"Failed to get process details for PID {pid}: {result.stderr.strip()}",
                command=result.command,
                exit_code=result.exit_code,
            )
        if not result.has_output:
            raise SystemCommandError.process_not_found(pid, result.command)

        fields = result.stdout.strip().splitlines()[0].split()
        if len(fields) < 3:
            raise SystemCommandError.invalid_output("ps", pid, result.command)
        process_pid = _parse_pid(fields[0])
        if process_pid is None:
            raise SystemCommandError.invalid_output("ps", pid, result.command)

        user, comm = fields[1], fields[2]
        args = " ".join(fields[3:])
        return ProcessDetails(pid=process_pid, user=user, name=comm, command=args or comm)

    async def _send_termination(self, pid: int, *, force: bool) -> None:
        signal = "KILL" if force else "TERM"
        argv = ["kill", f"-{signal}", str(pid)]
        result = await self._run(argv, tool="kill")
        if result.ok:
            return

        output = result.combined_output
        if contains_any(output, UNIX_PERMISSION_MARKERS):
            raise PermissionDeniedError.for_kill(
                pid, "The process may be owned by another user or be a system process."
            )
        if contains_any(output, UNIX_GONE_MARKERS):
            logger.debug("Process %s already exited before SIG%s", pid, signal)
            return
        if "Invalid argument" in output:
            raise SystemCommandError(
                f"Invalid signal or process ID when trying to kill process {pid}",
                command=result.command,
                exit_code=result.exit_code,
            )
        raise SystemCommandError(
            f"Failed to kill process {pid}: {output.strip()}",
            command=result.command,
            exit_code=result.exit_code,
        )

    def _liveness_command(self, pid: int) -> Sequence[str]:
        return ["ps", "-p", str(pid), "-o", "pid="]

    def _output_shows_process(self, result: CommandResult) -> bool:
        return result.has_output


__all__ = ["UnixAdapter", "parse_lsof_output"]
