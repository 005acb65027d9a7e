"""Windows adapter built on netstat, tasklist and taskkill."""

from __future__ import annotations

import csv
import io
import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..exceptions import (
    NetworkError,
    PermissionDeniedError,
    PortKillError,
    SystemCommandError,
    ValidationError,
)
from ..models.process import Process, TransportProtocol
from .base import PlatformAdapter, ProcessDetails
from .command_runner import CommandResult
from .failure_classifier import (
    WINDOWS_GONE_MARKERS,
    WINDOWS_MISSING_TOOL_MARKERS,
    WINDOWS_NO_TASKS_MARKER,
    WINDOWS_PERMISSION_MARKERS,
    contains_any,
    mentions_invalid_argument,
    mentions_network,
)

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
_NO_MATCH_EXIT_CODE = 1
_TASKLIST_FIELDS = 5
_RELEVANT_TCP_STATES = frozenset({"LISTENING", "ESTABLISHED"})


def _parse_pid(raw: str) -> Optional[int]:
    try:
        pid = int(raw)
    except ValueError:
        return None
    return pid if pid > 0 else None


def parse_netstat_output(stdout: str, port: int) -> List[Tuple[int, TransportProtocol]]:
    """
    Return ``(pid, protocol)`` pairs for sockets whose local address uses *port*.

    TCP rows are ``Proto Local Foreign State PID`` and only LISTENING or
    ESTABLISHED states count; UDP rows have no State column. Each PID is
    returned once, in first-seen order.
    """
    port_pattern = re.compile(rf":{port}(\s|$)")
    matches: Dict[int, TransportProtocol] = {}
    for line in stdout.strip().splitlines():
        fields = line.split()
        if len(fields) < 4:
            continue
        if not port_pattern.search(fields[1]):
            continue

        proto = fields[0].upper()
        if proto == TransportProtocol.TCP.value:
            if len(fields) < 5 or fields[3] not in _RELEVANT_TCP_STATES:
                continue
            pid = _parse_pid(fields[4])
        elif proto == TransportProtocol.UDP.value:
            pid = _parse_pid(fields[3])
        else:
            continue

        if pid is None or pid in matches:
            continue
        matches[pid] = TransportProtocol(proto)
    return list(matches.items())


def parse_tasklist_row(stdout: str) -> Optional[List[str]]:
    """Parse the first CSV row of ``tasklist /FO CSV /NH`` output."""
    line = stdout.strip().splitlines()[0]
    row = next(csv.reader(io.StringIO(line)), [])
    if len(row) < _TASKLIST_FIELDS or not all(field.strip() for field in row[:_TASKLIST_FIELDS]):
        return None
    return row


class WindowsAdapter(PlatformAdapter):
    """Adapter for Windows hosts."""

    compatible_systems = frozenset({"Windows"})
    missing_tool_hint = "Ensure netstat, tasklist and taskkill are available."

    async def find_process_by_port(self, port: int) -> List[Process]:
        argv = ["netstat", "-ano"]
        result = await self._run(argv, tool="netstat")
        if not result.ok:
            error = self._classify_lookup_failure(result, port)
            if error is None:
                return []
            raise error

        processes: List[Process] = []
        for pid, protocol in parse_netstat_output(result.stdout, port):
            process = await self._build_process(pid, protocol, port)
            if process is not None:
                processes.append(process)
        return processes

    async def _build_process(self, pid: int, protocol: TransportProtocol, port: int) -> Optional[Process]:
        try:
            details = await self.get_process_details(pid)
            return Process(
                pid=pid,
                name=details.name or UNKNOWN,
                user=details.user or UNKNOWN,
                protocol=protocol,
                port=port,
                command=details.command or details.name or UNKNOWN,
            )
        except PortKillError as exc:
            logger.debug("Could not read details for PID %s: %s", pid, exc)

        try:
            return Process(pid=pid, name=UNKNOWN, user=UNKNOWN, protocol=protocol, port=port, command=UNKNOWN)
        except ValidationError as exc:
            logger.debug("Skipping unusable netstat entry for PID %s: %s", pid, exc)
            return None

    def _classify_lookup_failure(self, result: CommandResult, port: int) -> Optional[Exception]:
        """Map a failed netstat run to an error; ``None`` means no socket matched."""
        stderr = result.stderr
        if contains_any(stderr, WINDOWS_MISSING_TOOL_MARKERS):
            return SystemCommandError.tool_missing("netstat", self.missing_tool_hint, result.command, result.exit_code)
        if contains_any(stderr, WINDOWS_PERMISSION_MARKERS):
            return PermissionDeniedError.for_port_lookup()
        if result.exit_code == _NO_MATCH_EXIT_CODE and not result.has_output:
            return None
        if mentions_network(stderr):
            return NetworkError(
                f"Network error while checking port {port}: {stderr.strip()}",
                port=port,
                operation="netstat lookup",
            )
        if mentions_invalid_argument(stderr):
            return ValidationError(f"Invalid port number {port} for netstat command")
        return SystemCommandError(
            f"Failed to find processes on port {port}: {stderr.strip() or 'netstat failed'}",
            command=result.command,
            exit_code=result.exit_code,
        )

    async def get_process_details(self, pid: int) -> ProcessDetails:
        result = await self._run(self._tasklist_command(pid), tool="tasklist")

        if not result.ok:
            if contains_any(result.combined_output, WINDOWS_PERMISSION_MARKERS):
                raise PermissionDeniedError.for_details(pid)
            if result.exit_code == _NO_MATCH_EXIT_CODE:
                raise SystemCommandError.process_not_found(pid, result.command, result.exit_code)
            raise SystemCommandError(
                f"Failed to get process details for PID {pid}: {result.stderr.strip()}",
                command=result.command,
                exit_code=result.exit_code,
            )
        if not result.has_output or WINDOWS_NO_TASKS_MARKER in result.stdout:
            raise SystemCommandError.process_not_found(pid, result.command)

        row = parse_tasklist_row(result.stdout)
        if row is None:
            raise SystemCommandError.invalid_output("tasklist", pid, result.command)
        image_name, raw_pid, session_name = row[0], row[1], row[2]
        process_pid = _parse_pid(raw_pid)
        if process_pid is None:
            raise SystemCommandError.invalid_output("tasklist", pid, result.command)

        # tasklist does not expose the owner without extra privileges; the
        # session name stands in for it.
        user = "SYSTEM" if session_name == "Services" else session_name
        return ProcessDetails(pid=process_pid, user=user, name=image_name, command=image_name)

    async def _send_termination(self, pid: int, *, force: bool) -> None:
        argv = ["taskkill", "/PID", str(pid)]
        if force:
            argv.append("/F")
        result = await self._run(argv, tool="taskkill")
        if result.ok:
            return

        output = result.combined_output
        if contains_any(output, WINDOWS_PERMISSION_MARKERS):
            raise PermissionDeniedError.for_kill(
                pid, "The process may be a system process or owned by another user."
            )
        if contains_any(output, WINDOWS_GONE_MARKERS):
            logger.debug("Process %s already exited before taskkill", pid)
            return
        if "not recognized" in output:
            raise SystemCommandError.tool_missing(
                "taskkill", "Ensure Windows system tools are available.", result.command, result.exit_code
            )
        if "Invalid argument" in output:
            raise SystemCommandError(
                f"Invalid process ID {pid} or taskkill parameters",
                command=result.command,
                exit_code=result.exit_code,
            )
        raise SystemCommandError(
            f"Failed to kill process {pid}: {output.strip()}",
            command=result.command,
            exit_code=result.exit_code,
        )

    def _liveness_command(self, pid: int) -> Sequence[str]:
        return self._tasklist_command(pid)

    def _output_shows_process(self, result: CommandResult) -> bool:
        return result.has_output and WINDOWS_NO_TASKS_MARKER not in result.stdout

    @staticmethod
    def _tasklist_command(pid: int) -> List[str]:
        return ["tasklist", "/FI", f"PID eq {pid}", "/FO", "CSV", "/NH"]


__all__ = ["UNKNOWN", "WindowsAdapter", "parse_netstat_output", "parse_tasklist_row"]
