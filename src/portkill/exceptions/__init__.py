"""Exception classes for port inspection and termination.

All errors raised by the engine inherit from :class:`PortKillError` so the CLI
can present them uniformly. Each class carries a ``code`` discriminant plus
the contextual attributes needed to explain the failure.

Exception classes support two patterns:
1. No-argument raise: raise ValidationError()
2. Contextual attributes: err = SystemCommandError(command="lsof -i :80", exit_code=1); raise err
"""

from __future__ import annotations

import platform
from typing import Any, Optional


class PortKillError(Exception):
    """Base exception for all portkill errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    code = "PORTKILL_ERROR"

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Port operation failed"
        super().__init__(message)
        self.message = message
        for key, value in kwargs.items():
            setattr(self, key, value)

    def user_message(self) -> str:
        """Return the message shown to the user."""
        return self.message


class ValidationError(PortKillError):
    """Caller input failed validation."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Input validation failed"
        super().__init__(message, **kwargs)


class PermissionDeniedError(PortKillError):
    """Insufficient privileges to inspect or terminate a process."""

    code = "PERMISSION_ERROR"

    def __init__(self, message: str = "", *, pid: Optional[int] = None, **kwargs: Any) -> None:
        if not message:
            message = "Permission denied"
        super().__init__(message, pid=pid, **kwargs)

    @classmethod
    def for_port_lookup(cls) -> "PermissionDeniedError":
        """Create error for a lookup that the OS tool refused."""
        return cls("Permission denied when checking port. Some processes may not be visible without elevated privileges.")

    @classmethod
    def for_kill(cls, pid: int, detail: str) -> "PermissionDeniedError":
        """Create error for a termination signal that was refused."""
        return cls(f"Permission denied when trying to kill process {pid}. {detail}", pid=pid)

    @classmethod
    def for_details(cls, pid: int) -> "PermissionDeniedError":
        """Create error for a process lister that refused to describe *pid*."""
        return cls(f"Permission denied when reading details for process {pid}", pid=pid)

    def user_message(self) -> str:
        message = self.message
        if self.pid:
            message += f" (PID: {self.pid})"
        message += "\n\nSuggestion: Try running the command with elevated privileges:"
        if platform.system() == "Windows":
            message += "\n- Run Command Prompt or PowerShell as Administrator"
        else:
            message += "\n- Use sudo: sudo pk"
        return message


class SystemCommandError(PortKillError):
    """A diagnostic or termination command is missing or misbehaved."""

    code = "SYSTEM_ERROR"

    def __init__(
        self,
        message: str = "",
        *,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        if not message:
            message = "System command failed"
        super().__init__(message, command=command, exit_code=exit_code, **kwargs)

    @classmethod
    def tool_missing(cls, tool: str, hint: str, command: str, exit_code: Optional[int] = None) -> "SystemCommandError":
        """Create error for a diagnostic tool that is not installed."""
        return cls(f"{tool} command not found. {hint}", command=command, exit_code=exit_code)

    @classmethod
    def process_not_found(cls, pid: int, command: str, exit_code: Optional[int] = 1) -> "SystemCommandError":
        """Create error for a PID the process lister does not know."""
        return cls(f"Process with PID {pid} not found", command=command, exit_code=exit_code)

    @classmethod
    def invalid_output(cls, tool: str, pid: int, command: str) -> "SystemCommandError":
        """Create error for output that does not have the expected shape."""
        return cls(f"Invalid {tool} output format for PID {pid}", command=command)

    def user_message(self) -> str:
        message = self.message
        if self.command:
            message += f"\nCommand: {self.command}"
        if self.exit_code is not None:
            message += f"\nExit code: {self.exit_code}"
        return message


class NetworkError(PortKillError):
    """A lookup failed for a networking-layer reason."""

    code = "NETWORK_ERROR"

    def __init__(
        self,
        message: str = "",
        *,
        port: Optional[int] = None,
        operation: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        if not message:
            message = "Network communication error"
        super().__init__(message, port=port, operation=operation, **kwargs)

    def user_message(self) -> str:
        message = self.message
        if self.port:
            message += f" (Port: {self.port})"
        if self.operation:
            message += f" (Operation: {self.operation})"
        message += "\n\nSuggestions:"
        message += "\n- Check your network connection"
        message += "\n- Verify the port number is correct and accessible"
        message += "\n- Ensure no firewall is blocking the connection"
        message += "\n- Try again in a few moments"
        return message


class UnsupportedPlatformError(PortKillError):
    """The host operating system has no platform adapter."""

    code = "UNSUPPORTED_PLATFORM"

    def __init__(self, message: str = "", *, system: Optional[str] = None, **kwargs: Any) -> None:
        if not message:
            message = f"Unsupported platform: {system}"
        super().__init__(message, system=system, **kwargs)


TAXONOMY_ERRORS = (ValidationError, PermissionDeniedError, SystemCommandError, NetworkError)


__all__ = [
    "NetworkError",
    "PermissionDeniedError",
    "PortKillError",
    "SystemCommandError",
    "TAXONOMY_ERRORS",
    "UnsupportedPlatformError",
    "ValidationError",
]
