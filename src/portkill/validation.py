"""Input validation for ports, process IDs and prompt answers."""

from __future__ import annotations

from typing import Any, Optional

from .exceptions import ValidationError
from .models.process import MAX_PORT, MIN_PORT, TransportProtocol

_YES_ANSWERS = {"y", "yes"}
_NO_ANSWERS = {"n", "no", ""}


def _coerce_int(value: Any) -> Optional[int]:
    """Return *value* as an int when it is an int or a decimal string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isdecimal():
            return int(stripped)
        if stripped.startswith("-") and stripped[1:].isdecimal():
            return int(stripped)
    return None


def validate_port(port: Any) -> int:
    """
    Validate a port number.

    Args:
        port: Integer or numeric string

    Returns:
        The port as an int

    Raises:
        ValidationError: If the value is not an integer in 1-65535
    """
    port_number = _coerce_int(port)
    if port_number is None:
        raise ValidationError(
            f'Invalid port number: "{port}". Port must be a valid integer between {MIN_PORT} and {MAX_PORT}.'
        )
    if not MIN_PORT <= port_number <= MAX_PORT:
        raise ValidationError(
            f"Port {port_number} is out of range. Port must be between {MIN_PORT} and {MAX_PORT}. "
            "Common ports: 80 (HTTP), 443 (HTTPS), 3000 (development), 8080 (web server)."
        )
    return port_number


def validate_pid(pid: Any) -> int:
    """Validate a process ID, returning it as a positive int."""
    pid_number = _coerce_int(pid)
    if pid_number is None or pid_number <= 0:
        raise ValidationError(f'Invalid process ID: "{pid}". Process ID must be a positive integer (e.g., 1234).')
    return pid_number


def validate_protocol(protocol: Any) -> TransportProtocol:
    if not isinstance(protocol, str):
        raise ValidationError("Protocol must be a string")
    try:
        return TransportProtocol(protocol.upper())
    except ValueError as exc:
        raise ValidationError("Protocol must be either TCP or UDP") from exc


def validate_yes_no(answer: Any) -> Optional[bool]:
    """Interpret a yes/no answer; ``None`` means the answer was not understood."""
    if not isinstance(answer, str):
        return None
    normalized = answer.strip().lower()
    if normalized in _YES_ANSWERS:
        return True
    if normalized in _NO_ANSWERS:
        return False
    return None


__all__ = ["validate_pid", "validate_port", "validate_protocol", "validate_yes_no"]
