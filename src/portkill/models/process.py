"""Process record describing an OS process bound to a port."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Mapping

import orjson

from ..exceptions import ValidationError

MIN_PORT = 1
MAX_PORT = 65535


class TransportProtocol(str, Enum):
    """Transport protocols a port can be bound with."""

    TCP = "TCP"
    UDP = "UDP"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Process:
    """A process found bound to a port.

    Every field is validated on construction; an invalid field raises
    :class:`ValidationError` and no instance is produced.
    """

    pid: int
    name: str
    user: str
    protocol: TransportProtocol
    port: int
    command: str = ""

    def __post_init__(self) -> None:
        if not _is_int(self.pid) or self.pid <= 0:
            raise ValidationError("Process ID must be a positive integer")
        if not isinstance(self.name, str) or not self.name:
            raise ValidationError("Process name must be a non-empty string")
        if not isinstance(self.user, str) or not self.user:
            raise ValidationError("Process user must be a non-empty string")
        try:
            protocol = TransportProtocol(self.protocol)
        except ValueError as exc:
            raise ValidationError("Protocol must be either TCP or UDP") from exc
        if not _is_int(self.port) or not MIN_PORT <= self.port <= MAX_PORT:
            raise ValidationError(f"Port must be an integer between {MIN_PORT} and {MAX_PORT}")
        if not isinstance(self.command, str):
            raise ValidationError("Command must be a string")
        object.__setattr__(self, "protocol", protocol)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["protocol"] = self.protocol.value
        return payload

    def to_json(self) -> str:
        return orjson.dumps(self.to_dict()).decode()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Process":
        try:
            return cls(
                pid=data["pid"],
                name=data["name"],
                user=data["user"],
                protocol=data["protocol"],
                port=data["port"],
                command=data.get("command", ""),
            )
        except KeyError as exc:
            raise ValidationError(f"Process payload is missing field {exc.args[0]!r}") from exc

    @classmethod
    def from_json(cls, text: str | bytes) -> "Process":
        try:
            data = orjson.loads(text)
        except orjson.JSONDecodeError as exc:
            raise ValidationError("Process payload is not valid JSON") from exc
        if not isinstance(data, dict):
            raise ValidationError("Process payload must be a JSON object")
        return cls.from_dict(data)


__all__ = ["MAX_PORT", "MIN_PORT", "Process", "TransportProtocol"]
