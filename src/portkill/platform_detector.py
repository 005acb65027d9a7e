"""Detect the host operating system and pick the matching adapter."""

from __future__ import annotations

import platform
from enum import Enum
from importlib import import_module
from typing import TYPE_CHECKING, Optional, Type

from .exceptions import UnsupportedPlatformError

if TYPE_CHECKING:
    from .adapters.base import PlatformAdapter


class PlatformKind(str, Enum):
    UNIX = "unix"
    WINDOWS = "windows"


_SYSTEM_KINDS = {
    "Linux": PlatformKind.UNIX,
    "Darwin": PlatformKind.UNIX,
    "Windows": PlatformKind.WINDOWS,
}

_ADAPTER_LOCATIONS = {
    PlatformKind.UNIX: ("portkill.adapters.unix", "UnixAdapter"),
    PlatformKind.WINDOWS: ("portkill.adapters.windows", "WindowsAdapter"),
}


def current_system() -> str:
    """Return the host OS identifier as reported by :func:`platform.system`."""
    return platform.system()


def detect_platform(system: Optional[str] = None) -> PlatformKind:
    """
    Map the host OS to a platform family.

    Args:
        system: OS identifier to classify; defaults to the current host

    Raises:
        UnsupportedPlatformError: If the OS is neither Unix-like nor Windows
    """
    system_name = current_system() if system is None else system
    try:
        return _SYSTEM_KINDS[system_name]
    except KeyError as exc:
        raise UnsupportedPlatformError(system=system_name) from exc


def select_adapter(system: Optional[str] = None) -> Type["PlatformAdapter"]:
    """Return the adapter class for the host OS family."""
    kind = detect_platform(system)
    module_name, class_name = _ADAPTER_LOCATIONS[kind]
    return getattr(import_module(module_name), class_name)


__all__ = ["PlatformKind", "current_system", "detect_platform", "select_adapter"]
