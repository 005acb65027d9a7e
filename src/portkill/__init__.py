"""Find the processes bound to a TCP/UDP port and terminate them."""

from .exceptions import (
    NetworkError,
    PermissionDeniedError,
    PortKillError,
    SystemCommandError,
    UnsupportedPlatformError,
    ValidationError,
)
from .manager import PortManager
from .models.process import Process, TransportProtocol

__version__ = "1.0.0"

__all__ = [
    "NetworkError",
    "PermissionDeniedError",
    "PortKillError",
    "PortManager",
    "Process",
    "SystemCommandError",
    "TransportProtocol",
    "UnsupportedPlatformError",
    "ValidationError",
    "__version__",
]
