"""Shared configuration helpers and settings."""

from .errors import ConfigurationError
from .runtime import env_float, env_seconds, env_str, reset_default_values
from .settings import PortKillSettings

__all__ = [
    "ConfigurationError",
    "PortKillSettings",
    "env_float",
    "env_seconds",
    "env_str",
    "reset_default_values",
]
