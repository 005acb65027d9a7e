"""Settings for the pk command collected from the environment."""

from __future__ import annotations

from dataclasses import dataclass

from ..adapters.base import DEFAULT_FORCE_WAIT_SECONDS, DEFAULT_GRACEFUL_WAIT_SECONDS, TerminationTiming
from .runtime import env_seconds, env_str

LOG_LEVEL_ENV = "PORTKILL_LOG_LEVEL"
FALLBACK_LOG_LEVEL_ENV = "LOG_LEVEL"
GRACEFUL_WAIT_ENV = "PORTKILL_GRACEFUL_WAIT_SECONDS"
FORCE_WAIT_ENV = "PORTKILL_FORCE_WAIT_SECONDS"

DEFAULT_LOG_LEVEL = "INFO"


def log_level_from_env() -> str:
    """Return the configured log level name, upper-cased."""
    level = env_str(LOG_LEVEL_ENV) or env_str(FALLBACK_LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)
    return str(level).upper()


@dataclass(frozen=True)
class PortKillSettings:
    log_level: str = DEFAULT_LOG_LEVEL
    graceful_wait_seconds: float = DEFAULT_GRACEFUL_WAIT_SECONDS
    force_wait_seconds: float = DEFAULT_FORCE_WAIT_SECONDS

    @classmethod
    def from_env(cls) -> "PortKillSettings":
        """
        Build settings from the environment and any ``.env`` file.

        Raises:
            ConfigurationError: If a delay is not a non-negative number
        """
        graceful = env_seconds(GRACEFUL_WAIT_ENV, or_value=DEFAULT_GRACEFUL_WAIT_SECONDS)
        force = env_seconds(FORCE_WAIT_ENV, or_value=DEFAULT_FORCE_WAIT_SECONDS)
        return cls(
            log_level=log_level_from_env(),
            graceful_wait_seconds=float(graceful),
            force_wait_seconds=float(force),
        )

    def termination_timing(self) -> TerminationTiming:
        return TerminationTiming(
            graceful_wait_seconds=self.graceful_wait_seconds,
            force_wait_seconds=self.force_wait_seconds,
        )


__all__ = [
    "DEFAULT_FORCE_WAIT_SECONDS",
    "DEFAULT_GRACEFUL_WAIT_SECONDS",
    "DEFAULT_LOG_LEVEL",
    "FALLBACK_LOG_LEVEL_ENV",
    "FORCE_WAIT_ENV",
    "GRACEFUL_WAIT_ENV",
    "LOG_LEVEL_ENV",
    "PortKillSettings",
    "log_level_from_env",
]
