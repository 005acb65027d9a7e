"""Typed accessors for environment variables with .env fallbacks.

A variable set in the process environment wins; otherwise the first of
``./.env`` and ``~/.env`` that defines it supplies the value. File contents
are read once and cached until :func:`reset_default_values` is called.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, TypeVar

from .dotenv import read_dotenv
from .errors import ConfigurationError

T = TypeVar("T")

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".env")

_DEFAULT_VALUES: dict[str, str] | None = None


def _load_default_values() -> dict[str, str]:
    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is not None:
        return _DEFAULT_VALUES

    defaults: dict[str, str] = {}
    for path in _DOTENV_CANDIDATES:
        for key, value in read_dotenv(path).items():
            defaults.setdefault(key, value)

    _DEFAULT_VALUES = defaults
    return defaults


def reset_default_values() -> None:
    """Forget cached .env values so the next lookup re-reads them."""
    global _DEFAULT_VALUES
    _DEFAULT_VALUES = None


def _lookup(name: str) -> Optional[str]:
    for candidate in (os.getenv(name), _load_default_values().get(name)):
        if candidate is not None and candidate.strip():
            return candidate.strip()
    return None


def _coerce(name: str, raw_value: str, *, cast: Callable[[str], T], expected: str) -> T:
    try:
        return cast(raw_value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError.not_coercible(name, raw_value, expected) from exc


def env_str(name: str, or_value: str | None = None) -> str | None:
    """Fetch an environment variable as a stripped, non-empty string."""
    value = _lookup(name)
    return or_value if value is None else value


def env_float(name: str, or_value: float | None = None) -> float | None:
    raw = env_str(name)
    if raw is None:
        return or_value
    return _coerce(name, raw, cast=float, expected="a float")


def env_seconds(name: str, or_value: float | None = None) -> float | None:
    """Fetch a non-negative duration in seconds."""
    value = env_float(name, or_value=or_value)
    if value is None:
        return None
    if value < 0:
        raise ConfigurationError.invalid_value(name, value, "Durations must be non-negative")
    return value


__all__ = [
    "env_float",
    "env_seconds",
    "env_str",
    "reset_default_values",
]
