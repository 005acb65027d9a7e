"""Exception types for configuration handling."""

from __future__ import annotations

from typing import Any, Optional


class ConfigurationError(RuntimeError):
    """Raised when configuration values are missing or malformed."""

    def __init__(self, message: str, *, variable: Optional[str] = None) -> None:
        super().__init__(message)
        self.variable = variable

    @classmethod
    def not_coercible(cls, name: str, raw_value: str, expected: str) -> "ConfigurationError":
        """Create error for a value that cannot be converted."""
        return cls(f"Environment variable {name!r} must be {expected} (got {raw_value!r})", variable=name)

    @classmethod
    def invalid_value(cls, name: str, value: Any, reason: str = "") -> "ConfigurationError":
        """Create error for a well-formed value outside the accepted range."""
        msg = f"Invalid value for {name}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg, variable=name)


__all__ = ["ConfigurationError"]
