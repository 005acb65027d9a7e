"""Read ``KEY=value`` pairs from .env files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional, Tuple

from .errors import ConfigurationError

_LINE_PATTERN = re.compile(r"^(?:export\s+)?(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*=\s*(?P<value>.*)$")
_QUOTES = ("'", '"')


def _unquote(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in _QUOTES:
        return raw[1:-1]
    # Unquoted values may carry a trailing " # comment"
    return raw.split(" #", 1)[0].rstrip()


def parse_dotenv_line(line: str) -> Optional[Tuple[str, str]]:
    """Return ``(key, value)`` for an assignment line, ``None`` for anything else."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    match = _LINE_PATTERN.match(stripped)
    if match is None:
        return None
    return match.group("key"), _unquote(match.group("value").strip())


def read_dotenv(path: Path) -> Dict[str, str]:
    """
    Load the assignments in *path*; a missing file yields an empty mapping.

    Raises:
        ConfigurationError: If the file exists but cannot be read
    """
    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to load configuration from {path}") from exc

    values: Dict[str, str] = {}
    for line in text.splitlines():
        parsed = parse_dotenv_line(line)
        if parsed is not None:
            key, value = parsed
            values[key] = value
    return values


__all__ = ["parse_dotenv_line", "read_dotenv"]
