"""Keyword heuristics for classifying diagnostic command failures."""

from __future__ import annotations

from typing import Iterable

NETWORK_KEYWORDS = ("network", "connection", "timeout")
MANAGER_NETWORK_KEYWORDS = NETWORK_KEYWORDS + ("unreachable",)

UNIX_PERMISSION_MARKERS = ("Permission denied", "Operation not permitted")
WINDOWS_PERMISSION_MARKERS = ("Access is denied",)

UNIX_GONE_MARKERS = ("No such process",)
WINDOWS_GONE_MARKERS = ("not found",)

WINDOWS_MISSING_TOOL_MARKERS = ("not recognized", "not found")
WINDOWS_NO_TASKS_MARKER = "INFO: No tasks are running"

INVALID_ARGUMENT_MARKER = "invalid"


def contains_any(text: str, markers: Iterable[str]) -> bool:
    """Return True when any marker occurs in *text* (case-sensitive)."""
    return any(marker in text for marker in markers)


def mentions_network(text: str, keywords: Iterable[str] = NETWORK_KEYWORDS) -> bool:
    """Return True when *text* suggests a networking-layer failure."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def mentions_invalid_argument(text: str) -> bool:
    return INVALID_ARGUMENT_MARKER in text.lower()


__all__ = [
    "INVALID_ARGUMENT_MARKER",
    "MANAGER_NETWORK_KEYWORDS",
    "NETWORK_KEYWORDS",
    "UNIX_GONE_MARKERS",
    "UNIX_PERMISSION_MARKERS",
    "WINDOWS_GONE_MARKERS",
    "WINDOWS_MISSING_TOOL_MARKERS",
    "WINDOWS_NO_TASKS_MARKER",
    "WINDOWS_PERMISSION_MARKERS",
    "contains_any",
    "mentions_invalid_argument",
    "mentions_network",
]
