"""Data models shared by the adapters and the manager."""

from .process import MAX_PORT, MIN_PORT, Process, TransportProtocol

__all__ = ["MAX_PORT", "MIN_PORT", "Process", "TransportProtocol"]
