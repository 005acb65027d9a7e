"""
Port manager

Coordinates the platform adapter to look up the processes bound to a port
and terminate them. The adapter is selected lazily on first use.

Usage:
    from portkill.manager import PortManager

    manager = PortManager()
    processes = await manager.check_port(3000)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, NoReturn, Optional, Type

from .adapters.base import PlatformAdapter, ProcessDetails, TerminationTiming
from .adapters.failure_classifier import MANAGER_NETWORK_KEYWORDS, mentions_network
from .exceptions import TAXONOMY_ERRORS, NetworkError, PortKillError, SystemCommandError
from .models.process import Process
from .platform_detector import current_system, select_adapter
from .validation import validate_pid, validate_port

logger = logging.getLogger(__name__)

AdapterSelector = Callable[[], Type[PlatformAdapter]]


class PortManager:
    """Validates input, owns the platform adapter and normalizes its errors."""

    def __init__(
        self,
        *,
        timing: Optional[TerminationTiming] = None,
        adapter_selector: Optional[AdapterSelector] = None,
        adapter_options: Optional[dict[str, Any]] = None,
    ) -> None:
        self._timing = timing
        self._adapter_selector = adapter_selector or select_adapter
        self._adapter_options = dict(adapter_options or {})
        self._adapter: Optional[PlatformAdapter] = None
        self._initialized = False

    @property
    def adapter(self) -> Optional[PlatformAdapter]:
        return self._adapter

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """
        Select and verify the platform adapter; later calls are no-ops.

        Raises:
            SystemCommandError: If no compatible adapter exists for this host
        """
        if self._initialized:
            logger.debug("Port manager already initialized")
            return

        logger.debug("Initializing port manager")
        try:
            adapter_cls = self._adapter_selector()
            adapter = adapter_cls(timing=self._timing, **self._adapter_options)
        except SystemCommandError:
            raise
        except (PortKillError, RuntimeError, TypeError, ValueError, ImportError) as exc:
            logger.error("Failed to initialize port manager: %s", exc)
            raise SystemCommandError(f"Failed to initialize port manager: {exc}") from exc

        if not adapter.is_compatible():
            logger.error("Platform adapter %s is not compatible with %s", type(adapter).__name__, current_system())
            raise SystemCommandError("Platform adapter is not compatible with current system")

        self._adapter = adapter
        self._initialized = True
        logger.info("Port manager initialized with %s", type(adapter).__name__)

    async def _require_adapter(self) -> PlatformAdapter:
        await self.initialize()
        if self._adapter is None:
            raise SystemCommandError("Port manager adapter not initialized")
        return self._adapter

    async def check_port(self, port: int | str) -> List[Process]:
        """
        Return the processes bound to *port*.

        Raises:
            ValidationError: If the port is malformed or out of range
            PermissionDeniedError: If the OS refuses the lookup
            NetworkError: If the lookup failed for a networking reason
            SystemCommandError: If the lookup tool is missing or failed
        """
        valid_port = validate_port(port)
        logger.debug("Checking port %s", valid_port)
        adapter = await self._require_adapter()

        try:
            processes = await adapter.find_process_by_port(valid_port)
        except TAXONOMY_ERRORS as exc:
            logger.error("Port check failed for %s: %s", valid_port, exc)
            raise
        except Exception as exc:
            logger.error("Port check failed for %s: %s", valid_port, exc)
            if mentions_network(str(exc), MANAGER_NETWORK_KEYWORDS):
                raise NetworkError(
                    f"Network error while checking port {valid_port}: {exc}",
                    port=valid_port,
                    operation="port check",
                ) from exc
            raise SystemCommandError(f"Failed to check port {valid_port}: {exc}") from exc

        logger.debug("Port check completed for %s: %d process(es)", valid_port, len(processes))
        return processes

    async def kill_process(self, pid: int | str) -> bool:
        """
        Terminate *pid*, gracefully first and forcefully if needed.

        Returns:
            True if the process is gone, False if it survived the forced kill
        """
        valid_pid = validate_pid(pid)
        logger.debug("Attempting to kill process %s", valid_pid)
        adapter = await self._require_adapter()

        try:
            success = await adapter.kill_process(valid_pid)
        except Exception as exc:
            logger.error("Process kill failed for %s: %s", valid_pid, exc)
            _reraise_or_wrap(exc, f"Failed to kill process {valid_pid}")

        logger.info("Process kill attempt completed for %s: success=%s", valid_pid, success)
        return success

    async def get_process_details(self, pid: int | str) -> ProcessDetails:
        valid_pid = validate_pid(pid)
        adapter = await self._require_adapter()

        try:
            return await adapter.get_process_details(valid_pid)
        except Exception as exc:
            _reraise_or_wrap(exc, f"Failed to get process details for PID {valid_pid}")

    async def is_port_available(self, port: int | str) -> bool:
        """Return True when no process is bound to *port*."""
        processes = await self.check_port(port)
        return not processes


def _reraise_or_wrap(exc: Exception, context: str) -> NoReturn:
    if isinstance(exc, TAXONOMY_ERRORS):
        raise exc
    raise SystemCommandError(f"{context}: {exc}") from exc


__all__ = ["AdapterSelector", "PortManager"]
