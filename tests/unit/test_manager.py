"""Tests for PortManager orchestration and error normalization."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from portkill.adapters.base import ProcessDetails, TerminationTiming
from portkill.adapters.unix import UnixAdapter
from portkill.exceptions import (
    NetworkError,
    PermissionDeniedError,
    SystemCommandError,
    UnsupportedPlatformError,
    ValidationError,
)
from portkill.manager import PortManager
from portkill.models.process import Process, TransportProtocol

NODE = Process(pid=1234, name="node", user="dev", protocol=TransportProtocol.TCP, port=3000, command="node")


def _mock_adapter(*, compatible: bool = True) -> MagicMock:
    adapter = MagicMock()
    adapter.is_compatible.return_value = compatible
    adapter.find_process_by_port = AsyncMock(return_value=[NODE])
    adapter.kill_process = AsyncMock(return_value=True)
    adapter.get_process_details = AsyncMock(
        return_value=ProcessDetails(pid=1234, user="dev", name="node", command="node server.js")
    )
    return adapter


def _manager_for(adapter: MagicMock) -> PortManager:
    return PortManager(adapter_selector=lambda: (lambda **kwargs: adapter))


class TestInitialize:
    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self):
        adapter = _mock_adapter()
        selector = MagicMock(return_value=lambda **kwargs: adapter)
        manager = PortManager(adapter_selector=selector)

        await manager.initialize()
        await manager.initialize()

        assert manager.is_initialized is True
        assert manager.adapter is adapter
        selector.assert_called_once()

    @pytest.mark.asyncio
    async def test_passes_timing_and_options_to_adapter(self, command_runner, on_linux):
        timing = TerminationTiming(graceful_wait_seconds=0.1, force_wait_seconds=0.2)
        manager = PortManager(
            timing=timing,
            adapter_selector=lambda: UnixAdapter,
            adapter_options={"command_runner": command_runner},
        )

        await manager.initialize()

        assert isinstance(manager.adapter, UnixAdapter)
        assert manager.adapter.timing == timing

    @pytest.mark.asyncio
    async def test_incompatible_adapter_leaves_manager_uninitialized(self):
        manager = _manager_for(_mock_adapter(compatible=False))

        with pytest.raises(SystemCommandError, match="not compatible"):
            await manager.initialize()
        assert manager.is_initialized is False
        assert manager.adapter is None

    @pytest.mark.asyncio
    async def test_unsupported_platform_is_reported_as_system_error(self):
        def selector():
            raise UnsupportedPlatformError(system="Plan9")

        manager = PortManager(adapter_selector=selector)

        with pytest.raises(SystemCommandError, match="Failed to initialize port manager: Unsupported platform: Plan9"):
            await manager.initialize()

    @pytest.mark.asyncio
    async def test_operations_initialize_lazily(self):
        adapter = _mock_adapter()
        manager = _manager_for(adapter)

        assert manager.is_initialized is False
        await manager.check_port(3000)
        assert manager.is_initialized is True


class TestCheckPort:
    @pytest.mark.asyncio
    async def test_returns_adapter_processes(self):
        adapter = _mock_adapter()
        manager = _manager_for(adapter)

        assert await manager.check_port("3000") == [NODE]
        adapter.find_process_by_port.assert_awaited_once_with(3000)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("port", [0, 70000, "http"])
    async def test_validation_happens_before_adapter_selection(self, port):
        selector = MagicMock()
        manager = PortManager(adapter_selector=selector)

        with pytest.raises(ValidationError):
            await manager.check_port(port)
        selector.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            PermissionDeniedError.for_port_lookup(),
            NetworkError("lookup timed out", port=3000),
            SystemCommandError("lsof failed"),
            ValidationError("bad port"),
        ],
    )
    async def test_taxonomy_errors_pass_through_unchanged(self, error):
        adapter = _mock_adapter()
        adapter.find_process_by_port.side_effect = error
        manager = _manager_for(adapter)

        with pytest.raises(type(error)) as excinfo:
            await manager.check_port(3000)
        assert excinfo.value is error

    @pytest.mark.asyncio
    async def test_unexpected_network_failure_becomes_network_error(self):
        adapter = _mock_adapter()
        adapter.find_process_by_port.side_effect = RuntimeError("Host unreachable")
        manager = _manager_for(adapter)

        with pytest.raises(NetworkError) as excinfo:
            await manager.check_port(3000)
        assert excinfo.value.port == 3000
        assert excinfo.value.operation == "port check"

    @pytest.mark.asyncio
    async def test_other_unexpected_failure_becomes_system_error(self):
        adapter = _mock_adapter()
        adapter.find_process_by_port.side_effect = KeyError("boom")
        manager = _manager_for(adapter)

        with pytest.raises(SystemCommandError, match="Failed to check port 3000"):
            await manager.check_port(3000)

    @pytest.mark.asyncio
    async def test_is_port_available(self):
        adapter = _mock_adapter()
        manager = _manager_for(adapter)

        assert await manager.is_port_available(3000) is False
        adapter.find_process_by_port.return_value = []
        assert await manager.is_port_available(3000) is True


class TestKillAndDetails:
    @pytest.mark.asyncio
    async def test_kill_process_returns_adapter_result(self):
        adapter = _mock_adapter()
        adapter.kill_process.return_value = False
        manager = _manager_for(adapter)

        assert await manager.kill_process("1234") is False
        adapter.kill_process.assert_awaited_once_with(1234)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pid", [0, -3, "abc"])
    async def test_kill_process_rejects_invalid_pid(self, pid):
        adapter = _mock_adapter()
        manager = _manager_for(adapter)

        with pytest.raises(ValidationError):
            await manager.kill_process(pid)
        adapter.kill_process.assert_not_called()

    @pytest.mark.asyncio
    async def test_kill_process_keeps_permission_errors(self):
        adapter = _mock_adapter()
        adapter.kill_process.side_effect = PermissionDeniedError.for_kill(1234, "detail")
        manager = _manager_for(adapter)

        with pytest.raises(PermissionDeniedError):
            await manager.kill_process(1234)

    @pytest.mark.asyncio
    async def test_kill_process_wraps_unexpected_errors(self):
        adapter = _mock_adapter()
        adapter.kill_process.side_effect = RuntimeError("socket closed")
        manager = _manager_for(adapter)

        with pytest.raises(SystemCommandError, match="Failed to kill process 1234: socket closed"):
            await manager.kill_process(1234)

    @pytest.mark.asyncio
    async def test_get_process_details(self):
        adapter = _mock_adapter()
        manager = _manager_for(adapter)

        details = await manager.get_process_details(1234)

        assert details.command == "node server.js"

    @pytest.mark.asyncio
    async def test_get_process_details_wraps_unexpected_errors(self):
        adapter = _mock_adapter()
        adapter.get_process_details.side_effect = ValueError("odd")
        manager = _manager_for(adapter)

        with pytest.raises(SystemCommandError, match="Failed to get process details for PID 1234"):
            await manager.get_process_details(1234)


class TestWithUnixAdapter:
    """Drive the real Unix adapter through the manager with canned command output."""

    LSOF_OUTPUT = (
        "COMMAND  PID USER   FD   TYPE DEVICE SIZE/OFF NODE NAME\n"
        "node    1234  dev   23u  IPv4 0xabc      0t0  TCP *:3000 (LISTEN)\n"
    )

    @pytest.fixture
    def manager(self, command_runner, fast_timing, on_linux) -> PortManager:
        return PortManager(
            timing=fast_timing,
            adapter_selector=lambda: UnixAdapter,
            adapter_options={"command_runner": command_runner},
        )

    @pytest.mark.asyncio
    async def test_busy_port(self, manager, command_runner):
        command_runner.add(("lsof", "-i", ":3000", "-P", "-n"), stdout=self.LSOF_OUTPUT)

        processes = await manager.check_port(3000)

        assert processes == [
            Process(pid=1234, name="node", user="dev", protocol=TransportProtocol.TCP, port=3000, command="node")
        ]

    @pytest.mark.asyncio
    async def test_free_port(self, manager, command_runner):
        command_runner.add(("lsof", "-i", ":9999", "-P", "-n"), exit_code=1)

        assert await manager.check_port(9999) == []
        assert await manager.is_port_available(9999) is True

    @pytest.mark.asyncio
    async def test_kill_round_trip(self, manager, command_runner):
        command_runner.add(("kill", "-TERM", "1234")).add(("ps", "-p", "1234", "-o", "pid="), exit_code=1)

        assert await manager.kill_process(1234) is True
