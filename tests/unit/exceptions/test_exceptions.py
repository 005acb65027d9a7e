"""Tests for the portkill error taxonomy."""

from __future__ import annotations

import pytest

from portkill.exceptions import (
    TAXONOMY_ERRORS,
    NetworkError,
    PermissionDeniedError,
    PortKillError,
    SystemCommandError,
    UnsupportedPlatformError,
    ValidationError,
)


class TestErrorCodes:
    @pytest.mark.parametrize(
        ("error_cls", "code"),
        [
            (ValidationError, "VALIDATION_ERROR"),
            (PermissionDeniedError, "PERMISSION_ERROR"),
            (SystemCommandError, "SYSTEM_ERROR"),
            (NetworkError, "NETWORK_ERROR"),
            (UnsupportedPlatformError, "UNSUPPORTED_PLATFORM"),
        ],
    )
    def test_each_kind_carries_its_code(self, error_cls, code) -> None:
        error = error_cls()
        assert error.code == code
        assert isinstance(error, PortKillError)
        assert str(error)

    def test_taxonomy_excludes_platform_error(self) -> None:
        assert UnsupportedPlatformError not in TAXONOMY_ERRORS
        assert len(TAXONOMY_ERRORS) == 4


class TestPermissionDeniedError:
    def test_for_kill_records_pid(self) -> None:
        error = PermissionDeniedError.for_kill(4321, "You may need elevated privileges.")
        assert error.pid == 4321
        assert error.message == "Permission denied when trying to kill process 4321. You may need elevated privileges."

    def test_user_message_suggests_sudo_on_unix(self, on_linux) -> None:
        message = PermissionDeniedError.for_kill(10, "detail").user_message()
        assert "(PID: 10)" in message
        assert "sudo pk" in message

    def test_user_message_suggests_administrator_on_windows(self, on_windows) -> None:
        message = PermissionDeniedError.for_port_lookup().user_message()
        assert "(PID:" not in message
        assert "Administrator" in message


class TestSystemCommandError:
    def test_user_message_includes_command_and_exit_code(self) -> None:
        error = SystemCommandError.process_not_found(99, "ps -p 99 -o pid=,user=,comm=,args=")
        assert error.user_message() == (
            "Process with PID 99 not found\nCommand: ps -p 99 -o pid=,user=,comm=,args=\nExit code: 1"
        )

    def test_tool_missing_message(self) -> None:
        error = SystemCommandError.tool_missing("lsof", "Please install lsof to use this tool.", "lsof -i :80 -P -n")
        assert str(error) == "lsof command not found. Please install lsof to use this tool."
        assert error.exit_code is None

    def test_invalid_output_message(self) -> None:
        error = SystemCommandError.invalid_output("ps", 5, "ps -p 5")
        assert error.message == "Invalid ps output format for PID 5"


def test_network_error_user_message_lists_suggestions() -> None:
    error = NetworkError("lookup timed out", port=8080, operation="lsof lookup")
    message = error.user_message()

    assert message.startswith("lookup timed out (Port: 8080) (Operation: lsof lookup)")
    assert "Check your network connection" in message


def test_unsupported_platform_names_system() -> None:
    error = UnsupportedPlatformError(system="Plan9")
    assert str(error) == "Unsupported platform: Plan9"
    assert error.system == "Plan9"


def test_extra_keyword_arguments_become_attributes() -> None:
    error = ValidationError("bad", field="port")
    assert error.field == "port"
    assert error.user_message() == "bad"
