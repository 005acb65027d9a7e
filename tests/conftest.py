"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import logging

import pytest

from portkill.adapters.base import TerminationTiming
from portkill.config import runtime
from tests.helpers.command_runner_stub import FakeCommandRunner


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep real .env files and portkill variables out of every test."""
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", ())
    runtime.reset_default_values()
    for name in (
        "PORTKILL_LOG_LEVEL",
        "LOG_LEVEL",
        "PORTKILL_GRACEFUL_WAIT_SECONDS",
        "PORTKILL_FORCE_WAIT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    runtime.reset_default_values()


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def fast_timing() -> TerminationTiming:
    return TerminationTiming(graceful_wait_seconds=0, force_wait_seconds=0)


@pytest.fixture
def command_runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture
def on_linux(monkeypatch):
    monkeypatch.setattr("platform.system", lambda: "Linux")


@pytest.fixture
def on_windows(monkeypatch):
    monkeypatch.setattr("platform.system", lambda: "Windows")
