import pytest

from portkill.adapters.base import TerminationTiming
from portkill.config import ConfigurationError, PortKillSettings, runtime
from portkill.config.settings import log_level_from_env


def test_defaults_without_environment():
    settings = PortKillSettings.from_env()

    assert settings == PortKillSettings(log_level="INFO", graceful_wait_seconds=1.0, force_wait_seconds=0.5)
    assert settings.termination_timing() == TerminationTiming()


def test_reads_overrides_from_environment(monkeypatch):
    monkeypatch.setenv("PORTKILL_LOG_LEVEL", "debug")
    monkeypatch.setenv("PORTKILL_GRACEFUL_WAIT_SECONDS", "2")
    monkeypatch.setenv("PORTKILL_FORCE_WAIT_SECONDS", "0")

    settings = PortKillSettings.from_env()

    assert settings.log_level == "DEBUG"
    assert settings.termination_timing() == TerminationTiming(graceful_wait_seconds=2.0, force_wait_seconds=0.0)


def test_log_level_falls_back_to_generic_variable(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warn")
    assert log_level_from_env() == "WARN"

    monkeypatch.setenv("PORTKILL_LOG_LEVEL", "error")
    assert log_level_from_env() == "ERROR"


def test_reads_values_from_dotenv_file(monkeypatch, tmp_path):
    dotenv = tmp_path / ".env"
    dotenv.write_text("PORTKILL_GRACEFUL_WAIT_SECONDS=3\n")
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", (dotenv,))
    runtime.reset_default_values()

    assert PortKillSettings.from_env().graceful_wait_seconds == 3.0


def test_negative_wait_is_rejected(monkeypatch):
    monkeypatch.setenv("PORTKILL_FORCE_WAIT_SECONDS", "-0.5")
    with pytest.raises(ConfigurationError):
        PortKillSettings.from_env()
