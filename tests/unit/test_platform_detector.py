import os
import subprocess
import sys
from pathlib import Path

import pytest

import portkill

from portkill.adapters.unix import UnixAdapter
from portkill.adapters.windows import WindowsAdapter
from portkill.exceptions import UnsupportedPlatformError
from portkill.platform_detector import PlatformKind, current_system, detect_platform, select_adapter


@pytest.mark.parametrize(
    ("system", "kind"),
    [("Linux", PlatformKind.UNIX), ("Darwin", PlatformKind.UNIX), ("Windows", PlatformKind.WINDOWS)],
)
def test_detect_platform_maps_known_systems(system, kind):
    assert detect_platform(system) is kind


def test_detect_platform_defaults_to_host(on_windows):
    assert current_system() == "Windows"
    assert detect_platform() is PlatformKind.WINDOWS


@pytest.mark.parametrize("system", ["FreeBSD", "Java", ""])
def test_unknown_systems_are_unsupported(system):
    with pytest.raises(UnsupportedPlatformError) as excinfo:
        detect_platform(system)
    assert excinfo.value.system == system


def test_select_adapter_returns_adapter_classes():
    assert select_adapter("Darwin") is UnixAdapter
    assert select_adapter("Windows") is WindowsAdapter


def test_select_adapter_uses_host(on_linux):
    assert select_adapter() is UnixAdapter


@pytest.mark.parametrize(
    ("module", "unwanted"),
    [("portkill.adapters.unix", "portkill.adapters.windows"), ("portkill.adapters.windows", "portkill.adapters.unix")],
)
def test_loading_one_adapter_does_not_import_the_other(module, unwanted):
    src_dir = Path(portkill.__file__).resolve().parent.parent
    env = dict(os.environ, PYTHONPATH=os.pathsep.join(filter(None, [str(src_dir), os.environ.get("PYTHONPATH")])))
    script = f"import sys, {module}; print({unwanted!r} in sys.modules)"

    completed = subprocess.run([sys.executable, "-c", script], capture_output=True, text=True, env=env, check=True)

    assert completed.stdout.strip() == "False"
