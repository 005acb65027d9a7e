"""Platform adapters for port lookup and process termination.

The concrete adapters live in :mod:`portkill.adapters.unix` and
:mod:`portkill.adapters.windows` and are imported on demand by
:func:`portkill.platform_detector.select_adapter`.
"""

from .base import PlatformAdapter, ProcessDetails, TerminationTiming
from .command_runner import CommandResult, CommandRunner, run_command

__all__ = [
    "CommandResult",
    "CommandRunner",
    "PlatformAdapter",
    "ProcessDetails",
    "TerminationTiming",
    "run_command",
]
