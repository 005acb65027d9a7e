"""
Interactive command line for freeing ports.

Usage:
    pk                 # prompt for a port
    pk 3000            # inspect port 3000 and choose what to kill
    pk 8080 --yes      # kill everything on port 8080 without asking
    pk 3000 --verbose  # same with debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import platform
import sys
from typing import Callable, List, Optional, Sequence, TextIO

import typer

from . import __version__
from .config import ConfigurationError, PortKillSettings
from .exceptions import (
    NetworkError,
    PermissionDeniedError,
    PortKillError,
    SystemCommandError,
    ValidationError,
)
from .logging_config import setup_logging
from .manager import PortManager
from .models.process import Process
from .validation import validate_port, validate_yes_no

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

_RULE = "=" * 60

_EPILOG = """\
Examples:
  pk                  Interactive mode - prompts for port number
  pk 3000             Check port 3000 and show interactive menu
  pk 8080 --yes       Check port 8080 and kill all processes
  pk 3000 --verbose   Check port 3000 with debug logging

Environment variables:
  PORTKILL_LOG_LEVEL               ERROR, WARN, INFO, DEBUG or TRACE
  LOG_LEVEL                        Fallback for PORTKILL_LOG_LEVEL
  PORTKILL_GRACEFUL_WAIT_SECONDS   Wait after the graceful signal (default 1.0)
  PORTKILL_FORCE_WAIT_SECONDS      Wait after the forced signal (default 0.5)
"""


def _plural(count: int, word: str = "process") -> str:
    return word if count == 1 else f"{word}es"


def _prompt(text: str) -> str:
    """Read one answer from the terminal; pressing Enter returns ``""``."""
    return typer.prompt(text, default="", show_default=False, prompt_suffix="")


def _elevation_hint() -> str:
    if platform.system() == "Windows":
        return "Run Command Prompt or PowerShell as Administrator"
    return "Use sudo: sudo pk"


class PortKillCLI:
    """Drives the port check and the kill menu for one invocation."""

    def __init__(
        self,
        manager: PortManager,
        *,
        input_func: Callable[[str], str] = _prompt,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.manager = manager
        self._input = input_func
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr

    def _say(self, message: str = "") -> None:
        print(message, file=self._stdout)

    def _warn(self, message: str = "") -> None:
        print(message, file=self._stderr)

    async def run(self, port: Optional[str], *, yes: bool = False) -> int:
        try:
            port_number = validate_port(port) if port is not None else self.prompt_for_port()
            self._say(f"🔍 Checking port {port_number}...")
            processes = await self.manager.check_port(port_number)

            if not processes:
                self._say(f"✅ Port {port_number} is available")
                self._say("   No processes are currently using this port")
                return EXIT_OK

            self.display_processes(processes)
            if len(processes) == 1:
                await self.handle_single_process(processes[0], yes=yes)
            elif yes:
                self._say("⚠️  Auto-killing all processes (--yes flag used)...")
                await self.kill_all_processes(processes)
            else:
                await self.show_process_menu(processes, port_number)
        except PortKillError as exc:
            self.handle_error(exc)
            return EXIT_FAILURE
        return EXIT_OK

    def prompt_for_port(self) -> int:
        while True:
            answer = self._input("Enter port number: ")
            try:
                return validate_port(answer)
            except ValidationError:
                self._say("Please enter a valid port number (1-65535)")

    def confirm(self, question: str) -> bool:
        while True:
            answer = validate_yes_no(self._input(f"{question} [y/N]: "))
            if answer is not None:
                return answer
            self._say("Please answer yes or no")

    def display_processes(self, processes: Sequence[Process]) -> None:
        count = len(processes)
        self._say()
        self._say(f"📋 Found {count} {_plural(count)} using this port:")
        for index, proc in enumerate(processes, start=1):
            self._say()
            self._say(f"🔸 Process {index}:" if count > 1 else "🔸 Process Details:")
            self._say(f"   PID: {proc.pid}")
            self._say(f"   Name: {proc.name}")
            self._say(f"   User: {proc.user}")
            self._say(f"   Protocol: {proc.protocol.value}")
            if proc.command and proc.command != proc.name:
                self._say(f"   Command: {proc.command}")
        self._say()

    async def handle_single_process(self, proc: Process, *, yes: bool) -> None:
        should_kill = yes or self.confirm(f"Do you want to kill this process (PID: {proc.pid})?")
        if not should_kill:
            self._say("ℹ️  Process not terminated - port remains in use")
            self._say(f"   Process {proc.pid} ({proc.name}) is still running")
            return

        if await self.kill_process_with_feedback(proc):
            self._say()
            self._say("🎉 Process terminated successfully!")
            self._say(f"   Port {proc.port} should now be available")

    async def show_process_menu(self, processes: List[Process], port: int) -> None:
        remaining = list(processes)
        while remaining:
            self._say()
            self._say(_RULE)
            self._say("🎯 Process Management Menu")
            self._say(_RULE)
            for index, proc in enumerate(remaining, start=1):
                self._say(f"  {index}) Kill Process {index}: {proc.name} (PID: {proc.pid}) - {proc.user}")
            if len(remaining) > 1:
                self._say(f"  a) 🔥 Kill ALL {len(remaining)} processes")
            self._say("  c) ❌ Cancel (do nothing)")

            choice = self._input("What would you like to do? ").strip().lower()

            if choice in ("c", "cancel", ""):
                self._say()
                self._say("✋ Operation cancelled - no processes were terminated")
                self._say(f"   Port {port} remains in use by {len(remaining)} {_plural(len(remaining))}")
                return

            if choice in ("a", "all") and len(remaining) > 1:
                if self.confirm_kill_all(remaining):
                    await self.kill_all_processes(remaining)
                    return
                continue

            if not choice.isdigit() or not 1 <= int(choice) <= len(remaining):
                self._say("Please choose one of the listed options")
                continue

            target = remaining[int(choice) - 1]
            if not await self.kill_process_with_feedback(target):
                continue

            remaining.remove(target)
            self._say()
            if not remaining:
                self._say("🎉 All processes have been terminated!")
                self._say(f"   Port {port} should now be available")
            else:
                self._say(f"📊 {len(remaining)} {_plural(len(remaining))} still running on port {port}")

    def confirm_kill_all(self, processes: Sequence[Process]) -> bool:
        self._say()
        self._say("⚠️  You are about to kill ALL processes:")
        for index, proc in enumerate(processes, start=1):
            self._say(f"   {index}. {proc.name} (PID: {proc.pid}) - {proc.user}")
        return self.confirm(f"Are you sure you want to kill all {len(processes)} processes?")

    async def kill_all_processes(self, processes: Sequence[Process]) -> tuple[int, int]:
        total = len(processes)
        self._say()
        self._say(f"🔥 Killing all {total} processes...")

        succeeded = 0
        for index, proc in enumerate(processes, start=1):
            self._say()
            self._say(f"[{index}/{total}] Killing {proc.name} (PID: {proc.pid})...")
            if await self.kill_process_with_feedback(proc, detailed=False):
                succeeded += 1
        failed = total - succeeded

        self._say()
        self._say("=" * 50)
        self._say("📊 Kill All Summary:")
        self._say("=" * 50)
        self._say(f"✅ Successfully killed: {succeeded} {_plural(succeeded)}")
        self._say(f"❌ Failed to kill: {failed} {_plural(failed)}")
        self._say()
        if failed == 0:
            self._say("🎉 All processes have been successfully terminated!")
            self._say("   Port should now be available")
        elif succeeded:
            self._say("⚠️  Some processes were terminated, but others may still be running")
            self._say("   You may need elevated privileges to kill the remaining processes")
        else:
            self._say("❌ No processes were successfully terminated")
            self._say("   You may need elevated privileges or the processes may be protected")
        return succeeded, failed

    async def kill_process_with_feedback(self, proc: Process, *, detailed: bool = True) -> bool:
        if detailed:
            self._say()
            self._say(f"🔄 Attempting to terminate process {proc.pid} ({proc.name})...")

        try:
            success = await self.manager.kill_process(proc.pid)
        except PortKillError as exc:
            if not detailed:
                self._say(f"   ❌ Failed to kill {proc.name} (PID: {proc.pid}) - {exc}")
                return False
            self._say(f"❌ Failed to terminate process {proc.pid}")
            self._say(f"   Process: {proc.name}")
            self._say(f"   Error: {exc}")
            self._say()
            if isinstance(exc, PermissionDeniedError):
                self._say("💡 Permission Issue - Suggestions:")
                self._say(f"   • {_elevation_hint()}")
                self._say("   • Some system processes require elevated privileges to terminate")
            else:
                self._say("💡 System Issue - Suggestions:")
                self._say("   • The process may have already terminated")
                self._say("   • Check if the process is protected or critical to the system")
                self._say("   • Verify that process termination commands are available")
            return False

        if success:
            if detailed:
                self._say(f"✅ Process {proc.pid} has been successfully terminated")
                self._say(f"   Process: {proc.name}")
                self._say(f"   Port {proc.port} should now be available")
            else:
                self._say(f"   ✅ Successfully killed {proc.name} (PID: {proc.pid})")
            return True

        if detailed:
            self._say(f"❌ Failed to terminate process {proc.pid}")
            self._say(f"   Process: {proc.name}")
            self._say()
            self._say("💡 Suggestions:")
            self._say("   • The process may have already terminated")
            self._say("   • Try running with elevated privileges")
            self._say("   • Check if the process is protected by the system")
        else:
            self._say(f"   ❌ Failed to kill {proc.name} (PID: {proc.pid})")
        return False

    def handle_error(self, exc: PortKillError) -> None:
        titles = {
            ValidationError: "Validation Error",
            PermissionDeniedError: "Permission Error",
            NetworkError: "Network Error",
            SystemCommandError: "System Error",
        }
        title = next((label for cls, label in titles.items() if isinstance(exc, cls)), "Unexpected Error")

        self._warn()
        self._warn(f"❌ {title}")
        for line in exc.user_message().splitlines():
            self._warn(f"   {line}" if line else "")
        if isinstance(exc, ValidationError):
            self._warn()
            self._warn("💡 Suggestion: Please check your input and try again.")
        elif isinstance(exc, SystemCommandError) and "lsof command not found" in exc.message:
            self._warn()
            self._warn("💡 Install lsof: sudo apt-get install lsof (Ubuntu/Debian) or brew install lsof (macOS)")
        self._warn()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pk",
        description="Find and kill the processes running on a port.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("port", nargs="?", help="Port number to check (1-65535)")
    parser.add_argument("-y", "--yes", action="store_true", help="Kill processes without asking for confirmation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        setup_logging(verbose=args.verbose)
        settings = PortKillSettings.from_env()
    except ConfigurationError as exc:
        print(f"❌ Configuration Error\n   {exc}", file=sys.stderr)
        return EXIT_FAILURE
    if args.verbose:
        logger.info("Verbose mode enabled - debug logging active")

    cli = PortKillCLI(PortManager(timing=settings.termination_timing()))
    try:
        return asyncio.run(cli.run(args.port, yes=args.yes))
    except (KeyboardInterrupt, EOFError, typer.Abort):
        print("\n✋ Aborted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
