"""
External command execution and the side-effect capabilities built on it.

Each capability has a single method so the pipeline can be driven by
recording fakes in tests while production shells out to the OS helpers.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, Sequence

from app_monitor_core.app_monitor_core import logger as app_logger

_LOGGER = app_logger.get_logger()

DEFAULT_COMMAND_TIMEOUT = 30
DEFAULT_DIALOG_PATH = Path("/usr/local/bin/dialog")
DEFAULT_DOCKUTIL_PATH = Path("/usr/local/bin/dockutil")
# Owners of /dev/console that do not represent a logged-in user.
_NON_USER_CONSOLE_OWNERS = {"", "root", "loginwindow", "_mbsetupuser"}


class CommandRunner(Protocol):
    def run(self, argv: Sequence[str]) -> Optional[str]:
        ...


class UserResolver(Protocol):
    def current_user(self) -> Optional[str]:
        ...


class Notifier(Protocol):
    def notify(
        self,
        user: str,
        *,
        title: str,
        body: str,
        subtitle: str,
        icon_path: Optional[Path] = None,
    ) -> None:
        ...


class DockRegistrar(Protocol):
    def register(self, user: str, app_path: str) -> None:
        ...


@dataclass
class ShellCommandRunner:
    """Runs a command and returns its trimmed stdout, or None when empty or failed."""

    timeout: int = DEFAULT_COMMAND_TIMEOUT

    def run(self, argv: Sequence[str]) -> Optional[str]:
        command = [str(part) for part in argv]
        _LOGGER.debug("Running command: {}", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            _LOGGER.warning("Command {} failed to execute: {}", command[0], exc)
            return None

        if completed.returncode != 0:
            _LOGGER.debug(
                "Command {} exited with code {}: {}",
                command[0],
                completed.returncode,
                completed.stderr.strip()[-200:],
            )
        output = completed.stdout.strip()
        return output or None


@dataclass
class ConsoleUserResolver:
    """Reports the owner of /dev/console, i.e. the active GUI user."""

    runner: CommandRunner = field(default_factory=ShellCommandRunner)

    def current_user(self) -> Optional[str]:
        owner = self.runner.run(["/usr/bin/stat", "-f", "%Su", "/dev/console"])
        if owner is None or owner.strip() in _NON_USER_CONSOLE_OWNERS:
            return None
        return owner.strip()


@dataclass
class DialogNotifier:
    """Sends a desktop notification through swiftDialog as the target user."""

    runner: CommandRunner = field(default_factory=ShellCommandRunner)
    dialog_path: Path = DEFAULT_DIALOG_PATH

    def notify(
        self,
        user: str,
        *,
        title: str,
        body: str,
        subtitle: str,
        icon_path: Optional[Path] = None,
    ) -> None:
        argv = [
            "/usr/bin/sudo",
            "-u",
            user,
            str(self.dialog_path),
            "--notification",
            "--title",
            title,
            "--message",
            body,
            "--subtitle",
            subtitle,
        ]
        if icon_path is not None:
            argv.extend(["--icon", str(icon_path)])
        self.runner.run(argv)
        _LOGGER.debug("Sent notification to {}: {} - {} (icon={})", user, title, body, icon_path)


@dataclass
class DockutilRegistrar:
    """Adds an application to the user's Dock with dockutil."""

    runner: CommandRunner = field(default_factory=ShellCommandRunner)
    dockutil_path: Path = DEFAULT_DOCKUTIL_PATH

    def register(self, user: str, app_path: str) -> None:
        self.runner.run(["/usr/bin/sudo", "-u", user, str(self.dockutil_path), "--add", app_path])
        _LOGGER.debug("Added {} to Dock for user {}", app_path, user)
