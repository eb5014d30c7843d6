"""Tests for external command execution and side-effect capabilities."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from conftest import RecordingRunner
from core.commands import ConsoleUserResolver, DialogNotifier, DockutilRegistrar, ShellCommandRunner


@patch("core.commands.subprocess.run")
def test_runner_returns_trimmed_stdout(mock_run):
    mock_run.return_value = MagicMock(returncode=0, stdout="  alice\n", stderr="")

    assert ShellCommandRunner().run(["/usr/bin/stat", "-f", "%Su", "/dev/console"]) == "alice"
    assert mock_run.call_args.args[0] == ["/usr/bin/stat", "-f", "%Su", "/dev/console"]


@patch("core.commands.subprocess.run")
def test_runner_empty_output_is_none(mock_run):
    mock_run.return_value = MagicMock(returncode=1, stdout="\n", stderr="boom")

    assert ShellCommandRunner().run(["false"]) is None


@patch("core.commands.subprocess.run")
def test_runner_failures_are_none(mock_run):
    mock_run.side_effect = subprocess.TimeoutExpired(cmd="sleep", timeout=1)
    assert ShellCommandRunner(timeout=1).run(["sleep", "5"]) is None

    mock_run.side_effect = FileNotFoundError("missing")
    assert ShellCommandRunner().run(["/nope"]) is None


def test_console_user_resolution():
    runner = RecordingRunner(outputs={"/usr/bin/stat -f %Su /dev/console": "alice"})

    assert ConsoleUserResolver(runner=runner).current_user() == "alice"


def test_login_window_means_no_user():
    for owner in ("root", None, "loginwindow"):
        runner = RecordingRunner(outputs={"/usr/bin/stat -f %Su /dev/console": owner})
        assert ConsoleUserResolver(runner=runner).current_user() is None


def test_dialog_notifier_argv():
    runner = RecordingRunner()
    notifier = DialogNotifier(runner=runner, dialog_path=Path("/usr/local/bin/dialog"))

    notifier.notify(
        "alice",
        title="Installation Completed",
        body="Installation of Keynote is now finished.",
        subtitle="Apple",
        icon_path=Path("/tmp/app_monitor/1.png"),
    )

    assert runner.calls == [
        [
            "/usr/bin/sudo", "-u", "alice", "/usr/local/bin/dialog", "--notification",
            "--title", "Installation Completed",
            "--message", "Installation of Keynote is now finished.",
            "--subtitle", "Apple",
            "--icon", "/tmp/app_monitor/1.png",
        ]
    ]


def test_dialog_notifier_without_icon():
    runner = RecordingRunner()

    DialogNotifier(runner=runner).notify("bob", title="t", body="b", subtitle="s")

    assert "--icon" not in runner.calls[0]


def test_dockutil_registrar_argv():
    runner = RecordingRunner()

    DockutilRegistrar(runner=runner).register("alice", "/Applications/Keynote.app")

    assert runner.calls == [
        ["/usr/bin/sudo", "-u", "alice", "/usr/local/bin/dockutil", "--add", "/Applications/Keynote.app"]
    ]
