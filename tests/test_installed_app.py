"""Tests for the installed-app checker."""

from unittest.mock import patch

from conftest import RecordingRunner
from app_installed_checker.app_installed_checker.installed_app import (
    InstalledAppFinder,
    extract_app_name,
)
from app_installed_checker import checker_main

PKGS = "com.apple.pkg.Core\ncom.google.Chrome\ncom.google.Chrome.helper"
FILES = "Applications\nApplications/Google Chrome.app\nApplications/Google Chrome.app/Contents"
SPOTLIGHT = (
    "/usr/bin/mdfind kMDItemContentType == 'com.apple.application-bundle' "
    "&& kMDItemFSName == 'Google Chrome.app'"
)


def _finder(tmp_path, **outputs):
    runner = RecordingRunner(
        outputs={
            "/usr/sbin/pkgutil --pkgs": PKGS,
            "/usr/sbin/pkgutil --files com.google.Chrome": FILES,
            **outputs,
        }
    )
    return InstalledAppFinder(runner=runner, applications_dir=tmp_path)


def test_extract_app_name():
    assert extract_app_name("Applications/Apple Configurator.app") == "Apple Configurator.app"
    assert extract_app_name("") is None


def test_package_id_match_is_case_insensitive(tmp_path):
    finder = _finder(tmp_path)

    assert finder.correct_package_id("COM.GOOGLE.CHROME") == "com.google.Chrome"
    assert finder.correct_package_id("chrome.helper") == "com.google.Chrome.helper"
    assert finder.correct_package_id("org.mozilla") is None


def test_found_in_applications(tmp_path):
    (tmp_path / "Google Chrome.app").mkdir()

    assert _finder(tmp_path).installed_app_path("com.google.chrome") == str(tmp_path / "Google Chrome.app")


def test_falls_back_to_spotlight(tmp_path):
    finder = _finder(tmp_path, **{SPOTLIGHT: "/Users/alice/Apps/Google Chrome.app\n/Volumes/x/Google Chrome.app"})

    assert finder.installed_app_path("com.google.chrome") == "/Users/alice/Apps/Google Chrome.app"


def test_not_installed(tmp_path):
    assert _finder(tmp_path).installed_app_path("com.google.chrome") is None


def test_unknown_package(tmp_path):
    finder = _finder(tmp_path)

    assert finder.installed_app_path("org.mozilla.firefox") is None
    assert finder.runner.calls == [["/usr/sbin/pkgutil", "--pkgs"]]


def test_payload_free_package(tmp_path):
    finder = _finder(tmp_path, **{"/usr/sbin/pkgutil --files com.google.Chrome": "usr/local/bin/tool"})

    assert finder.installed_app_path("com.google.chrome") is None


@patch.object(checker_main.app_logger, "configure")
@patch.object(checker_main, "InstalledAppFinder")
def test_cli_exit_codes(mock_finder, mock_configure, capsys):
    mock_finder.return_value.installed_app_path.return_value = "/Applications/Google Chrome.app"
    assert checker_main.main(["com.google.chrome"]) == 0
    assert "re-install" in capsys.readouterr().out

    mock_finder.return_value.installed_app_path.return_value = None
    assert checker_main.main(["com.google.chrome"]) == 1
    assert capsys.readouterr().out.startswith("install:")
