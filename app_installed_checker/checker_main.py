"""
Entry point for the installed-app checker.
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from app_installed_checker.app_installed_checker.installed_app import InstalledAppFinder
from app_monitor_core.app_monitor_core import logger as app_logger


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print whether the app from a package receipt is installed."""
    parser = argparse.ArgumentParser(
        prog="app-installed",
        description="Check whether the app delivered by a package is installed.",
    )
    parser.add_argument("package_id", help="package receipt identifier (case-insensitive)")
    parser.add_argument("-d", "--debug", action="store_true", help="enable verbose diagnostic logging")
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    app_logger.configure(verbose=args.debug)

    app_path = InstalledAppFinder().installed_app_path(args.package_id)
    if app_path is not None:
        print(f"re-install: package app is installed at {app_path}")
        return 0
    print("install: package app is not installed")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
