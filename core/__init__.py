"""
Core runtime for the managed app install monitor.
"""

from .dedup_state import DedupState, InstallPhase  # noqa: F401
from .directory_watcher import DirectoryWatcher, WatchSetupError  # noqa: F401
