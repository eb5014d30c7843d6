"""
app_monitor_core package.

Process-level helpers for the managed app install monitor.
"""

__all__ = [
    "logger",
]
