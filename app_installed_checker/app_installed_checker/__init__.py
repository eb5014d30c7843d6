"""
app_installed_checker package: reports whether a package-installed app is present.
"""

__all__ = [
    "installed_app",
]
