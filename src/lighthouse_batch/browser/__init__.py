"""Browser lifecycle and error classification."""

from .errors import LaunchError, classify_error
from .launcher import ChromeLauncher, LaunchedBrowser

__all__ = [
    "ChromeLauncher",
    "LaunchError",
    "LaunchedBrowser",
    "classify_error",
]
