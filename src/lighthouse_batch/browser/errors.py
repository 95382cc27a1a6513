"""Error classification for audit jobs."""

import asyncio

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..core.errors import LighthouseError
from ..core.types import AuditErrorKind

# Lighthouse runtime error codes caused by the page rather than the engine
NAVIGATION_CODES = frozenset(
    {
        "CHROME_INTERSTITIAL_ERROR",
        "DNS_FAILURE",
        "ERRORED_DOCUMENT_REQUEST",
        "FAILED_DOCUMENT_REQUEST",
        "INVALID_URL",
        "NO_FCP",
        "NOT_HTML",
        "PAGE_HUNG",
    }
)


class LaunchError(RuntimeError):
    """Raised when a browser instance cannot be started."""


def classify_error(exc: BaseException) -> AuditErrorKind:
    """Classify an exception raised while auditing a URL.

    Timeouts are checked before ``OSError`` because ``TimeoutError`` is one.

    Args:
        exc: The exception to classify.

    Returns:
        The corresponding AuditErrorKind.
    """
    if isinstance(exc, asyncio.TimeoutError | TimeoutError | PlaywrightTimeoutError):
        return AuditErrorKind.TIMEOUT

    if isinstance(exc, LaunchError | PlaywrightError):
        return AuditErrorKind.LAUNCH

    if isinstance(exc, LighthouseError):
        if exc.code in NAVIGATION_CODES or "net::" in str(exc):
            return AuditErrorKind.NAVIGATION
        return AuditErrorKind.ENGINE

    if isinstance(exc, OSError):
        return AuditErrorKind.IO

    return AuditErrorKind.UNKNOWN
