"""Report file naming."""

from datetime import datetime, timezone
from urllib.parse import urlparse


def timestamp_token(now: datetime) -> str:
    """Render ``now`` as a filesystem-safe UTC ISO-8601 stamp.

    ``2024-05-01T10:20:30.123Z`` becomes ``2024-05-01T10-20-30-123Z``.
    Naive datetimes are taken to be UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    iso = now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def safe_name(url: str, now: datetime) -> str:
    """Build the artifact base name for one audit of ``url`` at ``now``.

    Two audits of the same host within the same millisecond get the same
    name; callers needing strict uniqueness must serialize per host.
    """
    host = (urlparse(url).hostname or "unknown").replace(".", "_")
    return f"{host}__{timestamp_token(now)}"
