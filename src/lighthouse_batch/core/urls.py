"""URL list loading and validation."""

import logging
import re
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")

# A host may not contain whitespace or URL delimiters
_HOST_RE = re.compile(r"[^\s<>\"{}|\\^`%/?#@\[\]]+")


def validate_url(url: str) -> bool:
    """Check that ``url`` is an absolute HTTP(S) URL with a host.

    Args:
        url: Candidate URL, already stripped

    Returns:
        True if the URL is usable as an audit target
    """
    try:
        parsed = urlparse(url)
        # Accessing .port raises ValueError for malformed ports
        _ = parsed.port
    except ValueError:
        return False

    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.hostname:
        return False

    return _HOST_RE.fullmatch(parsed.hostname) is not None


def parse_url_lines(lines: Sequence[str]) -> list[str]:
    """Filter raw lines down to valid URLs, preserving order and duplicates."""
    urls: list[str] = []
    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        if line.startswith("http") and validate_url(line):
            urls.append(line)
        else:
            logger.warning(f"Invalid URL skipped: {line}")
    return urls


def _decode_lines(path: Path) -> list[str]:
    """Decode each line of ``path`` on its own, skipping lines that are not UTF-8."""
    lines: list[str] = []
    for number, raw in enumerate(path.read_bytes().splitlines(), start=1):
        try:
            lines.append(raw.decode("utf-8"))
        except UnicodeDecodeError:
            logger.warning(f"Undecodable line {number} skipped in {path}")
    return lines


def load_urls(path: Path | str | None, default_urls: Sequence[str]) -> list[str]:
    """Load URLs from a line-delimited file, falling back to ``default_urls``.

    The fallback applies when the file is absent or yields no valid URL.
    The returned list may be empty if ``default_urls`` is empty.

    Args:
        path: URL file path
        default_urls: Built-in URL set

    Returns:
        URLs to audit, in file order
    """
    urls: list[str] = []

    if path is not None and Path(path).is_file():
        urls = parse_url_lines(_decode_lines(Path(path)))
        logger.info(f"Loaded {len(urls)} URLs from {path}")
        if not urls:
            logger.warning(f"No valid URLs in {path}, using default URLs")
    else:
        logger.info(f"URLs file {path} not found, using default URLs")

    return urls or list(default_urls)
