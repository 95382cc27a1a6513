"""Retry policy for audit jobs."""

import asyncio
import logging
from typing import Protocol

from ..browser.errors import classify_error
from .types import AuditJob, AuditResult

logger = logging.getLogger(__name__)

DEFAULT_BACKOFF_SECONDS = 3.0


class SupportsAudit(Protocol):
    """Anything that audits one URL and reports the outcome as a result."""

    async def run(self, url: str, timeout_seconds: int) -> AuditResult: ...


async def run_with_retry(
    adapter: SupportsAudit,
    url: str,
    max_retries: int,
    timeout_seconds: int,
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
) -> AuditResult:
    """Audit ``url`` with up to ``max_retries`` retries after the first attempt.

    The wait between attempts is fixed. A failure result and an exception
    from the adapter both count as a failed attempt. Only the last
    attempt's result is returned; earlier failures are just logged.

    Args:
        adapter: Single-attempt auditor
        url: URL to audit
        max_retries: Retries after the first attempt (0 = single attempt)
        timeout_seconds: Per-attempt page load budget
        backoff_seconds: Wait before each retry

    Returns:
        Result of the last attempt, with ``attempts`` set

    Raises:
        ValueError: If ``max_retries`` is negative
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {max_retries}")

    total = max_retries + 1
    result: AuditResult | None = None

    for attempt in range(1, total + 1):
        job = AuditJob(url=url, attempt=attempt)

        if job.attempt > 1:
            logger.info(f"Retrying {url} (attempt {job.attempt}/{total})...")
            await asyncio.sleep(backoff_seconds)

        try:
            result = await adapter.run(job.url, timeout_seconds)
        except Exception as e:
            logger.error(f"Attempt {job.attempt} failed for {url}: {e}")
            result = AuditResult.failure(url, str(e) or type(e).__name__, classify_error(e))

        result = result.model_copy(update={"attempts": job.attempt})
        if result.ok:
            return result

        logger.warning(f"Attempt {job.attempt}/{total} failed for {url}: {result.error}")

    if result is None:
        raise RuntimeError("Retry logic error")  # Should never reach here

    logger.error(f"All retries failed for {url}")
    return result
