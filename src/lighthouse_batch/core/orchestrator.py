"""Main orchestrator for batch Lighthouse runs."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from ..browser.errors import classify_error
from ..engine.factory import create_audit_adapter
from ..report.sink import ReportSink
from .errors import NoValidUrlsError
from .policies import SupportsAudit, run_with_retry
from .types import AuditResult, BatchConfig, RunSummary

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class BatchAuditOrchestrator:
    """Runs every URL through the retry policy in fixed-size batches.

    A concurrency of 1 is sequential mode. Results come back in input
    order regardless of completion order, one per URL.
    """

    def __init__(
        self,
        config: BatchConfig,
        adapter: SupportsAudit,
        progress: ProgressCallback | None = None,
    ):
        """Initialize orchestrator.

        Args:
            config: Batch configuration
            adapter: Single-attempt auditor
            progress: Optional ``(index, total, url)`` callback fired as each job starts
        """
        self.config = config
        self.adapter = adapter
        self.progress = progress

    @property
    def concurrency(self) -> int:
        return self.config.run.concurrency

    @property
    def pacing_seconds(self) -> float:
        """Pause between consecutive batches."""
        if self.concurrency == 1:
            return self.config.run.sequential_delay_seconds
        return self.config.run.batch_delay_seconds

    async def run_all(self, urls: Sequence[str]) -> list[AuditResult]:
        """Audit every URL.

        Args:
            urls: URLs in input order (duplicates allowed)

        Returns:
            Exactly one result per URL, in input order
        """
        total = len(urls)
        results: list[AuditResult | None] = [None] * total
        logger.info(
            f"Starting Lighthouse analysis for {total} URLs (concurrency={self.concurrency})"
        )

        for start in range(0, total, self.concurrency):
            if start > 0:
                await self._pace()

            indices = range(start, min(start + self.concurrency, total))
            outcomes = await asyncio.gather(
                *(self._run_job(i, urls[i], total) for i in indices),
                return_exceptions=True,
            )

            for i, outcome in zip(indices, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error(f"Unexpected failure testing {urls[i]}: {outcome!r}")
                    outcome = AuditResult.failure(
                        urls[i], str(outcome) or type(outcome).__name__, classify_error(outcome)
                    )
                results[i] = outcome

        return [r for r in results if r is not None]

    async def _run_job(self, index: int, url: str, total: int) -> AuditResult:
        logger.info(f"[{index + 1}/{total}] Testing: {url}")
        if self.progress:
            self.progress(index + 1, total, url)

        return await run_with_retry(
            self.adapter,
            url,
            max_retries=self.config.run.retries,
            timeout_seconds=self.config.run.timeout_seconds,
            backoff_seconds=self.config.run.retry_backoff_seconds,
        )

    async def _pace(self) -> None:
        delay = self.pacing_seconds
        if delay > 0:
            unit = "test" if self.concurrency == 1 else "batch"
            logger.info(f"Waiting {delay:g} seconds before next {unit}...")
            await asyncio.sleep(delay)


async def run_batch_audit(
    config: BatchConfig,
    urls: Sequence[str],
    adapter: SupportsAudit | None = None,
    summary_path: Path | str | None = None,
    progress: ProgressCallback | None = None,
) -> RunSummary:
    """Run a complete batch audit and write the summary.

    Args:
        config: Batch configuration
        urls: URLs to audit
        adapter: Custom auditor (default: Chromium + Lighthouse from config)
        summary_path: Summary destination (default: ``<report.output>.csv``)
        progress: Optional per-job progress callback

    Returns:
        RunSummary with results in input order

    Raises:
        NoValidUrlsError: If ``urls`` is empty (nothing is written)
        OSError: If the reports directory or summary cannot be written
    """
    if not urls:
        raise NoValidUrlsError("No valid URLs to test")

    sink = ReportSink(config.report)
    sink.ensure_dir()

    if adapter is None:
        adapter = create_audit_adapter(config, sink)

    started = time.monotonic()
    orchestrator = BatchAuditOrchestrator(config, adapter, progress=progress)
    results = await orchestrator.run_all(urls)
    duration = time.monotonic() - started

    path = sink.write_summary(results, summary_path or config.report.summary_path)
    summary = RunSummary(results=results, summary_path=str(path), duration_seconds=duration)

    logger.info(f"Total execution time: {duration / 60:.2f} minutes")
    logger.info(f"Audit complete. {summary.succeeded}/{len(results)} URLs succeeded")
    return summary
