"""Single-URL audit: browser lifecycle, engine call, score normalization."""

import logging
import math
from collections.abc import Callable
from datetime import datetime, timezone

from ..browser.errors import classify_error
from ..browser.launcher import ChromeLauncher
from ..core.naming import safe_name
from ..core.types import NOT_AVAILABLE, AuditResult, Category, EngineOutput, Score
from ..report.sink import ReportSink
from .lighthouse import LighthouseRunner

logger = logging.getLogger(__name__)


def normalize_score(value: float | None) -> Score:
    """Convert a 0-1 score fraction to an integer percentage (half-up)."""
    if value is None:
        return NOT_AVAILABLE
    return max(0, min(100, math.floor(value * 100 + 0.5)))


def normalize_scores(output: EngineOutput) -> dict[Category, Score]:
    return {
        category: normalize_score(output.category_scores.get(category.lighthouse_id))
        for category in Category
    }


class AuditEngineAdapter:
    """Runs one audit in its own browser and never raises for job failures.

    Failures (launch, navigation, engine, timeout, artifact write) come
    back as an ``AuditResult`` with every score unavailable.
    """

    def __init__(
        self,
        launcher: ChromeLauncher,
        runner: LighthouseRunner,
        sink: ReportSink,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize adapter.

        Args:
            launcher: Per-job browser launcher
            runner: Lighthouse runner
            sink: Destination for per-URL artifacts
            clock: Source of timestamps for artifact names (default: UTC now)
        """
        self.launcher = launcher
        self.runner = runner
        self.sink = sink
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def run(self, url: str, timeout_seconds: int) -> AuditResult:
        try:
            async with self.launcher.launch() as browser:
                output = await self.runner.audit(url, browser.port, timeout_seconds)

            name = safe_name(url, self.clock())
            self.sink.write_artifacts(name, output.structured_doc, output.rendered_doc)
        except Exception as e:
            kind = classify_error(e)
            message = str(e) or type(e).__name__
            logger.error(f"Error testing {url} ({kind.value}): {message}")
            return AuditResult.failure(url, message, kind)

        return AuditResult(url=url, scores=normalize_scores(output), report_name=name)
