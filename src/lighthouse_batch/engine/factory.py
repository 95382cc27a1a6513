"""Factory for wiring the audit adapter from configuration."""

import logging

from ..browser.launcher import ChromeLauncher
from ..core.types import BatchConfig
from ..report.sink import ReportSink
from .adapter import AuditEngineAdapter
from .lighthouse import LighthouseRunner

logger = logging.getLogger(__name__)


def create_audit_adapter(config: BatchConfig, sink: ReportSink | None = None) -> AuditEngineAdapter:
    """Create the adapter used for every job of a run.

    Args:
        config: Batch configuration
        sink: Artifact destination (default: built from ``config.report``)

    Returns:
        An adapter launching one Chromium per audit and running Lighthouse against it
    """
    logger.info(
        "Using Lighthouse binary %s (headless=%s, locale=%s)",
        config.lighthouse.binary,
        config.browser.headless,
        config.lighthouse.locale,
    )
    return AuditEngineAdapter(
        launcher=ChromeLauncher(config.browser),
        runner=LighthouseRunner(config.lighthouse, grace_seconds=config.run.engine_grace_seconds),
        sink=sink or ReportSink(config.report),
    )
