"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from lighthouse_batch.core.types import BatchConfig, ReportConfig, RunConfig


@pytest.fixture(scope="session")
def project_root():
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def configs_dir(project_root):
    """Get configs directory."""
    return project_root / "configs"


@pytest.fixture
def fixed_now():
    """A fixed UTC instant for deterministic report names."""
    return datetime(2024, 5, 1, 10, 20, 30, 123000, tzinfo=timezone.utc)


@pytest.fixture
def fast_config(tmp_path):
    """BatchConfig with no pacing or backoff, writing under tmp_path."""
    return BatchConfig(
        run=RunConfig(
            retries=2,
            timeout_seconds=45,
            retry_backoff_seconds=0,
            sequential_delay_seconds=0,
            batch_delay_seconds=0,
        ),
        report=ReportConfig(
            reports_dir=str(tmp_path / "reports"),
            output=str(tmp_path / "lighthouse-results"),
        ),
        default_urls=[],
    )
