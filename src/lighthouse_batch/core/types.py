"""Type definitions for the batch runner."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

NOT_AVAILABLE = "N/A"

Score = int | Literal["N/A"]


class Category(str, Enum):
    """Audit categories, valued by their summary column name."""

    PERFORMANCE = "Performance"
    ACCESSIBILITY = "Accessibility"
    BEST_PRACTICES = "BestPractices"
    SEO = "SEO"

    @property
    def lighthouse_id(self) -> str:
        """Category id used inside Lighthouse reports."""
        return _LIGHTHOUSE_IDS[self]


_LIGHTHOUSE_IDS = {
    Category.PERFORMANCE: "performance",
    Category.ACCESSIBILITY: "accessibility",
    Category.BEST_PRACTICES: "best-practices",
    Category.SEO: "seo",
}


class AuditErrorKind(str, Enum):
    """Classifies job failures for logging and the summary."""

    TIMEOUT = "timeout"
    LAUNCH = "launch"
    NAVIGATION = "navigation"
    ENGINE = "engine"
    IO = "io"
    UNKNOWN = "unknown"


def unavailable_scores() -> dict[Category, Score]:
    return {category: NOT_AVAILABLE for category in Category}


class AuditJob(BaseModel):
    """One attempt at auditing a URL."""

    url: str = Field(description="URL being audited")
    attempt: int = Field(default=1, ge=1, description="Attempt number (1-indexed)")


class AuditResult(BaseModel):
    """Terminal outcome of one URL's audit."""

    url: str = Field(description="Audited URL")
    scores: dict[Category, Score] = Field(
        default_factory=unavailable_scores, description="Score per category, or N/A"
    )
    error: str | None = Field(default=None, description="Failure description, None on success")
    error_kind: AuditErrorKind | None = Field(default=None, description="Classified failure")
    attempts: int = Field(default=1, ge=1, description="Attempts made for this URL")
    report_name: str | None = Field(default=None, description="Base name of saved artifacts")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(
        cls,
        url: str,
        error: str,
        error_kind: AuditErrorKind = AuditErrorKind.UNKNOWN,
        attempts: int = 1,
    ) -> "AuditResult":
        """Build a failure result with every score unavailable."""
        return cls(
            url=url,
            error=error or "Unknown error",
            error_kind=error_kind,
            attempts=attempts,
        )


class RunSummary(BaseModel):
    """Outcome of a whole batch run."""

    results: list[AuditResult] = Field(description="One result per input URL, in input order")
    summary_path: str = Field(description="Path of the CSV summary")
    duration_seconds: float = Field(default=0.0, description="Wall-clock duration of the run")

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded


class EngineOutput(BaseModel):
    """Raw output of one successful engine run."""

    structured_doc: str = Field(description="JSON report, written verbatim")
    rendered_doc: str = Field(description="HTML report, written verbatim")
    category_scores: dict[str, float | None] = Field(
        default_factory=dict, description="Lighthouse category id -> score fraction (0-1)"
    )


# Configuration models


class RunConfig(BaseModel):
    """Scheduling, retry and timeout configuration."""

    retries: int = Field(default=2, ge=0, description="Retries after the first attempt")
    timeout_seconds: int = Field(default=45, gt=0, description="Per-audit page load timeout")
    concurrency: int = Field(default=1, ge=1, description="Jobs per batch (1 = sequential)")
    retry_backoff_seconds: float = Field(
        default=3.0, ge=0, description="Fixed wait between attempts"
    )
    sequential_delay_seconds: float = Field(
        default=2.0, ge=0, description="Pause between jobs in sequential mode"
    )
    batch_delay_seconds: float = Field(
        default=0.5, ge=0, description="Pause between batches in concurrent mode"
    )
    engine_grace_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Extra time allowed to the engine beyond the page load timeout",
    )


class BrowserConfig(BaseModel):
    """Per-job browser launch configuration."""

    headless: bool = Field(default=True, description="Run browser in headless mode")
    chrome_flags: list[str] = Field(
        default=[
            "--disable-gpu",
            "--no-sandbox",
            "--disable-dev-shm-usage",
            "--disable-setuid-sandbox",
        ],
        description="Extra Chromium command line flags",
    )
    executable_path: str | None = Field(
        default=None, description="Chromium/Chrome binary (default: Playwright's bundled build)"
    )


class ScreenEmulation(BaseModel):
    """Device screen emulation."""

    mobile: bool = False
    width: int = 1366
    height: int = 768
    device_scale_factor: float = 1
    disabled: bool = False


class Throttling(BaseModel):
    """Network and CPU throttling profile."""

    rtt_ms: int = 40
    throughput_kbps: int = 10240
    cpu_slowdown_multiplier: float = 1


class LighthouseSettings(BaseModel):
    """Audit engine configuration."""

    binary: str = Field(default="lighthouse", description="Lighthouse CLI executable")
    categories: list[Category] = Field(default_factory=lambda: list(Category))
    form_factor: Literal["desktop", "mobile"] = "desktop"
    screen_emulation: ScreenEmulation = Field(default_factory=ScreenEmulation)
    throttling_method: Literal["devtools", "simulate", "provided"] = "devtools"
    throttling: Throttling = Field(default_factory=Throttling)
    locale: str = Field(default="en-US", description="Report locale")
    disable_storage_reset: bool = True
    skip_about_blank: bool = True
    log_level: Literal["silent", "error", "info", "verbose"] = "error"


class ReportConfig(BaseModel):
    """Report output configuration."""

    reports_dir: str = Field(default="reports", description="Per-URL artifact directory")
    output: str = Field(default="lighthouse-results", description="Summary file base name")
    include_error_column: bool = Field(default=True, description="Write the Error column")

    @property
    def summary_path(self) -> str:
        return f"{self.output}.csv"


class BatchConfig(BaseModel):
    """Complete batch run configuration."""

    run: RunConfig = Field(default_factory=RunConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    lighthouse: LighthouseSettings = Field(default_factory=LighthouseSettings)
    report: ReportConfig = Field(default_factory=ReportConfig)
    urls_file: str = Field(default="urls.txt", description="Line-delimited URL list")
    default_urls: list[str] = Field(
        default=[
            "https://ascenten.net/culture.html",
            "https://ascenten.net/affirmative-action-policy.html",
        ],
        description="URLs used when the URL file is missing or yields nothing",
    )

    @field_validator("default_urls", mode="before")
    @classmethod
    def _none_to_empty(cls, v: list[str] | None) -> list[str]:
        return v if v is not None else []
