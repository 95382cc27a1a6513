"""Report persistence: per-URL artifacts and the CSV summary."""

import logging
from collections.abc import Sequence
from pathlib import Path

from ..core.types import NOT_AVAILABLE, AuditResult, Category, ReportConfig

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["URL", *(category.value for category in Category)]
ERROR_COLUMN = "Error"


# csv.writer has no mode that always quotes URL and Error but leaves scores and N/A bare
def quote(value: str | None) -> str:
    """Quote a CSV field, doubling embedded quotes."""
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


class ReportSink:
    """Writes engine artifacts and the run summary to disk."""

    def __init__(self, config: ReportConfig):
        """Initialize sink.

        Args:
            config: Report configuration
        """
        self.config = config
        self.reports_dir = Path(config.reports_dir)

    def ensure_dir(self) -> Path:
        """Create the reports directory if absent.

        Raises:
            OSError: If the directory cannot be created
        """
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        return self.reports_dir

    def write_artifacts(
        self, name: str, structured_doc: str, rendered_doc: str
    ) -> tuple[Path, Path]:
        """Write both engine documents verbatim as ``<name>.json`` and ``<name>.html``.

        Args:
            name: Artifact base name
            structured_doc: JSON report text
            rendered_doc: HTML report text

        Returns:
            Paths of the JSON and HTML files
        """
        self.ensure_dir()
        json_path = self.reports_dir / f"{name}.json"
        html_path = self.reports_dir / f"{name}.html"
        json_path.write_text(structured_doc, encoding="utf-8")
        html_path.write_text(rendered_doc, encoding="utf-8")
        logger.debug(f"Saved {json_path} and {html_path}")
        return json_path, html_path

    def format_row(self, result: AuditResult) -> str:
        fields = [quote(result.url)]
        fields.extend(str(result.scores.get(category, NOT_AVAILABLE)) for category in Category)
        if self.config.include_error_column:
            fields.append(quote(result.error))
        return ",".join(fields)

    def format_summary(self, results: Sequence[AuditResult]) -> str:
        header = list(SUMMARY_COLUMNS)
        if self.config.include_error_column:
            header.append(ERROR_COLUMN)
        lines = [",".join(header)]
        lines.extend(self.format_row(result) for result in results)
        return "\n".join(lines) + "\n"

    def write_summary(self, results: Sequence[AuditResult], destination: Path | str) -> Path:
        """Write the CSV summary, replacing any existing file.

        Args:
            results: One result per input URL, in input order
            destination: Summary file path

        Returns:
            The destination path
        """
        path = Path(destination)
        if path.parent != Path("."):
            path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.format_summary(results), encoding="utf-8")
        logger.info(f"Wrote summary for {len(results)} URLs to {path}")
        return path
