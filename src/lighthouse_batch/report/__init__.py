"""Report output."""

from .sink import ReportSink

__all__ = ["ReportSink"]
