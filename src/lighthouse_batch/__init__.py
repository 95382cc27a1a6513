"""Batch Lighthouse audits with bounded concurrency, retries and CSV summaries."""

__version__ = "0.1.0"
