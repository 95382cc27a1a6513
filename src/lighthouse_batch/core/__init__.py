"""Core orchestration and type definitions."""

from .types import (
    NOT_AVAILABLE,
    AuditErrorKind,
    AuditJob,
    AuditResult,
    BatchConfig,
    Category,
    RunConfig,
    RunSummary,
)

__all__ = [
    "NOT_AVAILABLE",
    "AuditErrorKind",
    "AuditJob",
    "AuditResult",
    "BatchConfig",
    "Category",
    "RunConfig",
    "RunSummary",
]
