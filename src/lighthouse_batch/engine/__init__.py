"""Audit engine integration."""

from .adapter import AuditEngineAdapter
from .factory import create_audit_adapter
from .lighthouse import LighthouseRunner

__all__ = ["AuditEngineAdapter", "LighthouseRunner", "create_audit_adapter"]
