"""Audit logging package."""

from receipt_engine.audit.logger import AuditLogger, configure_logging, create_correlation_id
from receipt_engine.audit.sink import AuditSink, InMemoryAuditSink

__all__ = [
    "AuditLogger",
    "AuditSink",
    "InMemoryAuditSink",
    "configure_logging",
    "create_correlation_id",
]
