"""
Audit Sinks

Audit logs are append-only - we never delete or modify them. They live
outside the ledger's own storage; the ledger keeps no audit state.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from receipt_engine.models.audit import AuditEvent, AuditEventType


class AuditSink(ABC):
    """Abstract destination for audit events."""

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event.

        Returns:
            True if stored successfully
        """
        pass


class InMemoryAuditSink(AuditSink):
    """Keeps events in a list. Used by tests and local runs."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self.events if e.correlation_id == correlation_id]

    def last(self) -> Optional[AuditEvent]:
        return self.events[-1] if self.events else None
