"""
Audit Models for Receipt Engine

Every command the engine executes is logged for audit purposes.
This provides:
1. Complete traceability of entitlement changes and payouts
2. Debugging information when a call is rolled back
3. A distinct, loud signal when an arithmetic invariant trips

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every command has its own event type.
    """
    # Setup
    INSTANTIATED = "instantiated"

    # Membership
    MEMBER_REGISTERED = "member_registered"
    MEMBER_REWEIGHTED = "member_reweighted"
    MEMBER_DEREGISTERED = "member_deregistered"

    # Value flow
    DEPOSIT_DISTRIBUTED = "deposit_distributed"
    DEPOSIT_HELD = "deposit_held"
    CLAIM_PAID = "claim_paid"

    # Administration
    PHASE_CHANGED = "phase_changed"
    OWNERSHIP_UPDATED = "ownership_updated"

    # Failures
    COMMAND_REJECTED = "command_rejected"
    TRANSFER_FAILED = "transfer_failed"
    INVARIANT_VIOLATION = "invariant_violation"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every executed or rejected command creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who
    actor: Optional[str] = Field(
        default=None,
        description="Address of the caller"
    )
    subject: Optional[str] = Field(
        default=None,
        description="Member identity the event is about, if any"
    )

    # Correlation - all events of one call share this
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "actor": self.actor,
            "subject": self.subject,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_kind": self.error_kind,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.member_registered(actor, identity, weight, cid)
        event = AuditEventBuilder.claim_paid(identity, amount, denom, cid)

    Amounts go into details as strings; they can exceed what JSON
    consumers represent exactly as numbers.
    """

    @staticmethod
    def instantiated(
        actor: str,
        owner: str,
        denom: str,
        phase_policy: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSTANTIATED,
            actor=actor,
            correlation_id=correlation_id,
            description=f"Ledger instantiated for {denom}",
            details={
                "owner": owner,
                "denom": denom,
                "phase_policy": phase_policy,
            },
        )

    @staticmethod
    def member_registered(
        actor: str,
        identity: str,
        weight: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_REGISTERED,
            actor=actor,
            subject=identity,
            correlation_id=correlation_id,
            description=f"Member registered: {identity}",
            details={"weight": str(weight)},
        )

    @staticmethod
    def member_reweighted(
        actor: str,
        identity: str,
        old_weight: int,
        new_weight: int,
        settled: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_REWEIGHTED,
            actor=actor,
            subject=identity,
            correlation_id=correlation_id,
            description=f"Member reweighted: {identity} {old_weight} -> {new_weight}",
            details={
                "old_weight": str(old_weight),
                "new_weight": str(new_weight),
                "settled": str(settled),
            },
        )

    @staticmethod
    def member_deregistered(
        actor: str,
        identity: str,
        weight: int,
        paid_out: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_DEREGISTERED,
            actor=actor,
            subject=identity,
            correlation_id=correlation_id,
            description=f"Member deregistered: {identity}",
            details={
                "weight": str(weight),
                "paid_out": str(paid_out),
            },
        )

    @staticmethod
    def deposit(
        actor: str,
        amount: int,
        distributed: bool,
        undistributed: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        if distributed:
            return AuditEvent(
                event_type=AuditEventType.DEPOSIT_DISTRIBUTED,
                actor=actor,
                correlation_id=correlation_id,
                description=f"Deposit of {amount} distributed",
                details={"amount": str(amount)},
            )
        return AuditEvent(
            event_type=AuditEventType.DEPOSIT_HELD,
            actor=actor,
            correlation_id=correlation_id,
            description=f"Deposit of {amount} held: no weight registered",
            details={
                "amount": str(amount),
                "undistributed": str(undistributed),
            },
        )

    @staticmethod
    def claim_paid(
        identity: str,
        amount: int,
        denom: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLAIM_PAID,
            actor=identity,
            subject=identity,
            correlation_id=correlation_id,
            description=f"Claim paid: {amount} {denom} to {identity}",
            details={
                "amount": str(amount),
                "denom": denom,
            },
        )

    @staticmethod
    def phase_changed(
        actor: str,
        old_phase: str,
        new_phase: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PHASE_CHANGED,
            actor=actor,
            correlation_id=correlation_id,
            description=f"Phase changed: {old_phase} -> {new_phase}",
            details={
                "old_phase": old_phase,
                "new_phase": new_phase,
            },
        )

    @staticmethod
    def ownership_updated(
        actor: str,
        action: str,
        owner: Optional[str],
        pending_owner: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OWNERSHIP_UPDATED,
            actor=actor,
            correlation_id=correlation_id,
            description=f"Ownership updated: {action}",
            details={
                "action": action,
                "owner": owner,
                "pending_owner": pending_owner,
            },
        )

    @staticmethod
    def command_rejected(
        actor: str,
        command: str,
        error_kind: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_REJECTED,
            severity=AuditSeverity.WARNING,
            actor=actor,
            correlation_id=correlation_id,
            description=f"Command rejected: {command}",
            details={"command": command},
            error_kind=error_kind,
            error_message=error_message,
        )

    @staticmethod
    def transfer_failed(
        actor: str,
        command: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_FAILED,
            severity=AuditSeverity.ERROR,
            actor=actor,
            correlation_id=correlation_id,
            description=f"Transfer failed during {command}; call rolled back",
            details={"command": command},
            error_kind="transfer_error",
            error_message=error_message,
        )

    @staticmethod
    def invariant_violation(
        actor: str,
        command: str,
        error_kind: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVARIANT_VIOLATION,
            severity=AuditSeverity.CRITICAL,
            actor=actor,
            correlation_id=correlation_id,
            description=f"Invariant violation during {command}",
            details={"command": command},
            error_kind=error_kind,
            error_message=error_message,
        )
