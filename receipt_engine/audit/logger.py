"""
Audit Logger

DESIGN DECISION: Every command the engine executes - or rejects - is logged.
This provides:
1. Complete traceability of who moved what value
2. Debugging capability for rolled-back calls
3. A distinct signal for invariant violations (defects, not user errors)

The audit logger:
- Never influences the outcome of a call
- Gracefully handles sink failures (doesn't fail the call if logging fails)
- Supports correlation IDs to trace every event of one call
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from receipt_engine.audit.sink import AuditSink
from receipt_engine.config import LoggingSettings, get_settings
from receipt_engine.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure structlog for local logging.

    Runs once at import with the environment's settings; call again to
    switch level or renderer. Only the package's own logger is touched:
    handlers and the root logger belong to whoever runs the engine.
    """
    settings = settings or get_settings().logging
    logging.getLogger("receipt_engine").setLevel(settings.level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An optional AuditSink (for persistence outside the ledger)
    """

    def __init__(
        self,
        sink: Optional[AuditSink] = None,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Destination for persisted events.
                  If None, only logs locally.
        """
        self._sink = sink
        self._logger = structlog.get_logger("receipt_engine.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Appends to the sink if available.

        Returns True if the sink write succeeded (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.CRITICAL:
            self._logger.critical("audit_event", **log_dict)
        elif event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink:
            try:
                return self._sink.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_instantiated(
        self,
        actor: str,
        owner: str,
        denom: str,
        phase_policy: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.instantiated(
            actor=actor,
            owner=owner,
            denom=denom,
            phase_policy=phase_policy,
            correlation_id=correlation_id,
        ))

    def log_command_rejected(
        self,
        actor: str,
        command: str,
        error_kind: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.command_rejected(
            actor=actor,
            command=command,
            error_kind=error_kind,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_transfer_failed(
        self,
        actor: str,
        command: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.transfer_failed(
            actor=actor,
            command=command,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_invariant_violation(
        self,
        actor: str,
        command: str,
        error_kind: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a defect. These are CRITICAL, never routine."""
        self.log(AuditEventBuilder.invariant_violation(
            actor=actor,
            command=command,
            error_kind=error_kind,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    The engine creates one per call and passes it to every event it logs.
    """
    return uuid4()
