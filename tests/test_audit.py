"""Tests for the audit logger and sinks."""

import logging

import pytest
from structlog.testing import capture_logs

from receipt_engine.audit import (
    AuditLogger,
    AuditSink,
    InMemoryAuditSink,
    configure_logging,
    create_correlation_id,
)
from receipt_engine.config import LoggingSettings
from receipt_engine.models import AuditEventBuilder, AuditEventType


class FailingSink(AuditSink):
    def append_event(self, event):
        raise IOError("disk full")


@pytest.fixture
def sink():
    return InMemoryAuditSink()


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_events_reach_sink(self, sink):
        """Test that logged events are appended to the sink in order."""
        audit = AuditLogger(sink)
        cid = create_correlation_id()
        audit.log(AuditEventBuilder.member_registered("admin", "alice", 3, cid))
        audit.log(AuditEventBuilder.deposit("payer", 100, True, 0, cid))

        assert len(sink.events) == 2
        assert sink.last().event_type == AuditEventType.DEPOSIT_DISTRIBUTED
        assert len(sink.by_correlation_id(cid)) == 2

    def test_without_sink(self):
        """Test that logging without a sink reports success."""
        event = AuditEventBuilder.claim_paid("alice", 5, "nucoin", create_correlation_id())
        assert AuditLogger().log(event) is True

    def test_failing_sink_does_not_raise(self):
        """Test that a sink failure is reported, not raised."""
        event = AuditEventBuilder.claim_paid("alice", 5, "nucoin", create_correlation_id())
        assert AuditLogger(FailingSink()).log(event) is False

    def test_severity_routing(self, sink):
        """Test that failure events log at warning, error and critical."""
        audit = AuditLogger(sink)
        cid = create_correlation_id()
        with capture_logs() as logs:
            audit.log_command_rejected("mallory", "register", "unauthorized", "nope", cid)
            audit.log_transfer_failed("alice", "claim", "blocked", cid)
            audit.log_invariant_violation("payer", "deposit", "arithmetic_overflow", "Overflow", cid)

        assert [entry["log_level"] for entry in logs] == ["warning", "error", "critical"]
        assert logs[0]["error_kind"] == "unauthorized"
        assert logs[2]["event_type"] == "invariant_violation"

    def test_log_instantiated(self, sink):
        """Test the instantiation helper."""
        AuditLogger(sink).log_instantiated("admin", "admin", "nucoin", "windowed", create_correlation_id())
        assert sink.last().event_type == AuditEventType.INSTANTIATED

    def test_correlation_ids_are_unique(self):
        """Test that each correlation ID is fresh."""
        assert create_correlation_id() != create_correlation_id()


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_root_logger_untouched(self):
        """Test that configuring logging leaves the root logger alone."""
        root = logging.getLogger()
        level, handlers = root.level, list(root.handlers)
        try:
            configure_logging(LoggingSettings(level="DEBUG"))
            assert root.level == level
            assert root.handlers == handlers
            assert logging.getLogger("receipt_engine").level == logging.DEBUG
        finally:
            configure_logging(LoggingSettings())


class TestInMemoryAuditSink:
    """Tests for InMemoryAuditSink."""

    def test_of_type(self, sink):
        """Test filtering stored events by type."""
        cid = create_correlation_id()
        sink.append_event(AuditEventBuilder.phase_changed("admin", "open", "closed", cid))
        sink.append_event(AuditEventBuilder.claim_paid("alice", 1, "nucoin", cid))
        assert len(sink.of_type(AuditEventType.PHASE_CHANGED)) == 1
        assert sink.of_type(AuditEventType.INSTANTIATED) == []

    def test_last_on_empty(self, sink):
        """Test that an empty sink has no last event."""
        assert sink.last() is None
