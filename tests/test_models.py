"""
Tests for Receipt Engine models

Pydantic records, message parsing, and audit event models.
"""

import pytest
from pydantic import ValidationError
from uuid import uuid4

from receipt_engine.models import (
    U128_MAX,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Claim,
    Coin,
    DenomKind,
    Denomination,
    GlobalLedger,
    ListMembers,
    Member,
    MessageInfo,
    Phase,
    Register,
    Response,
    SetPhase,
    UpdateOwnership,
    parse_execute_msg,
    parse_query_msg,
)


class TestLedgerModels:
    """Tests for ledger record models."""

    def test_member_defaults(self):
        """Test Member default accounting fields."""
        member = Member(identity="alice", weight=3)
        assert member.last_accumulator == 0
        assert member.settled == 0
        assert member.claimed == 0

    def test_member_rejects_negative_weight(self):
        """Test that negative weights are rejected."""
        with pytest.raises(ValidationError):
            Member(identity="alice", weight=-1)

    def test_member_rejects_weight_beyond_u128(self):
        """Test that weights beyond u128 are rejected."""
        with pytest.raises(ValidationError, match="exceeds"):
            Member(identity="alice", weight=U128_MAX + 1)

    def test_member_accepts_decimal_string(self):
        """Test that amounts parse from decimal strings."""
        member = Member(identity="alice", weight=str(U128_MAX))
        assert member.weight == U128_MAX

    def test_member_rejects_non_numeric_string(self):
        """Test that non-numeric strings are rejected."""
        with pytest.raises(ValidationError):
            Member(identity="alice", weight="12abc")

    def test_member_rejects_bool_weight(self):
        """Test that booleans are not amounts."""
        with pytest.raises(ValidationError):
            Member(identity="alice", weight=True)

    def test_identity_cannot_contain_whitespace(self):
        """Test that identities cannot contain whitespace."""
        with pytest.raises(ValidationError):
            Member(identity="al ice", weight=1)

    def test_identity_cannot_be_empty(self):
        """Test that blank identities are rejected."""
        with pytest.raises(ValidationError):
            Member(identity="   ", weight=1)

    def test_json_amounts_are_strings(self):
        """Test that amounts serialize to JSON as strings."""
        ledger = GlobalLedger(total_weight=5, accumulator=10 ** 60)
        dumped = ledger.model_dump(mode="json")
        assert dumped["total_weight"] == "5"
        assert dumped["accumulator"] == str(10 ** 60)
        assert dumped["phase"] == "open"

    def test_global_ledger_defaults(self):
        """Test GlobalLedger defaults."""
        ledger = GlobalLedger()
        assert ledger.total_weight == 0
        assert ledger.phase == Phase.OPEN


class TestDenomination:
    """Tests for the Denomination model."""

    def test_native_key(self):
        """Test the key of a native denomination."""
        denom = Denomination.native("ucoin")
        assert denom.kind == DenomKind.NATIVE
        assert denom.key == "nucoin"

    def test_token_key(self):
        """Test the key of a token denomination."""
        assert Denomination.token("contract1").key == "ccontract1"

    def test_key_distinguishes_kind(self):
        """Test that native and token keys never collide."""
        assert Denomination.native("abc").key != Denomination.token("abc").key

    def test_is_immutable(self):
        """Test that Denomination is frozen."""
        denom = Denomination.native("ucoin")
        with pytest.raises(ValidationError):
            denom.reference = "uother"


class TestMessages:
    """Tests for command and query message models."""

    def test_parse_execute_from_dict(self):
        """Test parsing a command from a dict."""
        msg = parse_execute_msg({"type": "register", "identity": "alice", "weight": "10"})
        assert isinstance(msg, Register)
        assert msg.weight == 10

    def test_parse_execute_from_json(self):
        """Test parsing a command from JSON."""
        msg = parse_execute_msg('{"type": "set_phase", "phase": "closed"}')
        assert isinstance(msg, SetPhase)
        assert msg.phase == Phase.CLOSED

    def test_parse_claim(self):
        """Test parsing a command without fields."""
        assert isinstance(parse_execute_msg({"type": "claim"}), Claim)

    def test_parse_unknown_command(self):
        """Test that unknown commands are rejected."""
        with pytest.raises(ValidationError):
            parse_execute_msg({"type": "withdraw_everything"})

    def test_parse_unknown_phase(self):
        """Test that unknown phases are rejected."""
        with pytest.raises(ValidationError):
            parse_execute_msg({"type": "set_phase", "phase": "paused"})

    def test_parse_query(self):
        """Test parsing a query."""
        msg = parse_query_msg({"type": "list_members", "start_after": "bob", "limit": 5})
        assert isinstance(msg, ListMembers)
        assert msg.start_after == "bob"

    def test_negative_limit_rejected(self):
        """Test that negative limits are rejected."""
        with pytest.raises(ValidationError):
            ListMembers(limit=-1)

    def test_transfer_ownership_needs_new_owner(self):
        """Test that a transfer names the new owner."""
        with pytest.raises(ValidationError, match="requires new_owner"):
            UpdateOwnership(action="transfer_ownership")

    def test_accept_ownership_takes_no_new_owner(self):
        """Test that accepting takes no new owner."""
        with pytest.raises(ValidationError, match="does not take new_owner"):
            UpdateOwnership(action="accept_ownership", new_owner="bob")

    def test_message_info_funds(self):
        """Test MessageInfo with attached funds."""
        info = MessageInfo(sender="payer", funds=[Coin(denom="ucoin", amount=5)])
        assert info.funds[0].amount == 5

    def test_response_attributes(self):
        """Test adding and reading response attributes."""
        response = Response().add_attribute("action", "deposit").add_attribute("amount", 5)
        assert response.attribute("amount") == "5"
        assert response.attribute("missing") is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.MEMBER_REGISTERED,
            description="Member registered",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test AuditEvent conversion for logging."""
        event = AuditEvent(
            event_type=AuditEventType.CLAIM_PAID,
            description="Claim paid",
            details={"amount": "100"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "claim_paid"
        assert log_dict["details"]["amount"] == "100"

    def test_builder_member_reweighted(self):
        """Test the reweight event builder."""
        correlation_id = uuid4()
        event = AuditEventBuilder.member_reweighted(
            actor="admin",
            identity="alice",
            old_weight=1,
            new_weight=0,
            settled=50,
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.MEMBER_REWEIGHTED
        assert event.subject == "alice"
        assert event.correlation_id == correlation_id
        assert event.details["settled"] == "50"

    def test_builder_deposit_held(self):
        """Test that a held deposit gets its own event type."""
        event = AuditEventBuilder.deposit(
            actor="payer",
            amount=400,
            distributed=False,
            undistributed=400,
            correlation_id=uuid4(),
        )
        assert event.event_type == AuditEventType.DEPOSIT_HELD

    def test_builder_invariant_violation(self):
        """Test that invariant violations are critical."""
        event = AuditEventBuilder.invariant_violation(
            actor="payer",
            command="deposit",
            error_kind="arithmetic_overflow",
            error_message="Overflow",
            correlation_id=uuid4(),
        )
        assert event.severity == AuditSeverity.CRITICAL
        assert event.error_kind == "arithmetic_overflow"
