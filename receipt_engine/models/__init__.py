"""
Data Models Package

This package contains all Pydantic models used in the Receipt Engine.
All records and messages flowing through the system conform to these schemas.
"""

from receipt_engine.models.ledger import (
    U128_MAX,
    U256_MAX,
    Coin,
    Config,
    DenomKind,
    Denomination,
    GlobalLedger,
    Member,
    Ownership,
    Phase,
    PhasePolicy,
)
from receipt_engine.models.messages import (
    Claim,
    Deposit,
    Deregister,
    GetConfig,
    GetLedger,
    GetMember,
    GetOwnership,
    GetPendingEntitlement,
    InstantiateMsg,
    LedgerResponse,
    ListMembers,
    ListMembersResponse,
    MemberResponse,
    MemberWeight,
    MessageInfo,
    PendingEntitlementResponse,
    Receive,
    Register,
    Response,
    Reweight,
    SetPhase,
    Transfer,
    UpdateOwnership,
    parse_execute_msg,
    parse_query_msg,
)
from receipt_engine.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger records
    "U128_MAX",
    "U256_MAX",
    "Coin",
    "Config",
    "DenomKind",
    "Denomination",
    "GlobalLedger",
    "Member",
    "Ownership",
    "Phase",
    "PhasePolicy",
    # Messages
    "Claim",
    "Deposit",
    "Deregister",
    "GetConfig",
    "GetLedger",
    "GetMember",
    "GetOwnership",
    "GetPendingEntitlement",
    "InstantiateMsg",
    "LedgerResponse",
    "ListMembers",
    "ListMembersResponse",
    "MemberResponse",
    "MemberWeight",
    "MessageInfo",
    "PendingEntitlementResponse",
    "Receive",
    "Register",
    "Response",
    "Reweight",
    "SetPhase",
    "Transfer",
    "UpdateOwnership",
    "parse_execute_msg",
    "parse_query_msg",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
