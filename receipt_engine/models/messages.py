"""
Message Models for Receipt Engine

The host dispatcher hands the engine three kinds of input:
1. MessageInfo - who is calling and what funds are attached
2. Commands - state-changing requests (execute)
3. Queries - read-only requests (query)

Every message carries a ``type`` discriminator so that raw JSON from the
host can be parsed into the right model with parse_execute_msg() /
parse_query_msg(). Shape problems (bad addresses, negative numbers,
unknown phases) are rejected here, before the engine runs.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from receipt_engine.models.ledger import (
    Address,
    Coin,
    Denomination,
    Phase,
    PhasePolicy,
    ScaledValue,
    Uint128,
)


class MessageInfo(BaseModel):
    """Caller identity (verified by the host) and attached native funds."""
    model_config = ConfigDict(frozen=True)

    sender: Address
    funds: list[Coin] = Field(default_factory=list)


class InstantiateMsg(BaseModel):
    """
    One-time setup.

    owner defaults to the instantiating sender. phase_policy defaults to
    the configured EngineSettings.phase_policy.
    """

    owner: Optional[Address] = None
    denom: Denomination
    phase_policy: Optional[PhasePolicy] = None


# =============================================================================
# COMMANDS
# =============================================================================

class Register(BaseModel):
    type: Literal["register"] = "register"
    identity: Address
    weight: Uint128


class Reweight(BaseModel):
    type: Literal["reweight"] = "reweight"
    identity: Address
    weight: Uint128


class Deregister(BaseModel):
    type: Literal["deregister"] = "deregister"
    identity: Address


class Deposit(BaseModel):
    """Native deposit: the value is the attached funds."""
    type: Literal["deposit"] = "deposit"


class Receive(BaseModel):
    """
    Token-contract deposit hook.

    Sent by the token contract itself (MessageInfo.sender is the token
    address); sender here is the account that moved the tokens.
    """
    type: Literal["receive"] = "receive"
    sender: Address
    amount: Uint128
    msg: Deposit = Field(default_factory=Deposit)


class Claim(BaseModel):
    """Claim the caller's own entitlement. No third-party claiming."""
    type: Literal["claim"] = "claim"


class SetPhase(BaseModel):
    type: Literal["set_phase"] = "set_phase"
    phase: Phase


class UpdateOwnership(BaseModel):
    type: Literal["update_ownership"] = "update_ownership"
    action: Literal["transfer_ownership", "accept_ownership", "renounce_ownership"]
    new_owner: Optional[Address] = None

    @model_validator(mode='after')
    def validate_new_owner(self) -> 'UpdateOwnership':
        if self.action == "transfer_ownership" and self.new_owner is None:
            raise ValueError("transfer_ownership requires new_owner")
        if self.action != "transfer_ownership" and self.new_owner is not None:
            raise ValueError(f"{self.action} does not take new_owner")
        return self


ExecuteMsg = Annotated[
    Union[Register, Reweight, Deregister, Deposit, Receive, Claim, SetPhase, UpdateOwnership],
    Field(discriminator="type"),
]


# =============================================================================
# QUERIES
# =============================================================================

class GetLedger(BaseModel):
    type: Literal["get_ledger"] = "get_ledger"


class GetMember(BaseModel):
    type: Literal["get_member"] = "get_member"
    identity: Address


class GetPendingEntitlement(BaseModel):
    type: Literal["get_pending_entitlement"] = "get_pending_entitlement"
    identity: Address


class ListMembers(BaseModel):
    type: Literal["list_members"] = "list_members"
    start_after: Optional[Address] = None
    limit: Optional[int] = Field(default=None, ge=0)


class GetConfig(BaseModel):
    type: Literal["get_config"] = "get_config"


class GetOwnership(BaseModel):
    type: Literal["get_ownership"] = "get_ownership"


QueryMsg = Annotated[
    Union[GetLedger, GetMember, GetPendingEntitlement, ListMembers, GetConfig, GetOwnership],
    Field(discriminator="type"),
]


_execute_adapter = TypeAdapter(ExecuteMsg)
_query_adapter = TypeAdapter(QueryMsg)


def parse_execute_msg(data: Union[dict, str, bytes]):
    """Parse a raw command from the host (dict or JSON)."""
    if isinstance(data, (str, bytes)):
        return _execute_adapter.validate_json(data)
    return _execute_adapter.validate_python(data)


def parse_query_msg(data: Union[dict, str, bytes]):
    """Parse a raw query from the host (dict or JSON)."""
    if isinstance(data, (str, bytes)):
        return _query_adapter.validate_json(data)
    return _query_adapter.validate_python(data)


# =============================================================================
# RESPONSES
# =============================================================================

class Attribute(BaseModel):
    key: str
    value: str


class Transfer(BaseModel):
    """A transfer executed during a command."""

    denom: Denomination
    recipient: Address
    amount: Uint128


class Response(BaseModel):
    """
    Result of a successful command.

    attributes always start with ("action", <command>).
    """

    attributes: list[Attribute] = Field(default_factory=list)
    transfers: list[Transfer] = Field(default_factory=list)

    def add_attribute(self, key: str, value) -> "Response":
        self.attributes.append(Attribute(key=key, value=str(value)))
        return self

    def attribute(self, key: str) -> Optional[str]:
        """Get the first attribute value for key."""
        for attr in self.attributes:
            if attr.key == key:
                return attr.value
        return None


class LedgerResponse(BaseModel):
    total_weight: Uint128
    accumulator: ScaledValue
    total_received: Uint128
    undistributed: Uint128
    total_claimed: Uint128
    phase: Phase


class MemberResponse(BaseModel):
    identity: Address
    weight: Uint128
    last_accumulator: ScaledValue
    settled: Uint128
    claimed: Uint128


class PendingEntitlementResponse(BaseModel):
    identity: Address
    amount: Uint128


class MemberWeight(BaseModel):
    identity: Address
    weight: Uint128


class ListMembersResponse(BaseModel):
    """
    One page of members in ascending identity order.

    next_start_after is the cursor for the following page, or None when
    this page ended the listing.
    """

    members: list[MemberWeight] = Field(default_factory=list)
    next_start_after: Optional[Address] = None
