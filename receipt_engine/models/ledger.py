"""
Core Data Models for Receipt Engine

These models define the records the engine persists:
1. Config - denomination, precision and phase policy (immutable)
2. Ownership - the administrator
3. GlobalLedger - the singleton distribution state
4. Member - weight plus accounting checkpoint, one per identity

DESIGN DECISION: Balances are plain Python ints range-checked to their
unsigned width. They are serialized as decimal strings in JSON so that
128-bit values survive any JSON consumer (the same convention the
original chain contracts use for Uint128).
"""

from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    StringConstraints,
)


U128_MAX = 2 ** 128 - 1
U256_MAX = 2 ** 256 - 1


# =============================================================================
# SCALAR TYPES
# =============================================================================

def _parse_uint(v: Any) -> Any:
    """Accept decimal strings (the JSON form) as well as ints."""
    if isinstance(v, bool):
        raise ValueError("Booleans are not amounts")
    if isinstance(v, str):
        v = v.strip()
        if not v.isdigit():
            raise ValueError(f"Not an unsigned integer: {v!r}")
        return int(v)
    return v


def _bounded(maximum: int, name: str):
    def check(v: int) -> int:
        if v < 0:
            raise ValueError(f"{name} cannot be negative")
        if v > maximum:
            raise ValueError(f"{name} exceeds its maximum of {maximum}")
        return v
    return check


Uint128 = Annotated[
    int,
    BeforeValidator(_parse_uint),
    AfterValidator(_bounded(U128_MAX, "u128")),
    PlainSerializer(str, return_type=str, when_used="json"),
]

# Scaled accumulator values hold u128 * P, so they get twice the width.
ScaledValue = Annotated[
    int,
    BeforeValidator(_parse_uint),
    AfterValidator(_bounded(U256_MAX, "scaled value")),
    PlainSerializer(str, return_type=str, when_used="json"),
]

Address = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=128, pattern=r"^\S+$"),
]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Phase(str, Enum):
    """
    Registration phase.

    Open -> Closed only. Deposits and claims are legal in both phases;
    registration and re-weighting only while Open.
    """
    OPEN = "open"
    CLOSED = "closed"


class PhasePolicy(str, Enum):
    """Whether the administrator may ever close the ledger."""
    WINDOWED = "windowed"
    ALWAYS_OPEN = "always_open"


class DenomKind(str, Enum):
    NATIVE = "native"   # bank-module coin, attached as funds
    TOKEN = "token"     # token contract, deposited through the Receive hook


# =============================================================================
# CONFIGURATION RECORDS
# =============================================================================

class Denomination(BaseModel):
    """
    The unit of value being distributed.

    Immutable once the engine is instantiated.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: DenomKind = Field(
        ...,
        description="Native coin or token contract"
    )
    reference: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Native denom name or token contract address"
    )

    @property
    def key(self) -> str:
        """Compact string form, stable across serializations."""
        prefix = "n" if self.kind == DenomKind.NATIVE else "c"
        return f"{prefix}{self.reference}"

    @classmethod
    def native(cls, denom: str) -> "Denomination":
        return cls(kind=DenomKind.NATIVE, reference=denom)

    @classmethod
    def token(cls, contract: str) -> "Denomination":
        return cls(kind=DenomKind.TOKEN, reference=contract)


class Config(BaseModel):
    """Singleton configuration record, written once at instantiation."""

    denom: Denomination
    precision: ScaledValue = Field(
        ...,
        description="Fixed-point precision factor P"
    )
    phase_policy: PhasePolicy = PhasePolicy.WINDOWED
    contract_name: str
    contract_version: str


class Ownership(BaseModel):
    """
    Administrative ownership.

    Transfers are two-step: the owner nominates a pending owner, who must
    accept. An owner of None means ownership was renounced.
    """

    owner: Optional[Address] = None
    pending_owner: Optional[Address] = None


# =============================================================================
# ACCOUNTING RECORDS
# =============================================================================

class GlobalLedger(BaseModel):
    """
    The singleton distribution state.

    INVARIANTS:
    - accumulator never decreases
    - accumulator only advances while total_weight > 0
    - value deposited while total_weight == 0 waits in undistributed
    """

    total_weight: Uint128 = 0
    accumulator: ScaledValue = Field(
        default=0,
        description="Cumulative value distributed per unit weight, scaled by P"
    )
    total_received: Uint128 = 0
    undistributed: Uint128 = Field(
        default=0,
        description="Value received while no weight was registered"
    )
    total_claimed: Uint128 = 0
    phase: Phase = Phase.OPEN


class Member(BaseModel):
    """
    A registered member.

    last_accumulator is the member's checkpoint: the value of the global
    accumulator at its last settlement. settled holds entitlement frozen by
    a settlement (e.g. before a reweight) that has not been paid out yet.
    """

    identity: Address
    weight: Uint128
    last_accumulator: ScaledValue = 0
    settled: Uint128 = 0
    claimed: Uint128 = Field(
        default=0,
        description="Lifetime amount paid out to this member"
    )


class Coin(BaseModel):
    """Native funds attached to a call."""
    model_config = ConfigDict(frozen=True)

    denom: str = Field(..., min_length=1)
    amount: Uint128
