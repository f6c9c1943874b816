"""
Error Hierarchy for Receipt Engine

Every failure names a specific kind plus the precondition that was violated.
Callers can branch on the exception class or on the stable ``kind`` string.

Two families:
- User errors: the request was refused, state is unchanged.
- Invariant violations: arithmetic guards tripped. These are defects,
  never expected outcomes, and are audited at CRITICAL severity.
"""


class ReceiptEngineError(Exception):
    """Base exception for all receipt engine failures."""

    kind = "receipt_engine_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class Unauthorized(ReceiptEngineError):
    """Caller lacks rights, or the phase forbids the operation."""
    kind = "unauthorized"


class NotFound(ReceiptEngineError):
    """Referenced member or record does not exist."""
    kind = "not_found"


class AlreadyRegistered(ReceiptEngineError):
    kind = "already_registered"


class InvalidWeight(ReceiptEngineError):
    """Weight is not an unsigned 128-bit integer."""
    kind = "invalid_weight"


class InvalidTransition(ReceiptEngineError):
    """Phase change not allowed by the state machine or phase policy."""
    kind = "invalid_transition"


class NothingToClaim(ReceiptEngineError):
    kind = "nothing_to_claim"


class MissingPayment(ReceiptEngineError):
    """Deposit carried no value."""
    kind = "missing_payment"


class InvalidDenom(ReceiptEngineError):
    """Deposit carried value in a denomination other than the configured one."""
    kind = "invalid_denom"


class InvalidLimit(ReceiptEngineError):
    kind = "invalid_limit"


class InvariantViolation(ReceiptEngineError):
    """
    A core arithmetic invariant was violated.

    These indicate a defect in the engine (or a ledger driven past its
    numeric range), not a user mistake.
    """
    kind = "invariant_violation"


class DivisionByZero(InvariantViolation):
    kind = "division_by_zero"


class ArithmeticOverflow(InvariantViolation):
    kind = "arithmetic_overflow"
