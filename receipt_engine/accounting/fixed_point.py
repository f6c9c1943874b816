"""
Fixed-Point Accumulator Arithmetic

"Value per unit weight" is fractional, so it is tracked as an integer
numerator scaled by a precision factor P (10**18 by default). Everything
here is unsigned, floor-divided and overflow-checked:

    increase(deposit, total_weight)   = deposit * P // total_weight
    entitlement(weight, delta)        = weight * delta // P

Floor division means each member's entitlement rounds down, so the sum of
entitlements for a deposit never exceeds the deposit. The only drift is
rounding dust, never over-distribution.

Overflow raises ArithmeticOverflow instead of wrapping or saturating:
a silently wrapped balance would corrupt every later distribution.
"""

from receipt_engine.errors import ArithmeticOverflow, DivisionByZero
from receipt_engine.models.ledger import U128_MAX, U256_MAX


DEFAULT_PRECISION = 10 ** 18


def checked_add(a: int, b: int, maximum: int = U128_MAX) -> int:
    result = a + b
    if result > maximum:
        raise ArithmeticOverflow(f"Overflow: {a} + {b} exceeds {maximum}")
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticOverflow(f"Underflow: {a} - {b} is negative")
    return a - b


def checked_mul(a: int, b: int, maximum: int = U128_MAX) -> int:
    result = a * b
    if result > maximum:
        raise ArithmeticOverflow(f"Overflow: {a} * {b} exceeds {maximum}")
    return result


def increase(total_deposit: int, total_weight: int, precision: int = DEFAULT_PRECISION) -> int:
    """
    Accumulator increment for distributing total_deposit over total_weight.

    Raises:
        DivisionByZero: If total_weight is zero. Callers route such
                        deposits to the undistributed remainder instead.
        ArithmeticOverflow: If the scaled deposit exceeds 256 bits.
    """
    if total_weight == 0:
        raise DivisionByZero("Cannot distribute over zero total weight")
    return checked_mul(total_deposit, precision, U256_MAX) // total_weight


def entitlement(weight: int, delta_accumulator: int, precision: int = DEFAULT_PRECISION) -> int:
    """
    Value owed to weight for an accumulator advance of delta_accumulator.

    Raises:
        ArithmeticOverflow: If the product exceeds 256 bits or the
                            result does not fit in 128 bits.
    """
    owed = checked_mul(weight, delta_accumulator, U256_MAX) // precision
    if owed > U128_MAX:
        raise ArithmeticOverflow(f"Entitlement {owed} exceeds u128")
    return owed


class FixedPointAccumulator:
    """
    The two accumulator operations bound to one precision factor.

    The precision is fixed per ledger (stored in Config) so existing
    accumulator values are never reinterpreted.
    """

    def __init__(self, precision: int = DEFAULT_PRECISION):
        if precision <= 0:
            raise ValueError("Precision must be positive")
        self.precision = precision

    def increase(self, total_deposit: int, total_weight: int) -> int:
        return increase(total_deposit, total_weight, self.precision)

    def entitlement(self, weight: int, delta_accumulator: int) -> int:
        return entitlement(weight, delta_accumulator, self.precision)
