"""Tests for the fixed-point accumulator arithmetic."""

import pytest

from receipt_engine.accounting import (
    FixedPointAccumulator,
    checked_add,
    checked_mul,
    checked_sub,
    entitlement,
    increase,
)
from receipt_engine.errors import ArithmeticOverflow, DivisionByZero, InvariantViolation
from receipt_engine.models import U128_MAX, U256_MAX


P = 10 ** 18


class TestIncrease:
    """Tests for increase()."""

    def test_even_split(self):
        """400 over weight 4 is 100 per unit weight, scaled."""
        assert increase(400, 4, P) == 100 * P

    def test_floors(self):
        """Division truncates toward zero."""
        assert increase(1, 3, 10) == 3

    def test_zero_weight_raises_division_by_zero(self):
        """Test that zero total weight raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            increase(100, 0, P)

    def test_division_by_zero_is_an_invariant_violation(self):
        """DivisionByZero is a defect, not a user error."""
        with pytest.raises(InvariantViolation):
            increase(100, 0, P)

    def test_scaled_overflow(self):
        """Test that a scaled deposit beyond 256 bits overflows."""
        with pytest.raises(ArithmeticOverflow):
            increase(U256_MAX, 1, 2)

    def test_largest_u128_deposit_fits(self):
        """u128 * 10**18 fits in the scaled width."""
        assert increase(U128_MAX, 1, P) == U128_MAX * P


class TestEntitlement:
    """Tests for entitlement()."""

    def test_basic(self):
        """Test a simple entitlement."""
        assert entitlement(3, 100 * P, P) == 300

    def test_floors_to_zero(self):
        """Test that entitlement rounds down."""
        assert entitlement(1, 3, 10) == 0

    def test_zero_weight_accrues_nothing(self):
        """Test that zero weight is owed nothing."""
        assert entitlement(0, 10 ** 30, P) == 0

    def test_result_beyond_u128_overflows(self):
        """Test that an entitlement beyond u128 overflows."""
        with pytest.raises(ArithmeticOverflow):
            entitlement(U128_MAX, 2 * P, P)

    def test_split_never_exceeds_deposit(self):
        """Summed floor entitlements stay within rounding dust of the deposit."""
        weights = [1, 2, 4]
        delta = increase(100, sum(weights), P)
        total = sum(entitlement(w, delta, P) for w in weights)
        assert total <= 100
        assert total >= 100 - len(weights)


class TestCheckedHelpers:
    """Tests for checked unsigned arithmetic."""

    def test_add_overflow(self):
        """Test checked_add at the u128 bound."""
        with pytest.raises(ArithmeticOverflow):
            checked_add(U128_MAX, 1)

    def test_add_custom_bound(self):
        """Test checked_add with an explicit bound."""
        assert checked_add(U128_MAX, 1, U256_MAX) == U128_MAX + 1

    def test_sub_underflow(self):
        """Test that checked_sub refuses to go negative."""
        with pytest.raises(ArithmeticOverflow, match="Underflow"):
            checked_sub(1, 2)

    def test_mul_overflow(self):
        """Test checked_mul at the u128 bound."""
        with pytest.raises(ArithmeticOverflow):
            checked_mul(U128_MAX, 2)


class TestFixedPointAccumulator:
    """Tests for the precision-bound wrapper."""

    def test_uses_its_precision(self):
        """Test that the accumulator applies its own precision."""
        fp = FixedPointAccumulator(precision=100)
        assert fp.increase(10, 4) == 250
        assert fp.entitlement(4, 250) == 10

    def test_rejects_non_positive_precision(self):
        """Test that precision must be positive."""
        with pytest.raises(ValueError):
            FixedPointAccumulator(precision=0)
