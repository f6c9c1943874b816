"""Accounting core: fixed-point arithmetic, distribution ledger, member registry."""

from receipt_engine.accounting.distribution import DistributionLedger
from receipt_engine.accounting.fixed_point import (
    DEFAULT_PRECISION,
    FixedPointAccumulator,
    checked_add,
    checked_mul,
    checked_sub,
    entitlement,
    increase,
)
from receipt_engine.accounting.registry import MemberRegistry, validate_weight

__all__ = [
    "DEFAULT_PRECISION",
    "DistributionLedger",
    "FixedPointAccumulator",
    "MemberRegistry",
    "checked_add",
    "checked_mul",
    "checked_sub",
    "entitlement",
    "increase",
    "validate_weight",
]
