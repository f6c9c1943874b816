"""
Distribution Ledger

Records deposits and computes what each member is owed, without ever
touching member records on a deposit.

HOW IT WORKS:
- A deposit advances one global number, the accumulator, by
  deposit * P / total_weight.
- A member remembers the accumulator value at its last settlement.
- What a member is owed is weight * (accumulator - checkpoint) / P.

So a deposit is O(1) no matter how many members exist. Anything that
iterates members on deposit would reintroduce the cost this avoids.

Deposits made while total_weight is zero cannot be divided; they are
held in the undistributed remainder and folded into the next deposit
made while weight exists. No value is discarded.
"""

from receipt_engine.accounting.fixed_point import (
    FixedPointAccumulator,
    checked_add,
    checked_sub,
)
from receipt_engine.models.ledger import U256_MAX, GlobalLedger, Member
from receipt_engine.services.storage import KeyValueStore
from receipt_engine.state import LEDGER


class DistributionLedger:
    """
    The global ledger record plus the operations that mutate it.

    Loaded from (and saved to) the call's store, so every call works on
    its own copy and nothing is shared between calls.
    """

    def __init__(self, store: KeyValueStore, accumulator: FixedPointAccumulator):
        self._store = store
        self._fp = accumulator
        self.state: GlobalLedger = LEDGER.load(store)

    def save(self) -> None:
        LEDGER.save(self._store, self.state)

    def deposit(self, amount: int) -> bool:
        """
        Record a deposit.

        Returns:
            True if the value was distributed, False if it was held in
            the undistributed remainder because no weight is registered.
        """
        ledger = self.state
        ledger.total_received = checked_add(ledger.total_received, amount)

        if ledger.total_weight == 0:
            ledger.undistributed = checked_add(ledger.undistributed, amount)
            return False

        pool = checked_add(amount, ledger.undistributed)
        delta = self._fp.increase(pool, ledger.total_weight)
        ledger.accumulator = checked_add(ledger.accumulator, delta, U256_MAX)
        ledger.undistributed = 0
        return True

    def preview(self, member: Member) -> int:
        """Entitlement accrued since the member's checkpoint. No mutation."""
        delta = checked_sub(self.state.accumulator, member.last_accumulator)
        return self._fp.entitlement(member.weight, delta)

    def settle(self, member: Member) -> int:
        """
        Lock in the member's accrued entitlement.

        Moves the member's checkpoint up to the current accumulator and
        returns what accrued in between. The caller decides whether the
        amount is paid out (claim) or parked in member.settled (reweight).
        """
        owed = self.preview(member)
        member.last_accumulator = self.state.accumulator
        return owed

    def add_weight(self, weight: int) -> None:
        self.state.total_weight = checked_add(self.state.total_weight, weight)

    def remove_weight(self, weight: int) -> None:
        self.state.total_weight = checked_sub(self.state.total_weight, weight)

    def record_claim(self, amount: int) -> None:
        self.state.total_claimed = checked_add(self.state.total_claimed, amount)
