"""
In-Memory Bank

Stands in for the host's asset layer in tests and local runs. Tracks
balances per (denomination, address) and pays out of a single account,
the engine's own address.
"""

from collections import defaultdict
from typing import Optional

from receipt_engine.models.ledger import Denomination
from receipt_engine.services.bank.interface import TransferError, TransferInterface


class InMemoryBank(TransferInterface):
    """
    Balance book for any number of denominations.

    Usage:
        bank = InMemoryBank(account="engine")
        bank.mint(denom, "alice", 1_000)
        bank.send(denom, "alice", "engine", 400)   # host attaching funds
        bank.transfer(denom, "bob", 100)            # engine paying out
    """

    def __init__(self, account: str, blocked: Optional[set[str]] = None):
        self.account = account
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._blocked: set[str] = set(blocked or ())

    def balance(self, denom: Denomination, address: str) -> int:
        return self._balances.get((denom.key, address), 0)

    def mint(self, denom: Denomination, address: str, amount: int) -> None:
        self._balances[(denom.key, address)] += amount

    def block(self, address: str) -> None:
        """Make address an invalid recipient."""
        self._blocked.add(address)

    def unblock(self, address: str) -> None:
        self._blocked.discard(address)

    def send(self, denom: Denomination, sender: str, recipient: str, amount: int) -> None:
        """Move amount between two arbitrary accounts."""
        if amount < 0:
            raise TransferError(f"Cannot transfer a negative amount: {amount}")
        if not recipient or not recipient.strip() or recipient in self._blocked:
            raise TransferError(f"Invalid recipient: {recipient!r}")
        available = self.balance(denom, sender)
        if available < amount:
            raise TransferError(
                f"Insufficient balance: {sender} holds {available} {denom.key}, needs {amount}"
            )
        self._balances[(denom.key, sender)] = available - amount
        self._balances[(denom.key, recipient)] += amount

    def transfer(self, denom: Denomination, recipient: str, amount: int) -> None:
        self.send(denom, self.account, recipient, amount)
