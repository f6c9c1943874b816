"""
Abstract Transfer Interface

The engine never moves value itself. It asks the host's asset layer
(bank module for native coins, token contract for tokens) to send units
of the configured denomination out of the engine's account.

A failed transfer raises TransferError. The engine does not retry: the
whole call is rolled back and the caller decides what to do next.
"""

from abc import ABC, abstractmethod

from receipt_engine.errors import ReceiptEngineError
from receipt_engine.models.ledger import Denomination


class TransferError(ReceiptEngineError):
    """Insufficient balance, invalid recipient, or the asset layer refused."""
    kind = "transfer_error"


class TransferInterface(ABC):
    """Moves value out of the engine's account."""

    @abstractmethod
    def transfer(self, denom: Denomination, recipient: str, amount: int) -> None:
        """
        Send amount units of denom to recipient.

        Raises:
            TransferError: If the transfer cannot be completed. Nothing
                           has moved when this is raised.
        """
        pass
