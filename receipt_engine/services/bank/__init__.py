"""Transfer services package."""

from receipt_engine.services.bank.interface import TransferError, TransferInterface
from receipt_engine.services.bank.memory import InMemoryBank

__all__ = ["InMemoryBank", "TransferError", "TransferInterface"]
