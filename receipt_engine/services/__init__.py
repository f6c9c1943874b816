"""Services package."""

from receipt_engine.services.bank import (
    InMemoryBank,
    TransferError,
    TransferInterface,
)
from receipt_engine.services.storage import (
    CorruptRecordError,
    InMemoryStore,
    Item,
    KeyValueStore,
    Map,
    PendingStore,
    StorageError,
)

__all__ = [
    # Transfer services
    "InMemoryBank",
    "TransferError",
    "TransferInterface",
    # Storage services
    "CorruptRecordError",
    "InMemoryStore",
    "Item",
    "KeyValueStore",
    "Map",
    "PendingStore",
    "StorageError",
]
