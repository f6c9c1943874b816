"""
Storage Services Package

Provides the abstract key-value interface the host implements, an
in-memory implementation, the per-call transaction overlay, and typed
record access on top of them.
"""

from receipt_engine.services.storage.interface import (
    CorruptRecordError,
    KeyValueStore,
    StorageError,
)
from receipt_engine.services.storage.memory import InMemoryStore
from receipt_engine.services.storage.records import Item, Map
from receipt_engine.services.storage.transaction import PendingStore

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "CorruptRecordError",
    "StorageError",
    # Implementations
    "InMemoryStore",
    "PendingStore",
    # Typed access
    "Item",
    "Map",
]
