"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run against whatever key-value store the host provides
2. Use in-memory storage for testing
3. Layer a transaction overlay on top without the engine noticing

The interface is intentionally tiny - get, set, remove and an ordered
range scan. Values are opaque strings; typed access lives in records.py.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional


class KeyValueStore(ABC):
    """
    Abstract interface for the host's key-value storage.

    Keys are compared as plain strings; range scans return keys in
    ascending order.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Retrieve a value.

        Returns:
            The stored value, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any existing value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key. Removing an absent key is a no-op."""
        pass

    @abstractmethod
    def range(
        self,
        prefix: str,
        start_after: Optional[str] = None,
    ) -> Iterator[tuple[str, str]]:
        """
        Iterate over keys starting with prefix, ascending.

        Args:
            prefix: Only keys beginning with this prefix are returned
            start_after: If given, only keys strictly greater than
                         prefix + start_after are returned

        Returns:
            Lazy iterator of (key, value) pairs. Each call starts a new,
            independent scan.
        """
        pass

    def has(self, key: str) -> bool:
        return self.get(key) is not None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptRecordError(StorageError):
    """A stored value could not be decoded into its record type."""
    pass
