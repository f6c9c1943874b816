"""
In-Memory Storage Implementation

Used by tests and local runs in place of the host's storage.

A dict holds the values and a sorted list holds the keys, so range scans
are ordered without sorting on every call.
"""

from bisect import bisect_left, bisect_right, insort
from typing import Iterator, Optional

from receipt_engine.services.storage.interface import KeyValueStore


class InMemoryStore(KeyValueStore):
    """Ordered in-memory key-value store."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self._keys: list[str] = sorted(self._data)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if key not in self._data:
            insort(self._keys, key)
        self._data[key] = value

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            del self._keys[bisect_left(self._keys, key)]

    def range(
        self,
        prefix: str,
        start_after: Optional[str] = None,
    ) -> Iterator[tuple[str, str]]:
        if start_after is None:
            index = bisect_left(self._keys, prefix)
        else:
            index = bisect_right(self._keys, prefix + start_after)

        while index < len(self._keys):
            key = self._keys[index]
            if not key.startswith(prefix):
                return
            yield key, self._data[key]
            # Re-seek from the last key so writes during iteration are safe
            index = bisect_right(self._keys, key)

    def snapshot(self) -> dict[str, str]:
        """Copy of all stored data."""
        return dict(self._data)

    def __len__(self) -> int:
        return len(self._data)
