"""
Transaction Overlay

DESIGN DECISION: Each engine call runs against a PendingStore wrapped
around the backing store. Reads fall through to the base, writes are
buffered. Only after every fallible step of the call (including external
transfers) has succeeded does the engine commit the buffer.

If anything raises, the buffer is discarded and the backing store never
saw a single write. This is what makes calls all-or-nothing.
"""

from typing import Iterator, Optional

from receipt_engine.services.storage.interface import KeyValueStore


_DELETED = None


class PendingStore(KeyValueStore):
    """Write-buffering overlay over another store."""

    def __init__(self, base: KeyValueStore):
        self._base = base
        self._writes: dict[str, Optional[str]] = {}

    def get(self, key: str) -> Optional[str]:
        if key in self._writes:
            return self._writes[key]
        return self._base.get(key)

    def set(self, key: str, value: str) -> None:
        self._writes[key] = value

    def remove(self, key: str) -> None:
        self._writes[key] = _DELETED

    def range(
        self,
        prefix: str,
        start_after: Optional[str] = None,
    ) -> Iterator[tuple[str, str]]:
        """Merge the base scan with buffered writes, buffered writes winning."""
        lower = prefix + start_after if start_after is not None else None
        pending = sorted(
            key for key in self._writes
            if key.startswith(prefix) and (lower is None or key > lower)
        )
        base_iter = self._base.range(prefix, start_after)
        base_item = next(base_iter, None)
        i = 0

        while base_item is not None or i < len(pending):
            if i < len(pending) and (base_item is None or pending[i] <= base_item[0]):
                key = pending[i]
                i += 1
                if base_item is not None and base_item[0] == key:
                    base_item = next(base_iter, None)
                value = self._writes[key]
                if value is not _DELETED:
                    yield key, value
            else:
                yield base_item
                base_item = next(base_iter, None)

    def commit(self) -> None:
        """Apply buffered writes to the base store."""
        for key, value in self._writes.items():
            if value is _DELETED:
                self._base.remove(key)
            else:
                self._base.set(key, value)
        self._writes.clear()

    def discard(self) -> None:
        self._writes.clear()
