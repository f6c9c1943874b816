"""
Typed Record Access

Item and Map give pydantic-typed access on top of any KeyValueStore,
so the engine never handles raw strings:

    LEDGER = Item("ledger", GlobalLedger)
    MEMBERS = Map("members", Member)

    ledger = LEDGER.load(store)
    MEMBERS.save(store, "alice", member)

Records are stored as their JSON form (model_dump_json).
"""

from typing import Generic, Iterator, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from receipt_engine.errors import NotFound
from receipt_engine.services.storage.interface import CorruptRecordError, KeyValueStore


ModelT = TypeVar("ModelT", bound=BaseModel)


def _decode(model: Type[ModelT], key: str, raw: str) -> ModelT:
    try:
        return model.model_validate_json(raw)
    except ValidationError as e:
        raise CorruptRecordError(f"Record at {key!r} is not a valid {model.__name__}: {e}")


class Item(Generic[ModelT]):
    """A singleton record stored under one key."""

    def __init__(self, key: str, model: Type[ModelT]):
        self.key = key
        self.model = model

    def may_load(self, store: KeyValueStore) -> Optional[ModelT]:
        raw = store.get(self.key)
        if raw is None:
            return None
        return _decode(self.model, self.key, raw)

    def load(self, store: KeyValueStore) -> ModelT:
        """Load the record, raising NotFound if it was never saved."""
        value = self.may_load(store)
        if value is None:
            raise NotFound(f"{self.model.__name__} record not found")
        return value

    def save(self, store: KeyValueStore, value: ModelT) -> None:
        store.set(self.key, value.model_dump_json())

    def exists(self, store: KeyValueStore) -> bool:
        return store.has(self.key)


class Map(Generic[ModelT]):
    """
    A family of records keyed by string, stored under namespace + ":".

    Iteration is in ascending key order.
    """

    def __init__(self, namespace: str, model: Type[ModelT]):
        self.namespace = namespace
        self.prefix = f"{namespace}:"
        self.model = model

    def _key(self, key: str) -> str:
        return self.prefix + key

    def may_load(self, store: KeyValueStore, key: str) -> Optional[ModelT]:
        raw = store.get(self._key(key))
        if raw is None:
            return None
        return _decode(self.model, self._key(key), raw)

    def load(self, store: KeyValueStore, key: str) -> ModelT:
        value = self.may_load(store, key)
        if value is None:
            raise NotFound(f"{self.model.__name__} not found: {key}")
        return value

    def has(self, store: KeyValueStore, key: str) -> bool:
        return store.has(self._key(key))

    def save(self, store: KeyValueStore, key: str, value: ModelT) -> None:
        store.set(self._key(key), value.model_dump_json())

    def remove(self, store: KeyValueStore, key: str) -> None:
        store.remove(self._key(key))

    def range(
        self,
        store: KeyValueStore,
        start_after: Optional[str] = None,
    ) -> Iterator[tuple[str, ModelT]]:
        """Lazily iterate (key, record) pairs after start_after."""
        for full_key, raw in store.range(self.prefix, start_after):
            yield full_key[len(self.prefix):], _decode(self.model, full_key, raw)
