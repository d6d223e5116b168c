"""Shared fixtures: an in-memory key-value store seeded like Steam's."""

from __future__ import annotations

import pytest

from steamcat.localdb.codec import encode_key, encode_value
from steamcat.localdb.entries import Entry, entry_to_wire
from steamcat.localdb.namespaces import namespace_prefix
from steamcat.localdb.store import EntryStore

USER_ID = 12345678
PREFIX = namespace_prefix(USER_ID)
NS_0 = f"{PREFIX}-1"
NS_1 = f"{PREFIX}-2"


class MemoryKeyValueStore:
    def __init__(self) -> None:
        self.data: dict[bytes, bytes] = {}
        self.closed = False
        self.puts: list[bytes] = []

    def get(self, key: bytes) -> bytes | None:
        return self.data.get(key)

    def put(self, key: bytes, value: bytes) -> None:
        self.puts.append(key)
        self.data[key] = value

    def close(self) -> None:
        self.closed = True


def seed(db: MemoryKeyValueStore, namespaces: dict[str, list[Entry]], indexes=None) -> None:
    """Write a namespace index and one aggregate per namespace."""
    indexes = indexes if indexes is not None else [
        int(key.rsplit("-", 1)[1]) for key in namespaces
    ]
    db.data[encode_key(f"{PREFIX}s")] = encode_value([[i, str(i)] for i in indexes])
    for key, entries in namespaces.items():
        db.data[encode_key(key)] = encode_value([entry_to_wire(e) for e in entries])


def make_entry(key: str, value=None, namespace_key: str = NS_0, **kwargs) -> Entry:
    kwargs.setdefault("timestamp", 1700000000)
    return Entry(namespace_key=namespace_key, key=key, value=value, **kwargs)


@pytest.fixture
def db() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def store(db: MemoryKeyValueStore) -> EntryStore:
    return EntryStore(db, USER_ID)
