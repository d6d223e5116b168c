"""Tests for namespace resolution and the entry store."""

from __future__ import annotations

import pytest

from conftest import NS_0, NS_1, PREFIX, USER_ID, MemoryKeyValueStore, make_entry, seed
from steamcat.errors import DecodeError, EntryNotFoundError, NamespaceNotFoundError
from steamcat.localdb.codec import decode_value, encode_key, encode_value
from steamcat.localdb.entries import Entry, entry_from_wire, entry_to_wire
from steamcat.localdb.namespaces import NamespaceResolver, namespace_prefix
from steamcat.localdb.store import EntryStore


def stored_keys(db: MemoryKeyValueStore, namespace_key: str) -> list[str]:
    return [item[0] for item in decode_value(db.data[encode_key(namespace_key)])]


class TestWireRecords:
    def test_snake_case_mapping(self):
        entry = Entry(
            namespace_key=NS_0, key="k", timestamp=5, value="v", version="3", is_deleted=False
        )
        assert entry_to_wire(entry) == [
            "k",
            {"key": "k", "is_deleted": False, "value": "v", "timestamp": 5, "version": "3"},
        ]
        assert entry_from_wire(NS_0, entry_to_wire(entry)) == entry

    def test_unset_fields_omitted(self):
        assert entry_to_wire(make_entry("k", timestamp=1)) == ["k", {"key": "k", "timestamp": 1}]

    @pytest.mark.parametrize(
        "pair",
        [
            "not a pair",
            ["k"],
            ["k", "record"],
            ["k", {"timestamp": 1}],
            ["k", {"key": "k"}],
            ["k", {"key": "k", "timestamp": True}],
            ["k", {"key": "k", "timestamp": 1, "is_deleted": "yes"}],
            ["k", {"key": "k", "timestamp": 1, "version": 3}],
        ],
    )
    def test_malformed_records(self, pair):
        with pytest.raises(DecodeError):
            entry_from_wire(NS_0, pair)


class TestNamespaceResolver:
    def test_prefix(self):
        assert namespace_prefix(42) == (
            "_https://steamloopback.host\x00\x01U42-cloud-storage-namespace"
        )

    @pytest.mark.asyncio
    async def test_keys_in_index_order(self, db):
        seed(db, {}, indexes=[1, 2, 5])
        resolver = NamespaceResolver(db, USER_ID)
        assert await resolver.get_namespace_keys() == [
            f"{PREFIX}-1",
            f"{PREFIX}-2",
            f"{PREFIX}-5",
        ]
        assert await resolver.get_last_namespace_key() == f"{PREFIX}-5"

    @pytest.mark.asyncio
    async def test_missing_index(self, db):
        resolver = NamespaceResolver(db, USER_ID)
        with pytest.raises(NamespaceNotFoundError):
            await resolver.get_namespace_keys()
        with pytest.raises(NamespaceNotFoundError):
            await resolver.get_last_namespace_key()

    @pytest.mark.asyncio
    async def test_empty_index(self, db):
        seed(db, {}, indexes=[])
        resolver = NamespaceResolver(db, USER_ID)
        assert await resolver.get_namespace_keys() == []
        with pytest.raises(NamespaceNotFoundError):
            await resolver.get_last_namespace_key()

    @pytest.mark.asyncio
    async def test_other_user_not_visible(self, db):
        seed(db, {NS_0: []})
        with pytest.raises(NamespaceNotFoundError):
            await NamespaceResolver(db, USER_ID + 1).get_namespace_keys()

    @pytest.mark.asyncio
    async def test_malformed_index(self, db):
        db.data[encode_key(f"{PREFIX}s")] = encode_value([5])
        with pytest.raises(DecodeError):
            await NamespaceResolver(db, USER_ID).get_namespace_keys()


class TestReads:
    @pytest.mark.asyncio
    async def test_entries_for_namespace(self, db, store):
        seed(db, {NS_0: [make_entry("a", "1"), make_entry("b", is_deleted=True)]})
        entries = await store.get_entries_for_namespace(NS_0)
        assert [e.key for e in entries] == ["a", "b"]
        assert all(e.namespace_key == NS_0 for e in entries)
        assert entries[1].is_deleted is True

    @pytest.mark.asyncio
    async def test_missing_namespace_value(self, db, store):
        seed(db, {NS_0: []}, indexes=[1, 2])
        with pytest.raises(NamespaceNotFoundError):
            await store.get_entries_for_namespace(NS_1)

    @pytest.mark.asyncio
    async def test_get_entry_first_match(self, db, store):
        seed(db, {NS_0: [make_entry("a", "first"), make_entry("a", "second")]})
        entry = await store.get_entry(NS_0, "a")
        assert entry.value == "first"

    @pytest.mark.asyncio
    async def test_get_entry_missing(self, db, store):
        seed(db, {NS_0: [make_entry("a")]})
        with pytest.raises(EntryNotFoundError) as exc_info:
            await store.get_entry(NS_0, "zzz")
        assert exc_info.value.entry_key == "zzz"
        assert exc_info.value.namespace_key == NS_0
        assert "key 'zzz' in namespace" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_get_entries_concatenates_in_namespace_order(self, db, store):
        seed(db, {
            NS_0: [make_entry("a"), make_entry("b")],
            NS_1: [make_entry("c", namespace_key=NS_1)],
        })
        entries = await store.get_entries()
        assert [(e.namespace_key, e.key) for e in entries] == [
            (NS_0, "a"),
            (NS_0, "b"),
            (NS_1, "c"),
        ]


class TestWrites:
    @pytest.fixture
    def abc(self, db):
        seed(db, {
            NS_0: [make_entry("A", "a"), make_entry("B", "b"), make_entry("C", "c")],
            NS_1: [make_entry("X", "x", namespace_key=NS_1)],
        })

    @pytest.mark.asyncio
    async def test_update_replaces_in_place(self, abc, store):
        await store.update_entries_for_namespace(NS_0, [make_entry("B", "b2")])
        entries = await store.get_entries_for_namespace(NS_0)
        assert [(e.key, e.value) for e in entries] == [("A", "a"), ("B", "b2"), ("C", "c")]

    @pytest.mark.asyncio
    async def test_update_appends_new_keys(self, abc, store):
        await store.update_entries_for_namespace(
            NS_0, [make_entry("D", "d"), make_entry("A", "a2")]
        )
        entries = await store.get_entries_for_namespace(NS_0)
        assert [(e.key, e.value) for e in entries] == [
            ("A", "a2"),
            ("B", "b"),
            ("C", "c"),
            ("D", "d"),
        ]

    @pytest.mark.asyncio
    async def test_update_is_idempotent(self, abc, db, store):
        await store.update_entries_for_namespace(NS_0, [make_entry("D", "d")])
        once = db.data[encode_key(NS_0)]
        await store.update_entries_for_namespace(NS_0, [make_entry("D", "d")])
        assert db.data[encode_key(NS_0)] == once

    @pytest.mark.asyncio
    async def test_set_is_destructive(self, abc, store):
        await store.set_entries_for_namespace(NS_0, [make_entry("B", "b2")])
        entries = await store.get_entries_for_namespace(NS_0)
        assert [(e.key, e.value) for e in entries] == [("B", "b2")]

    @pytest.mark.asyncio
    async def test_set_skips_other_namespaces(self, abc, db, store):
        await store.set_entries_for_namespace(
            NS_0, [make_entry("B"), make_entry("Y", namespace_key=NS_1)]
        )
        assert stored_keys(db, NS_0) == ["B"]
        assert stored_keys(db, NS_1) == ["X"]

    @pytest.mark.asyncio
    async def test_set_rejects_unknown_namespace(self, abc, db, store):
        unknown = f"{PREFIX}-99"
        with pytest.raises(NamespaceNotFoundError):
            await store.set_entries_for_namespace(unknown, [make_entry("A", namespace_key=unknown)])
        assert encode_key(unknown) not in db.data

    @pytest.mark.asyncio
    async def test_set_entries_one_write_per_namespace(self, abc, db, store):
        db.puts.clear()
        await store.set_entries([
            make_entry("A"),
            make_entry("Y", namespace_key=NS_1),
            make_entry("B"),
        ])
        assert sorted(db.puts) == sorted([encode_key(NS_0), encode_key(NS_1)])
        assert stored_keys(db, NS_0) == ["A", "B"]
        assert stored_keys(db, NS_1) == ["Y"]

    @pytest.mark.asyncio
    async def test_update_entries_across_namespaces(self, abc, db, store):
        await store.update_entries([
            make_entry("Z", "z", namespace_key=NS_1),
            make_entry("C", "c2"),
        ])
        assert stored_keys(db, NS_0) == ["A", "B", "C"]
        assert stored_keys(db, NS_1) == ["X", "Z"]
        assert (await store.get_entry(NS_0, "C")).value == "c2"

    @pytest.mark.asyncio
    async def test_set_entry_for_namespace_merges(self, abc, db, store):
        await store.set_entry_for_namespace(NS_0, make_entry("E", "e"))
        assert stored_keys(db, NS_0) == ["A", "B", "C", "E"]

    @pytest.mark.asyncio
    async def test_delete_writes_tombstone(self, db, store):
        seed(db, {NS_0: [make_entry("A", "a", version="7"), make_entry("B", "b")]})
        assert await store.delete_entry_for_namespace(NS_0, "A") is True

        entry = await store.get_entry(NS_0, "A")
        assert entry.is_deleted is True
        assert entry.value is None
        assert entry.version == "7"
        assert entry.timestamp > 1700000000
        assert stored_keys(db, NS_0) == ["A", "B"]

    @pytest.mark.asyncio
    async def test_delete_missing_entry_returns_false(self, abc, db, store):
        before = dict(db.data)
        assert await store.delete_entry_for_namespace(NS_0, "nope") is False
        assert db.data == before

    @pytest.mark.asyncio
    async def test_delete_unreadable_namespace_returns_false(self, store):
        assert await store.delete_entry_for_namespace(NS_0, "A") is False


class TestLifecycle:
    def test_close_closes_handle(self, db, store):
        store.close()
        assert db.closed

    @pytest.mark.asyncio
    async def test_async_context_manager(self, db):
        async with EntryStore(db, USER_ID) as store:
            assert store.user_id == USER_ID
        assert db.closed


class TestLevelDb:
    @pytest.mark.asyncio
    async def test_round_trip_through_leveldb(self, tmp_path):
        pytest.importorskip("plyvel")
        path = tmp_path / "leveldb"
        async with EntryStore.open(path, USER_ID, create_if_missing=True) as store:
            memory = MemoryKeyValueStore()
            seed(memory, {NS_0: [make_entry("A", "a")]})
            for key, value in memory.data.items():
                store._db.put(key, value)

            await store.set_entry_for_namespace(NS_0, make_entry("B", "b"))
            entries = await store.get_entries()
        assert [(e.key, e.value) for e in entries] == [("A", "a"), ("B", "b")]

    def test_second_open_fails_while_locked(self, tmp_path):
        plyvel = pytest.importorskip("plyvel")
        path = tmp_path / "leveldb"
        store = EntryStore.open(path, USER_ID, create_if_missing=True)
        try:
            with pytest.raises(plyvel.IOError):
                EntryStore.open(path, USER_ID)
        finally:
            store.close()
