"""Entry store — CRUD over the entries of Steam's local storage namespaces.

Each namespace is persisted as a single aggregate value, so every write is
a read-then-write of the whole namespace. Nothing here is atomic: two
writers targeting the same namespace race, and a cross-namespace write
that fails halfway leaves the earlier namespaces written.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from steamcat.errors import EntryNotFoundError, NamespaceNotFoundError
from steamcat.localdb.backend import KeyValueStore, LevelDbStore
from steamcat.localdb.codec import decode_value, encode_key, encode_value
from steamcat.localdb.entries import (
    Entry,
    create_timestamp,
    entries_from_wire,
    entry_to_wire,
)
from steamcat.localdb.namespaces import NamespaceResolver

logger = logging.getLogger(__name__)


def _group_by_namespace(entries: Iterable[Entry]) -> dict[str, list[Entry]]:
    """Partition entries by namespace key, in first-seen namespace order."""
    groups: dict[str, list[Entry]] = {}
    for entry in entries:
        groups.setdefault(entry.namespace_key, []).append(entry)
    return groups


class EntryStore:
    """Reads and writes entries in a Steam user's local storage.

    The store owns *db*: closing the store closes the handle.
    """

    def __init__(self, db: KeyValueStore, user_id: int) -> None:
        self._db = db
        self.user_id = user_id
        self.namespaces = NamespaceResolver(db, user_id)

    @classmethod
    def open(
        cls, path: Path, user_id: int, *, create_if_missing: bool = False
    ) -> EntryStore:
        return cls(LevelDbStore(path, create_if_missing=create_if_missing), user_id)

    async def __aenter__(self) -> EntryStore:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._db.close()

    # ── Namespaces ───────────────────────────────────────────

    async def get_namespace_keys(self) -> list[str]:
        return await self.namespaces.get_namespace_keys()

    async def get_last_namespace_key(self) -> str:
        return await self.namespaces.get_last_namespace_key()

    async def _require_namespace(self, namespace_key: str) -> None:
        if namespace_key not in await self.get_namespace_keys():
            raise NamespaceNotFoundError(
                f"Namespace {namespace_key!r} is not listed in the namespace index"
            )

    # ── Reads ────────────────────────────────────────────────

    async def get_entries_for_namespace(self, namespace_key: str) -> list[Entry]:
        raw = await asyncio.to_thread(self._db.get, encode_key(namespace_key))
        if raw is None:
            raise NamespaceNotFoundError(f"Namespace {namespace_key!r} has no value")

        entries = entries_from_wire(namespace_key, decode_value(raw))
        logger.debug("Read %d entries from %r", len(entries), namespace_key)
        return entries

    async def get_entry(self, namespace_key: str, entry_key: str) -> Entry:
        """Return the first entry with *entry_key* in the namespace."""
        for entry in await self.get_entries_for_namespace(namespace_key):
            if entry.key == entry_key:
                return entry
        raise EntryNotFoundError(namespace_key, entry_key)

    async def get_entries(self) -> list[Entry]:
        """Return the entries of every namespace, in namespace order."""
        namespace_keys = await self.get_namespace_keys()
        results = await asyncio.gather(
            *(self.get_entries_for_namespace(key) for key in namespace_keys)
        )
        return [entry for entries in results for entry in entries]

    # ── Writes ───────────────────────────────────────────────

    async def set_entries_for_namespace(
        self, namespace_key: str, entries: Iterable[Entry]
    ) -> None:
        """Replace the namespace's content with *entries*.

        Entries belonging to another namespace are skipped. Anything stored in
        the namespace but not passed here is discarded.
        """
        await self._require_namespace(namespace_key)

        items = [
            entry_to_wire(entry)
            for entry in entries
            if entry.namespace_key == namespace_key
        ]
        data = encode_value(items)
        await asyncio.to_thread(self._db.put, encode_key(namespace_key), data)
        logger.debug("Wrote %d entries to %r", len(items), namespace_key)

    async def update_entries_for_namespace(
        self, namespace_key: str, entries: Iterable[Entry]
    ) -> None:
        """Merge *entries* into the namespace by key.

        An existing entry with the same key is replaced in place; new keys are
        appended at the end. Untouched entries keep their position.
        """
        merged = await self.get_entries_for_namespace(namespace_key)
        for entry in entries:
            for i, existing in enumerate(merged):
                if existing.key == entry.key:
                    merged[i] = entry
                    break
            else:
                merged.append(entry)

        await self.set_entries_for_namespace(namespace_key, merged)

    async def set_entries(self, entries: Iterable[Entry]) -> None:
        """Replace the content of every namespace that *entries* touch."""
        groups = _group_by_namespace(entries)
        await asyncio.gather(
            *(
                self.set_entries_for_namespace(namespace_key, group)
                for namespace_key, group in groups.items()
            )
        )

    async def update_entries(self, entries: Iterable[Entry]) -> None:
        """Merge entries into each namespace they belong to."""
        groups = _group_by_namespace(entries)
        await asyncio.gather(
            *(
                self.update_entries_for_namespace(namespace_key, group)
                for namespace_key, group in groups.items()
            )
        )

    async def set_entry_for_namespace(self, namespace_key: str, entry: Entry) -> None:
        await self.update_entries_for_namespace(namespace_key, [entry])

    async def delete_entry_for_namespace(
        self, namespace_key: str, entry_key: str
    ) -> bool:
        """Write a tombstone for the entry.

        Returns False if the entry could not be read, True once the tombstone
        is written.
        """
        try:
            entry = await self.get_entry(namespace_key, entry_key)
        except Exception as e:
            logger.warning(
                "Not deleting %r from %r: %s", entry_key, namespace_key, e
            )
            return False

        tombstone = Entry(
            namespace_key=namespace_key,
            key=entry_key,
            timestamp=create_timestamp(),
            version=entry.version,
            is_deleted=True,
        )
        await self.set_entry_for_namespace(namespace_key, tombstone)
        return True
