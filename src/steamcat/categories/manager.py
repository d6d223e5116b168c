"""Reads and writes categories through the entry store."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from steamcat.categories.records import (
    COLLECTION_PREFIX,
    Category,
    decode_category_data,
    encode_category_data,
)
from steamcat.localdb.entries import Entry, create_timestamp
from steamcat.localdb.store import EntryStore

if TYPE_CHECKING:
    from steamcat.config import SteamcatConfig

logger = logging.getLogger(__name__)


def category_from_entry(entry: Entry) -> Category:
    return Category(
        namespace_key=entry.namespace_key,
        entry_key=entry.key,
        is_deleted=entry.is_deleted,
        version=entry.version,
        data=decode_category_data(entry.value) if entry.value else None,
    )


def category_to_entry(category: Category, default_namespace_key: str) -> Entry:
    return Entry(
        namespace_key=category.namespace_key or default_namespace_key,
        key=category.entry_key,
        version=category.version,
        value=encode_category_data(category.data) if category.data else None,
        timestamp=category.timestamp or create_timestamp(),
        is_deleted=category.is_deleted,
    )


class CategoryManager:
    """Category view over a Steam user's local storage.

    Deleted categories are returned like any other; check `is_deleted`.
    """

    def __init__(self, store: EntryStore) -> None:
        self.store = store

    @classmethod
    def open(cls, db_path: Path, user_id: int) -> CategoryManager:
        logger.info("Opening Steam local storage %s for user %s", db_path, user_id)
        return cls(EntryStore.open(db_path, user_id))

    @classmethod
    def from_config(cls, config: SteamcatConfig) -> CategoryManager:
        db_path, user_id = config.db_path, config.user_id
        logger.info("Opening Steam local storage %s for user %s", db_path, user_id)
        return cls(
            EntryStore.open(
                db_path,
                user_id,
                create_if_missing=config.database.create_if_missing,
            )
        )

    async def __aenter__(self) -> CategoryManager:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.store.close()
        logger.info("Closed Steam local storage")

    async def get_categories(self) -> list[Category]:
        entries = await self.store.get_entries()
        return [
            category_from_entry(entry)
            for entry in entries
            if entry.key.startswith(COLLECTION_PREFIX)
        ]

    async def set_categories(self, categories: Iterable[Category]) -> None:
        """Merge *categories* into storage.

        Categories never written before go to the newest namespace.
        """
        namespace_key = await self.store.get_last_namespace_key()
        entries = [category_to_entry(category, namespace_key) for category in categories]
        await self.store.update_entries(entries)
        logger.debug("Wrote %d categories", len(entries))
