"""In-memory editing of a category collection."""

from __future__ import annotations

import logging

from steamcat.categories.records import (
    Category,
    CategoryData,
    create_collection_id,
    create_collection_key,
)
from steamcat.errors import DuplicateCategoryError

logger = logging.getLogger(__name__)


class CategoryEditor:
    """Finds, creates and fills categories without touching storage.

    The list passed in is edited in place; hand it back to
    `CategoryManager.set_categories()` to persist the result.
    """

    def __init__(self, categories: list[Category]) -> None:
        self._categories = categories

    @property
    def categories(self) -> list[Category]:
        return self._categories

    def get_categories(self) -> list[Category]:
        return self._categories

    def find_category_by_name(self, name: str) -> Category | None:
        for category in self._categories:
            if category.data is not None and category.data.name == name:
                return category
        return None

    def create_category(self, name: str, game_ids: list[int]) -> Category:
        if self.find_category_by_name(name) is not None:
            raise DuplicateCategoryError(name)

        category = Category(
            entry_key=create_collection_key(name),
            data=CategoryData(
                id=create_collection_id(name),
                name=name,
                added=list(game_ids) if game_ids else None,
            ),
        )
        self._categories.append(category)
        logger.info("Created category %r with %d games", name, len(game_ids))
        return category

    def _ensure_data(self, category: Category, name: str) -> CategoryData:
        if category.data is None:
            category.data = CategoryData(id=create_collection_id(name), name=name)
        return category.data

    def add_games_for_category(self, name: str, game_ids: list[int]) -> Category:
        """Add games to a category, creating the category if needed."""
        category = self.find_category_by_name(name)
        if category is None:
            return self.create_category(name, game_ids)

        if category.is_deleted:
            category.is_deleted = None

        for game_id in game_ids:
            data = self._ensure_data(category, name)
            if data.added is None:
                data.added = []
            if game_id not in data.added:
                data.added.append(game_id)
        return category

    def set_games_for_category(self, name: str, game_ids: list[int]) -> Category:
        """Replace a category's explicitly added games."""
        category = self.find_category_by_name(name)
        if category is None:
            return self.create_category(name, game_ids)

        if category.is_deleted:
            category.is_deleted = None

        data = self._ensure_data(category, name)
        data.added = list(game_ids)
        return category
