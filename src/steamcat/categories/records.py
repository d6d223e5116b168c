"""Category data model and collection payload encoding."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from steamcat.errors import MalformedCategoryError

COLLECTION_PREFIX = "user-collections."
COLLECTION_ID_PREFIX = "ssg-"


@dataclass
class CategoryData:
    """Collection payload as Steam shows it in the library UI."""

    id: str
    name: str
    added: list[int] | None = None
    removed: list[int] | None = None
    # Dynamic collection rules; carried through untouched.
    filter_spec: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.added is not None:
            data["added"] = self.added
        if self.removed is not None:
            data["removed"] = self.removed
        if self.filter_spec is not None:
            data["filterSpec"] = self.filter_spec
        return data


@dataclass
class Category:
    """A collection and where it lives in the store.

    `namespace_key` and `version` are None only for categories that have never
    been written; once read from storage they must be passed back unchanged.
    """

    entry_key: str
    namespace_key: str | None = None
    is_deleted: bool | None = None
    version: str | None = None
    timestamp: int | None = None
    data: CategoryData | None = None


def create_collection_id(name: str) -> str:
    """Return the collection id slug for a category name."""
    return COLLECTION_ID_PREFIX + re.sub(r"\s+", "-", name)


def create_collection_key(name: str) -> str:
    """Return the entry key for a category name."""
    return COLLECTION_PREFIX + create_collection_id(name)


def _game_ids(payload: dict, field: str) -> list[int] | None:
    value = payload.get(field)
    if value is None:
        return None
    if not isinstance(value, list) or not all(
        isinstance(item, int) and not isinstance(item, bool) for item in value
    ):
        raise MalformedCategoryError(
            f"Collection '{payload.get('id')}' has a non-integer '{field}' list"
        )
    return value


def decode_category_data(text: Any) -> CategoryData:
    """Decode a collection entry value.

    Raises MalformedCategoryError when the payload is not a JSON object with
    a truthy `id` and `name`.
    """
    if not isinstance(text, str):
        raise MalformedCategoryError(
            f"Collection value is {type(text).__name__}, expected a JSON string"
        )
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedCategoryError(f"Collection value is not JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedCategoryError("Collection value is not a JSON object")
    if not payload.get("id") or not payload.get("name"):
        raise MalformedCategoryError(
            "Unable to decode collection data; missing 'id' or 'name'"
        )

    return CategoryData(
        id=payload["id"],
        name=payload["name"],
        added=_game_ids(payload, "added"),
        removed=_game_ids(payload, "removed"),
        filter_spec=payload.get("filterSpec"),
    )


def encode_category_data(data: CategoryData) -> str:
    return json.dumps(data.to_dict(), ensure_ascii=False, separators=(",", ":"))
