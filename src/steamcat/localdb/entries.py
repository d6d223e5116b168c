"""Entry model and its mapping to the records persisted in a namespace."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any

from steamcat.errors import DecodeError


def create_timestamp() -> int:
    """Current time in whole epoch seconds, rounded up."""
    return math.ceil(time.time())


@dataclass
class Entry:
    """One record inside a namespace.

    `key` is unique within a namespace only; `namespace_key` locates it.
    `is_deleted=None` means the same as False. A deleted entry is a soft
    tombstone and is still returned by reads.
    """

    namespace_key: str
    key: str
    timestamp: int
    value: Any = None
    version: str | None = None
    is_deleted: bool | None = None


def entry_from_wire(namespace_key: str, pair: Any) -> Entry:
    """Validate one `[key, record]` pair and build an Entry from it."""
    if not isinstance(pair, list) or len(pair) != 2:
        raise DecodeError("Namespace item is not a [key, record] pair", pair)

    record = pair[1]
    if not isinstance(record, dict):
        raise DecodeError("Namespace record is not an object", record)

    key = record.get("key")
    if not isinstance(key, str):
        raise DecodeError("Namespace record has no string 'key'", record)

    timestamp = record.get("timestamp")
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise DecodeError("Namespace record has no integer 'timestamp'", record)

    is_deleted = record.get("is_deleted")
    if is_deleted is not None and not isinstance(is_deleted, bool):
        raise DecodeError("Namespace record 'is_deleted' is not a boolean", record)

    version = record.get("version")
    if version is not None and not isinstance(version, str):
        raise DecodeError("Namespace record 'version' is not a string", record)

    return Entry(
        namespace_key=namespace_key,
        key=key,
        timestamp=timestamp,
        value=record.get("value"),
        version=version,
        is_deleted=is_deleted,
    )


def entry_to_wire(entry: Entry) -> list:
    """Build the `[key, record]` pair persisted for *entry*.

    Unset optional fields are left out of the record entirely.
    """
    record: dict[str, Any] = {"key": entry.key}
    if entry.is_deleted is not None:
        record["is_deleted"] = entry.is_deleted
    if entry.value is not None:
        record["value"] = entry.value
    record["timestamp"] = entry.timestamp
    if entry.version is not None:
        record["version"] = entry.version
    return [entry.key, record]


def entries_from_wire(namespace_key: str, items: Any) -> list[Entry]:
    if not isinstance(items, list):
        raise DecodeError("Namespace value is not an array", items)
    return [entry_from_wire(namespace_key, item) for item in items]
