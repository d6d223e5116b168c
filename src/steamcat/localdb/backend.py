"""Store handle protocol and the LevelDB implementation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import plyvel

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal byte-level key-value handle the entry store reads and writes."""

    def get(self, key: bytes) -> bytes | None:
        """Return the stored value, or None if *key* is absent."""
        ...

    def put(self, key: bytes, value: bytes) -> None: ...

    def close(self) -> None: ...


class LevelDbStore:
    """Exclusive handle on a LevelDB database directory.

    LevelDB takes a file lock for as long as the handle is open, so a second
    process (a running Steam client included) opening the same database fails
    immediately with `plyvel.IOError`.
    """

    def __init__(self, path: Path, *, create_if_missing: bool = False) -> None:
        self.path = Path(path)
        self._db = plyvel.DB(str(self.path), create_if_missing=create_if_missing)
        logger.debug("Opened LevelDB at %s", self.path)

    @property
    def closed(self) -> bool:
        return self._db.closed

    def get(self, key: bytes) -> bytes | None:
        return self._db.get(key)

    def put(self, key: bytes, value: bytes) -> None:
        self._db.put(key, value)

    def close(self) -> None:
        if not self._db.closed:
            self._db.close()
            logger.debug("Closed LevelDB at %s", self.path)
