"""Discovery of the namespaces that exist for one Steam user."""

from __future__ import annotations

import asyncio
import logging

from steamcat.errors import DecodeError, NamespaceNotFoundError
from steamcat.localdb.backend import KeyValueStore
from steamcat.localdb.codec import decode_value, encode_key

logger = logging.getLogger(__name__)

ORIGIN = "_https://steamloopback.host"


def namespace_prefix(user_id: int) -> str:
    return f"{ORIGIN}\x00\x01U{user_id}-cloud-storage-namespace"


class NamespaceResolver:
    """Reads the namespace index for a user.

    Namespace keys are only ever discovered here; nothing in this package
    creates a namespace.
    """

    def __init__(self, db: KeyValueStore, user_id: int) -> None:
        self._db = db
        self.user_id = user_id
        self.prefix = namespace_prefix(user_id)

    @property
    def index_key(self) -> str:
        return f"{self.prefix}s"

    def namespace_key(self, index: object) -> str:
        return f"{self.prefix}-{index}"

    async def get_namespace_keys(self) -> list[str]:
        """Return namespace keys in index order, oldest first."""
        raw = await asyncio.to_thread(self._db.get, encode_key(self.index_key))
        if raw is None:
            raise NamespaceNotFoundError(
                f"No namespace index for Steam user {self.user_id}"
            )

        values = decode_value(raw)
        if not isinstance(values, list):
            raise DecodeError("Namespace index is not an array", values)

        keys = []
        for value in values:
            if not isinstance(value, list) or not value:
                raise DecodeError("Namespace index item is not a non-empty array", value)
            keys.append(self.namespace_key(value[0]))

        logger.debug("Found %d namespaces for user %s", len(keys), self.user_id)
        return keys

    async def get_last_namespace_key(self) -> str:
        """Return the most recently created namespace key."""
        keys = await self.get_namespace_keys()
        if not keys:
            raise NamespaceNotFoundError(
                f"Namespace index for Steam user {self.user_id} is empty"
            )
        return keys[-1]
