"""Exceptions raised by steamcat."""

from __future__ import annotations


def _fragment(raw: object, limit: int = 80) -> str:
    text = repr(raw)
    if len(text) > limit:
        return text[:limit] + "..."
    return text


class SteamcatError(Exception):
    """Base class for every error raised by this package."""


class DecodeError(SteamcatError):
    """A stored value could not be decoded."""

    def __init__(self, message: str, raw: object = None) -> None:
        self.raw = raw
        if raw is not None:
            message = f"{message}: {_fragment(raw)}"
        super().__init__(message)


class UnsupportedFormatError(DecodeError):
    """A stored value carries a format tag we do not know how to read."""

    def __init__(self, tag: int, raw: object = None) -> None:
        self.tag = tag
        super().__init__(f"Unsupported value format tag 0x{tag:02x}", raw)


class NamespaceNotFoundError(SteamcatError):
    """The namespace index, or a namespace listed in it, is missing."""


class EntryNotFoundError(SteamcatError):
    def __init__(self, namespace_key: str, entry_key: str) -> None:
        self.namespace_key = namespace_key
        self.entry_key = entry_key
        super().__init__(
            f"No entry with key {entry_key!r} in namespace {namespace_key!r}"
        )


class MalformedCategoryError(SteamcatError):
    """A collection payload is missing required fields or has the wrong shape."""


class DuplicateCategoryError(SteamcatError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A category named '{name}' already exists")


class ConfigError(SteamcatError):
    """Configuration is incomplete."""
