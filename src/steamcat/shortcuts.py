"""Non-Steam shortcut app ids and their category membership."""

from __future__ import annotations

import zlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from steamcat.categories.editor import CategoryEditor


def shortcut_app_id(exec_bin: str, name: str) -> int:
    """App id Steam uses for a shortcut in collections and the desktop library.

    crc32(exe + name) with the top bit set.
    """
    crc = zlib.crc32((exec_bin + name).encode("utf-8")) & 0xFFFFFFFF
    return crc | 0x80000000


def shortcut_long_app_id(app_id: int) -> int:
    """64-bit id used in launch URLs and Big Picture artwork names."""
    return ((app_id & 0xFFFFFFFF) << 32) | 0x02000000


@dataclass
class ShortcutTarget:
    """A validated shortcut as produced by a shortcut file loader."""

    name: str
    exec_bin: str
    categories: list[str] = field(default_factory=list)

    @property
    def app_id(self) -> int:
        return shortcut_app_id(self.exec_bin, self.name)

    @property
    def long_app_id(self) -> int:
        return shortcut_long_app_id(self.app_id)

    @property
    def launch_url(self) -> str:
        return f"steam://rungameid/{self.long_app_id}"


def apply_shortcut_categories(
    editor: CategoryEditor, shortcuts: Iterable[ShortcutTarget]
) -> dict[str, list[int]]:
    """Add each shortcut's app id to the categories it names.

    Returns category name → app ids added, in first-seen order.
    """
    membership: dict[str, list[int]] = {}
    for shortcut in shortcuts:
        app_id = shortcut.app_id
        for name in shortcut.categories:
            ids = membership.setdefault(name, [])
            if app_id not in ids:
                ids.append(app_id)

    for name, ids in membership.items():
        editor.add_games_for_category(name, ids)
    return membership
