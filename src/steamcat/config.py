"""Configuration loading from environment variables and steamcat.toml."""

from __future__ import annotations

import os
import platform
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from steamcat.errors import ConfigError

_CONFIG_FILENAME = "steamcat.toml"
_LEVELDB_SUBPATH = Path("config") / "htmlcache" / "Local Storage" / "leveldb"

STEAMID64_BASE = 76561197960265728


def detect_steam_root() -> Path | None:
    """Return the first usual Steam install location that has a userdata dir."""
    home = Path.home()
    candidates: list[Path] = []

    if platform.system().lower() == "windows":
        for var in ("PROGRAMFILES(X86)", "PROGRAMFILES"):
            base = os.environ.get(var)
            if base:
                candidates.append(Path(base) / "Steam")
        candidates.append(Path("C:/Steam"))
    else:
        candidates.extend([
            home / ".steam" / "steam",
            home / ".local" / "share" / "Steam",
            home / ".var" / "app" / "com.valvesoftware.Steam" / "data" / "Steam",
            home / "Library" / "Application Support" / "Steam",
        ])

    for candidate in candidates:
        if (candidate / "userdata").is_dir():
            return candidate
    return None


def normalize_user_id(value: int | str) -> int:
    """Return the 32-bit account id used in storage keys.

    SteamID64 values are converted; account ids pass through.
    """
    text = str(value).strip()
    if not text.isdigit():
        raise ConfigError(f"Invalid Steam user id: {value!r}")
    user_id = int(text)
    if user_id >= STEAMID64_BASE:
        user_id -= STEAMID64_BASE
    return user_id


@dataclass
class SteamConfig:
    """Steam installation and user selection."""

    root: Path | None = None
    user_id: int | None = None


@dataclass
class DatabaseConfig:
    """Local storage LevelDB location."""

    path: Path | None = None
    create_if_missing: bool = False


@dataclass
class SteamcatConfig:
    """Top-level steamcat configuration."""

    steam: SteamConfig = field(default_factory=SteamConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @property
    def db_path(self) -> Path:
        if self.database.path is not None:
            return self.database.path
        if self.steam.root is not None:
            return self.steam.root / _LEVELDB_SUBPATH
        raise ConfigError(
            "No local storage database path configured and no Steam install found"
        )

    @property
    def user_id(self) -> int:
        if self.steam.user_id is None:
            raise ConfigError("No Steam user id configured")
        return self.steam.user_id


def load_config(config_path: Path | None = None) -> SteamcatConfig:
    """Load configuration from environment variables and optional steamcat.toml.

    Priority: environment variables > steamcat.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".steamcat" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    steam_data = file_data.get("steam", {})
    database_data = file_data.get("database", {})

    root = os.getenv("STEAMCAT_STEAM_ROOT", steam_data.get("root"))
    user_id = os.getenv("STEAMCAT_STEAM_USER_ID", steam_data.get("user_id"))
    db_path = os.getenv("STEAMCAT_DB_PATH", database_data.get("path"))

    config = SteamcatConfig(
        steam=SteamConfig(
            root=Path(root).expanduser() if root else detect_steam_root(),
            user_id=normalize_user_id(user_id) if user_id is not None else None,
        ),
        database=DatabaseConfig(
            path=Path(db_path).expanduser() if db_path else None,
            create_if_missing=bool(database_data.get("create_if_missing", False)),
        ),
    )
    return config
