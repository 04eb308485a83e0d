"""Locations of the local SQLite store and the HTTP cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DATA_DIR_ENV: Final[str] = "RECLAIMER_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"


@dataclass(frozen=True, slots=True)
class DataPaths:
    root: Path
    database: Path
    http_cache: Path

    @classmethod
    def under(cls, root: Path) -> DataPaths:
        resolved = root.expanduser().resolve()
        return cls(
            root=resolved,
            database=resolved / "reclaimer.db",
            http_cache=resolved / "http_cache.db",
        )


def _xdg_data_home() -> Path:
    configured = os.getenv("XDG_DATA_HOME")
    return Path(configured) if configured else Path.home() / ".local" / "share"


def data_paths() -> DataPaths:
    """Resolve the data directory and create it if missing."""

    configured = os.getenv(DATA_DIR_ENV)
    paths = DataPaths.under(Path(configured) if configured else _xdg_data_home() / "reclaimer")
    paths.root.mkdir(parents=True, exist_ok=True)
    return paths


def default_database_uri() -> str:
    """Return ``DATABASE_URI`` when set, otherwise the SQLite file in the data directory."""

    return os.getenv(DATABASE_URI_ENV) or f"sqlite+pysqlite:///{data_paths().database}"
