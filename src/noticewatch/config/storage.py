"""Where noticewatch keeps its database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "noticewatch"
DEFAULT_DB_FILENAME: Final[str] = "noticewatch.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Resolved storage locations.

    ``database_uri_override`` comes from ``DATABASE_URI`` and replaces the SQLite
    file inside ``data_dir``.
    """

    data_dir: Path
    database_uri_override: str | None = None

    def ensure_data_dir(self) -> Path:
        data_dir = self.data_dir.expanduser().resolve()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    @property
    def database_path(self) -> Path:
        return self.ensure_data_dir() / DEFAULT_DB_FILENAME

    @property
    def database_uri(self) -> str:
        if self.database_uri_override:
            return self.database_uri_override
        return f"sqlite+pysqlite:///{self.database_path}"


def default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("NOTICEWATCH_DATA_DIR")
    return StorageConfig(
        data_dir=Path(env_dir) if env_dir else default_data_dir(),
        database_uri_override=os.getenv("DATABASE_URI") or None,
    )
