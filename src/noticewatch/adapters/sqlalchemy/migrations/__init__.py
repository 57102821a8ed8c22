"""Alembic migrations for the service table store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from noticewatch.config.storage import get_storage_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent
HEAD: Final[str] = "head"


def alembic_config(database_uri: str | None = None) -> Config:
    """Config pointing at the migration scripts bundled with the package.

    Installed wheels carry no pyproject.toml, so the script location is set
    here instead of being read from ``[tool.alembic]``.
    """

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    config.set_main_option("path_separator", "os")
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    if engine is None:
        command.upgrade(alembic_config(database_uri or get_storage_config().database_uri), HEAD)
        return
    config = alembic_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, HEAD)
