"""Alembic environment for the service table store.

``upgrade_head`` hands over an open connection through
``config.attributes["connection"]``; the ``alembic`` command line instead
connects to ``sqlalchemy.url`` or the configured storage location.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from alembic import context
from sqlalchemy import create_engine, pool

from noticewatch.adapters.sqlalchemy.mappings import metadata
from noticewatch.config.storage import get_storage_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config

# SQLite cannot ALTER most constraints in place; batch mode rebuilds the table.
MIGRATION_OPTIONS = {
    "target_metadata": metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_storage_config().database_uri


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    context.configure(url=_database_url(), literal_binds=True, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    handed_over: Connection | None = config.attributes.get("connection")
    if handed_over is not None:
        _migrate(handed_over)
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.begin() as connection:
            _migrate(connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
