"""Engine lifecycle and the unit of work over ``service_table`` rows.

``startup()`` must run once per process before any :class:`SqlAlchemyUnitOfWork`
is created; it brings the schema to the latest Alembic revision. The relay
writes one row per source and never holds a session across sources, so a
single engine with short-lived sessions is all the adapter keeps.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from noticewatch.adapters.sqlalchemy.migrations import upgrade_head
from noticewatch.adapters.sqlalchemy.repositories import SqlAlchemyServiceTableRepository
from noticewatch.config.storage import get_storage_config
from noticewatch.domain.ports.unit_of_work import TableRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before ``startup()`` or configured twice."""


@dataclass(frozen=True, slots=True)
class _Database:
    engine: Engine
    sessions: sessionmaker[Session]


@dataclass(slots=True)
class _Registry:
    current: _Database | None = None

    def require(self) -> _Database:
        if self.current is None:
            raise StartupError(
                "Service table storage is not started; call "
                "noticewatch.adapters.sqlalchemy.startup() first."
            )
        return self.current


_registry = _Registry()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Bind the adapter to ``engine`` (or a new one for ``database_uri``).

    Without ``force`` a second call raises :class:`StartupError`. A forced
    call replaces the previous binding without disposing its engine.
    """

    if _registry.current is not None and not force:
        raise StartupError("Service table storage already started; pass force=True to rebind.")

    bound = engine or create_engine(
        database_uri or get_storage_config().database_uri,
        future=True,
    )
    upgrade_head(engine=bound)
    _registry.current = _Database(
        engine=bound,
        sessions=sessionmaker(bind=bound, expire_on_commit=False),
    )
    log.debug("Service table storage bound to %s", bound.url.render_as_string(hide_password=True))
    return bound


def configured_engine() -> Engine | None:
    return _registry.current.engine if _registry.current is not None else None


def is_started() -> bool:
    return _registry.current is not None


def shutdown() -> None:
    """Dispose the bound engine; a no-op when nothing is bound."""

    database, _registry.current = _registry.current, None
    if database is not None:
        database.engine.dispose()


class SqlAlchemyUnitOfWork:
    """One session per ``with`` block.

    Writes are kept only when ``commit()`` runs inside the block. An exception
    leaving the block rolls the session back before it is closed.
    """

    def __init__(self) -> None:
        self._sessions = _registry.require().sessions
        self._session: Session | None = None
        self._repositories: TableRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = TableRepositories(
            tables=SqlAlchemyServiceTableRepository(self._session)
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self._open_session()
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def repositories(self) -> TableRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self._open_session().commit()

    def rollback(self) -> None:
        self._open_session().rollback()

    def _open_session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session


if TYPE_CHECKING:
    from noticewatch.domain.ports.unit_of_work import TableUnitOfWork

    _uow_check: TableUnitOfWork = SqlAlchemyUnitOfWork()
