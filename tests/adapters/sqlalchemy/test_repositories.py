"""Tests for the SQLAlchemy service-table repository."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session  # noqa: TC002

from noticewatch.adapters.sqlalchemy.mappings import service_table
from noticewatch.adapters.sqlalchemy.repositories import SqlAlchemyServiceTableRepository


def test_get_returns_none_for_unknown_source(sqlite_session: Session) -> None:
    repository = SqlAlchemyServiceTableRepository(sqlite_session)

    assert repository.get("hinet") is None
    assert repository.names() == []


def test_save_inserts_then_updates(sqlite_session: Session) -> None:
    repository = SqlAlchemyServiceTableRepository(sqlite_session)

    repository.save("hinet", '{"a":1}')
    sqlite_session.commit()
    repository.save("hinet", '{"b":2}')
    sqlite_session.commit()

    assert repository.get("hinet") == '{"b":2}'
    rows = sqlite_session.execute(select(service_table)).all()
    assert len(rows) == 1


def test_save_stamps_updated_at_in_utc(sqlite_session: Session) -> None:
    repository = SqlAlchemyServiceTableRepository(sqlite_session)
    before = datetime.now(UTC).replace(microsecond=0)

    repository.save("seednet", "{}")
    sqlite_session.commit()

    updated_at = sqlite_session.execute(
        select(service_table.c.updated_at).where(service_table.c.name == "seednet")
    ).scalar_one()
    assert updated_at.tzinfo is not None
    assert updated_at >= before


def test_names_are_sorted(sqlite_session: Session) -> None:
    repository = SqlAlchemyServiceTableRepository(sqlite_session)
    for name in ("tpcfd", "cpc", "hinet"):
        repository.save(name, "{}")
    sqlite_session.commit()

    assert repository.names() == ["cpc", "hinet", "tpcfd"]
