"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import insert, select, update

from noticewatch.adapters.sqlalchemy.mappings import service_table

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SqlAlchemyServiceTableRepository:
    """Stores one JSON blob per source name."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, name: str) -> str | None:
        stmt = select(service_table.c.payload).where(service_table.c.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def save(self, name: str, blob: str) -> None:
        now = datetime.now(UTC)
        exists = self.session.execute(
            select(service_table.c.name).where(service_table.c.name == name)
        ).first()
        if exists is None:
            stmt = insert(service_table).values(name=name, payload=blob, updated_at=now)
        else:
            stmt = (
                update(service_table)
                .where(service_table.c.name == name)
                .values(payload=blob, updated_at=now)
            )
        self.session.execute(stmt)

    def names(self) -> list[str]:
        stmt = select(service_table.c.name).order_by(service_table.c.name)
        return list(self.session.execute(stmt).scalars())
