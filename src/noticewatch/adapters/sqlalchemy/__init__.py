"""SQLAlchemy adapter package for noticewatch."""

from __future__ import annotations

from .mappings import metadata, service_table
from .repositories import SqlAlchemyServiceTableRepository
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyServiceTableRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "configured_engine",
    "is_started",
    "metadata",
    "service_table",
    "shutdown",
    "startup",
]
