"""Domain port definitions for adapters."""

from __future__ import annotations

from .messaging import Messenger
from .persistence import ServiceTableRepository
from .sources import DetailSource, Source
from .unit_of_work import (
    RepositoryCollection,
    TableRepositories,
    TableUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "DetailSource",
    "Messenger",
    "RepositoryCollection",
    "ServiceTableRepository",
    "Source",
    "TableRepositories",
    "TableUnitOfWork",
    "UnitOfWork",
]
