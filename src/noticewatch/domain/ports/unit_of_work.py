"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from noticewatch.domain.ports.persistence import ServiceTableRepository


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


TRepositories = TypeVar("TRepositories", bound=RepositoryCollection)


@runtime_checkable
class UnitOfWork(Protocol[TRepositories]):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class TableRepositories(RepositoryCollection):
    """Repositories required to persist service tables."""

    tables: ServiceTableRepository


TableUnitOfWork = UnitOfWork[TableRepositories]
