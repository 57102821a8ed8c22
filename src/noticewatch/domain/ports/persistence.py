"""Ports for persisting service tables."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ServiceTableRepository(Protocol):
    """Row store keyed by source name, one serialized blob per row."""

    def get(self, name: str) -> str | None: ...

    def save(self, name: str, blob: str) -> None: ...

    def names(self) -> list[str]: ...


__all__ = ["ServiceTableRepository"]
