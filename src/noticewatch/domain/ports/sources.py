"""Ports for fetching records from announcement sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from noticewatch.domain.types import Record, RecordDetail, SourceSpec


@runtime_checkable
class Source(Protocol):
    """A named feed that can list its current records and format them."""

    name: str

    def fetch(self) -> Sequence[Record]: ...

    def build_message(self, record: Record, spec: SourceSpec) -> str: ...


@runtime_checkable
class DetailSource(Source, Protocol):
    """Optional capability: enrich a record with a secondary detail fetch."""

    def fetch_detail(self, key: str) -> RecordDetail: ...


__all__ = ["DetailSource", "Source"]
