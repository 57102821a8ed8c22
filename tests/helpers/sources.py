"""Scripted sources and record builders for relay tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from noticewatch.domain.types import Record, RecordDetail, ScrapeOrder, SourceSpec

if TYPE_CHECKING:
    from collections.abc import Sequence


def make_record(
    record_id: str,
    *,
    title: str = "",
    timestamp: str | None = "2026-01-01T00:00:00+00:00",
    images: tuple[str, ...] = (),
    detail_key: str | None = None,
) -> Record:
    return Record(
        id=record_id,
        title=title or f"Title {record_id}",
        content=f"Content {record_id}",
        timestamp=timestamp,
        images=images,
        detail_key=detail_key,
    )


def make_spec(
    name: str = "example",
    *,
    correlated: bool = False,
    scrape_order: ScrapeOrder = ScrapeOrder.OLDEST_FIRST,
    message_thread_id: int | None = None,
    enabled: bool = True,
) -> SourceSpec:
    return SourceSpec(
        name=name,
        display_name=name.title(),
        enabled=enabled,
        message_thread_id=message_thread_id,
        event_prefix_separator="_" if correlated else None,
        supports_message_edit=correlated,
        scrape_order=scrape_order,
    )


@dataclass
class FakeSource:
    """Returns the queued batches one fetch at a time, repeating the last one."""

    name: str = "example"
    batches: list[list[Record]] = field(default_factory=list[list[Record]])
    error: Exception | None = None
    fetches: int = 0

    def fetch(self) -> Sequence[Record]:
        self.fetches += 1
        if self.error is not None:
            raise self.error
        if not self.batches:
            return []
        if len(self.batches) > 1:
            return self.batches.pop(0)
        return self.batches[0]

    def build_message(self, record: Record, spec: SourceSpec) -> str:
        return f"{spec.display_name}: {record.title} [{record.id}]"


@dataclass
class FakeDetailSource(FakeSource):
    details: dict[str, RecordDetail] = field(default_factory=dict[str, RecordDetail])
    detail_error: Exception | None = None
    detail_requests: list[str] = field(default_factory=list[str])

    def fetch_detail(self, key: str) -> RecordDetail:
        self.detail_requests.append(key)
        if self.detail_error is not None:
            raise self.detail_error
        return self.details[key]
