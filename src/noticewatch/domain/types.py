"""Core value types shared by the relay domain."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Mapping

Timestamp: TypeAlias = str | int | float
"""Timestamp as scraped or persisted: ISO-like string or epoch number."""

MessageHandle: TypeAlias = int | str
"""Opaque identifier of a delivered chat message, sufficient to edit it later."""


class ScrapeOrder(StrEnum):
    """Order in which a source returns its items."""

    OLDEST_FIRST = "oldest_first"
    NEWEST_FIRST = "newest_first"


@dataclass(frozen=True, slots=True)
class SourceSpec:
    """Immutable configuration of one announcement source."""

    name: str
    display_name: str
    url: str = ""
    enabled: bool = True
    message_thread_id: int | None = None
    event_prefix_separator: str | None = None
    supports_message_edit: bool = False
    scrape_order: ScrapeOrder = ScrapeOrder.OLDEST_FIRST

    @property
    def correlated(self) -> bool:
        """Whether status changes of one event are folded into a single edited message."""

        return bool(self.event_prefix_separator) and self.supports_message_edit


@dataclass(frozen=True, slots=True)
class RecordDetail:
    """Extra fields returned by a source's secondary detail fetch."""

    title: str | None = None
    content: str | None = None
    images: tuple[str, ...] = ()
    publish_date: Timestamp | None = None


@dataclass(frozen=True, slots=True)
class Record:
    """A normalised item scraped from a source."""

    id: str
    title: str = ""
    content: str = ""
    timestamp: Timestamp | None = None
    url: str = ""
    poster: str = ""
    images: tuple[str, ...] = ()
    detail_key: str | None = None
    fields: Mapping[str, str] = field(default_factory=dict[str, str])

    def get(self, name: str, default: str = "") -> str:
        return self.fields.get(name, default)

    def media(self) -> tuple[str, ...]:
        """Return the images to deliver, the poster first when present."""

        urls = [self.poster] if self.poster else []
        urls.extend(url for url in self.images if url not in urls)
        return tuple(urls)

    def with_detail(self, detail: RecordDetail) -> Record:
        """Return a copy with the non-empty detail values merged in."""

        return replace(
            self,
            title=detail.title or self.title,
            content=detail.content or self.content,
            images=detail.images or self.images,
            timestamp=detail.publish_date or self.timestamp,
        )


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with seconds precision."""

    return datetime.now(UTC).isoformat(timespec="seconds")
