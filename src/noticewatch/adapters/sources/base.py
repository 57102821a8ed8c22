"""Shared plumbing for HTTP announcement sources."""

from __future__ import annotations

import asyncio
import hashlib
import html
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar, Final, TypeAlias

from bs4 import BeautifulSoup

from noticewatch.adapters.http_resilience import ResilientClient
from noticewatch.config.http_resilience import RateLimit, ResilienceConfig
from noticewatch.domain.entries import parse_timestamp

if TYPE_CHECKING:
    from noticewatch.domain.types import Record, RecordDetail, SourceSpec, Timestamp

log = getLogger(__name__)

CONTENT_LIMIT: Final[int] = 500
# Taiwan observes no daylight saving time.
LOCAL_TZ: Final[timezone] = timezone(timedelta(hours=8), "Asia/Taipei")

_WHITESPACE = re.compile(r"\s+")

ClientFactory: TypeAlias = Callable[[ResilienceConfig], ResilientClient]
KeywordRules: TypeAlias = tuple[tuple[tuple[str, ...], str], ...]


class SourceFormatError(RuntimeError):
    """Raised when a source answers with a payload of unexpected shape."""


def strip_html(markup: str) -> str:
    """Return the visible text of ``markup`` with whitespace collapsed."""

    if not markup:
        return ""
    text = BeautifulSoup(markup, "html.parser").get_text(separator=" ")
    return _WHITESPACE.sub(" ", text).strip()


def md5_hex(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()  # noqa: S324


def clip(text: str, limit: int = CONTENT_LIMIT) -> str:
    return text[:limit]


def escape(text: object) -> str:
    return html.escape(str(text), quote=False)


def link(url: str, label: str) -> str:
    return f'<a href="{html.escape(url, quote=True)}">{escape(label)}</a>'


def local_time(value: Timestamp | None, fmt: str = "%Y-%m-%d %H:%M") -> str | None:
    """Format a timestamp in Taiwan local time; ``None`` when it can not be read."""

    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return parsed.astimezone(LOCAL_TZ).strftime(fmt)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class HttpSource(ABC):
    """A source whose listing is fetched over HTTP.

    Subclasses implement ``fetch_records`` against an open client; ``fetch``
    wraps it in its own event loop so callers stay synchronous.
    """

    name: ClassVar[str]

    resilience: ResilienceConfig | None = None
    client_factory: ClientFactory = field(default=_default_client_factory)

    def fetch(self) -> list[Record]:
        return asyncio.run(self._fetch_async())

    async def _fetch_async(self) -> list[Record]:
        async with self.client_factory(self.listing_config()) as client:
            records = await self.fetch_records(client)
        log.info(f"Fetched {len(records)} records from {self.name}")
        return records

    @abstractmethod
    async def fetch_records(self, client: ResilientClient) -> list[Record]: ...

    def listing_config(self) -> ResilienceConfig:
        return self.resilience or ResilienceConfig(
            name=self.name,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        )

    def build_message(self, record: Record, spec: SourceSpec) -> str:
        """Default announcement layout: linked source name, title, body, date, link."""

        source_label = link(spec.url, spec.display_name) if spec.url else escape(spec.display_name)
        lines = [f"<b>📢 {source_label} | {escape(record.title)}</b>", ""]
        if record.content:
            lines.append(escape(record.content))
        if record.timestamp:
            lines.extend(("", f"📅 發布日期: {escape(record.timestamp)}"))
        if record.url:
            if not record.timestamp:
                lines.append("")
            lines.append(f"🔗 {link(record.url, '查看詳情')}")
        return "\n".join(lines).rstrip()


@dataclass(slots=True)
class HttpDetailSource(HttpSource):
    """An ``HttpSource`` that can enrich records from a secondary page."""

    detail_resilience: ResilienceConfig | None = None

    def fetch_detail(self, key: str) -> RecordDetail:
        return asyncio.run(self._fetch_detail_async(key))

    async def _fetch_detail_async(self, key: str) -> RecordDetail:
        async with self.client_factory(self.detail_config()) as client:
            return await self.fetch_detail_with(client, key)

    @abstractmethod
    async def fetch_detail_with(self, client: ResilientClient, key: str) -> RecordDetail: ...

    def detail_config(self) -> ResilienceConfig:
        return self.detail_resilience or ResilienceConfig(
            name=f"{self.name}-detail",
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        )


async def get_text(client: ResilientClient, url: str, **params: str | int) -> str:
    response = await client.get(url, params=params or None)
    response.raise_for_status()
    return response.text


async def get_json(client: ResilientClient, url: str, **params: str | int) -> object:
    response = await client.get(url, params=params or None)
    response.raise_for_status()
    try:
        return response.json()
    except ValueError as exc:
        raise SourceFormatError(f"{url} did not return JSON") from exc


def now_local() -> datetime:
    return datetime.now(LOCAL_TZ)


def first_match(text: str, rules: KeywordRules, default: str = "") -> str:
    """Return the value of the first rule whose keywords occur in ``text``."""

    for keywords, value in rules:
        if any(keyword in text for keyword in keywords):
            return value
    return default


def timestamp_sort_key(record: Record) -> float:
    """Epoch seconds of ``record.timestamp``; unreadable timestamps sort first."""

    parsed = parse_timestamp(record.timestamp)
    return parsed.timestamp() if parsed else float("-inf")
