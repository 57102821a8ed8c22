"""CPC Corporation open-data feeds: press releases, news and major policies."""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar, Final

import httpx
from bs4 import BeautifulSoup
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from noticewatch.domain.types import Record

from .base import HttpSource, SourceFormatError, clip, get_json, local_time, md5_hex, strip_html

if TYPE_CHECKING:
    from bs4 import Tag

    from noticewatch.adapters.http_resilience import ResilientClient

log = getLogger(__name__)

OPEN_DATA_URL: Final[str] = "https://www.cpc.com.tw/OpenData.aspx"
MAX_ITEMS_PER_FEED: Final[int] = 30

_NEWS_ID = re.compile(r"[?&]s=(\d+)")
_IMAGE_URL = re.compile(r"\((https?://[^)]+)\)")


@dataclass(frozen=True, slots=True)
class CpcFeed:
    serial: str
    hashtag: str


FEEDS: Final[tuple[CpcFeed, ...]] = (
    CpcFeed(serial="78702647C7A5B61B", hashtag="#新聞稿"),
    CpcFeed(serial="594FC080B4D63D73", hashtag="#最新訊息"),
    CpcFeed(serial="CF5DF99964D9DB8E", hashtag="#重大政策"),
)


class CpcItem(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    title: str = Field(default="", validation_alias=AliasChoices("title", "Title"))
    link: str = Field(default="", validation_alias=AliasChoices("Source", "Link"))
    content: str = Field(default="", validation_alias=AliasChoices("內容", "Content"))
    published: str = Field(default="", validation_alias=AliasChoices("刊登日期", "PublishDate"))
    related_images: list[str] = Field(
        default_factory=list[str],
        validation_alias=AliasChoices("相關圖片", "RelatedImages"),
    )


def table_to_text(table: Tag) -> str:
    """Render an HTML table as one ``a | b | c`` line per row."""

    lines: list[str] = []
    for row in table.find_all("tr"):
        cells = [cell.get_text(strip=True) for cell in row.find_all(["td", "th"])]
        cells = [cell for cell in cells if cell]
        if cells:
            lines.append(" | ".join(cells))
    return "\n".join(lines)


def html_to_text(markup: str) -> str:
    """Flatten body HTML to text while keeping tables readable."""

    if not markup:
        return ""
    soup = BeautifulSoup(markup, "html.parser")
    tables: list[str] = []
    for index, table in enumerate(soup.find_all("table")):
        tables.append(table_to_text(table))
        table.replace_with(f" __TABLE_{index}__ ")
    text = strip_html(str(soup))
    for index, rendered in enumerate(tables):
        text = text.replace(f"__TABLE_{index}__", f"\n{rendered}\n")
    return clip(text.strip())


def image_urls(values: list[str]) -> tuple[str, ...]:
    return tuple(match.group(1) for value in values if (match := _IMAGE_URL.search(value)))


def record_from_item(item: CpcItem, feed: CpcFeed) -> Record | None:
    if not item.title:
        return None
    news_id = _NEWS_ID.search(item.link)
    record_id = (
        f"{feed.serial}_{news_id.group(1)}"
        if news_id
        else md5_hex(f"{feed.serial}|{item.title}|{item.published}")
    )
    body = html_to_text(item.content)
    content = "\n\n".join(part for part in (body, feed.hashtag) if part)
    return Record(
        id=record_id,
        title=item.title,
        content=content,
        timestamp=local_time(item.published, "%Y/%m/%d"),
        url=item.link,
        images=image_urls(item.related_images),
    )


def parse_feed(payload: object, feed: CpcFeed) -> list[Record]:
    if not isinstance(payload, list):
        raise SourceFormatError(f"CPC feed {feed.serial} is not a list")
    records: list[Record] = []
    for raw in payload[:MAX_ITEMS_PER_FEED]:
        try:
            item = CpcItem.model_validate(raw)
        except ValidationError as exc:
            log.warning(f"Skipping malformed CPC item in {feed.serial}: {exc}")
            continue
        record = record_from_item(item, feed)
        if record is not None:
            records.append(record)
    return records


@dataclass(slots=True)
class CpcSource(HttpSource):
    name: ClassVar[str] = "cpc"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        """Merge the three feeds; one failing feed does not hide the others."""

        records: list[Record] = []
        seen: set[str] = set()
        for feed in FEEDS:
            try:
                payload = await get_json(client, OPEN_DATA_URL, SN=feed.serial)
                feed_records = parse_feed(payload, feed)
            except (httpx.HTTPError, SourceFormatError) as exc:
                log.warning(f"CPC feed {feed.serial} failed: {exc}")
                continue
            for record in feed_records:
                if record.id not in seen:
                    seen.add(record.id)
                    records.append(record)
        return records
