"""Homeplus cable TV system notices; body and date come from each notice page."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from bs4 import BeautifulSoup

from noticewatch.domain.types import Record, RecordDetail

from .base import HttpDetailSource, clip, get_text, strip_html

if TYPE_CHECKING:
    from noticewatch.adapters.http_resilience import ResilientClient

LIST_URL: Final[str] = "https://www.homeplus.net.tw/cable/topic/system"
MAX_ITEMS: Final[int] = 10

_NOTICE_URL = re.compile(r"^https://www\.homeplus\.net\.tw/cable/topic/system/(\d+)$")


def parse_topic_list(markup: str) -> list[Record]:
    """Notice links carry their title in an ``h3``; the numeric path tail is the id."""

    records: list[Record] = []
    seen: set[str] = set()
    for anchor in BeautifulSoup(markup, "html.parser").find_all("a", href=True):
        url = str(anchor["href"]).strip()
        match = _NOTICE_URL.match(url)
        heading = anchor.find("h3")
        if match is None or heading is None or match.group(1) in seen:
            continue
        seen.add(match.group(1))
        records.append(
            Record(
                id=match.group(1),
                title=strip_html(heading.get_text(" ")),
                url=url,
                detail_key=url,
            )
        )
        if len(records) >= MAX_ITEMS:
            break
    return records


def parse_topic_page(markup: str) -> RecordDetail:
    soup = BeautifulSoup(markup, "html.parser")
    date = soup.find("p", class_="sec-date")
    body = soup.find("div", class_="ck-content")
    published = date.get_text(strip=True) if date else ""
    return RecordDetail(
        content=clip(strip_html(body.get_text(" "))) if body else None,
        publish_date=published or None,
    )


@dataclass(slots=True)
class HomeplusSource(HttpDetailSource):
    name: ClassVar[str] = "homeplus"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        return parse_topic_list(await get_text(client, LIST_URL))

    async def fetch_detail_with(self, client: ResilientClient, key: str) -> RecordDetail:
        return parse_topic_page(await get_text(client, key))
