"""Seednet important notices, scraped from the notice list page."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from bs4 import BeautifulSoup

from noticewatch.domain.types import Record, RecordDetail

from .base import HttpDetailSource, clip, get_text, strip_html

if TYPE_CHECKING:
    from noticewatch.adapters.http_resilience import ResilientClient

LIST_URL: Final[str] = "https://service.seed.net.tw/register-cgi/service_notice"
LIST_PARAMS: Final[dict[str, str | int]] = {
    "FUNC": "notice_qry_more",
    "Category": "01",
    "Start": 1,
}
MAX_ITEMS: Final[int] = 10

_NOTICE_URL = re.compile(r"^https://service\.seed\.net\.tw/importantNotice/IN(\d+)\.htm$")
_DATE = re.compile(r"\d{4}/\d{2}/\d{2}")


def parse_notice_list(markup: str) -> list[Record]:
    """Pair the n-th date cell with the n-th notice link, as the page lays them out."""

    soup = BeautifulSoup(markup, "html.parser")
    dates = [
        match.group(0)
        for cell in soup.find_all("td", class_="date")
        if (match := _DATE.search(cell.get_text()))
    ]
    links = [
        (anchor, match.group(1))
        for anchor in soup.find_all("a", href=True)
        if (match := _NOTICE_URL.match(str(anchor["href"]).strip()))
    ]

    records: list[Record] = []
    for published, (anchor, notice_id) in zip(dates, links, strict=False):
        url = str(anchor["href"]).strip()
        records.append(
            Record(
                id=notice_id,
                title=strip_html(anchor.get_text(" ")),
                timestamp=published,
                url=url,
                detail_key=url,
            )
        )
        if len(records) >= MAX_ITEMS:
            break
    return records


def parse_notice_page(markup: str) -> RecordDetail:
    soup = BeautifulSoup(markup, "html.parser")
    title_cell = soup.find("td", class_="title")
    body_cell = soup.find("td", class_="ct")
    return RecordDetail(
        title=strip_html(title_cell.get_text(" ")) if title_cell else None,
        content=clip(strip_html(body_cell.get_text(" "))) if body_cell else None,
    )


@dataclass(slots=True)
class SeednetSource(HttpDetailSource):
    name: ClassVar[str] = "seednet"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        return parse_notice_list(await get_text(client, LIST_URL, **LIST_PARAMS))

    async def fetch_detail_with(self, client: ResilientClient, key: str) -> RecordDetail:
        return parse_notice_page(await get_text(client, key))
