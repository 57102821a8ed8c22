"""Elf (易飛網) news, scraped from the news list page."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from bs4 import BeautifulSoup

from noticewatch.domain.types import Record

from .base import HttpSource, clip, get_text, md5_hex, strip_html

if TYPE_CHECKING:
    from noticewatch.adapters.http_resilience import ResilientClient

NEWS_URL: Final[str] = "https://www.elf.com.tw/news.aspx"

_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")
_DATE_ICON = re.compile(r"icon-news-date")


def parse_news(markup: str) -> list[Record]:
    """One record per ``div.news`` block; blocks without date or title are skipped."""

    records: list[Record] = []
    for block in BeautifulSoup(markup, "html.parser").find_all("div", class_="news"):
        icon = block.find("img", src=_DATE_ICON)
        date_match = _DATE.search(icon.parent.get_text()) if icon and icon.parent else None
        title_div = block.find("div", class_="news-text")
        if date_match is None or title_div is None:
            continue
        title = strip_html(title_div.get_text(" "))
        body_div = block.find("div", class_="new-textContent")
        published = date_match.group(0)
        records.append(
            Record(
                id=md5_hex(f"{title}+{published}"),
                title=title,
                content=clip(strip_html(body_div.get_text(" "))) if body_div else "",
                timestamp=published,
                url=NEWS_URL,
            )
        )
    return records


@dataclass(slots=True)
class ElfSource(HttpSource):
    name: ClassVar[str] = "elf"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        return parse_news(await get_text(client, NEWS_URL))
