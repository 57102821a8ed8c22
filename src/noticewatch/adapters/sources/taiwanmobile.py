"""Taiwan Mobile (台灣大哥大) service announcements."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from noticewatch.domain.types import Record, RecordDetail

from .base import HttpDetailSource, clip, get_text, md5_hex, strip_html

if TYPE_CHECKING:
    from noticewatch.adapters.http_resilience import ResilientClient

LIST_URL: Final[str] = "https://www.taiwanmobile.com/cs/public/servAnn/queryList.htm"
BASE_URL: Final[str] = "https://www.taiwanmobile.com"

_DATE = re.compile(r"^\d{4}/\d{2}/\d{2}$")
_PAGE_NAME = re.compile(r"/([^/]+)\.html$")
_SPACES = re.compile(r"[ \t\r\f\v]+")


def parse_announcement_rows(markup: str) -> list[Record]:
    """Rows of ``tr.pagination_data``: a date cell and a link; repeated ids are dropped."""

    records: list[Record] = []
    seen: set[str] = set()
    for row in BeautifulSoup(markup, "html.parser").find_all("tr", class_="pagination_data"):
        published = next(
            (
                cell.get_text(strip=True)
                for cell in row.find_all("td")
                if _DATE.match(cell.get_text(strip=True))
            ),
            None,
        )
        anchor = row.find("a", href=True)
        if published is None or anchor is None:
            continue
        href = str(anchor["href"]).strip()
        title = strip_html(anchor.get_text(" "))
        match = _PAGE_NAME.search(href)
        record_id = match.group(1) if match else md5_hex(title + published)
        if record_id in seen:
            continue
        seen.add(record_id)
        url = urljoin(BASE_URL, href)
        records.append(
            Record(
                id=record_id,
                title=title,
                timestamp=published,
                url=url,
                detail_key=url,
            )
        )
    return records


def _paragraph_text(paragraph: Tag) -> str:
    for line_break in paragraph.find_all("br"):
        line_break.replace_with("\n")
    lines = (_SPACES.sub(" ", line).strip() for line in paragraph.get_text().splitlines())
    return "\n".join(line for line in lines if line)


def parse_announcement_page(markup: str) -> RecordDetail:
    """Join the plain paragraphs of a notice page; paragraphs holding markup are layout."""

    paragraphs = [
        text
        for paragraph in BeautifulSoup(markup, "html.parser").find_all("p")
        if not paragraph.find(lambda tag: tag.name != "br")
        if (text := _paragraph_text(paragraph))
    ]
    return RecordDetail(content=clip("\n".join(paragraphs)) or None)


@dataclass(slots=True)
class TaiwanMobileSource(HttpDetailSource):
    name: ClassVar[str] = "taiwanmobile"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        return parse_announcement_rows(await get_text(client, LIST_URL, type=3))

    async def fetch_detail_with(self, client: ResilientClient, key: str) -> RecordDetail:
        return parse_announcement_page(await get_text(client, key))
