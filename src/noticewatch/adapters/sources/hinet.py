"""HiNet service notices, served as JSONP wrapping an HTML table."""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from noticewatch.domain.types import Record, RecordDetail

from .base import HttpDetailSource, SourceFormatError, clip, get_text, md5_hex, strip_html

if TYPE_CHECKING:
    from noticewatch.adapters.http_resilience import ResilientClient

LIST_URL: Final[str] = "https://search.hinet.net/getNotify"
DETAIL_URL: Final[str] = "https://search.hinet.net/getNotifyPage"
JSONP_CALLBACK: Final[str] = "jsonpCallback"

_JSONP = re.compile(rf"{JSONP_CALLBACK}\((.+)\);?\s*$", re.DOTALL)
_DETAIL_ID = re.compile(r"id=([^&]+)")
_DESCRIPTION_LABEL: Final[str] = "說明："


class CountryInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str = ""


class NotifyPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    country_info: CountryInfo = Field(default_factory=CountryInfo, alias="countryInfo")


def parse_jsonp(text: str) -> NotifyPayload:
    match = _JSONP.search(text)
    if match is None:
        raise SourceFormatError("HiNet response is not a JSONP callback")
    try:
        return NotifyPayload.model_validate(json.loads(match.group(1)))
    except (ValueError, ValidationError) as exc:
        raise SourceFormatError(f"Unexpected HiNet payload: {exc}") from exc


def parse_notice_table(markup: str) -> list[Record]:
    """Turn the notice table (date, linked title, end date) into records."""

    records: list[Record] = []
    for row in BeautifulSoup(markup, "html.parser").find_all("tr"):
        cells = row.find_all("td")
        if len(cells) < 3:
            continue
        anchor = cells[1].find("a", href=True)
        if anchor is None:
            continue
        published = cells[0].get_text(strip=True)
        detail_url = str(anchor["href"]).strip()
        title = anchor.get_text(strip=True)
        ends = cells[2].get_text(strip=True)

        match = _DETAIL_ID.search(detail_url)
        record_id = match.group(1) if match else md5_hex(f"{title}+{published}")
        records.append(
            Record(
                id=record_id,
                title=title,
                content=f"公告期間：{published} ~ {ends}" if ends else "",
                timestamp=published or None,
                url=detail_url,
                detail_key=record_id,
            )
        )
    return records


def parse_description(markup: str) -> str:
    """Prefer the ``說明：`` list item of a notice page, else the page text."""

    soup = BeautifulSoup(markup, "html.parser")
    for item in soup.find_all("li"):
        text = item.get_text(strip=True)
        if text.startswith(_DESCRIPTION_LABEL):
            span = item.find("span")
            description = span.get_text(" ") if span else text.removeprefix(_DESCRIPTION_LABEL)
            return clip(strip_html(description))
    return clip(strip_html(markup))


@dataclass(slots=True)
class HinetSource(HttpDetailSource):
    name: ClassVar[str] = "hinet"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        text = await get_text(
            client,
            LIST_URL,
            callback=JSONP_CALLBACK,
            type=0,
            sort=0,
            mobile=0,
            _=int(time.time() * 1000),
        )
        return parse_notice_table(parse_jsonp(text).country_info.content)

    async def fetch_detail_with(self, client: ResilientClient, key: str) -> RecordDetail:
        text = await get_text(client, DETAIL_URL, id=key, callback=JSONP_CALLBACK)
        content = parse_jsonp(text).country_info.content
        return RecordDetail(content=parse_description(content) if content else None)
