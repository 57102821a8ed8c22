"""Taichung City Fire Department dispatch list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final
from urllib.parse import quote

from bs4 import BeautifulSoup

from noticewatch.domain.types import Record

from .base import (
    HttpSource,
    KeywordRules,
    SourceFormatError,
    escape,
    first_match,
    get_text,
    link,
    md5_hex,
)

if TYPE_CHECKING:
    from bs4 import Tag

    from noticewatch.adapters.http_resilience import ResilientClient
    from noticewatch.domain.types import SourceSpec

CASE_LIST_URL: Final[str] = "https://www.fire.taichung.gov.tw/caselist/index.asp"
CASE_LIST_PARSER: Final[str] = "99,8,226,,,,,,,,1"
MAP_SEARCH_URL: Final[str] = "https://www.google.com/maps/search/?api=1&query="
CITY: Final[str] = "台中市"

TIME_LABEL: Final[str] = "受理時間："
TYPE_LABEL: Final[str] = "案類："
SUBTYPE_LABEL: Final[str] = "案別"
LOCATION_LABEL: Final[str] = "發生地點："
UNIT_LABEL: Final[str] = "派遣分隊："
STATUS_LABEL: Final[str] = "執行狀況："

STATUS_EMOJI: Final[KeywordRules] = (
    (("出勤",), "🚨"),
    (("到達",), "📍"),
    (("離開", "送醫"), "🚑"),
    (("返隊",), "🏠"),
)


def _cell(item: Tag, label: str) -> str:
    cell = item.find(attrs={"data-th": label})
    if cell is None:
        return ""
    for button in cell.find_all("button"):
        button.decompose()
    return cell.get_text(" ", strip=True)


def parse_case_list(markup: str) -> list[Record]:
    """Records keyed ``md5(time + type + location)_status`` in page order (newest first)."""

    case_list = BeautifulSoup(markup, "html.parser").select_one("ul.list.rwd-table")
    if case_list is None:
        raise SourceFormatError("TCCFD case list not found")

    records: list[Record] = []
    for item in case_list.find_all("li"):
        if item.find(class_="list_head") is not None or "list_head" in (item.get("class") or []):
            continue
        received = _cell(item, TIME_LABEL)
        kind = _cell(item, TYPE_LABEL)
        status = _cell(item, STATUS_LABEL)
        if not received or not kind or not status:
            continue
        subtype = _cell(item, SUBTYPE_LABEL)
        location = _cell(item, LOCATION_LABEL)
        unit = _cell(item, UNIT_LABEL)

        event = md5_hex(f"{received}{kind}{location}")
        full_kind = f"{kind} - {subtype}" if subtype else kind
        records.append(
            Record(
                id=f"{event}_{status}",
                title=f"{location} - {full_kind}",
                content=f"{unit} - {status}",
                timestamp=received,
                url=f"{CASE_LIST_URL}?Parser={CASE_LIST_PARSER}",
                fields={
                    "time": received,
                    "type": kind,
                    "subtype": subtype,
                    "location": location,
                    "unit": unit,
                    "status": status,
                },
            )
        )
    return records


@dataclass(slots=True)
class TccfdSource(HttpSource):
    name: ClassVar[str] = "tccfd"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        return parse_case_list(await get_text(client, CASE_LIST_URL, Parser=CASE_LIST_PARSER))

    def build_message(self, record: Record, spec: SourceSpec) -> str:
        kind = record.get("type")
        subtype = record.get("subtype")
        status = record.get("status")
        location = record.get("location")

        medical = "救護" in kind or any(word in subtype for word in ("急病", "路倒"))
        type_emoji = "🏥" if medical else "🚒"
        status_emoji = first_match(status, STATUS_EMOJI)
        site = spec.url or f"{CASE_LIST_URL}?Parser={CASE_LIST_PARSER}"
        map_url = MAP_SEARCH_URL + quote(CITY + location)
        header = f"{type_emoji} {link(site, spec.display_name)} | {escape(status)}"
        return "\n".join(
            (
                f"{header} {status_emoji}".rstrip(),
                "",
                f"📍 {link(map_url, location)} ({escape(kind)}/{escape(subtype)})",
                f"派遣分隊: {escape(record.get('unit'))}",
                "",
                f"受理時間: {escape(record.get('time'))}",
            )
        )
