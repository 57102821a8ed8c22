"""Tainan City Fire Department dispatch table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Final

from bs4 import BeautifulSoup

from noticewatch.config.proxy import ForwardProxyConfig, get_forward_proxy_config
from noticewatch.domain.types import Record

from .base import HttpSource, KeywordRules, escape, first_match, link

if TYPE_CHECKING:
    from noticewatch.adapters.http_resilience import ResilientClient
    from noticewatch.domain.types import SourceSpec

CASE_LIST_URL: Final[str] = "https://119dts.tncfd.gov.tw/DTS/caselist/html"
PROXY_ENV_PREFIX: Final[str] = "TNCFD"
COLUMN_COUNT: Final[int] = 7

TYPE_EMOJI: Final[KeywordRules] = (
    (("緊急救護", "救護"), "🏥"),
    (("火災",), "🚒"),
)
STATUS_EMOJI: Final[KeywordRules] = (
    (("已派遣",), "🚨"),
    (("已出動",), "💨"),
    (("已到達",), "📍"),
    (("火已滅",), "🧯"),
    (("已到院",), "🏥"),
    (("返隊中",), "🔙"),
    (("已返隊",), "🏠"),
    (("送醫中",), "🚑"),
)


def parse_case_table(markup: str) -> list[Record]:
    """Read the case table, skipping the header row.

    Columns: serial, case number, received at, type, location, unit, status.
    Cells inside HTML comments are not part of the parsed tree.
    """

    records: list[Record] = []
    rows = BeautifulSoup(markup, "html.parser").find_all("tr")
    for row in rows[1:]:
        cells = [cell.get_text(strip=True) for cell in row.find_all("td")]
        if len(cells) < COLUMN_COUNT:
            continue
        _, case_no, received, kind, location, unit, status = cells[:COLUMN_COUNT]
        if not case_no or not status:
            continue
        records.append(
            Record(
                id=f"{case_no}_{status}",
                title=f"{location} - {kind}",
                content=f"{unit} - {status}",
                timestamp=received or None,
                url=CASE_LIST_URL,
                fields={
                    "case_no": case_no,
                    "time": received,
                    "type": kind,
                    "location": location,
                    "unit": unit,
                    "status": status,
                },
            )
        )
    return records


@dataclass(slots=True)
class TncfdSource(HttpSource):
    """The list blocks most foreign clients; an optional forward proxy can relay it."""

    name: ClassVar[str] = "tncfd"

    proxy: ForwardProxyConfig | None = field(
        default_factory=lambda: get_forward_proxy_config(PROXY_ENV_PREFIX)
    )

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        if self.proxy is not None:
            response = await client.get(
                self.proxy.wrap(CASE_LIST_URL), headers=self.proxy.headers()
            )
        else:
            response = await client.get(CASE_LIST_URL)
        response.raise_for_status()
        return parse_case_table(response.text)

    def build_message(self, record: Record, spec: SourceSpec) -> str:
        kind = record.get("type")
        status = record.get("status")
        type_emoji = first_match(kind, TYPE_EMOJI, "🚒")
        status_emoji = first_match(status, STATUS_EMOJI)
        site = spec.url or CASE_LIST_URL
        header = f"{type_emoji} {link(site, spec.display_name)} | {escape(status)}"
        return "\n".join(
            (
                f"{header} {status_emoji}".rstrip(),
                "",
                f"📍 <b>{escape(record.get('location'))}</b> ({escape(kind)})",
                f"派遣分隊: {escape(record.get('unit'))}",
                "",
                f"案件編號: {escape(record.get('case_no'))}",
                f"受理時間: {escape(record.get('time'))}",
            )
        )
