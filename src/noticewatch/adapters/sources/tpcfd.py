"""Taipei City Fire Department live dispatch list."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from noticewatch.domain.types import Record

from .base import (
    HttpSource,
    KeywordRules,
    SourceFormatError,
    escape,
    first_match,
    link,
    md5_hex,
    timestamp_sort_key,
)

if TYPE_CHECKING:
    from noticewatch.adapters.http_resilience import ResilientClient
    from noticewatch.domain.types import SourceSpec


CASE_LIST_URL: Final[str] = "https://service119.tfd.gov.tw/service119/citizenCase/caseList"
CASE_PAGE_URL: Final[str] = "https://service119.tfd.gov.tw/service119/citizenCase.php"
SITE_URL: Final[str] = "https://service119.tfd.gov.tw/"

TYPE_EMOJI: Final[KeywordRules] = ((("救護",), "🏥"),)
STATUS_EMOJI: Final[KeywordRules] = (
    (("已派遣", "已出勤"), "🚨"),
    (("到達",), "📍"),
    (("離開",), "🚑"),
    (("返隊",), "🏠"),
)


class CaseRow(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    in_time: str | None = Field(default=None, alias="inTime")
    kind: str | None = Field(default=None, alias="csKindName")
    status: str | None = Field(default=None, alias="caseStatus")
    place: str = Field(default="", alias="csPlaceFuzzy")


class CaseList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rows: list[CaseRow]


def parse_cases(payload: object) -> list[Record]:
    """Records keyed ``md5(time + kind)_status``, oldest case first."""

    try:
        case_list = CaseList.model_validate(payload)
    except ValidationError as exc:
        raise SourceFormatError(f"Unexpected TPCFD payload: {exc}") from exc

    records: list[Record] = []
    for row in case_list.rows:
        if not row.in_time or not row.kind or not row.status:
            continue
        event = md5_hex(row.in_time + row.kind)
        records.append(
            Record(
                id=f"{event}_{row.status}",
                title=f"{row.place} - {row.kind}",
                content=row.status,
                timestamp=row.in_time,
                url=CASE_PAGE_URL,
                fields={
                    "in_time": row.in_time,
                    "type": row.kind,
                    "status": row.status,
                    "location": row.place,
                },
            )
        )

    records.sort(key=timestamp_sort_key)
    return records


@dataclass(slots=True)
class TpcfdSource(HttpSource):
    name: ClassVar[str] = "tpcfd"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        response = await client.post(CASE_LIST_URL, data={"t": str(random.random())})  # noqa: S311
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceFormatError("TPCFD case list is not JSON") from exc
        return parse_cases(payload)

    def build_message(self, record: Record, spec: SourceSpec) -> str:
        kind = record.get("type")
        status = record.get("status")
        type_emoji = first_match(kind, TYPE_EMOJI, "🚒")
        status_emoji = first_match(status, STATUS_EMOJI)
        header = f"{type_emoji} {link(spec.url or SITE_URL, spec.display_name)} | {escape(status)}"
        return "\n".join(
            (
                f"{header} {status_emoji}".rstrip(),
                "",
                f"📍 <b>{escape(record.get('location'))}</b> ({escape(kind)})",
                f"時間: {escape(record.get('in_time'))}",
            )
        )
