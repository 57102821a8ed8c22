"""Submarine cable incidents around Taiwan (smc.peering.tw)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, ClassVar, Final

from pydantic import BaseModel, ConfigDict, ValidationError

from noticewatch.domain.entries import parse_timestamp
from noticewatch.domain.types import Record

from .base import (
    HttpSource,
    SourceFormatError,
    escape,
    get_json,
    link,
    local_time,
    md5_hex,
    now_local,
    timestamp_sort_key,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from noticewatch.adapters.http_resilience import ResilientClient
    from noticewatch.domain.types import SourceSpec

INCIDENTS_URL: Final[str] = "https://smc.peering.tw/data/incidents.json"
SITE_URL: Final[str] = "https://smc.peering.tw/"
RECENT_WINDOW: Final[timedelta] = timedelta(days=7)
RESOLVED_SUFFIX: Final[str] = "_resolved"


class Incident(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    title: str
    date: str
    description: str = ""
    status: str | None = None
    segment: str | None = None
    cableid: str | None = None
    resolved_at: str | None = None


def _is_recent(value: str, cutoff: datetime) -> bool:
    parsed = parse_timestamp(value)
    return parsed is None or parsed >= cutoff


def parse_incidents(payload: object, *, now: datetime) -> list[Record]:
    """Build one record per recent incident, plus one per recent resolution.

    The incident id hashes title, date and status, so a status change yields a
    new message; a resolution is a separate record suffixed ``_resolved``.
    """

    if not isinstance(payload, list):
        raise SourceFormatError("SMC incidents payload is not a list")
    cutoff = now - RECENT_WINDOW

    records: list[Record] = []
    for raw in payload:
        try:
            incident = Incident.model_validate(raw)
        except ValidationError as exc:
            raise SourceFormatError(f"Unexpected SMC incident: {exc}") from exc
        if not _is_recent(incident.date, cutoff):
            continue

        incident_id = md5_hex(incident.title + incident.date + (incident.status or ""))
        fields = {
            "status": incident.status or "",
            "segment": incident.segment or "",
            "cableid": incident.cableid or "",
        }
        records.append(
            Record(
                id=incident_id,
                title=incident.title,
                content=incident.description,
                timestamp=incident.date,
                url=SITE_URL,
                fields=fields,
            )
        )
        if incident.resolved_at and _is_recent(incident.resolved_at, cutoff):
            records.append(
                Record(
                    id=incident_id + RESOLVED_SUFFIX,
                    title=incident.title,
                    content=incident.description,
                    timestamp=incident.resolved_at,
                    url=SITE_URL,
                    fields={**fields, "resolved": "1", "original_id": incident_id},
                )
            )

    records.sort(key=timestamp_sort_key, reverse=True)
    return records


@dataclass(slots=True)
class SmcSource(HttpSource):
    name: ClassVar[str] = "smc"

    now: Callable[[], datetime] = field(default=now_local)

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        return parse_incidents(await get_json(client, INCIDENTS_URL), now=self.now())

    def build_message(self, record: Record, spec: SourceSpec) -> str:
        site = spec.url or SITE_URL
        resolved = record.get("resolved") == "1"
        prefix, headline = ("✅", "障礙已排除") if resolved else ("💥", "新障礙通報")

        lines = [
            f"<b>{prefix} {link(site, spec.display_name)} | {headline}</b>",
            "",
            f"<b>{escape(record.title)}</b>",
        ]
        if record.content:
            lines.extend(("", escape(record.content)))
        when = local_time(record.timestamp)
        if when:
            label = "排除時間" if resolved else "發生時間"
            lines.extend(("", f"📅 {label}: {when}"))
        lines.append(f"🔗 {link(site, '查看詳情')}")
        return "\n".join(lines)
