"""Far EasTone (遠傳) customer announcements from the card API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from noticewatch.domain.types import Record

from .base import HttpSource, SourceFormatError, clip, get_json, local_time, md5_hex, strip_html

if TYPE_CHECKING:
    from noticewatch.adapters.http_resilience import ResilientClient

ANNOUNCE_API_URL: Final[str] = "https://www.fetnet.net/bin/cbu/cards/cbuannounce"
ANNOUNCE_PAGE_URL: Final[str] = (
    "https://www.fetnet.net/content/cbu/tw/help-center/announcement.html"
)
PAGE_SIZE: Final[int] = 10


class Announcement(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    content: str = ""
    date: str | int | float | None = None


class AnnouncementPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    result: list[Announcement] = Field(default_factory=list[Announcement])


def parse_announcements(payload: object) -> list[Record]:
    """Records keyed ``md5(title + "+" + YYYY-MM-DD)`` in Taiwan local date."""

    try:
        page = AnnouncementPage.model_validate(payload)
    except ValidationError as exc:
        raise SourceFormatError(f"Unexpected FET payload: {exc}") from exc

    records: list[Record] = []
    for item in page.result:
        published = local_time(item.date, "%Y-%m-%d") or ""
        records.append(
            Record(
                id=md5_hex(f"{item.title}+{published}"),
                title=item.title,
                content=clip(strip_html(item.content)),
                timestamp=published or None,
                url=ANNOUNCE_PAGE_URL,
            )
        )
    return records


@dataclass(slots=True)
class FetSource(HttpSource):
    name: ClassVar[str] = "fet"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        payload = await get_json(client, ANNOUNCE_API_URL, offset=0, limit=PAGE_SIZE)
        return parse_announcements(payload)
