"""JYB (巧巧郎) notice posts from the public post API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from noticewatch.domain.types import Record

from .base import HttpSource, SourceFormatError, clip, get_json, strip_html

if TYPE_CHECKING:
    from noticewatch.adapters.http_resilience import ResilientClient

POST_INDEX_URL: Final[str] = "https://api.jyb.com.tw/post/v1frontend/post/index"
PAGE_SIZE: Final[int] = 10


class JybPost(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    poid: str
    title: str = ""
    content: str = ""
    published_at: str | None = Field(default=None, alias="publishedAt")


class JybPostPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    posts: list[JybPost] = Field(default_factory=list[JybPost], alias="list")


def first_image(markup: str) -> str:
    image = BeautifulSoup(markup, "html.parser").find("img", src=True)
    return str(image["src"]) if image else ""


def parse_posts(payload: object) -> list[Record]:
    try:
        page = JybPostPage.model_validate(payload)
    except ValidationError as exc:
        raise SourceFormatError(f"Unexpected JYB payload: {exc}") from exc
    return [
        Record(
            id=post.poid,
            title=post.title,
            content=clip(strip_html(post.content)),
            timestamp=post.published_at,
            poster=first_image(post.content),
        )
        for post in page.posts
    ]


@dataclass(slots=True)
class JybSource(HttpSource):
    name: ClassVar[str] = "jyb"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        payload = await get_json(
            client,
            POST_INDEX_URL,
            type="notice",
            label="",
            page=1,
            pageSize=PAGE_SIZE,
        )
        return parse_posts(payload)
