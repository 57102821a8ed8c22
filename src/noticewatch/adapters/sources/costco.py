"""Costco Taiwan news page, published through the storefront CMS API."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from noticewatch.domain.types import Record, RecordDetail

from .base import HttpDetailSource, SourceFormatError, get_json, md5_hex, strip_html

if TYPE_CHECKING:
    from noticewatch.adapters.http_resilience import ResilientClient

SITE_URL: Final[str] = "https://www.costco.com.tw"
CMS_PAGES_URL: Final[str] = f"{SITE_URL}/rest/v3/taiwan/cms/pages"
NEWS_PAGE_LABEL: Final[str] = "Newspage"
TITLE_LENGTH: Final[int] = 50

_DATE = re.compile(r"\d{4}/\d{2}/\d{2}")
_MEDIA_SRC = re.compile(r'src="([^"]*mediapermalink/[^"]+)"')
_IGNORED_IMAGE_MARKERS: Final[tuple[str, ...]] = (
    "social_icon",
    "appicon",
    "footericon",
    "GOLDSTAR",
    "BUSINESS",
    "Executive",
    "icon_membership",
)


class CmsModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class HtmlRenderRef(CmsModel):
    html: str = ""


class HtmlRenderBlock(CmsModel):
    html_render_component_ref: list[HtmlRenderRef] = Field(default_factory=list[HtmlRenderRef])


class AdImage(CmsModel):
    url: str = ""


class AdBuilderRef(CmsModel):
    image: AdImage | None = None


class AdBuilderBlock(CmsModel):
    ad_builder_ref: list[AdBuilderRef] = Field(default_factory=list[AdBuilderRef])


class RowComposer(CmsModel):
    html_render_component_block: HtmlRenderBlock | None = None
    ad_builder_block: AdBuilderBlock | None = None


class Row(CmsModel):
    row_composer: list[RowComposer] = Field(default_factory=list[RowComposer])


class PageComposerItem(CmsModel):
    row: Row | None = None


class SlotComponent(CmsModel):
    content: str = ""


class SlotComponents(CmsModel):
    component: list[SlotComponent] = Field(default_factory=list[SlotComponent])


class ContentSlot(CmsModel):
    components: SlotComponents | None = None


class ContentSlots(CmsModel):
    content_slot: list[ContentSlot] = Field(default_factory=list[ContentSlot], alias="contentSlot")


class CmsPage(CmsModel):
    page_composer: list[PageComposerItem] = Field(default_factory=list[PageComposerItem])
    content_slots: ContentSlots | None = Field(default=None, alias="contentSlots")

    def composers(self) -> list[RowComposer]:
        return [
            composer
            for item in self.page_composer
            if item.row is not None
            for composer in item.row.row_composer
        ]

    def rendered_html(self) -> str:
        return "".join(
            composer.html_render_component_block.html_render_component_ref[0].html
            for composer in self.composers()
            if composer.html_render_component_block is not None
            and composer.html_render_component_block.html_render_component_ref
        )

    def ad_images(self) -> list[str]:
        return [
            ref.image.url
            for composer in self.composers()
            if composer.ad_builder_block is not None
            for ref in composer.ad_builder_block.ad_builder_ref
            if ref.image is not None and ref.image.url
        ]

    def slot_images(self) -> list[str]:
        if self.content_slots is None:
            return []
        images: list[str] = []
        for slot in self.content_slots.content_slot:
            if slot.components is None:
                continue
            for component in slot.components.component:
                for src in _MEDIA_SRC.findall(component.content):
                    if any(marker in src for marker in _IGNORED_IMAGE_MARKERS):
                        continue
                    url = absolute_url(src)
                    if url not in images:
                        images.append(url)
        return images


def absolute_url(href: str) -> str:
    return href if href.startswith("http") else f"{SITE_URL}{href}"


def page_id_from_href(href: str) -> str:
    return href.removeprefix("/content/").removeprefix("/")


def load_page(payload: object) -> CmsPage:
    try:
        return CmsPage.model_validate(payload)
    except ValidationError as exc:
        raise SourceFormatError(f"Unexpected Costco CMS payload: {exc}") from exc


def parse_news_rows(markup: str) -> list[Record]:
    """Read the dated rows of the news table.

    A row linking to its own CMS page becomes a record keyed by the page id;
    a plain-text row is keyed by a hash of its text and date.
    """

    records: list[Record] = []
    seen: set[str] = set()
    for date_cell in BeautifulSoup(markup, "html.parser").find_all("td", class_="Date"):
        date_match = _DATE.search(date_cell.get_text())
        row = date_cell.find_parent("tr")
        if date_match is None or row is None:
            continue
        published = date_match.group(0)

        anchor = row.find("a", href=True)
        if anchor is not None:
            href = str(anchor["href"]).strip()
            page_id = page_id_from_href(href)
            record = Record(
                id=page_id,
                title=strip_html(anchor.get_text(" ")),
                timestamp=published,
                url=absolute_url(href),
                detail_key=page_id,
            )
        else:
            paragraph = row.find("p", class_="footerH3")
            content = strip_html(paragraph.get_text(" ")) if paragraph else ""
            if not content:
                continue
            title = content[:TITLE_LENGTH] + ("..." if len(content) > TITLE_LENGTH else "")
            record = Record(
                id=md5_hex(content + published),
                title=title,
                content=content,
                timestamp=published,
            )

        if record.id in seen:
            continue
        seen.add(record.id)
        records.append(record)
    return records


def cms_params(page_label: str) -> dict[str, str | int]:
    return {
        "pageType": "ContentPage",
        "pageLabelOrId": page_label,
        "lang": "zh_TW",
        "curr": "TWD",
    }


@dataclass(slots=True)
class CostcoSource(HttpDetailSource):
    name: ClassVar[str] = "costco"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        page = load_page(await get_json(client, CMS_PAGES_URL, **cms_params(NEWS_PAGE_LABEL)))
        markup = page.rendered_html()
        if not markup:
            raise SourceFormatError("Costco news page carries no rendered HTML")
        return parse_news_rows(markup)

    async def fetch_detail_with(self, client: ResilientClient, key: str) -> RecordDetail:
        page = load_page(await get_json(client, CMS_PAGES_URL, **cms_params(key)))
        images = page.ad_images() or page.slot_images()
        return RecordDetail(images=tuple(images))
