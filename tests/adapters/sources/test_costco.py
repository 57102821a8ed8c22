from __future__ import annotations

import httpx
import pytest

from noticewatch.adapters.sources import CostcoSource, SourceFormatError, md5_hex
from noticewatch.adapters.sources.costco import load_page, page_id_from_href, parse_news_rows
from tests.helpers.http import make_client_factory

PARKING_NOTICE = (
    "本賣場將於一月十五日起至二月二十八日止進行停車場整修工程，"
    "期間請改由 B2 入口進出，造成不便敬請見諒，謝謝您的配合與體諒！"
)
NEWS_TABLE = f"""
<table>
  <tr><td class="Date">2026/01/10</td>
      <td><a href="/content/news-2026-01">新春 營業時間</a></td></tr>
  <tr><td class="Date">2026/01/08</td>
      <td><p class="footerH3">{PARKING_NOTICE}</p></td></tr>
  <tr><td class="Date">日期未定</td><td><a href="/content/draft">草稿</a></td></tr>
  <tr><td class="Date">2026/01/10</td>
      <td><a href="/content/news-2026-01">新春 營業時間</a></td></tr>
</table>
"""


def _composer_page(*composers: dict[str, object]) -> dict[str, object]:
    return {"page_composer": [{"row": {"row_composer": list(composers)}}]}


def _html_block(html: str) -> dict[str, object]:
    return {"html_render_component_block": {"html_render_component_ref": [{"html": html}]}}


def _ad_block(url: str) -> dict[str, object]:
    return {"ad_builder_block": {"ad_builder_ref": [{"image": {"url": url}}]}}


def _slot_page(content: str) -> dict[str, object]:
    component = {"component": [{"content": content}]}
    return {"contentSlots": {"contentSlot": [{"components": component}]}}


def test_parse_news_rows_handles_linked_and_plain_rows() -> None:
    records = parse_news_rows(NEWS_TABLE)

    linked, plain = records
    assert linked.id == "news-2026-01"
    assert linked.url == "https://www.costco.com.tw/content/news-2026-01"
    assert linked.detail_key == "news-2026-01"
    assert linked.title == "新春 營業時間"
    assert plain.content == PARKING_NOTICE
    assert plain.id == md5_hex(PARKING_NOTICE + "2026/01/08")
    assert plain.title == PARKING_NOTICE[:50] + "..."
    assert plain.detail_key is None


def test_page_id_from_href() -> None:
    assert page_id_from_href("/content/news-1") == "news-1"
    assert page_id_from_href("news-2") == "news-2"


def test_detail_prefers_ad_images_then_slot_images() -> None:
    slots_only = load_page(
        _slot_page(
            '<img src="/medias/mediapermalink/news1">'
            '<img src="/medias/mediapermalink/social_icon_fb">'
            '<img src="/medias/mediapermalink/news1">'
        )
    )
    with_ads = load_page(_composer_page(_ad_block("https://a/1.jpg")))

    assert slots_only.ad_images() == []
    assert slots_only.slot_images() == ["https://www.costco.com.tw/medias/mediapermalink/news1"]
    assert with_ads.ad_images() == ["https://a/1.jpg"]


def test_source_fetches_news_page_and_detail() -> None:
    requests: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        label = request.url.params["pageLabelOrId"]
        requests.append(label)
        if label == "Newspage":
            return httpx.Response(200, json=_composer_page(_html_block(NEWS_TABLE)))
        return httpx.Response(200, json=_composer_page(_ad_block("https://a/2.jpg")))

    source = CostcoSource(client_factory=make_client_factory(handler))

    records = source.fetch()
    detail = source.fetch_detail("news-2026-01")

    assert records[0].id == "news-2026-01"
    assert detail.images == ("https://a/2.jpg",)
    assert requests == ["Newspage", "news-2026-01"]


def test_source_requires_rendered_html() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"page_composer": []})

    with pytest.raises(SourceFormatError):
        CostcoSource(client_factory=make_client_factory(handler)).fetch()
