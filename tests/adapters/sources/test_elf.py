from __future__ import annotations

import httpx

from noticewatch.adapters.sources import ElfSource, md5_hex
from noticewatch.adapters.sources.elf import NEWS_URL, parse_news
from tests.helpers.http import make_client_factory, route

NEWS_PAGE = """
<div class="news">
  <div class="news-date"><img src="/images/icon-news-date.png"> 2026-01-05</div>
  <div class="news-text">春節 營業時間</div>
  <div class="new-textContent"><p>除夕</p><p>公休</p></div>
</div>
<div class="news">
  <div class="news-date"><img src="/images/icon-news-date.png"></div>
  <div class="news-text">沒有日期</div>
</div>
<div class="news">
  <div class="news-date"><img src="/images/icon-news-date.png">2026-01-02</div>
  <div class="news-text">新年快樂</div>
</div>
"""


def test_parse_news_keys_records_by_title_and_date() -> None:
    records = parse_news(NEWS_PAGE)

    assert [record.id for record in records] == [
        md5_hex("春節 營業時間+2026-01-05"),
        md5_hex("新年快樂+2026-01-02"),
    ]
    assert records[0].content == "除夕 公休"
    assert records[0].timestamp == "2026-01-05"
    assert records[0].url == NEWS_URL
    assert records[1].content == ""


def test_parse_news_clips_long_content() -> None:
    page = (
        '<div class="news"><div><img src="icon-news-date.png">2026-01-05</div>'
        f'<div class="news-text">長公告</div><div class="new-textContent">{"字" * 600}</div></div>'
    )

    assert len(parse_news(page)[0].content) == 500


def test_source_fetches_news_page() -> None:
    handler = route({"news.aspx": httpx.Response(200, text=NEWS_PAGE)})
    source = ElfSource(client_factory=make_client_factory(handler))

    assert [record.title for record in source.fetch()] == ["春節 營業時間", "新年快樂"]
