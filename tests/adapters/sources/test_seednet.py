from __future__ import annotations

import httpx

from noticewatch.adapters.sources import SeednetSource
from noticewatch.adapters.sources.seednet import parse_notice_list, parse_notice_page
from tests.helpers.http import make_client_factory, route

LIST_PAGE = """
<table>
  <tr><td class="date">2026/01/03</td>
      <td><a href="https://service.seed.net.tw/importantNotice/IN0042.htm">系統
      維護公告</a></td></tr>
  <tr><td class="date">2026/01/01</td>
      <td><a href="https://service.seed.net.tw/importantNotice/IN0041.htm">年度盤點</a></td></tr>
  <tr><td><a href="https://www.seed.net.tw/">首頁</a></td></tr>
</table>
"""
NOTICE_PAGE = """
<table><tr><td class="title">系統維護公告</td></tr>
<tr><td class="ct"><p>1/5 凌晨</p><p>暫停服務</p></td></tr></table>
"""


def test_parse_notice_list_pairs_dates_with_links() -> None:
    records = parse_notice_list(LIST_PAGE)

    assert [record.id for record in records] == ["0042", "0041"]
    assert records[0].title == "系統 維護公告"
    assert records[0].timestamp == "2026/01/03"
    assert records[0].detail_key == "https://service.seed.net.tw/importantNotice/IN0042.htm"


def test_parse_notice_page_reads_title_and_body() -> None:
    detail = parse_notice_page(NOTICE_PAGE)

    assert detail.title == "系統維護公告"
    assert detail.content == "1/5 凌晨 暫停服務"


def test_source_fetches_detail_from_notice_url() -> None:
    handler = route(
        {
            "IN0042.htm": httpx.Response(200, text=NOTICE_PAGE),
            "service_notice": httpx.Response(200, text=LIST_PAGE),
        }
    )
    source = SeednetSource(client_factory=make_client_factory(handler))

    records = source.fetch()
    detail = source.fetch_detail(records[0].detail_key or "")

    assert len(records) == 2
    assert detail.title == "系統維護公告"
