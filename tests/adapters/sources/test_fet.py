from __future__ import annotations

import httpx
import pytest

from noticewatch.adapters.sources import FetSource, SourceFormatError, md5_hex
from noticewatch.adapters.sources.fet import ANNOUNCE_PAGE_URL, parse_announcements
from tests.helpers.http import make_client_factory, route

# 2026-01-05 00:00 UTC, in milliseconds.
PAYLOAD = {
    "result": [
        {"date": 1767571200000, "title": "系統維護", "content": "<p>1/6 凌晨</p><p>暫停</p>"},
        {"date": None, "title": "無日期公告", "content": ""},
    ]
}


def test_parse_announcements_uses_local_date_in_id() -> None:
    records = parse_announcements(PAYLOAD)

    assert records[0].id == md5_hex("系統維護+2026-01-05")
    assert records[0].timestamp == "2026-01-05"
    assert records[0].content == "1/6 凌晨 暫停"
    assert records[0].url == ANNOUNCE_PAGE_URL
    assert records[1].id == md5_hex("無日期公告+")
    assert records[1].timestamp is None


def test_parse_announcements_rejects_unexpected_shape() -> None:
    with pytest.raises(SourceFormatError):
        parse_announcements({"result": "unavailable"})


def test_source_requests_first_page() -> None:
    handler = route({"offset=0&limit=10": httpx.Response(200, json=PAYLOAD)})
    source = FetSource(client_factory=make_client_factory(handler))

    assert len(source.fetch()) == 2
