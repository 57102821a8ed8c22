from __future__ import annotations

import httpx
import pytest

from noticewatch.adapters.sources import JybSource, SourceFormatError
from noticewatch.adapters.sources.jyb import parse_posts
from tests.helpers.http import make_client_factory

PAYLOAD = {
    "list": [
        {
            "poid": 101,
            "title": "春節營業時間",
            "content": (
                "<p>除夕<br>公休</p>"
                '<img src="https://img.jyb/a.jpg"><img src="https://img.jyb/b.jpg">'
            ),
            "publishedAt": "2026-01-20 10:00:00",
        },
        {"poid": "100", "title": "會員日", "content": "<p>全館 9 折</p>"},
    ]
}


def test_parse_posts_builds_records() -> None:
    records = parse_posts(PAYLOAD)

    first, second = records
    assert first.id == "101"
    assert first.content == "除夕 公休"
    assert first.poster == "https://img.jyb/a.jpg"
    assert first.timestamp == "2026-01-20 10:00:00"
    assert second.poster == ""
    assert second.timestamp is None


def test_parse_posts_rejects_unexpected_payload() -> None:
    with pytest.raises(SourceFormatError):
        parse_posts({"list": [{"title": "missing id"}]})


def test_source_queries_notice_posts() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=PAYLOAD)

    records = JybSource(client_factory=make_client_factory(handler)).fetch()

    assert len(records) == 2
    params = requests[0].url.params
    assert params["type"] == "notice"
    assert params["pageSize"] == "10"


def test_source_reports_non_json_answers() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(SourceFormatError):
        JybSource(client_factory=make_client_factory(handler)).fetch()
