"""지역 역사(Wikipedia) 조회 서비스 테스트."""

from __future__ import annotations

import asyncio

import pytest

from app.services.history_service import HistoryService, sanitize_for_wikipedia


class _FakePage:
    def __init__(self, title: str, summary: str | None) -> None:
        self.title = title
        self.summary = summary

    def exists(self) -> bool:
        return self.summary is not None


class FakeWikipedia:
    def __init__(self, articles: dict[str, str], *, fail: bool = False) -> None:
        self.articles = articles
        self.fail = fail
        self.requested: list[str] = []

    def page(self, title: str) -> _FakePage:
        self.requested.append(title)
        if self.fail:
            raise ConnectionError("wikipedia unreachable")
        return _FakePage(title, self.articles.get(title))


@pytest.mark.parametrize(
    ("location", "expected"),
    [
        ("Austin, TX, USA", "Austin, Texas"),
        ("Portland, OR", "Portland, Oregon"),
        ("Paris, France", "Paris, France"),
        ("Springfield, ZZ", "Springfield, ZZ"),
        ("  Kyoto  ", "Kyoto"),
    ],
)
def test_sanitize_for_wikipedia(location: str, expected: str) -> None:
    assert sanitize_for_wikipedia(location) == expected


def test_lookup_returns_summary_for_sanitized_title() -> None:
    wiki = FakeWikipedia({"Austin, Texas": "Austin is the capital of Texas."})

    result = asyncio.run(HistoryService(wiki).lookup("Austin, TX, USA"))

    assert wiki.requested == ["Austin, Texas"]
    assert result.title == "Austin, Texas"
    assert result.extract == "Austin is the capital of Texas."


def test_lookup_missing_article_returns_none() -> None:
    assert asyncio.run(HistoryService(FakeWikipedia({})).lookup("Atlantis")) is None


def test_lookup_failure_returns_none() -> None:
    assert asyncio.run(HistoryService(FakeWikipedia({}, fail=True)).lookup("Paris")) is None


def test_long_summary_is_truncated_at_sentence() -> None:
    summary = "First sentence is here. Second sentence is a little longer. " + "x" * 200
    wiki = FakeWikipedia({"Paris": summary})

    result = asyncio.run(HistoryService(wiki, max_chars=80).lookup("Paris"))

    assert result.extract == "First sentence is here. Second sentence is a little longer."
