"""Tests for request validation and the service operations."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from osint_feed.config import AppConfig
from osint_feed.core.types import AggregateResult, AggregateStats, Article
from osint_feed.errors import ConfigurationError, RequestValidationError
from osint_feed.service import OsintService


ARTICLE_HTML = """
<html><head><title>Front line update</title></head>
<body>
  <nav>Home | World | Sport</nav>
  <article>
    <h1>Front line update</h1>
    <p>Officials reported renewed shelling near the river crossing on Tuesday morning,
    according to statements released by the regional administration.</p>
    <p>Residents described damage to several residential buildings and a power substation,
    while repair crews worked through the afternoon to restore electricity.</p>
    <p>Analysts said the pattern of strikes matched activity observed over the previous week,
    with most attacks concentrated along the same stretch of the front.</p>
  </article>
  <footer>Copyright</footer>
</body></html>
"""


class _StubAggregator:
    def __init__(self):
        self.calls = []

    async def aggregate(self, query, source_names=None):
        self.calls.append((query, source_names))
        article = Article(id="a1", source="gdelt", title="Story", url="https://news.example/story")
        return AggregateResult(articles=[article], stats=[AggregateStats("gdelt", 1, 5)])


class _EchoProvider:
    async def generate(self, model, parts, logger=None):
        return "## Executive Summary\n- Item [#1]"


async def _public(host: str) -> list[str]:
    return ["93.184.216.34"]


def _analyze_body(**overrides):
    body = {
        "start": "2024-05-01",
        "end": "2024-05-03",
        "q": "Ukraine",
        "articles": [{"url": "https://news.example/story", "title": "Story", "extra": "ignored"}],
    }
    body.update(overrides)
    return body


@pytest.mark.parametrize(
    "params, fragment",
    [
        ({"start": "2024-05-01", "end": "2024-05-03", "sources": "gdelt,twitter"}, "twitter"),
        ({"start": "2024-05-01", "end": "2024-05-03", "max_per_source": 0}, "maxPerSource"),
        ({"start": "2024-05-01", "end": "2024-05-03", "maxPerSource": 0}, "maxPerSource"),
        ({"start": "2024-05-01", "end": "2024-05-03", "max_per_source": 201}, "maxPerSource"),
        ({"start": "2024-05-01", "end": "2024-05-03", "maxPerSource": 201}, "maxPerSource"),
        ({"start": "2024-05-01", "end": "2024-05-03", "maxPerSource": 500}, "maxPerSource"),
        ({"start": "2024-05-04", "end": "2024-05-03"}, "end must not be before start"),
        ({"start": "yesterday", "end": "2024-05-03"}, "start"),
    ],
)
def test_get_articles_rejects_invalid_queries(params, fragment):
    service = OsintService(AppConfig(), aggregator=_StubAggregator())

    with pytest.raises(RequestValidationError) as excinfo:
        asyncio.run(service.get_articles(params))
    assert fragment in str(excinfo.value)


def test_get_articles_applies_defaults():
    aggregator = _StubAggregator()
    service = OsintService(AppConfig(), aggregator=aggregator)

    payload = asyncio.run(service.get_articles({"start": "2024-05-01", "end": "2024-05-01", "q": "  "}))

    query, names = aggregator.calls[0]
    assert query.q == "Ukraine"
    assert query.max_per_source == 50
    assert names == ["gdelt", "guardian", "currents", "newsdata", "gnews", "rss"]
    assert payload["count"] == 1
    assert payload["articles"][0]["url"] == "https://news.example/story"
    assert payload["stats"] == [{"source": "gdelt", "count": 1, "ms": 5, "error": None}]


def test_get_articles_accepts_camel_case_bound():
    aggregator = _StubAggregator()
    service = OsintService(AppConfig(), aggregator=aggregator)

    asyncio.run(service.get_articles({"start": "2024-05-01", "end": "2024-05-02", "maxPerSource": 120}))

    query, _ = aggregator.calls[0]
    assert query.max_per_source == 120


def test_analyze_without_credential_is_configuration_error():
    service = OsintService(AppConfig())

    with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
        asyncio.run(service.analyze(_analyze_body()))


def test_analyze_validates_before_checking_credential():
    service = OsintService(AppConfig())

    with pytest.raises(RequestValidationError, match="maxDocs"):
        asyncio.run(service.analyze(_analyze_body(maxDocs=4)))
    with pytest.raises(RequestValidationError, match="url"):
        asyncio.run(service.analyze(_analyze_body(articles=[{"url": "/relative/path"}])))
    with pytest.raises(RequestValidationError, match="articles"):
        asyncio.run(service.analyze(_analyze_body(articles=[])))


def test_analyze_returns_report():
    service = OsintService(AppConfig(), provider=_EchoProvider())

    payload = asyncio.run(service.analyze(_analyze_body(promptPreset="basic", focus="logistics")))

    analysis = payload["analysis"]
    assert analysis["model"] == "gemini-2.5-flash"
    assert analysis["promptPreset"] == "basic"
    assert analysis["focus"] == "logistics"
    assert analysis["chunks"] == 1
    assert analysis["report"].startswith("## Executive Summary")
    assert analysis["fallback"] is None


def test_extract_batch_rejects_oversized_and_relative_input():
    service = OsintService(AppConfig())
    urls = [f"https://news.example/{i}" for i in range(51)]

    with pytest.raises(RequestValidationError):
        asyncio.run(service.extract_batch({"urls": urls}))
    with pytest.raises(RequestValidationError):
        asyncio.run(service.extract_batch({"urls": ["news.example/a"]}))
    with pytest.raises(RequestValidationError):
        asyncio.run(service.extract({"url": "ftp://news.example/a"}))


def test_extract_and_batch_use_guarded_fetch():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/missing":
            return httpx.Response(404)
        return httpx.Response(200, text=ARTICLE_HTML, headers={"Content-Type": "text/html"})

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            service = OsintService(AppConfig(), fetch_client=client, resolver=_public)
            single = await service.extract({"url": "https://news.example/story"})
            batch = await service.extract_batch(
                {"urls": ["https://news.example/story", "https://news.example/missing", "http://127.0.0.1/x"]}
            )
            return single, batch

    single, batch = asyncio.run(go())

    data = single["data"]
    assert "renewed shelling" in data["textContent"]
    assert data["length"] == len(data["textContent"])
    results = batch["results"]
    assert "renewed shelling" in results["https://news.example/story"]["textContent"]
    assert results["https://news.example/missing"] == {"error": "HTTP 404"}
    assert "error" in results["http://127.0.0.1/x"]
