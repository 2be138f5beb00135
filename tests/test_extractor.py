"""Tests for main-content extraction."""

from __future__ import annotations

import asyncio

import httpx

from osint_feed.config import FetchConfig
from osint_feed.core.types import ExtractedContent
from osint_feed.fetch.extractor import extract_article, extract_batch, extract_from_url, extract_text


PARAGRAPH = (
    "Ukrainian air defence units reported intercepting a large wave of drones overnight, "
    "while officials in Kharkiv said energy infrastructure had been damaged, and repair crews "
    "were working to restore power to several districts before the morning commute."
)

ARTICLE_HTML = f"""
<html>
  <head><title>Night of drones over Kharkiv</title></head>
  <body>
    <nav><a href="/">Home</a> <a href="/world">World</a></nav>
    <article>
      <h1>Night of drones over Kharkiv</h1>
      <p>{PARAGRAPH}</p>
      <p>{PARAGRAPH}</p>
      <p>{PARAGRAPH}</p>
    </article>
    <footer>Copyright Example News</footer>
  </body>
</html>
"""


async def _public(host: str) -> list[str]:
    return ["93.184.216.34"]


def test_extract_article_finds_main_content():
    content = extract_article(ARTICLE_HTML, "https://news.example/kharkiv")

    assert "air defence units" in content.text_content
    assert content.title
    assert content.content
    assert content.length == len(content.text_content)
    assert content.to_dict()["textContent"] == content.text_content


def test_extract_article_empty_page_is_not_an_error():
    content = extract_article("   ")
    assert content == ExtractedContent()
    assert content.length == 0


def test_extract_text_chain_falls_back_to_bs4():
    html = "<html><body><script>var x = 1;</script><p>Short note</p></body></html>"
    assert extract_text(html, "unknown", ["bs4"]) == "Short note"


def test_extract_from_url_sends_browser_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.headers)
        return httpx.Response(200, text=ARTICLE_HTML, headers={"Content-Type": "text/html; charset=utf-8"})

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await extract_from_url("https://news.example/kharkiv", FetchConfig(), client=client, resolver=_public)

    content = asyncio.run(go())

    assert "air defence units" in content.text_content
    assert seen["user-agent"].startswith("Mozilla/5.0")
    assert "text/html" in seen["accept"]


def test_extract_batch_isolates_failures():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/missing":
            return httpx.Response(404)
        return httpx.Response(200, text=ARTICLE_HTML, headers={"Content-Type": "text/html"})

    urls = ["https://news.example/ok", "https://news.example/missing", "http://127.0.0.1/admin"]

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await extract_batch(urls, FetchConfig(), client=client, resolver=_public)

    results = asyncio.run(go())

    assert list(results) == urls
    assert isinstance(results[urls[0]], ExtractedContent)
    assert results[urls[1]] == {"error": "HTTP 404"}
    assert "Blocked" in results[urls[2]]["error"]
