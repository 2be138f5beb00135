"""
HTML main-content extraction.

This module isolates the article body from navigation, ads and boilerplate:
1. readability: Mozilla's readability algorithm for the main content block
2. trafilatura: byline/title metadata and a text fallback
3. bs4: HTML to plain text conversion

``extract_from_url`` fetches through the guarded fetcher with strict host
safety before running the extraction.
"""

from __future__ import annotations

from html import escape
import logging
from typing import Callable, Iterable

from bs4 import BeautifulSoup
import httpx
from readability import Document
from readability.readability import Unparseable
import trafilatura

from ..config import FetchConfig
from ..core.types import ExtractedContent
from ..utils.logging import log_event
from .fetcher import guarded_fetch
from .guard import Resolver


def extract_text(html: str, primary: str, fallback: list[str]) -> str | None:
    """Extract plain text from HTML using a chain of extractors.

    Tries each extraction method in order until one produces non-empty
    output.

    Args:
        html: The HTML content to extract text from
        primary: Name of the primary extraction method to try first
        fallback: List of fallback method names to try if primary fails

    Returns:
        Extracted plain text with leading/trailing whitespace stripped,
        or None if all methods fail
    """
    order = [primary] + [name for name in fallback if name != primary]
    for method in order:
        extractor = _get_extractor(method)
        if not extractor:
            continue
        text = extractor(html)
        if text:
            return text.strip()
    return None


def extract_article(html: str, url: str | None = None) -> ExtractedContent:
    """Run readability-style extraction over a page.

    Never raises: a page without a recognizable article yields an
    all-empty ExtractedContent.
    """
    if not html or not html.strip():
        return ExtractedContent()

    title = ""
    content = ""
    try:
        doc = Document(html, url=url)
        content = (doc.summary(html_partial=True) or "").strip()
        title = (doc.short_title() or "").strip()
    except (Unparseable, ValueError):
        content = ""

    text_content = _html_to_text(content) if content else ""
    metadata = _metadata(html, url)
    byline = (getattr(metadata, "author", None) or "").strip()
    if not title:
        title = (getattr(metadata, "title", None) or "").strip()

    if not text_content:
        text_content = (_extract_trafilatura(html) or "").strip()
        if not text_content:
            return ExtractedContent()
        content = "".join(f"<p>{escape(line)}</p>" for line in text_content.splitlines() if line.strip())

    return ExtractedContent(title=title, byline=byline, text_content=text_content, content=content)


async def extract_from_url(
    url: str,
    cfg: FetchConfig,
    client: httpx.AsyncClient | None = None,
    resolver: Resolver | None = None,
) -> ExtractedContent:
    """Fetch ``url`` with strict host safety and extract its main content.

    Raises:
        InvalidUrlError, FetchError: When the page cannot be retrieved safely
    """
    result = await guarded_fetch(
        url,
        timeout=cfg.timeout_seconds,
        max_redirects=cfg.max_redirects,
        max_content_bytes=cfg.max_content_bytes,
        headers=browser_headers(cfg),
        client=client,
        resolver=resolver,
    )
    return extract_article(result.text, result.final_url)


async def extract_batch(
    urls: Iterable[str],
    cfg: FetchConfig,
    client: httpx.AsyncClient | None = None,
    resolver: Resolver | None = None,
    logger: logging.Logger | None = None,
) -> dict[str, ExtractedContent | dict[str, str]]:
    """Extract several URLs one after another.

    Each URL's failure is recorded as ``{"error": message}`` under that URL
    instead of aborting the batch.
    """
    results: dict[str, ExtractedContent | dict[str, str]] = {}
    for url in urls:
        try:
            results[url] = await extract_from_url(url, cfg, client=client, resolver=resolver)
        except Exception as exc:  # noqa: BLE001
            log_event(
                logger,
                "Extract failed",
                level=logging.WARNING,
                event="extract_failed",
                url=url,
                error=str(exc) or type(exc).__name__,
            )
            results[url] = {"error": str(exc) or type(exc).__name__}
    return results


def browser_headers(cfg: FetchConfig) -> dict[str, str]:
    """Realistic browser headers; some origins reject empty user agents."""
    return {
        "User-Agent": cfg.user_agent,
        "Accept": cfg.accept,
        "Accept-Language": cfg.accept_language,
    }


def _metadata(html: str, url: str | None):
    try:
        return trafilatura.extract_metadata(html, default_url=url)
    except Exception:  # noqa: BLE001
        return None


def _get_extractor(name: str) -> Callable[[str], str | None] | None:
    if name == "trafilatura":
        return _extract_trafilatura
    if name == "readability":
        return _extract_readability
    if name == "bs4":
        return _extract_bs4
    return None


def _extract_trafilatura(html: str) -> str | None:
    return trafilatura.extract(html)


def _extract_readability(html: str) -> str | None:
    try:
        content_html = Document(html).summary()
    except (Unparseable, ValueError):
        return None
    return _extract_bs4(content_html)


def _extract_bs4(html: str) -> str | None:
    """Extract plain text from HTML using BeautifulSoup.

    Removes script/style tags and keeps non-empty lines only.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text(separator="\n")
    cleaned = "\n".join([line.strip() for line in text.splitlines() if line.strip()])
    return cleaned if cleaned else None


def _html_to_text(html: str) -> str:
    return _extract_bs4(html) or ""
