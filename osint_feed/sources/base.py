"""
Abstract base class for news sources.

New sources should inherit from NewsSource and implement ``fetch``. Each
concrete source owns a small wire dataclass for its upstream response
shape and a single mapping into the common Article type.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Any

import httpx

from ..config import SourcesConfig
from ..core.types import Article, SourceQuery
from ..core.urls import canonicalize, identity, is_http_url


DEFAULT_PAGE_SIZE = 100


class NewsSource(ABC):
    """One external content origin queried for a date window and topic.

    Attributes:
        name: Registry name used in requests and stats
        max_page_size: Hard ceiling on items requested per call
        excerpt_chars: Maximum length of ``Article.content_excerpt``
        requires_key: Whether ``fetch`` needs a configured credential
    """

    name: str = ""
    max_page_size: int = DEFAULT_PAGE_SIZE
    excerpt_chars: int = 500
    requires_key: bool = False

    def __init__(
        self,
        cfg: SourcesConfig,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ):
        self.cfg = cfg
        self.client = client
        self.logger = logger

    def api_key(self) -> str | None:
        return None

    def is_configured(self) -> bool:
        """False when a required credential is missing; fetch then returns []."""
        return not self.requires_key or bool(self.api_key())

    def page_size(self, query: SourceQuery) -> int:
        return min(query.max_per_source or DEFAULT_PAGE_SIZE, self.max_page_size)

    def query_text(self, query: SourceQuery) -> str:
        return query.q or self.cfg.default_query

    @abstractmethod
    async def fetch(self, query: SourceQuery) -> list[Article]:
        """Return normalized articles for ``query``.

        Returns an empty list without error when ``is_configured`` is False.
        Any other failure propagates and is isolated by the aggregator.
        """
        raise NotImplementedError


def build_article(
    source: str,
    url: str | None,
    title: str | None,
    published_at: str | None,
    description: str | None = None,
    excerpt: str | None = None,
    lang: str | None = None,
    excerpt_chars: int = 500,
) -> Article | None:
    """Assemble an Article with a canonical URL and derived id.

    Returns None when ``url`` is not an absolute http(s) URL.
    """
    if not url or not is_http_url(url.strip()):
        return None
    canonical = canonicalize(url.strip())
    return Article(
        id=identity(canonical),
        source=source,
        title=(title or "").strip(),
        url=canonical,
        published_at=(published_at or "").strip(),
        description=description,
        content_excerpt=(excerpt or "")[:excerpt_chars],
        lang=lang,
    )


def keep_articles(items: list[Article | None]) -> list[Article]:
    return [item for item in items if item is not None]


def json_list(data: Any, *path: str) -> list[dict[str, Any]]:
    """Follow ``path`` through nested dicts and return the object items found there."""
    for key in path:
        if not isinstance(data, dict):
            return []
        data = data.get(key)
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]
