"""Currents API keyword search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.types import Article, SourceQuery
from ..fetch.fetcher import fetch_json
from ..utils.dates import ymd
from .base import NewsSource, build_article, json_list, keep_articles


ENDPOINT = "https://api.currentsapi.services/v1/search"


@dataclass
class CurrentsItem:
    url: str | None
    title: str = ""
    published: str = ""
    description: str | None = None
    language: str | None = None

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> "CurrentsItem":
        return cls(
            url=raw.get("url"),
            title=raw.get("title") or "",
            published=raw.get("published") or "",
            description=raw.get("description") or None,
            language=raw.get("language") or None,
        )


class CurrentsSource(NewsSource):
    name = "currents"
    max_page_size = 200
    excerpt_chars = 1000
    requires_key = True

    def api_key(self) -> str | None:
        return self.cfg.currents_api_key

    async def fetch(self, query: SourceQuery) -> list[Article]:
        if not self.is_configured():
            return []
        params = {
            "keywords": self.query_text(query),
            "start_date": ymd(query.start),
            "end_date": ymd(query.end),
            "language": query.language or "en",
            "page_size": str(self.page_size(query)),
            "apiKey": self.api_key(),
        }
        data = await fetch_json(
            ENDPOINT,
            params,
            timeout=self.cfg.timeout_seconds,
            client=self.client,
            label=self.name,
        )
        items = [CurrentsItem.from_json(raw) for raw in json_list(data, "news")]
        return keep_articles([self.to_article(item) for item in items])

    def to_article(self, item: CurrentsItem) -> Article | None:
        return build_article(
            source=self.name,
            url=item.url,
            title=item.title,
            published_at=item.published,
            description=item.description,
            excerpt=item.description,
            lang=item.language,
            excerpt_chars=self.excerpt_chars,
        )
