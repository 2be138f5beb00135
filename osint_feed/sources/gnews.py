"""GNews v4 search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.types import Article, SourceQuery
from ..fetch.fetcher import fetch_json
from ..utils.dates import ymd
from .base import NewsSource, build_article, json_list, keep_articles


ENDPOINT = "https://gnews.io/api/v4/search"


@dataclass
class GnewsItem:
    url: str | None
    title: str = ""
    published_at: str = ""
    description: str | None = None

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> "GnewsItem":
        return cls(
            url=raw.get("url"),
            title=raw.get("title") or "",
            published_at=raw.get("publishedAt") or "",
            description=raw.get("description") or None,
        )


class GnewsSource(NewsSource):
    name = "gnews"
    max_page_size = 100
    excerpt_chars = 1000
    requires_key = True

    def api_key(self) -> str | None:
        return self.cfg.gnews_api_key

    async def fetch(self, query: SourceQuery) -> list[Article]:
        if not self.is_configured():
            return []
        lang = (query.language or "en")[:2]
        params = {
            "q": self.query_text(query),
            "from": ymd(query.start),
            "to": ymd(query.end),
            "lang": lang,
            "token": self.api_key(),
            "max": str(self.page_size(query)),
            "sortby": "publishedAt",
        }
        data = await fetch_json(
            ENDPOINT,
            params,
            timeout=self.cfg.timeout_seconds,
            client=self.client,
            label=self.name,
        )
        items = [GnewsItem.from_json(raw) for raw in json_list(data, "articles")]
        return keep_articles([self.to_article(item, lang) for item in items])

    def to_article(self, item: GnewsItem, lang: str | None = None) -> Article | None:
        return build_article(
            source=self.name,
            url=item.url,
            title=item.title,
            published_at=item.published_at,
            description=item.description,
            excerpt=item.description,
            lang=lang,
            excerpt_chars=self.excerpt_chars,
        )
