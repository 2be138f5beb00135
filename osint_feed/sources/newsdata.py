"""NewsData.io latest-news search.

The endpoint has no page-size parameter, so results are sliced locally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.types import Article, SourceQuery
from ..fetch.fetcher import fetch_json
from ..utils.dates import ymd
from .base import NewsSource, build_article, json_list, keep_articles


ENDPOINT = "https://newsdata.io/api/1/news"


@dataclass
class NewsdataItem:
    link: str | None
    title: str = ""
    pub_date: str = ""
    description: str | None = None
    language: str | None = None

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> "NewsdataItem":
        return cls(
            link=raw.get("link"),
            title=raw.get("title") or "",
            pub_date=raw.get("pubDate") or "",
            description=raw.get("description") or None,
            language=raw.get("language") or None,
        )


class NewsdataSource(NewsSource):
    name = "newsdata"
    max_page_size = 100
    excerpt_chars = 1000
    requires_key = True

    def api_key(self) -> str | None:
        return self.cfg.newsdata_api_key

    async def fetch(self, query: SourceQuery) -> list[Article]:
        if not self.is_configured():
            return []
        params = {
            "apikey": self.api_key(),
            "q": self.query_text(query),
            "from_date": ymd(query.start),
            "to_date": ymd(query.end),
            "language": query.language or "en",
            "page": "1",
        }
        data = await fetch_json(
            ENDPOINT,
            params,
            timeout=self.cfg.timeout_seconds,
            client=self.client,
            label=self.name,
        )
        raw_items = json_list(data, "results")[: self.page_size(query)]
        items = [NewsdataItem.from_json(raw) for raw in raw_items]
        return keep_articles([self.to_article(item) for item in items])

    def to_article(self, item: NewsdataItem) -> Article | None:
        return build_article(
            source=self.name,
            url=item.link,
            title=item.title,
            published_at=item.pub_date,
            description=item.description,
            excerpt=item.description,
            lang=item.language,
            excerpt_chars=self.excerpt_chars,
        )
