"""GDELT DOC 2.0 federated search (no credential required)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.types import Article, SourceQuery
from ..fetch.fetcher import fetch_json
from ..utils.dates import compact_timestamp, day_end, day_start
from .base import NewsSource, build_article, json_list, keep_articles


ENDPOINT = "https://api.gdeltproject.org/api/v2/doc/doc"


@dataclass
class GdeltArticle:
    url: str | None
    title: str = ""
    seendate: str = ""
    sourcecountry: str | None = None
    language: str | None = None

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> "GdeltArticle":
        return cls(
            url=raw.get("url"),
            title=raw.get("title") or "",
            seendate=raw.get("seendate") or "",
            sourcecountry=raw.get("sourcecountry") or None,
            language=raw.get("language") or None,
        )


class GdeltSource(NewsSource):
    name = "gdelt"
    max_page_size = 250

    async def fetch(self, query: SourceQuery) -> list[Article]:
        params = {
            "query": self.query_text(query),
            "startdatetime": compact_timestamp(day_start(query.start)),
            "enddatetime": compact_timestamp(day_end(query.end)),
            "format": "json",
            "maxrecords": str(self.page_size(query)),
        }
        data = await fetch_json(
            ENDPOINT,
            params,
            timeout=self.cfg.timeout_seconds,
            client=self.client,
            label=self.name,
        )
        items = [GdeltArticle.from_json(raw) for raw in json_list(data, "articles")]
        return keep_articles([self.to_article(item) for item in items])

    def to_article(self, item: GdeltArticle) -> Article | None:
        return build_article(
            source=self.name,
            url=item.url,
            title=item.title,
            published_at=item.seendate,
            description=f"Country: {item.sourcecountry}" if item.sourcecountry else None,
            excerpt=item.title,
            lang=item.language,
            excerpt_chars=self.excerpt_chars,
        )
