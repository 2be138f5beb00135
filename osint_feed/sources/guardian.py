"""The Guardian Open Platform content search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.types import Article, SourceQuery
from ..fetch.fetcher import fetch_json
from ..utils.dates import ymd
from .base import NewsSource, build_article, json_list, keep_articles


ENDPOINT = "https://content.guardianapis.com/search"


@dataclass
class GuardianItem:
    web_url: str | None
    web_title: str = ""
    web_publication_date: str = ""
    trail_text: str | None = None
    body_text: str = ""

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> "GuardianItem":
        fields = raw.get("fields") if isinstance(raw.get("fields"), dict) else {}
        return cls(
            web_url=raw.get("webUrl"),
            web_title=raw.get("webTitle") or "",
            web_publication_date=raw.get("webPublicationDate") or "",
            trail_text=fields.get("trailText") or None,
            body_text=fields.get("bodyText") or "",
        )


class GuardianSource(NewsSource):
    name = "guardian"
    max_page_size = 200
    requires_key = True

    def api_key(self) -> str | None:
        return self.cfg.guardian_api_key

    async def fetch(self, query: SourceQuery) -> list[Article]:
        if not self.is_configured():
            return []
        params = {
            "q": self.query_text(query),
            "from-date": ymd(query.start),
            "to-date": ymd(query.end),
            "api-key": self.api_key(),
            "page-size": str(self.page_size(query)),
            "show-fields": "trailText,bodyText",
            "order-by": "newest",
        }
        data = await fetch_json(
            ENDPOINT,
            params,
            timeout=self.cfg.timeout_seconds,
            client=self.client,
            label=self.name,
        )
        items = [GuardianItem.from_json(raw) for raw in json_list(data, "response", "results")]
        return keep_articles([self.to_article(item) for item in items])

    def to_article(self, item: GuardianItem) -> Article | None:
        return build_article(
            source=self.name,
            url=item.web_url,
            title=item.web_title,
            published_at=item.web_publication_date,
            description=item.trail_text,
            excerpt=item.body_text,
            lang="en",
            excerpt_chars=self.excerpt_chars,
        )
