"""
Fixed list of named RSS/Atom feeds.

Feeds are downloaded concurrently through the guarded fetcher and parsed
with feedparser. Entries are kept when their timestamp falls inside the
requested day window and the query appears in the title or snippet.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Any

from bs4 import BeautifulSoup
import feedparser

from ..config import FeedConfig
from ..core.dedup import sort_by_recency
from ..core.types import Article, SourceQuery
from ..fetch.fetcher import guarded_fetch
from ..fetch.guard import Resolver
from ..utils.dates import in_day_window, parse_timestamp
from ..utils.logging import log_event
from .base import NewsSource, build_article, keep_articles


FEED_ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5"


@dataclass
class FeedEntry:
    link: str | None
    title: str = ""
    published: str = ""
    published_parsed: Any = None
    snippet: str = ""

    @classmethod
    def from_entry(cls, entry: Any) -> "FeedEntry":
        published = entry.get("published") or entry.get("updated") or entry.get("created") or ""
        parsed = (
            entry.get("published_parsed")
            or entry.get("updated_parsed")
            or entry.get("created_parsed")
        )
        summary = entry.get("summary") or ""
        if not summary and entry.get("content"):
            summary = entry["content"][0].get("value") or ""
        return cls(
            link=entry.get("link"),
            title=(entry.get("title") or "").strip(),
            published=published,
            published_parsed=parsed,
            snippet=_strip_html(summary),
        )

    def timestamp(self):
        return parse_timestamp(self.published_parsed) or parse_timestamp(self.published)


class RssSource(NewsSource):
    name = "rss"
    max_page_size = 200

    def __init__(self, cfg, client=None, logger=None, resolver: Resolver | None = None):
        super().__init__(cfg, client=client, logger=logger)
        self.resolver = resolver

    async def fetch(self, query: SourceQuery) -> list[Article]:
        feeds = list(self.cfg.feeds)
        results = await asyncio.gather(*(self._fetch_feed(feed, query) for feed in feeds))
        articles = [article for batch in results for article in batch]
        return sort_by_recency(articles)[: self.page_size(query)]

    async def _fetch_feed(self, feed: FeedConfig, query: SourceQuery) -> list[Article]:
        try:
            result = await guarded_fetch(
                feed.url,
                timeout=self.cfg.rss_timeout_seconds,
                max_content_bytes=self.cfg.rss_max_bytes,
                headers={"Accept": FEED_ACCEPT},
                client=self.client,
                resolver=self.resolver,
            )
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                "Feed failed",
                level=logging.WARNING,
                event="feed_failed",
                feed=feed.name,
                error=str(exc) or type(exc).__name__,
            )
            return []

        parsed = feedparser.parse(result.text)
        entries = [FeedEntry.from_entry(entry) for entry in parsed.entries]
        needle = (query.q or "").strip().lower()
        kept = []
        for entry in entries:
            moment = entry.timestamp()
            if moment is None or not in_day_window(moment, query.start, query.end):
                continue
            if needle and needle not in f"{entry.title} {entry.snippet}".lower():
                continue
            kept.append(self.to_article(entry, feed))
        log_event(self.logger, "Feed parsed", level=logging.DEBUG, event="feed_parsed", feed=feed.name, count=len(kept))
        return keep_articles(kept)

    def to_article(self, entry: FeedEntry, feed: FeedConfig) -> Article | None:
        published = entry.published
        if not published:
            moment = entry.timestamp()
            published = moment.isoformat() if moment else ""
        return build_article(
            source=feed.name,
            url=entry.link,
            title=entry.title,
            published_at=published,
            description=entry.snippet or None,
            excerpt=entry.snippet,
            lang="en",
            excerpt_chars=self.excerpt_chars,
        )


def _strip_html(html: str) -> str:
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(separator=" ")
    return " ".join(text.split())
