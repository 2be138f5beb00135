"""
Article deduplication, domain filtering and recency ordering.

This module removes duplicate articles based on:
1. Canonical URL identity (same story, different tracking links)
2. Optional fuzzy title similarity (syndicated copies on different URLs)
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from rapidfuzz import fuzz

from ..utils.dates import recency_key
from .types import Article
from .urls import canonicalize, hostname_of, identity


def dedup_articles(articles: Iterable[Article], threshold: int | None = None) -> list[Article]:
    """Remove duplicate articles, preserving the order of first occurrence.

    Every article's URL is re-canonicalized and its id re-derived, so
    adapters that forgot to do so still collapse correctly. The first
    occurrence wins for all other fields.

    Args:
        articles: Articles in priority order
        threshold: Optional similarity threshold (0-100) for fuzzy title
                   matching. None disables the title pass.

    Returns:
        Deduplicated list of articles
    """
    seen_ids: set[str] = set()
    kept: list[Article] = []
    titles: list[str] = []

    for article in articles:
        url = canonicalize(article.url)
        article_id = identity(url)
        if article_id in seen_ids:
            continue
        if threshold is not None and article.title and _is_similar_title(article.title, titles, threshold):
            continue
        seen_ids.add(article_id)
        if article.title:
            titles.append(article.title)
        kept.append(replace(article, id=article_id, url=url))

    return kept


def filter_by_domain(
    articles: Iterable[Article],
    allow: Sequence[str] = (),
    block: Sequence[str] = (),
) -> list[Article]:
    """Apply allow/block domain lists.

    A host matches a domain when it equals it or is a subdomain of it.
    With both lists empty the input is returned as-is; otherwise articles
    whose URL has no host are dropped.
    """
    items = list(articles)
    if not allow and not block:
        return items

    kept = []
    for article in items:
        host = hostname_of(article.url)
        if not host:
            continue
        if allow and not domain_matches(host, allow):
            continue
        if block and domain_matches(host, block):
            continue
        kept.append(article)
    return kept


def domain_matches(host: str, domains: Sequence[str]) -> bool:
    host = host.lower().rstrip(".")
    for domain in domains:
        domain = domain.lower().strip().lstrip(".")
        if not domain:
            continue
        if host == domain or host.endswith("." + domain):
            return True
    return False


def sort_by_recency(articles: Iterable[Article]) -> list[Article]:
    """Newest first; unparseable timestamps last; ties keep input order."""
    return sorted(articles, key=lambda a: recency_key(a.published_at), reverse=True)


def _is_similar_title(title: str, titles: list[str], threshold: int) -> bool:
    """Check if a title is similar to any title in the given list.

    Uses rapidfuzz's ratio function which calculates the Levenshtein
    distance as a similarity percentage.
    """
    for existing in titles:
        if fuzz.ratio(title, existing) >= threshold:
            return True
    return False
