"""Source registry in fixed aggregation order."""

from __future__ import annotations

import logging

import httpx

from ..config import SourcesConfig
from ..fetch.guard import Resolver
from .base import NewsSource
from .currents import CurrentsSource
from .gdelt import GdeltSource
from .gnews import GnewsSource
from .guardian import GuardianSource
from .newsdata import NewsdataSource
from .rss import RssSource


_SOURCE_REGISTRY: dict[str, type[NewsSource]] = {
    "gdelt": GdeltSource,
    "guardian": GuardianSource,
    "currents": CurrentsSource,
    "newsdata": NewsdataSource,
    "gnews": GnewsSource,
    "rss": RssSource,
}

KNOWN_SOURCES: tuple[str, ...] = tuple(_SOURCE_REGISTRY)


def build_sources(
    cfg: SourcesConfig,
    client: httpx.AsyncClient | None = None,
    logger: logging.Logger | None = None,
    resolver: Resolver | None = None,
) -> dict[str, NewsSource]:
    """Instantiate every registered source, keyed by name in registry order."""
    sources: dict[str, NewsSource] = {}
    for name, builder in _SOURCE_REGISTRY.items():
        if builder is RssSource:
            sources[name] = RssSource(cfg, client=client, logger=logger, resolver=resolver)
        else:
            sources[name] = builder(cfg, client=client, logger=logger)
    return sources

