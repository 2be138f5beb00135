"""
Multi-source aggregation.

Selected sources run concurrently. One source failing never affects the
others: its exception becomes an error string in the per-source stats.
The merged list is then domain-filtered, deduplicated by canonical URL
identity and sorted newest first.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Iterable, Mapping

import httpx

from ..config import AppConfig
from ..core.dedup import dedup_articles, filter_by_domain, sort_by_recency
from ..core.types import AggregateResult, AggregateStats, ProviderResult, SourceQuery
from ..errors import RequestValidationError
from ..utils.logging import log_event
from .base import NewsSource
from .registry import KNOWN_SOURCES, build_sources


class Aggregator:
    """Fan a query out to the selected sources and merge the results."""

    def __init__(
        self,
        cfg: AppConfig,
        sources: Mapping[str, NewsSource] | None = None,
        logger: logging.Logger | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.cfg = cfg
        self.logger = logger
        self.sources = dict(sources) if sources is not None else build_sources(
            cfg.sources, client=client, logger=logger
        )

    def select(self, names: Iterable[str] | None) -> list[NewsSource]:
        """Resolve source names, always returning them in registry order.

        Raises:
            RequestValidationError: If a name is not a registered source
        """
        if names is None:
            wanted = list(self.sources)
        else:
            wanted = [name.strip().lower() for name in names if name and name.strip()]
        unknown = [name for name in wanted if name not in self.sources]
        if unknown:
            raise RequestValidationError(
                f"Unknown source(s): {', '.join(unknown)}. Known: {', '.join(self.sources)}"
            )
        order = [name for name in KNOWN_SOURCES if name in self.sources]
        order += [name for name in self.sources if name not in order]
        return [self.sources[name] for name in order if name in wanted]

    async def aggregate(self, query: SourceQuery, source_names: Iterable[str] | None = None) -> AggregateResult:
        selected = self.select(source_names)
        log_event(
            self.logger,
            "Aggregation started",
            event="aggregate_start",
            sources=[s.name for s in selected],
            q=query.q,
            start=str(query.start),
            end=str(query.end),
        )

        results: list[ProviderResult] = await asyncio.gather(
            *(self._run_source(source, query) for source in selected)
        )

        merged = [article for result in results for article in result.articles]
        filtered = filter_by_domain(
            merged,
            allow=self.cfg.filters.allow_domains,
            block=self.cfg.filters.block_domains,
        )
        unique = dedup_articles(filtered, threshold=self.cfg.filters.title_similarity_threshold)
        ordered = sort_by_recency(unique)

        stats = [AggregateStats.from_result(result) for result in results]
        log_event(
            self.logger,
            "Aggregation finished",
            event="aggregate_done",
            raw=len(merged),
            filtered=len(filtered),
            unique=len(ordered),
        )
        return AggregateResult(articles=ordered, stats=stats)

    async def _run_source(self, source: NewsSource, query: SourceQuery) -> ProviderResult:
        started = time.perf_counter()
        try:
            articles = await source.fetch(query)
        except Exception as exc:  # noqa: BLE001
            ms = _elapsed_ms(started)
            error = str(exc) or type(exc).__name__
            log_event(
                self.logger,
                "Source failed",
                level=logging.WARNING,
                event="source_failed",
                source=source.name,
                ms=ms,
                error=error,
            )
            return ProviderResult(name=source.name, articles=[], ms=ms, error=error)

        ms = _elapsed_ms(started)
        log_event(self.logger, "Source done", event="source_done", source=source.name, count=len(articles), ms=ms)
        return ProviderResult(name=source.name, articles=list(articles), ms=ms)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
