"""
Service facade for the four boundary operations.

Every operation validates its raw input with the pydantic request models
and returns plain JSON-ready dictionaries:
- get_articles: multi-source aggregation
- analyze: chunked LLM report
- extract: main content of one page
- extract_batch: main content of up to 50 pages, one after another
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx
from pydantic import BaseModel, ValidationError

from .analyzers.analyst import ReportAnalyzer
from .cache import AnalysisCache
from .config import AppConfig
from .core.types import AggregateResult, AnalysisRequest, SourceQuery
from .errors import ConfigurationError, RequestValidationError
from .fetch.extractor import extract_batch, extract_from_url
from .fetch.guard import Resolver
from .llm.providers.base import GenerationProvider
from .llm.providers.factory import create_provider
from .schemas import AnalyzeBody, ArticlesQuery, ExtractBatchBody, ExtractBody
from .sources.aggregate import Aggregator


class OsintService:
    """Entry point used by the CLI and by embedding applications.

    Collaborators can be injected for testing; otherwise they are built
    lazily from ``cfg``.
    """

    def __init__(
        self,
        cfg: AppConfig,
        logger: logging.Logger | None = None,
        llm_logger: logging.Logger | None = None,
        aggregator: Aggregator | None = None,
        provider: GenerationProvider | None = None,
        fetch_client: httpx.AsyncClient | None = None,
        resolver: Resolver | None = None,
    ):
        self.cfg = cfg
        self.logger = logger
        self.llm_logger = llm_logger
        self._aggregator = aggregator
        self._provider = provider
        self.fetch_client = fetch_client
        self.resolver = resolver

    @property
    def aggregator(self) -> Aggregator:
        if self._aggregator is None:
            self._aggregator = Aggregator(self.cfg, logger=self.logger)
        return self._aggregator

    def provider(self) -> GenerationProvider:
        """Return the generation backend, failing fast without a credential."""
        if self._provider is None:
            if not self.cfg.provider.api_key:
                raise ConfigurationError(
                    f"Missing LLM credential: set {self.cfg.provider.api_key_env}"
                )
            self._provider = create_provider(
                self.cfg.provider, self.cfg.analysis, self.cfg.logging, self.llm_logger
            )
        return self._provider

    async def get_articles(self, params: Mapping[str, Any]) -> dict[str, Any]:
        query = validate_request(ArticlesQuery, params)
        result = await self.aggregate(query)
        return result.to_dict()

    async def aggregate(self, query: ArticlesQuery) -> AggregateResult:
        source_query = SourceQuery(
            start=query.start,
            end=query.end,
            q=query.q,
            max_per_source=query.max_per_source,
            language=query.language,
        )
        return await self.aggregator.aggregate(source_query, query.sources)

    async def analyze(self, body: Mapping[str, Any]) -> dict[str, Any]:
        parsed = validate_request(AnalyzeBody, body)
        provider = self.provider()
        request = AnalysisRequest(
            start=parsed.start,
            end=parsed.end,
            q=parsed.q,
            articles=[item.to_article() for item in parsed.articles],
            prompt_preset=parsed.prompt_preset,
            focus=parsed.focus,
            model=parsed.model or self.cfg.analysis.default_model,
            max_docs=parsed.max_docs,
        )
        analyzer = ReportAnalyzer(
            self.cfg,
            provider,
            logger=self.logger,
            llm_logger=self.llm_logger,
            cache=AnalysisCache(self.cfg.cache),
        )
        result = await analyzer.analyze(request)
        return {"analysis": result.to_dict()}

    async def extract(self, body: Mapping[str, Any]) -> dict[str, Any]:
        parsed = validate_request(ExtractBody, body)
        content = await extract_from_url(
            parsed.url, self.cfg.fetch, client=self.fetch_client, resolver=self.resolver
        )
        return {"data": content.to_dict()}

    async def extract_batch(self, body: Mapping[str, Any]) -> dict[str, Any]:
        parsed = validate_request(ExtractBatchBody, body)
        results = await extract_batch(
            parsed.urls,
            self.cfg.fetch,
            client=self.fetch_client,
            resolver=self.resolver,
            logger=self.logger,
        )
        return {
            "results": {
                url: value if isinstance(value, dict) else value.to_dict()
                for url, value in results.items()
            }
        }


def validate_request(model: type[BaseModel], data: Mapping[str, Any]):
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        raise RequestValidationError(_format_validation_error(exc)) from exc


def _format_validation_error(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid request: " + "; ".join(messages)
