"""
End-to-end pipeline orchestration.

This module coordinates the whole workflow for one topic and date window:
1. Aggregate articles from the selected sources
2. Optionally enrich the leading articles with extracted full text
3. Generate the cited report
4. Write articles.json, analysis.json and report.md into a run folder

Supports both progress bar and quiet modes.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime
import json
import logging
from pathlib import Path
import re
from typing import Any, Mapping

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .config import AppConfig
from .core.types import Article
from .fetch.extractor import browser_headers, extract_text
from .fetch.fetcher import guarded_fetch
from .llm.tracing import set_span_output, setup_langfuse, start_span
from .schemas import ArticlesQuery
from .service import OsintService, validate_request
from .utils.logging import log_event, setup_llm_logger, setup_logging


@dataclass
class EnrichStats:
    """Outcome counts for the enrichment stage."""

    total: int = 0
    enriched: int = 0
    failed: int = 0


@dataclass
class AnalysisOptions:
    """Report options for a pipeline run; None fields use config defaults."""

    focus: str = ""
    prompt_preset: str | None = None
    model: str | None = None
    max_docs: int | None = None


def run_pipeline(
    params: Mapping[str, Any],
    output_dir: Path,
    cfg: AppConfig,
    options: AnalysisOptions | None = None,
    enrich: bool = False,
    analyze: bool = True,
    show_progress: bool = True,
    console: Console | None = None,
) -> Path:
    """Run the complete pipeline and return the run folder.

    Args:
        params: Raw article query (start, end, q, sources, max_per_source, language)
        output_dir: Base directory for run folders
        cfg: Application configuration
        options: Report options
        enrich: Replace excerpts of the leading articles with extracted text
        analyze: Generate the report (requires the LLM credential)
        show_progress: Whether to display progress bars
        console: Rich console for output

    Raises:
        RequestValidationError: Invalid query
        ConfigurationError: ``analyze`` without an LLM credential
    """
    return asyncio.run(
        run_pipeline_async(
            params,
            output_dir,
            cfg,
            options=options,
            enrich=enrich,
            analyze=analyze,
            show_progress=show_progress,
            console=console,
        )
    )


async def run_pipeline_async(
    params: Mapping[str, Any],
    output_dir: Path,
    cfg: AppConfig,
    options: AnalysisOptions | None = None,
    enrich: bool = False,
    analyze: bool = True,
    show_progress: bool = True,
    console: Console | None = None,
    service: OsintService | None = None,
) -> Path:
    options = options or AnalysisOptions()
    query = validate_request(ArticlesQuery, params)
    run_output_dir = build_run_output_dir(output_dir, query, cfg)
    run_output_dir.mkdir(parents=True, exist_ok=True)
    logger = setup_logging(cfg.logging, run_output_dir)
    llm_logger = setup_llm_logger(cfg.logging, run_output_dir)
    setup_langfuse(cfg.langfuse)

    service = service or OsintService(cfg, logger=logger, llm_logger=llm_logger)
    if analyze:
        service.provider()

    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        disable=not show_progress,
    )

    with start_span(
        "osint_feed.run",
        kind="chain",
        input_value={"q": query.q, "start": str(query.start), "end": str(query.end)},
        attributes={"sources": ",".join(query.sources), "enrich": enrich},
    ) as run_span, progress:
        log_event(
            logger,
            "Pipeline start",
            event="pipeline_start",
            q=query.q,
            start=str(query.start),
            end=str(query.end),
            output=str(run_output_dir),
        )
        stage_task = progress.add_task("Stages", total=3)

        progress.update(stage_task, description="Aggregating sources")
        aggregated = await service.aggregate(query)
        articles = aggregated.articles
        _write_json(run_output_dir / "articles.json", aggregated.to_dict())
        progress.advance(stage_task)

        max_docs = options.max_docs or cfg.analysis.max_docs
        if enrich and articles:
            progress.update(stage_task, description="Enriching articles")
            enrich_task = progress.add_task("Extracting", total=min(len(articles), max_docs))
            articles, stats = await enrich_articles(
                articles,
                cfg,
                limit=max_docs,
                logger=logger,
                on_done=lambda: progress.advance(enrich_task),
            )
            log_event(
                logger,
                "Enrichment finished",
                event="enrich_done",
                total=stats.total,
                enriched=stats.enriched,
                failed=stats.failed,
            )
        progress.advance(stage_task)

        if analyze and articles:
            progress.update(stage_task, description="Generating report")
            body = {
                "start": str(query.start),
                "end": str(query.end),
                "q": query.q,
                "promptPreset": options.prompt_preset or cfg.analysis.default_preset,
                "focus": options.focus,
                "model": options.model,
                "maxDocs": max_docs,
                "articles": [article.to_dict() for article in articles],
            }
            analysis = (await service.analyze(body))["analysis"]
            _write_json(run_output_dir / "analysis.json", analysis)
            (run_output_dir / "report.md").write_text(analysis["report"], encoding="utf-8")
            set_span_output(run_span, {"model": analysis["model"], "chunks": analysis["chunks"]})
        elif analyze:
            log_event(logger, "No articles to analyze", level=logging.WARNING, event="analysis_skipped")
        progress.advance(stage_task)

    log_event(
        logger,
        "Pipeline complete",
        event="pipeline_complete",
        articles=len(articles),
        output=str(run_output_dir),
    )
    return run_output_dir


async def enrich_articles(
    articles: list[Article],
    cfg: AppConfig,
    limit: int,
    logger: logging.Logger | None = None,
    on_done=None,
    client=None,
    resolver=None,
) -> tuple[list[Article], EnrichStats]:
    """Replace excerpts of the first ``limit`` articles with extracted text.

    Pages are fetched one after another through the guarded fetcher. A page
    that fails or yields no text keeps its original excerpt.
    """
    stats = EnrichStats(total=min(len(articles), limit))
    enriched = list(articles)
    for idx, article in enumerate(articles[:limit]):
        try:
            result = await guarded_fetch(
                article.url,
                timeout=cfg.fetch.timeout_seconds,
                max_redirects=cfg.fetch.max_redirects,
                max_content_bytes=cfg.fetch.max_content_bytes,
                headers=browser_headers(cfg.fetch),
                client=client,
                resolver=resolver,
            )
            text = extract_text(result.text, cfg.fetch.extract_primary, cfg.fetch.extract_fallback)
        except Exception as exc:  # noqa: BLE001
            stats.failed += 1
            log_event(
                logger,
                "Enrichment failed",
                level=logging.WARNING,
                event="enrich_failed",
                url=article.url,
                error=str(exc) or type(exc).__name__,
            )
            text = None
        if text:
            enriched[idx] = replace(article, content_excerpt=text[: cfg.analysis.excerpt_chars])
            stats.enriched += 1
        if on_done is not None:
            on_done()
    return enriched, stats


def build_run_output_dir(output_dir: Path, query: ArticlesQuery, cfg: AppConfig) -> Path:
    """Build the run folder name based on the configured mode.

    Raises:
        ValueError: If run_folder_mode is not supported
    """
    stem = f"{_slug(query.q)}-{query.start:%Y%m%d}-{query.end:%Y%m%d}"
    mode = (cfg.output.run_folder_mode or "query").lower()
    if mode == "query":
        run_dir_name = stem
    elif mode == "timestamp":
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        run_dir_name = f"{timestamp}-{stem}"
    elif mode == "query_timestamp":
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        run_dir_name = f"{stem}-{timestamp}"
    else:
        raise ValueError(
            "Unsupported run_folder_mode. Use 'query', 'timestamp', or 'query_timestamp'."
        )
    return output_dir / run_dir_name


def _slug(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:40] or "query"


def _write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
