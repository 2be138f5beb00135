"""
Command-line interface for osint-feed.

Uses Typer to expose the four service operations plus the end-to-end
``run`` pipeline. Supports loading .env files for API keys; the
environment is read once, when the configuration is built.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from .config import AppConfig, load_config
from .errors import ConfigurationError, RequestValidationError
from .llm.tracing import flush, setup_langfuse
from .runner import AnalysisOptions, run_pipeline
from .service import OsintService
from .utils.logging import setup_logging

try:
    from dotenv import load_dotenv
except Exception:  # noqa: BLE001
    load_dotenv = None

app = typer.Typer(add_completion=False, help="Aggregate conflict news and generate cited OSINT reports.")
console = Console()

EXIT_VALIDATION = 2
EXIT_CONFIG = 3


def _config_option():
    return typer.Option(None, "--config", "-c", exists=True, help="YAML config file.")


def _load(config: Path | None) -> AppConfig:
    if load_dotenv is not None:
        load_dotenv()
    default = Path("config.yaml")
    path = config if config else (default if default.exists() else None)
    return load_config(str(path) if path else None, os.environ)


def _service(cfg: AppConfig) -> OsintService:
    cfg.logging.file = False
    logger = setup_logging(cfg.logging, None)
    setup_langfuse(cfg.langfuse)
    return OsintService(cfg, logger=logger)


def _emit(payload: Any, output: Path | None) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if output is None:
        console.print_json(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    console.print(f"Wrote {output}")


def _run(coro) -> Any:
    try:
        return asyncio.run(coro)
    except RequestValidationError as exc:
        console.print(f"[red]Invalid request:[/red] {exc}")
        raise typer.Exit(EXIT_VALIDATION) from exc
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(EXIT_CONFIG) from exc
    finally:
        flush()


@app.command()
def articles(
    start: str = typer.Option(..., "--start", help="First day, YYYY-MM-DD."),
    end: str = typer.Option(..., "--end", help="Last day, YYYY-MM-DD."),
    q: str = typer.Option("Ukraine", "--q", "-q", help="Topic query."),
    sources: str | None = typer.Option(None, "--sources", "-s", help="Comma-separated source names."),
    max_per_source: int = typer.Option(50, "--max-per-source", help="1-200 items per source."),
    language: str | None = typer.Option(None, "--language", help="Language code."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON here."),
    config: Path | None = _config_option(),
):
    """Aggregate, deduplicate and rank articles from the selected sources."""
    service = _service(_load(config))
    params = {
        "start": start,
        "end": end,
        "q": q,
        "sources": sources,
        "max_per_source": max_per_source,
        "language": language,
    }
    _emit(_run(service.get_articles(params)), output)


@app.command()
def analyze(
    articles_file: Path = typer.Option(..., "--articles", "-a", exists=True, readable=True),
    start: str = typer.Option(..., "--start"),
    end: str = typer.Option(..., "--end"),
    q: str = typer.Option("Ukraine", "--q", "-q"),
    preset: str = typer.Option("osint_structured_v1", "--preset"),
    focus: str = typer.Option("", "--focus"),
    model: str | None = typer.Option(None, "--model"),
    max_docs: int = typer.Option(60, "--max-docs", help="5-120 documents."),
    output: Path | None = typer.Option(None, "--output", "-o"),
    config: Path | None = _config_option(),
):
    """Generate a cited report from an articles JSON file.

    Accepts either the output of ``articles`` or a bare list of articles.
    """
    service = _service(_load(config))
    data = json.loads(articles_file.read_text(encoding="utf-8"))
    items = data.get("articles", []) if isinstance(data, dict) else data
    body = {
        "start": start,
        "end": end,
        "q": q,
        "promptPreset": preset,
        "focus": focus,
        "model": model,
        "maxDocs": max_docs,
        "articles": items,
    }
    result = _run(service.analyze(body))
    if output is None:
        console.print(result["analysis"]["report"])
        if result["analysis"]["fallback"]:
            console.print(f"[yellow]Fallback:[/yellow] {result['analysis']['fallback']}")
        return
    _emit(result, output)


@app.command()
def extract(
    url: str = typer.Argument(..., help="Page URL."),
    config: Path | None = _config_option(),
):
    """Extract the main article content of one page."""
    service = _service(_load(config))
    _emit(_run(service.extract({"url": url})), None)


@app.command("extract-batch")
def extract_batch(
    urls: list[str] = typer.Argument(..., help="Up to 50 page URLs."),
    config: Path | None = _config_option(),
):
    """Extract several pages one after another."""
    service = _service(_load(config))
    _emit(_run(service.extract_batch({"urls": urls})), None)


@app.command()
def run(
    start: str = typer.Option(..., "--start"),
    end: str = typer.Option(..., "--end"),
    q: str = typer.Option("Ukraine", "--q", "-q"),
    sources: str | None = typer.Option(None, "--sources", "-s"),
    max_per_source: int = typer.Option(50, "--max-per-source"),
    language: str | None = typer.Option(None, "--language"),
    preset: str | None = typer.Option(None, "--preset"),
    focus: str = typer.Option("", "--focus"),
    model: str | None = typer.Option(None, "--model"),
    max_docs: int | None = typer.Option(None, "--max-docs"),
    enrich: bool = typer.Option(False, "--enrich/--no-enrich", help="Fetch full text before analysis."),
    analyze_report: bool = typer.Option(True, "--analyze/--no-analyze"),
    output: Path = typer.Option(Path("out"), "--output", "-o"),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    run_folder_mode: str | None = typer.Option(
        None,
        "--run-folder-mode",
        help="Output subfolder mode: query, timestamp, or query_timestamp.",
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    config: Path | None = _config_option(),
):
    """Run aggregation, optional enrichment and report generation end to end."""
    cfg = _load(config)
    if run_folder_mode:
        cfg.output.run_folder_mode = run_folder_mode
    if log_level:
        cfg.logging.level = log_level

    params = {
        "start": start,
        "end": end,
        "q": q,
        "sources": sources,
        "max_per_source": max_per_source,
        "language": language,
    }
    options = AnalysisOptions(focus=focus, prompt_preset=preset, model=model, max_docs=max_docs)
    try:
        run_dir = run_pipeline(
            params,
            output,
            cfg,
            options=options,
            enrich=enrich,
            analyze=analyze_report,
            show_progress=progress,
            console=console,
        )
    except RequestValidationError as exc:
        console.print(f"[red]Invalid request:[/red] {exc}")
        raise typer.Exit(EXIT_VALIDATION) from exc
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(EXIT_CONFIG) from exc
    finally:
        flush()
    console.print(f"Run folder: {run_dir}")


if __name__ == "__main__":
    app()
