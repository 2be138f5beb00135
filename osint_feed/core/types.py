"""
Core data types for the OSINT feed pipeline.

This module defines the fundamental data structures used throughout the pipeline:
- Article: Normalized news item produced by every source adapter
- SourceQuery: Common query parameters handed to each adapter
- ProviderResult / AggregateStats / AggregateResult: Aggregation output
- AnalysisRequest / AnalysisResult: Input and output of the report analysis
- ExtractedContent: Main-content extraction output for one URL
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass
class Article:
    """A normalized news item.

    ``url`` is always canonical and ``id`` is derived from it, so two items
    pointing at the same story collapse to one during aggregation.

    Attributes:
        id: SHA-1 of the canonical URL
        source: Provider name or feed name
        title: The article headline
        url: Canonical absolute http(s) URL
        published_at: Timestamp string as reported upstream (may be empty)
        description: Short description or trail text
        content_excerpt: Bounded text used to ground the LLM
        lang: Language code, if known
    """

    id: str
    source: str
    title: str
    url: str
    published_at: str = ""
    description: str | None = None
    content_excerpt: str = ""
    lang: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "title": self.title,
            "url": self.url,
            "published_at": self.published_at,
            "description": self.description,
            "content_excerpt": self.content_excerpt,
            "lang": self.lang,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Article":
        return cls(
            id=str(data.get("id") or ""),
            source=str(data.get("source") or ""),
            title=str(data.get("title") or ""),
            url=str(data.get("url") or ""),
            published_at=str(data.get("published_at") or ""),
            description=data.get("description"),
            content_excerpt=str(data.get("content_excerpt") or ""),
            lang=data.get("lang"),
        )


@dataclass(frozen=True)
class SourceQuery:
    """Parameters shared by every source adapter call."""

    start: date
    end: date
    q: str
    max_per_source: int = 50
    language: str | None = None


@dataclass
class ProviderResult:
    """Outcome of one adapter call; ``error`` set means ``articles`` is empty."""

    name: str
    articles: list[Article] = field(default_factory=list)
    ms: int = 0
    error: str | None = None


@dataclass
class AggregateStats:
    """Per-source observability record with raw (pre-dedupe) counts."""

    source: str
    count: int
    ms: int
    error: str | None = None

    @classmethod
    def from_result(cls, result: ProviderResult) -> "AggregateStats":
        return cls(
            source=result.name,
            count=len(result.articles),
            ms=result.ms,
            error=result.error,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source, "count": self.count, "ms": self.ms, "error": self.error}


@dataclass
class AggregateResult:
    articles: list[Article]
    stats: list[AggregateStats]

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": len(self.articles),
            "articles": [a.to_dict() for a in self.articles],
            "stats": [s.to_dict() for s in self.stats],
        }


@dataclass
class AnalysisRequest:
    """Input for one report analysis.

    Attributes:
        start: Start of the reporting window (YYYY-MM-DD)
        end: End of the reporting window (YYYY-MM-DD)
        q: Topic query
        prompt_preset: Template selector for the system instruction
        focus: Free-text analyst priorities
        articles: Candidate documents, already ranked
        model: Requested model (tried first)
        max_docs: Number of leading articles sent to the model
    """

    start: str
    end: str
    q: str
    articles: list[Article]
    prompt_preset: str = "osint_structured_v1"
    focus: str = ""
    model: str = "gemini-2.5-flash"
    max_docs: int = 60


@dataclass
class AnalysisResult:
    """Output of one report analysis.

    Attributes:
        model: The model that actually produced the report
        chunks: Number of document chunks sent in the map phase
        report: Markdown report text
        fallback: "A -> B" trace of failed models plus the model used, or None
    """

    model: str
    start: str
    end: str
    q: str
    focus: str
    prompt_preset: str
    chunks: int
    report: str
    fallback: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "start": self.start,
            "end": self.end,
            "q": self.q,
            "focus": self.focus,
            "promptPreset": self.prompt_preset,
            "chunks": self.chunks,
            "report": self.report,
            "fallback": self.fallback,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisResult":
        return cls(
            model=data["model"],
            start=data["start"],
            end=data["end"],
            q=data["q"],
            focus=data.get("focus", ""),
            prompt_preset=data.get("promptPreset", ""),
            chunks=int(data.get("chunks", 0)),
            report=data.get("report", ""),
            fallback=data.get("fallback"),
        )


@dataclass
class ExtractedContent:
    """Main content isolated from one web page.

    An all-empty instance means "no article found", which is not an error.
    """

    title: str = ""
    byline: str = ""
    text_content: str = ""
    content: str = ""

    @property
    def length(self) -> int:
        return len(self.text_content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "byline": self.byline,
            "textContent": self.text_content,
            "content": self.content,
            "length": self.length,
        }
