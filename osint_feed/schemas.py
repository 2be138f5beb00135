"""Request models validating the service operations' inputs."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .core.types import Article
from .core.urls import is_http_url
from .sources.registry import KNOWN_SOURCES


DEFAULT_QUERY = "Ukraine"


class _DateWindow(BaseModel):
    start: date
    end: date

    @model_validator(mode="after")
    def _check_window(self):
        if self.end < self.start:
            raise ValueError("end must not be before start")
        return self


class ArticlesQuery(_DateWindow):
    model_config = ConfigDict(populate_by_name=True)

    q: str = DEFAULT_QUERY
    sources: list[str] = Field(default_factory=lambda: list(KNOWN_SOURCES))
    max_per_source: int = Field(50, ge=1, le=200, alias="maxPerSource")
    language: str | None = None

    @field_validator("q", mode="before")
    @classmethod
    def _default_query(cls, value):
        if value is None or not str(value).strip():
            return DEFAULT_QUERY
        return str(value).strip()

    @field_validator("sources", mode="before")
    @classmethod
    def _split_sources(cls, value):
        if value is None:
            return list(KNOWN_SOURCES)
        if isinstance(value, str):
            value = value.split(",")
        names = [str(name).strip().lower() for name in value if str(name).strip()]
        return names or list(KNOWN_SOURCES)

    @field_validator("sources")
    @classmethod
    def _known_sources(cls, value: list[str]) -> list[str]:
        unknown = [name for name in value if name not in KNOWN_SOURCES]
        if unknown:
            raise ValueError(f"unknown source(s): {', '.join(unknown)}")
        return value


class ArticleIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    source: str = ""
    title: str = ""
    url: str
    published_at: str = ""
    description: str | None = None
    content_excerpt: str = ""
    lang: str | None = None

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        value = value.strip()
        if not is_http_url(value):
            raise ValueError("url must be an absolute http(s) URL")
        return value

    @field_validator("title", "published_at", "content_excerpt", "id", "source", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    def to_article(self) -> Article:
        return Article(
            id=self.id,
            source=self.source,
            title=self.title,
            url=self.url,
            published_at=self.published_at,
            description=self.description,
            content_excerpt=self.content_excerpt,
            lang=self.lang,
        )


class AnalyzeBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: str
    end: str
    q: str = DEFAULT_QUERY
    prompt_preset: str = Field("osint_structured_v1", alias="promptPreset")
    focus: str = ""
    articles: list[ArticleIn] = Field(min_length=1)
    model: str | None = None
    max_docs: int = Field(60, ge=5, le=120, alias="maxDocs")

    @field_validator("focus", mode="before")
    @classmethod
    def _focus_default(cls, value):
        return "" if value is None else value


class ExtractBody(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        value = value.strip()
        if not is_http_url(value):
            raise ValueError("url must be an absolute http(s) URL")
        return value


class ExtractBatchBody(BaseModel):
    urls: list[str] = Field(min_length=1, max_length=50)

    @field_validator("urls")
    @classmethod
    def _absolute_urls(cls, value: list[str]) -> list[str]:
        cleaned = [url.strip() for url in value]
        bad = [url for url in cleaned if not is_http_url(url)]
        if bad:
            raise ValueError(f"not absolute http(s) URLs: {', '.join(bad[:5])}")
        return cleaned
