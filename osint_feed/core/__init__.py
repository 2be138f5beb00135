"""
Core domain models and business logic.

This package contains data types, URL identity and deduplication logic
that is independent of any specific source or pipeline stage.
"""

from .types import (
    AggregateResult,
    AggregateStats,
    AnalysisRequest,
    AnalysisResult,
    Article,
    ExtractedContent,
    ProviderResult,
    SourceQuery,
)
from .urls import canonicalize, identity
from .dedup import dedup_articles, filter_by_domain, sort_by_recency

__all__ = [
    "Article",
    "SourceQuery",
    "ProviderResult",
    "AggregateStats",
    "AggregateResult",
    "AnalysisRequest",
    "AnalysisResult",
    "ExtractedContent",
    "canonicalize",
    "identity",
    "dedup_articles",
    "filter_by_domain",
    "sort_by_recency",
]
