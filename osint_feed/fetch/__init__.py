"""
Guarded fetching and content extraction.

This package handles SSRF-safe HTTP retrieval, bounded JSON API calls,
and main-content extraction for article enrichment.
"""

from .fetcher import FetchResult, fetch_json, guarded_fetch
from .guard import ensure_public_host, is_private_address, validate_url
from .extractor import extract_article, extract_batch, extract_from_url, extract_text

__all__ = [
    "FetchResult",
    "guarded_fetch",
    "fetch_json",
    "ensure_public_host",
    "is_private_address",
    "validate_url",
    "extract_article",
    "extract_from_url",
    "extract_batch",
    "extract_text",
]
