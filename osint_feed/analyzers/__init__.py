"""Report analysis: document chunking and the map/reduce orchestrator."""

from .analyst import ReportAnalyzer
from .chunker import chunk_articles, citation_indices, render_document

__all__ = ["ReportAnalyzer", "chunk_articles", "citation_indices", "render_document"]
