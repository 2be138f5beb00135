"""
Document rendering and chunk packing for the map phase.

Each article becomes one numbered block. Blocks are packed greedily into
chunks under a character budget and are never split, so every ``[#n]``
citation id maps back to exactly one article.
"""

from __future__ import annotations

import re
from typing import Sequence

from ..core.types import Article
from ..core.urls import hostname_of


BLOCK_SEPARATOR = "\n\n"
_CITATION_RE = re.compile(r"^\[#(\d+)\]", re.MULTILINE)


def render_document(article: Article, index: int, excerpt_chars: int = 1200) -> str:
    """Render one article as a numbered document block.

    Args:
        article: The article to render
        index: 1-based citation id
        excerpt_chars: Maximum excerpt length after whitespace collapsing
    """
    raw = article.content_excerpt or article.description or article.title or ""
    excerpt = " ".join(raw.split())[:excerpt_chars]
    title = " ".join((article.title or "").split()) or "(no title)"
    outlet = hostname_of(article.url) or article.source
    return (
        f"[#{index}] {title}\n"
        f"Outlet: {outlet}\n"
        f"Date: {article.published_at}\n"
        f"URL: {article.url}\n"
        f"Excerpt: {excerpt}"
    )


def chunk_articles(
    articles: Sequence[Article],
    max_docs: int = 60,
    max_chars_per_chunk: int = 12000,
    excerpt_chars: int = 1200,
) -> list[str]:
    """Pack the first ``max_docs`` articles into ordered chunks.

    A block that alone exceeds the budget forms its own chunk.
    """
    blocks = [
        render_document(article, idx + 1, excerpt_chars)
        for idx, article in enumerate(articles[:max_docs])
    ]
    chunks: list[str] = []
    buffer = ""
    for block in blocks:
        candidate = f"{buffer}{BLOCK_SEPARATOR}{block}" if buffer else block
        if buffer and len(candidate) > max_chars_per_chunk:
            chunks.append(buffer)
            buffer = block
        else:
            buffer = candidate
    if buffer:
        chunks.append(buffer)
    return chunks


def citation_indices(chunk: str) -> list[int]:
    """Return the document ids that start a block in ``chunk``, in order."""
    return [int(match) for match in _CITATION_RE.findall(chunk)]
