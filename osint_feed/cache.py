"""
On-disk cache for analysis results.

Each entry is one JSON file named by a SHA-256 fingerprint of the analysis
request, so repeating an identical request does not spend model calls.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import json
from pathlib import Path
from typing import Any

from .config import CacheConfig
from .core.types import AnalysisRequest, AnalysisResult


def request_fingerprint(request: AnalysisRequest) -> str:
    """Stable hash over everything that influences the generated report."""
    payload = {
        "start": request.start,
        "end": request.end,
        "q": request.q,
        "prompt_preset": request.prompt_preset,
        "focus": request.focus,
        "model": request.model,
        "max_docs": request.max_docs,
        "articles": [
            [a.url, a.title, a.published_at, a.content_excerpt, a.description or ""]
            for a in request.articles[: request.max_docs]
        ],
    }
    raw = json.dumps(payload, ensure_ascii=True, sort_keys=True)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class AnalysisCache:
    """JSON file cache keyed by request fingerprint.

    Attributes:
        directory: Directory holding one ``<fingerprint>.json`` per entry
        enabled: Whether reads and writes happen at all
        ttl: Optional maximum entry age
    """

    def __init__(self, cfg: CacheConfig):
        self.directory = Path(cfg.directory)
        self.enabled = cfg.enabled
        self.ttl = timedelta(days=cfg.ttl_days) if cfg.ttl_days else None

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> AnalysisResult | None:
        if not self.enabled:
            return None
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        if self._expired(data.get("cached_at")):
            return None
        try:
            return AnalysisResult.from_dict(data["result"])
        except (KeyError, TypeError, ValueError):
            return None

    def put(self, key: str, result: AnalysisResult) -> None:
        if not self.enabled:
            return
        self.directory.mkdir(parents=True, exist_ok=True)
        payload: dict[str, Any] = {
            "cached_at": datetime.now(timezone.utc).isoformat(),
            "result": result.to_dict(),
        }
        self.path_for(key).write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def _expired(self, cached_at: str | None) -> bool:
        if self.ttl is None:
            return False
        if not cached_at:
            return True
        try:
            stamp = datetime.fromisoformat(cached_at)
        except ValueError:
            return True
        return datetime.now(timezone.utc) - stamp > self.ttl
