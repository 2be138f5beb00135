"""Tests for the on-disk analysis cache."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json

from osint_feed.cache import AnalysisCache, request_fingerprint
from osint_feed.config import CacheConfig
from osint_feed.core.types import AnalysisRequest, AnalysisResult, Article


def _request(**overrides) -> AnalysisRequest:
    data = {
        "start": "2024-05-01",
        "end": "2024-05-03",
        "q": "Ukraine",
        "articles": [Article(id="1", source="gdelt", title="T", url="https://a.example/1")],
    }
    data.update(overrides)
    return AnalysisRequest(**data)


def _result() -> AnalysisResult:
    return AnalysisResult(
        model="gemini-2.5-flash",
        start="2024-05-01",
        end="2024-05-03",
        q="Ukraine",
        focus="",
        prompt_preset="osint_structured_v1",
        chunks=1,
        report="## Executive Summary",
    )


def test_fingerprint_depends_on_inputs():
    assert request_fingerprint(_request()) == request_fingerprint(_request())
    assert request_fingerprint(_request()) != request_fingerprint(_request(focus="logistics"))
    assert request_fingerprint(_request()) != request_fingerprint(_request(model="gemini-2.5-pro"))


def test_disabled_cache_never_reads_or_writes(tmp_path):
    cache = AnalysisCache(CacheConfig(enabled=False, directory=str(tmp_path)))
    cache.put("k", _result())

    assert cache.get("k") is None
    assert list(tmp_path.iterdir()) == []


def test_round_trip_and_ttl_expiry(tmp_path):
    cache = AnalysisCache(CacheConfig(enabled=True, directory=str(tmp_path / "c"), ttl_days=1))
    cache.put("k", _result())
    assert cache.get("k") == _result()

    path = cache.path_for("k")
    payload = json.loads(path.read_text(encoding="utf-8"))
    payload["cached_at"] = (datetime.now(timezone.utc) - timedelta(days=2)).isoformat()
    path.write_text(json.dumps(payload), encoding="utf-8")

    assert cache.get("k") is None


def test_corrupt_entry_is_a_miss(tmp_path):
    cache = AnalysisCache(CacheConfig(enabled=True, directory=str(tmp_path)))
    cache.path_for("bad").write_text("{not json", encoding="utf-8")

    assert cache.get("bad") is None
