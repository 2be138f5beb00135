"""Tests for configuration loading and environment resolution."""

from __future__ import annotations

from osint_feed.config import AppConfig, FeedConfig, load_config, parse_domain_list


def test_defaults_without_file_or_environment():
    cfg = load_config(None)

    assert cfg == AppConfig()
    assert cfg.sources.guardian_api_key is None
    assert cfg.fetch.max_redirects == 3
    assert cfg.fetch.max_content_bytes == 2_000_000
    assert cfg.analysis.max_docs == 60
    assert len(cfg.sources.feeds) == 5


def test_environment_is_resolved_once_into_config():
    environ = {
        "GUARDIAN_API_KEY": "g",
        "GNEWS_API_KEY": "  ",
        "GEMINI_API_KEY": "gem",
        "ALLOWED_DOMAINS": "Reuters.com, .apnews.com,,",
        "BLOCKED_DOMAINS": "tabloid.example",
    }

    cfg = load_config(None, environ)

    assert cfg.sources.guardian_api_key == "g"
    assert cfg.sources.gnews_api_key is None
    assert cfg.provider.api_key == "gem"
    assert cfg.filters.allow_domains == ["reuters.com", "apnews.com"]
    assert cfg.filters.block_domains == ["tabloid.example"]


def test_yaml_overrides_merge_with_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "\n".join(
            [
                "sources:",
                "  guardian_api_key: inline",
                "  feeds:",
                "    - name: Only Feed",
                "      url: https://feeds.example/rss",
                "filters:",
                "  block_domains: [spam.example]",
                "analysis:",
                "  fallback_models: [m1, m2]",
                "unknown_section: {a: 1}",
            ]
        ),
        encoding="utf-8",
    )

    cfg = load_config(str(path), {"GUARDIAN_API_KEY": "from-env", "BLOCKED_DOMAINS": "other.example"})

    assert cfg.sources.guardian_api_key == "inline"
    assert cfg.sources.feeds == [FeedConfig("Only Feed", "https://feeds.example/rss")]
    assert cfg.sources.timeout_seconds == 12.0
    assert cfg.filters.block_domains == ["spam.example", "other.example"]
    assert cfg.analysis.fallback_models == ["m1", "m2"]
    assert cfg.analysis.max_chars_per_chunk == 12000


def test_parse_domain_list():
    assert parse_domain_list(None) == []
    assert parse_domain_list(" A.com ,b.org") == ["a.com", "b.org"]
