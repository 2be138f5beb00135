"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- SourcesConfig: News provider credentials, timeouts and feed list
- FilterConfig: Domain allow/block lists and optional fuzzy title dedup
- FetchConfig: Guarded HTTP fetching settings for full-text extraction
- AnalysisConfig: Chunking, model chain and generation settings
- ProviderConfig: LLM provider settings
- OutputConfig: Run folder naming
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- CacheConfig: Analysis cache settings
- AppConfig: Root configuration container

The process environment is read exactly once, inside ``load_config``.
Every other component receives the resulting ``AppConfig`` explicitly.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

import yaml


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class FeedConfig:
    """A named RSS/Atom feed polled by the ``rss`` source."""

    name: str
    url: str


def _default_feeds() -> list[FeedConfig]:
    return [
        FeedConfig("Kyiv Independent", "https://kyivindependent.com/rss"),
        FeedConfig("The Guardian - Ukraine", "https://www.theguardian.com/world/ukraine/rss"),
        FeedConfig("BBC Europe", "https://feeds.bbci.co.uk/news/world/europe/rss.xml"),
        FeedConfig("DW - Top Stories", "https://www.dw.com/en/top-stories/rss"),
        FeedConfig("ISW - Updates", "https://www.understandingwar.org/backgrounder/feed"),
    ]


@dataclass
class SourcesConfig:
    """Configuration for the news providers.

    Attributes:
        guardian_api_key: Guardian Open Platform key (resolved from env)
        currents_api_key: Currents API key (resolved from env)
        newsdata_api_key: NewsData.io key (resolved from env)
        gnews_api_key: GNews key (resolved from env)
        guardian_api_key_env: Environment variable holding the Guardian key
        currents_api_key_env: Environment variable holding the Currents key
        newsdata_api_key_env: Environment variable holding the NewsData key
        gnews_api_key_env: Environment variable holding the GNews key
        timeout_seconds: Deadline for a single JSON API request
        rss_timeout_seconds: Deadline for a single feed download
        rss_max_bytes: Maximum feed body size
        default_query: Query used when the caller passes an empty one
        feeds: Named feeds polled by the rss source
    """

    guardian_api_key: str | None = None
    currents_api_key: str | None = None
    newsdata_api_key: str | None = None
    gnews_api_key: str | None = None
    guardian_api_key_env: str = "GUARDIAN_API_KEY"
    currents_api_key_env: str = "CURRENTS_API_KEY"
    newsdata_api_key_env: str = "NEWSDATA_API_KEY"
    gnews_api_key_env: str = "GNEWS_API_KEY"
    timeout_seconds: float = 12.0
    rss_timeout_seconds: float = 15.0
    rss_max_bytes: int = 5_000_000
    default_query: str = "Ukraine"
    feeds: list[FeedConfig] = field(default_factory=_default_feeds)


@dataclass
class FilterConfig:
    """Post-aggregation filtering.

    Attributes:
        allow_domains: If non-empty, keep only articles whose host matches one entry
        block_domains: Drop articles whose host matches any entry
        allow_domains_env: Comma-separated env var merged into allow_domains
        block_domains_env: Comma-separated env var merged into block_domains
        title_similarity_threshold: Optional fuzzy title dedup threshold (0-100)
    """

    allow_domains: list[str] = field(default_factory=list)
    block_domains: list[str] = field(default_factory=list)
    allow_domains_env: str = "ALLOWED_DOMAINS"
    block_domains_env: str = "BLOCKED_DOMAINS"
    title_similarity_threshold: int | None = None


@dataclass
class FetchConfig:
    """Configuration for guarded full-text fetching.

    Attributes:
        timeout_seconds: Deadline for each request (one per redirect hop)
        max_redirects: Maximum redirect hops before giving up
        max_content_bytes: Maximum response size
        user_agent: HTTP User-Agent header string
        accept: HTTP Accept header string
        accept_language: HTTP Accept-Language header string
        extract_primary: Primary plain-text extraction method for enrichment
        extract_fallback: Fallback plain-text extraction methods
    """

    timeout_seconds: float = 15.0
    max_redirects: int = 3
    max_content_bytes: int = 2_000_000
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    accept_language: str = "en,en-GB;q=0.9"
    extract_primary: str = "trafilatura"
    extract_fallback: list[str] = field(default_factory=lambda: ["readability", "bs4"])


@dataclass
class AnalysisConfig:
    """Configuration for the chunked report analysis.

    Attributes:
        default_model: Model used when the request does not name one
        fallback_models: Ordered models tried after the requested one fails
        default_preset: Prompt preset used when the request does not name one
        max_docs: Default number of articles sent to the model
        max_chars_per_chunk: Character budget for one chunk of documents
        excerpt_chars: Maximum excerpt characters per rendered document
        temperature: Sampling temperature
        max_output_tokens: Output token limit per generation call
        timeout_seconds: Deadline for one generation call
    """

    default_model: str = "gemini-2.5-flash"
    fallback_models: list[str] = field(
        default_factory=lambda: [
            "gemini-2.5-pro",
            "gemini-2.5-flash",
            "gemini-2.0-flash",
            "gemini-2.0-flash-lite",
        ]
    )
    default_preset: str = "osint_structured_v1"
    max_docs: int = 60
    max_chars_per_chunk: int = 12000
    excerpt_chars: int = 1200
    temperature: float = 0.3
    max_output_tokens: int = 8192
    timeout_seconds: float = 120.0


@dataclass
class ProviderConfig:
    """Configuration for the LLM provider.

    Attributes:
        name: Provider name ("gemini" currently supported)
        api_key_env: Environment variable name containing the API key
        base_url: Base URL for the provider API
        api_key: Resolved API key (inline config or env)
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "gemini"
    api_key_env: str = "GEMINI_API_KEY"
    base_url: str = "https://generativelanguage.googleapis.com"
    api_key: str | None = None
    trust_env: bool = True


@dataclass
class OutputConfig:
    """Configuration for pipeline output.

    Attributes:
        run_folder_mode: How to name output folders ("query", "timestamp", "query_timestamp")
    """

    run_folder_mode: str = "query_timestamp"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls_authors")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = True
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls_authors"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (inline or LANGFUSE_PUBLIC_KEY)
        secret_key: Langfuse secret key (inline or LANGFUSE_SECRET_KEY)
        host: Langfuse host URL (inline or LANGFUSE_HOST)
        timeout_seconds: Timeout for Langfuse ingestion requests
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    timeout_seconds: int = 30
    redaction: str = "redact_urls_authors"
    max_text_chars: int = 20000


@dataclass
class CacheConfig:
    """Configuration for the analysis result cache.

    Attributes:
        enabled: Whether to read from/write to the cache
        directory: Directory holding one JSON file per request fingerprint
        ttl_days: Optional time-to-live for cache entries in days
    """

    enabled: bool = False
    directory: str = ".cache/analysis"
    ttl_days: int | None = None


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    sources: SourcesConfig = field(default_factory=SourcesConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)


def load_config(path: str | None, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Load configuration from a YAML file with defaults.

    Credentials and domain lists are then resolved from ``environ``. Pass
    ``None`` to skip environment resolution entirely (useful in tests).
    """
    cfg = AppConfig()
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        cfg = _merge_config(cfg, raw)
    if environ is not None:
        cfg = apply_environment(cfg, environ)
    return cfg


def apply_environment(cfg: AppConfig, environ: Mapping[str, str]) -> AppConfig:
    """Fill unset credentials and extend domain lists from an environment mapping."""
    src = cfg.sources
    src.guardian_api_key = src.guardian_api_key or _env(environ, src.guardian_api_key_env)
    src.currents_api_key = src.currents_api_key or _env(environ, src.currents_api_key_env)
    src.newsdata_api_key = src.newsdata_api_key or _env(environ, src.newsdata_api_key_env)
    src.gnews_api_key = src.gnews_api_key or _env(environ, src.gnews_api_key_env)

    cfg.provider.api_key = cfg.provider.api_key or _env(environ, cfg.provider.api_key_env)

    flt = cfg.filters
    flt.allow_domains = _merge_domains(flt.allow_domains, environ.get(flt.allow_domains_env))
    flt.block_domains = _merge_domains(flt.block_domains, environ.get(flt.block_domains_env))

    lf = cfg.langfuse
    lf.public_key = lf.public_key or _env(environ, "LANGFUSE_PUBLIC_KEY")
    lf.secret_key = lf.secret_key or _env(environ, "LANGFUSE_SECRET_KEY")
    lf.host = lf.host or _env(environ, "LANGFUSE_HOST")
    return cfg


def parse_domain_list(raw: str | None) -> list[str]:
    """Split a comma-separated domain list, lower-casing and dropping blanks."""
    if not raw:
        return []
    domains = []
    for part in raw.split(","):
        domain = part.strip().lower().lstrip(".")
        if domain:
            domains.append(domain)
    return domains


def _merge_domains(existing: list[str], raw: str | None) -> list[str]:
    merged = [d.strip().lower().lstrip(".") for d in existing if d and d.strip()]
    for domain in parse_domain_list(raw):
        if domain not in merged:
            merged.append(domain)
    return merged


def _env(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    sources = dict(data["sources"])
    sources["feeds"] = [
        feed if isinstance(feed, FeedConfig) else FeedConfig(**feed)
        for feed in sources.get("feeds") or []
    ]
    return AppConfig(
        sources=SourcesConfig(**sources),
        filters=FilterConfig(**data["filters"]),
        fetch=FetchConfig(**data["fetch"]),
        analysis=AnalysisConfig(**data["analysis"]),
        provider=ProviderConfig(**data["provider"]),
        output=OutputConfig(**data["output"]),
        logging=LoggingConfig(**data["logging"]),
        langfuse=LangfuseConfig(**data.get("langfuse", {})),
        cache=CacheConfig(**data["cache"]),
    )
