"""
URL canonicalization and content identity.

Canonical URLs drop tracking parameters and AMP suffixes so the same story
reached through different links hashes to the same article id.
"""

from __future__ import annotations

import hashlib
from urllib.parse import unquote_plus, urlsplit, urlunsplit


TRACKING_PARAMS = frozenset({"gclid", "fbclid", "mc_cid", "mc_eid"})
TRACKING_PREFIXES = ("utm_",)
DEFAULT_PORTS = {"http": 80, "https": 443}
AMP_SUFFIXES = ("/amp", ".amp")


def canonicalize(url: str) -> str:
    """Return the canonical form of ``url``.

    Input that cannot be parsed as an absolute URL is returned unchanged;
    this function never raises.

    Examples:
        >>> canonicalize("HTTPS://Example.com:443/a/amp?utm_source=x&id=7")
        'https://example.com/a?id=7'
    """
    try:
        parts = urlsplit(url.strip())
        scheme = parts.scheme.lower()
        host = parts.hostname
        port = parts.port
    except (AttributeError, ValueError):
        return url
    if not scheme or not host:
        return url

    netloc = _build_netloc(scheme, host, port, parts.username, parts.password)
    path = _strip_amp(parts.path) or "/"
    query = _strip_tracking(parts.query)
    return urlunsplit((scheme, netloc, path, query, parts.fragment))


def identity(url: str) -> str:
    """Stable content id: SHA-1 hex digest of the canonical URL."""
    return hashlib.sha1(canonicalize(url).encode("utf-8")).hexdigest()


def is_http_url(url: str | None) -> bool:
    """True when ``url`` is an absolute http(s) URL with a host."""
    if not url:
        return False
    try:
        parts = urlsplit(url)
        return parts.scheme.lower() in DEFAULT_PORTS and bool(parts.hostname)
    except ValueError:
        return False


def hostname_of(url: str) -> str | None:
    """Lower-cased hostname of ``url`` or None when it has none."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host.lower().rstrip(".") if host else None


def _build_netloc(
    scheme: str,
    host: str,
    port: int | None,
    username: str | None,
    password: str | None,
) -> str:
    host = host.lower()
    if ":" in host:
        host = f"[{host}]"
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        host = f"{host}:{port}"
    if username is None:
        return host
    userinfo = username if password is None else f"{username}:{password}"
    return f"{userinfo}@{host}"


def _strip_amp(path: str) -> str:
    while path.lower().endswith(AMP_SUFFIXES):
        path = path[: -len(".amp")]
    return path


def _strip_tracking(query: str) -> str:
    if not query:
        return ""
    kept = []
    for pair in query.split("&"):
        if not pair:
            continue
        name = unquote_plus(pair.split("=", 1)[0]).lower()
        if name in TRACKING_PARAMS or name.startswith(TRACKING_PREFIXES):
            continue
        kept.append(pair)
    return "&".join(kept)
