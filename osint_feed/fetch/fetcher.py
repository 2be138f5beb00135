"""
Bounded HTTP retrieval.

This module provides two fetch paths:
1. guarded_fetch: SSRF-hardened GET for caller-supplied URLs. Redirects are
   walked manually so every hop is re-validated, and body size is capped.
2. fetch_json: plain bounded GET for fixed-host JSON APIs. Error messages
   never include the query string, which carries credentials.

Both enforce a deadline per request and surface failures as FetchError or
SourceError subclasses.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin, urlsplit

import httpx

from ..errors import (
    ContentTooLargeError,
    FetchError,
    FetchTimeoutError,
    SourceError,
    TooManyRedirectsError,
)
from .guard import Resolver, ensure_public_host, validate_url


REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


@dataclass
class FetchResult:
    """Result of a successful guarded fetch.

    Attributes:
        url: The URL originally requested
        final_url: The URL the body was served from after redirects
        status_code: Final HTTP status code (always 2xx)
        text: Decoded response body
    """
    url: str
    final_url: str
    status_code: int
    text: str


@dataclass
class _Redirect:
    location: str | None


async def guarded_fetch(
    url: str,
    *,
    timeout: float = 15.0,
    max_redirects: int = 3,
    max_content_bytes: int = 2_000_000,
    headers: dict[str, str] | None = None,
    allow_any_port: bool = False,
    client: httpx.AsyncClient | None = None,
    resolver: Resolver | None = None,
) -> FetchResult:
    """GET ``url`` without ever contacting a private destination.

    The host is checked before every request, including each redirect
    target. Redirects (301/302/303/307/308) are followed up to
    ``max_redirects`` hops.

    Args:
        url: Absolute http(s) URL
        timeout: Deadline in seconds for each request
        max_redirects: Maximum redirect hops
        max_content_bytes: Maximum body size, checked against Content-Length
                           and again against the bytes actually read
        headers: Extra request headers
        allow_any_port: Skip the 80/443 port restriction
        client: Optional shared client; one is created per call otherwise
        resolver: Optional DNS resolver override

    Returns:
        FetchResult for the final 2xx response

    Raises:
        InvalidUrlError: Bad scheme, port or URL shape
        BlockedHostError: A hop targets a private or unresolvable host
        TooManyRedirectsError: Redirect limit exceeded
        ContentTooLargeError: Body exceeds ``max_content_bytes``
        FetchTimeoutError: A request exceeded ``timeout``
        FetchError: Non-2xx response, redirect without Location, or transport failure
    """
    current = validate_url(url, allow_any_port=allow_any_port)
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(follow_redirects=False, trust_env=False)

    try:
        for _ in range(max_redirects + 1):
            await ensure_public_host(urlsplit(current).hostname or "", resolver)
            outcome = await _request_once(client, current, timeout, max_content_bytes, headers)
            if isinstance(outcome, _Redirect):
                if not outcome.location:
                    raise FetchError("Redirect without Location")
                current = validate_url(
                    urljoin(current, outcome.location), allow_any_port=allow_any_port
                )
                continue
            status_code, text = outcome
            return FetchResult(url=url, final_url=current, status_code=status_code, text=text)
    finally:
        if owns_client:
            await client.aclose()

    raise TooManyRedirectsError("Too many redirects")


async def _request_once(
    client: httpx.AsyncClient,
    url: str,
    timeout: float,
    max_content_bytes: int,
    headers: dict[str, str] | None,
) -> _Redirect | tuple[int, str]:
    try:
        return await asyncio.wait_for(
            _stream_body(client, url, timeout, max_content_bytes, headers),
            timeout=timeout,
        )
    except asyncio.TimeoutError as exc:
        raise FetchTimeoutError(f"Timed out after {timeout:g}s") from exc
    except httpx.TimeoutException as exc:
        raise FetchTimeoutError(f"Timed out after {timeout:g}s") from exc
    except httpx.HTTPError as exc:
        raise FetchError(f"{type(exc).__name__}: request failed") from exc


async def _stream_body(
    client: httpx.AsyncClient,
    url: str,
    timeout: float,
    max_content_bytes: int,
    headers: dict[str, str] | None,
) -> _Redirect | tuple[int, str]:
    async with client.stream(
        "GET", url, headers=headers, timeout=timeout, follow_redirects=False
    ) as resp:
        if resp.status_code in REDIRECT_STATUSES:
            return _Redirect(location=resp.headers.get("location"))
        if not resp.is_success:
            raise FetchError(f"HTTP {resp.status_code}", status_code=resp.status_code)

        declared = _content_length(resp)
        if declared is not None and declared > max_content_bytes:
            raise ContentTooLargeError("Content too large", status_code=resp.status_code)

        buffer = bytearray()
        async for chunk in resp.aiter_bytes():
            buffer.extend(chunk)
            if len(buffer) > max_content_bytes:
                raise ContentTooLargeError("Content too large", status_code=resp.status_code)

        text = bytes(buffer).decode(resp.charset_encoding or "utf-8", errors="replace")
        if len(text) > max_content_bytes:
            raise ContentTooLargeError("Content too large", status_code=resp.status_code)
        return resp.status_code, text


def _content_length(resp: httpx.Response) -> int | None:
    raw = resp.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


async def fetch_json(
    url: str,
    params: dict[str, Any] | None = None,
    *,
    timeout: float = 12.0,
    client: httpx.AsyncClient | None = None,
    label: str = "source",
) -> Any:
    """GET a fixed-host JSON API and decode the body.

    Raises:
        SourceError: On transport failure, non-2xx status, timeout or invalid
                     JSON. Messages name the host only, never the query.
    """
    host = urlsplit(url).hostname or label
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(trust_env=True)
    try:
        resp = await asyncio.wait_for(client.get(url, params=params, timeout=timeout), timeout=timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise SourceError(f"{label}: request to {host} timed out") from exc
    except httpx.HTTPError as exc:
        raise SourceError(f"{label}: {type(exc).__name__} contacting {host}") from exc
    finally:
        if owns_client:
            await client.aclose()

    if not resp.is_success:
        snippet = _safe_snippet(resp.text, params)
        message = f"{label}: HTTP {resp.status_code} {resp.reason_phrase}".strip()
        if snippet:
            message = f"{message} {snippet}"
        raise SourceError(message)
    try:
        return resp.json()
    except ValueError as exc:
        raise SourceError(f"{label}: invalid JSON from {host}") from exc


def _safe_snippet(text: str, params: dict[str, Any] | None, limit: int = 200) -> str:
    snippet = " ".join((text or "").split())[:limit]
    for value in (params or {}).values():
        secret = str(value)
        if len(secret) >= 8 and secret in snippet:
            snippet = snippet.replace(secret, "[REDACTED]")
    return snippet
