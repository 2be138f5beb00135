"""Tests for the guarded fetcher and the JSON API helper."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from osint_feed.errors import (
    BlockedHostError,
    ContentTooLargeError,
    FetchError,
    FetchTimeoutError,
    InvalidUrlError,
    SourceError,
    TooManyRedirectsError,
)
from osint_feed.fetch.fetcher import fetch_json, guarded_fetch


async def _public(host: str) -> list[str]:
    return ["93.184.216.34"]


def _fetch(handler, url: str, **kwargs):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await guarded_fetch(url, client=client, resolver=_public, **kwargs)

    return asyncio.run(go())


def test_guarded_fetch_returns_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>ok</html>", headers={"Content-Type": "text/html; charset=utf-8"})

    result = _fetch(handler, "https://news.example/a")

    assert result.status_code == 200
    assert result.text == "<html>ok</html>"
    assert result.final_url == "https://news.example/a"


def test_guarded_fetch_follows_relative_redirect():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        if request.url.path == "/old":
            return httpx.Response(301, headers={"Location": "/new"})
        return httpx.Response(200, text="moved")

    result = _fetch(handler, "https://news.example/old")

    assert result.text == "moved"
    assert result.final_url == "https://news.example/new"
    assert seen == ["https://news.example/old", "https://news.example/new"]


def test_guarded_fetch_rejects_redirect_to_localhost():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        return httpx.Response(302, headers={"Location": "http://localhost/admin"})

    with pytest.raises(BlockedHostError):
        _fetch(handler, "https://news.example/a")
    assert seen == ["news.example"]


def test_guarded_fetch_rejects_redirect_to_metadata_address():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(307, headers={"Location": "http://169.254.169.254/latest/meta-data"})

    with pytest.raises(BlockedHostError):
        _fetch(handler, "https://news.example/a")


def test_guarded_fetch_rejects_private_target_without_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("must not be contacted")

    for url in ("http://127.0.0.1/", "http://10.0.0.5/x", "http://[::1]/", "http://169.254.169.254/"):
        with pytest.raises(BlockedHostError):
            _fetch(handler, url)


def test_guarded_fetch_rejects_bad_scheme_and_port():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("must not be contacted")

    with pytest.raises(InvalidUrlError):
        _fetch(handler, "ftp://news.example/a")
    with pytest.raises(InvalidUrlError):
        _fetch(handler, "http://news.example:8080/a")


def test_guarded_fetch_limits_redirects():
    def handler(request: httpx.Request) -> httpx.Response:
        hop = int(request.url.params.get("hop", "0"))
        return httpx.Response(302, headers={"Location": f"/loop?hop={hop + 1}"})

    with pytest.raises(TooManyRedirectsError):
        _fetch(handler, "https://news.example/loop", max_redirects=3)


def test_guarded_fetch_redirect_without_location():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302)

    with pytest.raises(FetchError, match="Location"):
        _fetch(handler, "https://news.example/a")


def test_guarded_fetch_rejects_declared_oversize():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"x" * 2048)

    with pytest.raises(ContentTooLargeError):
        _fetch(handler, "https://news.example/big", max_content_bytes=1024)


def test_guarded_fetch_rejects_content_length_lie():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"y" * 4096, headers={"Content-Length": "10"})

    with pytest.raises(ContentTooLargeError):
        _fetch(handler, "https://news.example/liar", max_content_bytes=1024)


def test_guarded_fetch_non_success_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="missing")

    with pytest.raises(FetchError) as excinfo:
        _fetch(handler, "https://news.example/a")
    assert excinfo.value.status_code == 404


def test_guarded_fetch_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(FetchTimeoutError):
        _fetch(handler, "https://news.example/a", timeout=0.5)


def _json(handler, url: str, params=None):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_json(url, params, client=client, label="guardian")

    return asyncio.run(go())


def test_fetch_json_decodes_body():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["q"] == "Kyiv"
        return httpx.Response(200, json={"ok": True})

    assert _json(handler, "https://api.example/search", {"q": "Kyiv"}) == {"ok": True}


def test_fetch_json_error_never_leaks_credentials():
    secret = "super-secret-key-123"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text=f"invalid api-key {secret}")

    with pytest.raises(SourceError) as excinfo:
        _json(handler, "https://api.example/search", {"api-key": secret})
    message = str(excinfo.value)
    assert message.startswith("guardian: HTTP 401")
    assert secret not in message


def test_fetch_json_invalid_json_and_transport_errors():
    def bad_json(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    with pytest.raises(SourceError, match="invalid JSON"):
        _json(bad_json, "https://api.example/search")

    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(SourceError, match="ConnectError contacting api.example"):
        _json(refused, "https://api.example/search", {"token": "abcdefghijk"})
