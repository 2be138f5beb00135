"""Tests for the Gemini provider, its response parsing and the provider factory."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from osint_feed.config import AnalysisConfig, LoggingConfig, ProviderConfig
from osint_feed.errors import ConfigurationError, GenerationError
from osint_feed.llm.providers.factory import available_providers, create_provider
from osint_feed.llm.providers.gemini import GeminiProvider, _extract_text


API_KEY = "gemini-test-key-0001"


def _provider(handler) -> GeminiProvider:
    return GeminiProvider(
        ProviderConfig(api_key=API_KEY),
        AnalysisConfig(),
        API_KEY,
        LoggingConfig(),
        transport=httpx.MockTransport(handler),
    )


def test_extract_text_joins_non_thought_parts():
    data = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"thought": True, "text": "internal reasoning"},
                        {"text": "## Executive Summary\n"},
                        {"text": "- Point [#1]"},
                    ]
                }
            }
        ]
    }

    assert _extract_text(data) == "## Executive Summary\n- Point [#1]"


def test_extract_text_falls_back_to_all_text_when_only_thought():
    data = {"candidates": [{"content": {"parts": [{"thought": True, "text": "first"}, {"thought": True, "text": " second"}]}}]}
    assert _extract_text(data) == "first second"


def test_extract_text_handles_missing_candidates():
    assert _extract_text({}) == ""
    assert _extract_text({"candidates": []}) == ""
    assert _extract_text({"candidates": [{"finishReason": "SAFETY"}]}) == ""


def test_generate_posts_parts_with_header_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "  report  "}]}}]})

    text = asyncio.run(_provider(handler).generate("gemini-2.5-pro", ["system", "instructions", "docs"]))

    assert text == "report"
    assert seen["url"] == "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-pro:generateContent"
    assert seen["key"] == API_KEY
    assert [p["text"] for p in seen["body"]["contents"][0]["parts"]] == ["system", "instructions", "docs"]
    assert seen["body"]["generationConfig"]["maxOutputTokens"] == AnalysisConfig().max_output_tokens


def test_generate_http_error_becomes_generation_error_without_key():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text=f"quota exceeded for {API_KEY}")

    with pytest.raises(GenerationError) as excinfo:
        asyncio.run(_provider(handler).generate("gemini-2.5-pro", ["x"]))
    assert str(excinfo.value) == "gemini-2.5-pro: HTTP 429 Too Many Requests"
    assert API_KEY not in str(excinfo.value)


def test_generate_transport_error_becomes_generation_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(GenerationError, match="ConnectError"):
        asyncio.run(_provider(handler).generate("gemini-2.0-flash", ["x"]))


def test_model_name_is_escaped_in_path():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.raw_path.decode("ascii")
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "ok"}]}}]})

    asyncio.run(_provider(handler).generate("gemini/../tunedModels/x", ["x"]))

    assert seen["path"] == "/v1beta/models/gemini%2F..%2FtunedModels%2Fx:generateContent"


def test_invalid_url_becomes_generation_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("request must not be sent")

    provider = GeminiProvider(
        ProviderConfig(api_key=API_KEY, base_url="https://generativelanguage.googleapis.com\t"),
        AnalysisConfig(),
        API_KEY,
        LoggingConfig(),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(GenerationError, match="invalid request URL"):
        asyncio.run(provider.generate("gemini-2.5-flash", ["x"]))


def test_factory_builds_gemini_and_rejects_bad_config():
    assert "gemini" in available_providers()
    provider = create_provider(ProviderConfig(api_key="k"), AnalysisConfig())
    assert isinstance(provider, GeminiProvider)

    with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
        create_provider(ProviderConfig(), AnalysisConfig())
    with pytest.raises(ConfigurationError, match="Unsupported provider"):
        create_provider(ProviderConfig(name="unknown", api_key="k"), AnalysisConfig())
