"""Google Gemini provider for report generation."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ...config import AnalysisConfig, LoggingConfig, ProviderConfig
from ...errors import ConfigurationError, GenerationError
from ...utils.logging import log_event, redact_text, truncate_text
from ..tracing import record_span_error, set_span_output, start_span
from .base import GenerationProvider


class GeminiProvider(GenerationProvider):
    """Gemini REST ``generateContent`` backend.

    The API key travels in the ``x-goog-api-key`` header so it never shows
    up in URLs, error messages or logs.
    """

    name = "gemini"

    def __init__(
        self,
        cfg: ProviderConfig,
        analysis_cfg: AnalysisConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ConfigurationError("Missing Gemini API key")
        self.cfg = cfg
        self.analysis_cfg = analysis_cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger
        self.transport = transport

    async def generate(
        self,
        model: str,
        parts: list[str],
        logger: logging.Logger | None = None,
    ) -> str:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": part} for part in parts]}],
            "generationConfig": {
                "temperature": self.analysis_cfg.temperature,
                "maxOutputTokens": self.analysis_cfg.max_output_tokens,
            },
        }
        prompt = "\n\n".join(parts)
        with start_span(
            "gemini.generate",
            kind="llm",
            input_value=prompt,
            attributes={"llm.model": model, "llm.provider": "gemini", "llm.parts": len(parts)},
        ) as span:
            try:
                data = await self._post(model, payload)
            except httpx.HTTPStatusError as exc:
                record_span_error(span, exc)
                message = f"{model}: HTTP {exc.response.status_code} {exc.response.reason_phrase}".strip()
                self._log_llm_response(model, "provider_error", message, prompt, logger)
                raise GenerationError(message) from exc
            except httpx.InvalidURL as exc:
                record_span_error(span, exc)
                message = f"{model}: invalid request URL"
                self._log_llm_response(model, "provider_error", message, prompt, logger)
                raise GenerationError(message) from exc
            except httpx.HTTPError as exc:
                record_span_error(span, exc)
                message = f"{model}: {type(exc).__name__}"
                self._log_llm_response(model, "provider_error", message, prompt, logger)
                raise GenerationError(message) from exc
            except ValueError as exc:
                record_span_error(span, exc)
                self._log_llm_response(model, "parse_error", str(exc), prompt, logger)
                raise GenerationError(f"{model}: invalid JSON response") from exc

            content = _extract_text(data)
            set_span_output(span, content)
            self._log_llm_response(model, "ok", content, prompt, logger)
            return content.strip()

    async def _post(self, model: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{quote(model, safe='-._')}:generateContent"
        headers = {"x-goog-api-key": self.api_key}
        async with httpx.AsyncClient(
            timeout=self.analysis_cfg.timeout_seconds,
            trust_env=self.cfg.trust_env,
            transport=self.transport,
        ) as client:
            resp = await client.post(url, headers=headers, json=payload)
            resp.raise_for_status()
            return resp.json()

    def _log_llm_response(
        self,
        model: str,
        status: str,
        content: str,
        prompt: str,
        logger: logging.Logger | None = None,
    ) -> None:
        active_logger = logger or self.llm_logger
        if active_logger is None:
            return
        redaction = self.log_cfg.llm_log_redaction
        payload: dict[str, Any] = {
            "event": "llm_generate",
            "status": status,
            "model": model,
            "raw_response": truncate_text(redact_text(content, redaction)),
        }
        if self.log_cfg.llm_log_detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
        log_event(active_logger, "LLM response", **payload)


def _extract_text(data: dict[str, Any]) -> str:
    """Join text parts of the first candidate, preferring non-thought parts."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""

    if not isinstance(parts, list):
        return ""

    non_thought_chunks: list[str] = []
    all_chunks: list[str] = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        text = part.get("text")
        if not text:
            continue
        chunk = str(text)
        all_chunks.append(chunk)
        if not bool(part.get("thought")):
            non_thought_chunks.append(chunk)

    if non_thought_chunks:
        return "".join(non_thought_chunks)
    return "".join(all_chunks)
