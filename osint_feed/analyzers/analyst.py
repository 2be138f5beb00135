"""
Chunked map/reduce report analysis with a model fallback chain.

For each model in the chain the documents are chunked, every chunk is
analyzed in order (map), and the partial notes are merged into one report
(reduce) when there is more than one chunk. The first model whose map
phase succeeds produces the result. A reply without text counts as an
empty string, not a failure.
"""

from __future__ import annotations

import logging

from ..cache import AnalysisCache, request_fingerprint
from ..config import AppConfig
from ..core.types import AnalysisRequest, AnalysisResult
from ..errors import GenerationError
from ..llm.prompts import build_chunk_instructions, build_synthesis_instructions, build_system_prompt
from ..llm.providers.base import GenerationProvider
from ..utils.logging import log_event
from .chunker import chunk_articles


class ReportAnalyzer:
    """Produce a cited report from ranked articles."""

    def __init__(
        self,
        cfg: AppConfig,
        provider: GenerationProvider,
        logger: logging.Logger | None = None,
        llm_logger: logging.Logger | None = None,
        cache: AnalysisCache | None = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.logger = logger
        self.llm_logger = llm_logger
        self.cache = cache

    def model_chain(self, requested: str | None) -> list[str]:
        """Requested model first, then configured fallbacks without repeats."""
        first = (requested or "").strip() or self.cfg.analysis.default_model
        chain = [first]
        for model in self.cfg.analysis.fallback_models:
            if model and model not in chain:
                chain.append(model)
        return chain

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        cache_key = None
        if self.cache is not None and self.cache.enabled:
            cache_key = request_fingerprint(request)
            cached = self.cache.get(cache_key)
            if cached is not None:
                log_event(self.logger, "Analysis cache hit", event="analysis_cache_hit", key=cache_key)
                return cached

        system = build_system_prompt(
            request.prompt_preset, request.start, request.end, request.q, request.focus
        )
        chunks = chunk_articles(
            request.articles,
            max_docs=request.max_docs,
            max_chars_per_chunk=self.cfg.analysis.max_chars_per_chunk,
            excerpt_chars=self.cfg.analysis.excerpt_chars,
        )

        failed: list[str] = []
        last_error: Exception | None = None
        for model in self.model_chain(request.model):
            try:
                report = await self._run_model(model, system, chunks, request.focus)
            except Exception as exc:  # noqa: BLE001
                last_error = exc
                failed.append(model)
                log_event(
                    self.logger,
                    "Model failed",
                    level=logging.WARNING,
                    event="analysis_model_failed",
                    model=model,
                    error=str(exc) or type(exc).__name__,
                )
                continue

            result = AnalysisResult(
                model=model,
                start=request.start,
                end=request.end,
                q=request.q,
                focus=request.focus,
                prompt_preset=request.prompt_preset,
                chunks=len(chunks),
                report=report,
                fallback=" -> ".join(failed + [model]) if failed else None,
            )
            log_event(
                self.logger,
                "Analysis finished",
                event="analysis_done",
                model=model,
                chunks=len(chunks),
                fallback=result.fallback,
            )
            if cache_key is not None:
                self.cache.put(cache_key, result)
            return result

        if last_error is not None:
            raise last_error
        raise GenerationError("Model generation failed")

    async def _run_model(self, model: str, system: str, chunks: list[str], focus: str) -> str:
        total = len(chunks)
        partials: list[str] = []
        for idx, chunk in enumerate(chunks, start=1):
            instructions = build_chunk_instructions(idx, total, focus)
            text = await self.provider.generate(
                model,
                [system, instructions, f"Documents:\n\n{chunk}"],
                logger=self.llm_logger,
            )
            log_event(
                self.logger,
                "Chunk analyzed",
                level=logging.DEBUG,
                event="analysis_chunk_done",
                model=model,
                part=idx,
                total=total,
            )
            partials.append(text or "")

        combined = "\n\n".join(partials)
        if total <= 1:
            return combined

        try:
            merged = await self.provider.generate(
                model,
                [system, build_synthesis_instructions(focus), combined],
                logger=self.llm_logger,
            )
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                "Synthesis failed, using partial notes",
                level=logging.WARNING,
                event="analysis_reduce_failed",
                model=model,
                error=str(exc) or type(exc).__name__,
            )
            merged = ""
        if merged and merged.strip():
            return merged
        return combined
