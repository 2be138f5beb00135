"""Provider factory and registry for LLM backends."""

from __future__ import annotations

import logging

from ...config import AnalysisConfig, LoggingConfig, ProviderConfig
from ...errors import ConfigurationError
from .base import GenerationProvider
from .gemini import GeminiProvider


ProviderBuilder = type[GenerationProvider]

_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "gemini": GeminiProvider,
    "google": GeminiProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    provider_cfg: ProviderConfig,
    analysis_cfg: AnalysisConfig,
    log_cfg: LoggingConfig | None = None,
    llm_logger: logging.Logger | None = None,
) -> GenerationProvider:
    """Build a provider instance from runtime config.

    Raises:
        ConfigurationError: Unknown backend or missing API key
    """
    name = provider_cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ConfigurationError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    if not provider_cfg.api_key:
        raise ConfigurationError(f"Missing API key: set {provider_cfg.api_key_env}")
    return builder(provider_cfg, analysis_cfg, provider_cfg.api_key, log_cfg or LoggingConfig(), llm_logger)
