"""LLM report generation and observability."""

from .providers.base import GenerationProvider
from .providers.factory import available_providers, create_provider
from .providers.gemini import GeminiProvider
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "GenerationProvider",
    "GeminiProvider",
    "create_provider",
    "available_providers",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
]
