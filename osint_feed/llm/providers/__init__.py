from .base import GenerationProvider
from .factory import available_providers, create_provider
from .gemini import GeminiProvider

__all__ = ["GenerationProvider", "GeminiProvider", "available_providers", "create_provider"]
