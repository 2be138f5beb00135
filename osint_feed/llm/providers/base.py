"""Abstract interface for text generation backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging


class GenerationProvider(ABC):
    """Provider interface for one-shot text generation."""

    name: str = ""

    @abstractmethod
    async def generate(
        self,
        model: str,
        parts: list[str],
        logger: logging.Logger | None = None,
    ) -> str:
        """Send ``parts`` as one user turn to ``model`` and return the text.

        An empty string means the model answered without text.

        Raises:
            GenerationError: If the call fails
        """
        raise NotImplementedError
