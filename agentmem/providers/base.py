"""Interfaces for the external summarization and embedding services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agentmem.memory.turns import Turn


class Summarizer(ABC):
    """Turns an evicted chunk of dialogue into long-term memory text."""

    @abstractmethod
    async def summarize(self, turns: list[Turn], memory: str = "") -> str:
        """
        Summarize *turns*, optionally folding in the previous *memory* text.

        Raises:
            SummarizationError: if the service fails or returns nothing usable.
        """


class Embedder(ABC):
    """Maps text to a dense vector for similarity search."""

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """
        Return the embedding for *text*. May be empty when the service has nothing to offer.

        Raises:
            EmbeddingError: if the service call fails.
        """
