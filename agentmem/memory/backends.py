"""Long-term memory backends: a single inline summary, or a vector index of summaries."""

from __future__ import annotations

import numbers
from abc import ABC, abstractmethod
from typing import Any

from agentmem.errors import EmbeddingError, VectorIndexError
from agentmem.logging import get_logger
from agentmem.memory.turns import Turn
from agentmem.providers.base import Embedder, Summarizer
from agentmem.vector.base import MemoryRecord, VectorIndex

logger = get_logger(__name__)


class MemoryBackend(ABC):
    """Where consolidated chunks end up and how they are recalled."""

    # Whether ``memory_text`` belongs in the on-disk snapshot.
    persists_memory_text: bool = True

    def __init__(self, summarizer: Summarizer) -> None:
        self.summarizer = summarizer
        self.memory_text = ""

    @abstractmethod
    async def store(self, owner_id: str, chunk: list[Turn]) -> None:
        """Summarize *chunk* into long-term memory. Summarizer errors propagate."""

    @abstractmethod
    async def recall(self, owner_id: str, context: str) -> str:
        """Return memory text relevant to *context* (possibly empty). Never raises."""

    def restore(self, memory_text: str | None) -> None:
        self.memory_text = memory_text or ""

    def reset(self) -> None:
        self.memory_text = ""


class InlineTextBackend(MemoryBackend):
    """Keeps one running summary string, capped at ``max_chars``."""

    TRUNCATION_MARKER = "...(Memory truncated to {max_chars} chars. Compress it more next time)"

    def __init__(self, summarizer: Summarizer, *, max_chars: int = 1024) -> None:
        super().__init__(summarizer)
        self.max_chars = max_chars

    async def store(self, owner_id: str, chunk: list[Turn]) -> None:
        text = await self.summarizer.summarize(chunk, memory=self.memory_text)
        if len(text) > self.max_chars:
            logger.warning("memory_truncated", chars=len(text), max_chars=self.max_chars)
            text = text[:self.max_chars] + self.TRUNCATION_MARKER.format(max_chars=self.max_chars)
        self.memory_text = text
        logger.info("memory_updated", chars=len(text))

    async def recall(self, owner_id: str, context: str) -> str:
        return self.memory_text


class VectorIndexBackend(MemoryBackend):
    """Embeds every consolidated summary as a new, dated record in a vector index.

    ``memory_text`` holds the latest summary for this process only; long-term
    memory lives in the index and is never written to the local snapshot.
    """

    persists_memory_text = False

    def __init__(
        self,
        summarizer: Summarizer,
        embedder: Embedder,
        index: VectorIndex,
        *,
        top_k: int = 3,
    ) -> None:
        super().__init__(summarizer)
        self.embedder = embedder
        self.index = index
        self.top_k = top_k

    def restore(self, memory_text: str | None) -> None:
        self.memory_text = ""

    @staticmethod
    def _valid_vector(vector: Any) -> bool:
        return (
            isinstance(vector, list)
            and len(vector) > 0
            and all(isinstance(v, numbers.Real) and not isinstance(v, bool) for v in vector)
        )

    async def store(self, owner_id: str, chunk: list[Turn]) -> None:
        text = await self.summarizer.summarize(chunk)
        self.memory_text = text

        try:
            vector = await self.embedder.embed(text)
        except EmbeddingError as e:
            logger.warning("vector_upsert_skipped", reason="embedding_failed", error=str(e), memory=text)
            return
        if not self._valid_vector(vector):
            logger.warning("vector_upsert_skipped", reason="embedding_empty_or_invalid", memory=text)
            return

        record = MemoryRecord(owner_id=owner_id, memory_text=text, vector=[float(v) for v in vector])
        try:
            await self.index.upsert(record)
        except VectorIndexError as e:
            logger.error("vector_upsert_failed", record_id=record.id, error=str(e))
            return
        logger.info("vector_upsert_done", record_id=record.id, chars=len(text))

    async def recall(self, owner_id: str, context: str) -> str:
        # Read path: any failure degrades to no memory.
        try:
            vector = await self.embedder.embed(context)
        except Exception as e:
            logger.warning("vector_recall_failed", stage="embed", error=str(e))
            return ""
        if not self._valid_vector(vector):
            return ""

        try:
            results = await self.index.query(owner_id, vector, self.top_k)
        except Exception as e:
            logger.warning("vector_recall_failed", stage="query", error=str(e))
            return ""
        if not isinstance(results, list):
            return ""

        hits: list[tuple[float, str]] = []
        for r in results:
            if not isinstance(r, dict):
                continue
            payload = r.get("payload")
            memory = payload.get("memory") if isinstance(payload, dict) else None
            if not isinstance(memory, str) or not memory.strip():
                continue
            score = r.get("score")
            if not isinstance(score, numbers.Real):
                score = 0.0
            hits.append((float(score), memory.strip()))

        hits.sort(key=lambda h: h[0], reverse=True)
        logger.debug("vector_recall_done", hits=len(hits))
        return "\n".join(text for _, text in hits)
