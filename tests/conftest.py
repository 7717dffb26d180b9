from typing import Any

import pytest

from agentmem.memory.turns import Turn
from agentmem.providers.base import Embedder, Summarizer
from agentmem.vector.base import MemoryRecord, VectorIndex


class FakeSummarizer(Summarizer):
    """Records every chunk it receives and returns a canned summary."""

    def __init__(self, reply: str = "summary", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[list[Turn], str]] = []

    async def summarize(self, turns: list[Turn], memory: str = "") -> str:
        self.calls.append((list(turns), memory))
        if self.error is not None:
            raise self.error
        return self.reply


class FakeEmbedder(Embedder):
    def __init__(self, vector: Any = None, error: Exception | None = None) -> None:
        self.vector = [0.1, 0.2, 0.3] if vector is None else vector
        self.error = error
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.vector


class FakeIndex(VectorIndex):
    def __init__(
        self,
        results: Any = None,
        upsert_error: Exception | None = None,
        query_error: Exception | None = None,
    ) -> None:
        self.records: list[MemoryRecord] = []
        self.queries: list[tuple[str, list[float], int]] = []
        self.results = [] if results is None else results
        self.upsert_error = upsert_error
        self.query_error = query_error

    async def upsert(self, record: MemoryRecord) -> None:
        if self.upsert_error is not None:
            raise self.upsert_error
        self.records.append(record)

    async def query(self, owner_id: str, vector: list[float], top_k: int) -> list[dict[str, Any]]:
        self.queries.append((owner_id, vector, top_k))
        if self.query_error is not None:
            raise self.query_error
        return self.results


@pytest.fixture
def summarizer() -> FakeSummarizer:
    return FakeSummarizer()


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def index() -> FakeIndex:
    return FakeIndex()
