"""Vector index interface and record type."""

from __future__ import annotations

import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MemoryRecord:
    """One consolidated summary stored in the index. Records are never updated."""

    owner_id: str
    memory_text: str
    vector: list[float]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    @property
    def payload(self) -> dict[str, Any]:
        return {"bot": self.owner_id, "memory": self.memory_text, "timestamp": self.timestamp}


class VectorIndex(ABC):
    """Append-only store of memory records partitioned by owner."""

    @abstractmethod
    async def upsert(self, record: MemoryRecord) -> None:
        """Insert *record*. Raises ``VectorIndexError`` on failure."""

    @abstractmethod
    async def query(self, owner_id: str, vector: list[float], top_k: int) -> list[dict[str, Any]]:
        """
        Return up to *top_k* hits for *owner_id*, each ``{"score": float, "payload": dict}``.

        Raises ``VectorIndexError`` on failure.
        """
