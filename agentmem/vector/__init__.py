"""Vector index for semantic recall of long-term memory."""

from agentmem.vector.base import MemoryRecord, VectorIndex
from agentmem.vector.qdrant import QdrantIndex

__all__ = ["MemoryRecord", "QdrantIndex", "VectorIndex"]
