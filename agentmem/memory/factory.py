"""Build an AgentMemory from configuration, choosing the backend once."""

from __future__ import annotations

from pathlib import Path

from agentmem.config.schema import Config
from agentmem.logging import get_logger
from agentmem.memory.backends import InlineTextBackend, MemoryBackend, VectorIndexBackend
from agentmem.memory.history import AgentMemory
from agentmem.memory.persistence import PersistenceLayer
from agentmem.providers.base import Embedder, Summarizer
from agentmem.vector.base import VectorIndex

logger = get_logger(__name__)


def build_backend(
    config: Config,
    summarizer: Summarizer,
    embedder: Embedder | None = None,
    index: VectorIndex | None = None,
) -> MemoryBackend:
    """Vector backend when configured and its collaborators exist, inline text otherwise."""
    mem = config.memory
    if mem.backend == "vector":
        if embedder is not None and index is not None:
            return VectorIndexBackend(summarizer, embedder, index, top_k=mem.top_k)
        logger.warning(
            "vector_backend_unavailable",
            has_embedder=embedder is not None,
            has_index=index is not None,
            fallback="inline",
        )
    return InlineTextBackend(summarizer, max_chars=mem.memory_max_chars)


def create_agent_memory(
    name: str,
    config: Config,
    summarizer: Summarizer,
    embedder: Embedder | None = None,
    index: VectorIndex | None = None,
) -> AgentMemory:
    """Wire buffer, backend and persistence for agent *name*."""
    backend = build_backend(config, summarizer, embedder, index)
    persistence = PersistenceLayer(
        Path(config.memory.bots_dir),
        name,
        persist_memory_text=backend.persists_memory_text,
    )
    return AgentMemory(name, config.memory, backend, persistence)
