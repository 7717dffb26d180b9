"""Per-agent conversational memory: short-term window plus long-term backend."""

from __future__ import annotations

from agentmem.config.schema import MemoryConfig
from agentmem.logging import bind_agent, get_logger
from agentmem.memory.backends import MemoryBackend
from agentmem.memory.buffer import TurnBuffer
from agentmem.memory.persistence import AgentState, MemorySnapshot, PersistenceLayer
from agentmem.memory.policy import ConsolidationPolicy
from agentmem.memory.turns import Turn

logger = get_logger(__name__)


class AgentMemory:
    """
    The memory surface a hosting agent talks to.

    ``add`` may block on summarization (and embedding/indexing for the vector
    backend). When it returns, the chunk has been stored and recorded in the
    audit log, or the failure has been raised to the caller.

    Every log line emitted below these methods carries ``agent=<name>``.
    """

    def __init__(
        self,
        name: str,
        config: MemoryConfig,
        backend: MemoryBackend,
        persistence: PersistenceLayer,
    ) -> None:
        self.name = name
        self.config = config
        self.backend = backend
        self.persistence = persistence
        self.buffer = TurnBuffer(
            name,
            self._consolidate,
            max_messages=config.max_messages,
            policy=ConsolidationPolicy(config.summary_chunk_size),
        )

    @property
    def memory_text(self) -> str:
        return self.backend.memory_text

    async def _consolidate(self, chunk: list[Turn]) -> None:
        logger.info("storing_memories", turns=len(chunk))
        await self.backend.store(self.name, chunk)
        self.persistence.append_audit(chunk)

    async def add(self, sender: str, content: str, image_path: str | None = None) -> None:
        with bind_agent(self.name):
            await self.buffer.add(sender, content, image_path)

    def get_history(self) -> list[Turn]:
        return self.buffer.get_snapshot()

    async def recall(self, context: str) -> str:
        """Long-term memory relevant to *context*, for augmenting the next prompt."""
        with bind_agent(self.name):
            return await self.backend.recall(self.name, context)

    def snapshot(self, state: AgentState | None = None) -> MemorySnapshot:
        return MemorySnapshot(
            turns=self.buffer.get_snapshot(),
            memory_text=self.backend.memory_text,
            state=state or AgentState(),
        )

    def save(self, state: AgentState | None = None) -> None:
        with bind_agent(self.name):
            self.persistence.save(self.snapshot(state))

    def load(self) -> MemorySnapshot | None:
        """Restore window and memory text from disk. Returns ``None`` if nothing was saved."""
        with bind_agent(self.name):
            snapshot = self.persistence.load()
            if snapshot is None:
                return None
            self.buffer.restore(snapshot.turns)
            self.backend.restore(snapshot.memory_text)
            return snapshot

    def start(self) -> MemorySnapshot | None:
        """Resume from disk when ``load_memory`` is enabled, otherwise start empty."""
        if not self.config.load_memory:
            with bind_agent(self.name):
                logger.info("memory_load_skipped")
            return None
        return self.load()

    def clear(self) -> None:
        self.buffer.clear()
        self.backend.reset()
