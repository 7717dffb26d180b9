"""Short-term window, consolidation and long-term memory backends."""

from agentmem.memory.backends import InlineTextBackend, MemoryBackend, VectorIndexBackend
from agentmem.memory.buffer import TurnBuffer
from agentmem.memory.factory import build_backend, create_agent_memory
from agentmem.memory.history import AgentMemory
from agentmem.memory.persistence import AgentState, MemorySnapshot, PersistenceLayer
from agentmem.memory.policy import ConsolidationPolicy
from agentmem.memory.turns import Turn, normalize_turn

__all__ = [
    "AgentMemory",
    "AgentState",
    "ConsolidationPolicy",
    "InlineTextBackend",
    "MemoryBackend",
    "MemorySnapshot",
    "PersistenceLayer",
    "Turn",
    "TurnBuffer",
    "VectorIndexBackend",
    "build_backend",
    "create_agent_memory",
    "normalize_turn",
]
