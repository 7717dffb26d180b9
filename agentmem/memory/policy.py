"""Eviction boundary for short-term memory consolidation."""

from __future__ import annotations

from agentmem.memory.turns import Turn


class ConsolidationPolicy:
    """Pick the prefix of the window that gets summarized into long-term memory.

    A fixed-size prefix is evicted first, then any assistant turns left at the
    head are pulled into the chunk too, so the retained window always starts
    with the message that prompted the next reply.
    """

    def __init__(self, chunk_size: int = 5) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.chunk_size = chunk_size

    def split(self, turns: list[Turn]) -> list[Turn]:
        """Remove and return the chunk to consolidate. Mutates *turns* in place."""
        chunk = turns[:self.chunk_size]
        del turns[:self.chunk_size]
        while turns and turns[0].role == "assistant":
            chunk.append(turns.pop(0))
        return chunk
