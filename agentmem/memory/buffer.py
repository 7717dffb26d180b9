"""Bounded short-term dialogue window."""

from __future__ import annotations

import copy
from typing import Awaitable, Callable

from agentmem.logging import get_logger
from agentmem.memory.policy import ConsolidationPolicy
from agentmem.memory.turns import Turn, normalize_turn

logger = get_logger(__name__)

ConsolidateFn = Callable[[list[Turn]], Awaitable[None]]


class TurnBuffer:
    """Ordered window of turns for one agent.

    When an ``add`` brings the window up to ``max_messages`` the policy evicts a
    chunk and ``add`` awaits ``on_consolidate(chunk)`` before returning. There is
    no internal locking: callers must not overlap ``add`` calls for one agent.
    """

    def __init__(
        self,
        owner: str,
        on_consolidate: ConsolidateFn,
        *,
        max_messages: int = 32,
        policy: ConsolidationPolicy | None = None,
    ) -> None:
        if max_messages < 1:
            raise ValueError("max_messages must be >= 1")
        self.owner = owner
        self.max_messages = max_messages
        self.policy = policy or ConsolidationPolicy()
        self._on_consolidate = on_consolidate
        self._turns: list[Turn] = []

    def __len__(self) -> int:
        return len(self._turns)

    async def add(self, sender: str, content: str, image_path: str | None = None) -> None:
        self._turns.append(normalize_turn(self.owner, sender, content, image_path))
        # Normally runs once; loops only for a restored window larger than the limit.
        while len(self._turns) >= self.max_messages:
            chunk = self.policy.split(self._turns)
            logger.info(
                "consolidation_triggered",
                chunk_turns=len(chunk),
                retained_turns=len(self._turns),
            )
            await self._on_consolidate(chunk)

    def get_snapshot(self) -> list[Turn]:
        """Deep copy of the window; mutating it does not affect the buffer."""
        return copy.deepcopy(self._turns)

    def restore(self, turns: list[Turn]) -> None:
        self._turns = copy.deepcopy(turns)

    def clear(self) -> None:
        self._turns = []
