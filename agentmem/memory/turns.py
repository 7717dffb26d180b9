"""Dialogue turns and sender -> role normalization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

Role = Literal["system", "user", "assistant"]

SYSTEM_SENDER = "system"


@dataclass
class Turn:
    """One message in the short-term window."""

    role: Role
    content: str
    image_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content, "imagePath": self.image_path}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Turn:
        return cls(
            role=data["role"],
            content=data.get("content", ""),
            image_path=data.get("imagePath", data.get("image_path")),
        )


def normalize_turn(owner: str, sender: str, content: str, image_path: str | None = None) -> Turn:
    """Build a turn from the perspective of the agent named *owner*.

    The owner's own messages become ``assistant``; the literal ``system`` sender
    stays ``system``; anyone else becomes ``user`` with the sender name prefixed.
    """
    if sender == SYSTEM_SENDER:
        return Turn(role="system", content=content, image_path=image_path)
    if sender == owner:
        return Turn(role="assistant", content=content, image_path=image_path)
    return Turn(role="user", content=f"{sender}: {content}", image_path=image_path)
