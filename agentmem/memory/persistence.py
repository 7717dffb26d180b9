"""Snapshot persistence and the per-session audit log of evicted turns."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agentmem.errors import PersistenceError
from agentmem.logging import get_logger
from agentmem.memory.turns import Turn
from agentmem.utils.helpers import atomic_write_text, safe_filename, session_timestamp

logger = get_logger(__name__)


@dataclass
class AgentState:
    """Hosting-agent state that is resumed together with the dialogue window."""

    self_prompt_state: Any = None
    self_prompt: str | None = None
    task_start_time: float | None = None
    last_sender: str | None = None


@dataclass
class MemorySnapshot:
    """Everything needed to resume an agent's conversation."""

    turns: list[Turn] = field(default_factory=list)
    memory_text: str | None = ""
    state: AgentState = field(default_factory=AgentState)

    def __post_init__(self) -> None:
        if self.memory_text is None:
            self.memory_text = ""

    def to_dict(self, *, include_memory_text: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "turns": [t.to_dict() for t in self.turns],
            "self_prompting_state": self.state.self_prompt_state,
            "self_prompt": self.state.self_prompt,
            "taskStart": self.state.task_start_time,
            "last_sender": self.state.last_sender,
        }
        if include_memory_text:
            data["memory"] = self.memory_text
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemorySnapshot:
        return cls(
            turns=[Turn.from_dict(t) for t in data.get("turns") or []],
            memory_text=data.get("memory") or "",
            state=AgentState(
                self_prompt_state=data.get("self_prompting_state"),
                self_prompt=data.get("self_prompt"),
                task_start_time=data.get("taskStart"),
                last_sender=data.get("last_sender"),
            ),
        )


class PersistenceLayer:
    """
    File layout under ``bots_dir``::

        <agent>/memory.json               latest snapshot, overwritten on every save
        <agent>/histories/<stamp>.json    JSON array of every turn evicted this session
    """

    def __init__(self, bots_dir: Path, agent_name: str, *, persist_memory_text: bool = True) -> None:
        self.agent_name = agent_name
        self.persist_memory_text = persist_memory_text
        self.agent_dir = Path(bots_dir) / safe_filename(agent_name)
        self.memory_file = self.agent_dir / "memory.json"
        self.histories_dir = self.agent_dir / "histories"
        self.audit_file: Path | None = None

    def save(self, snapshot: MemorySnapshot) -> None:
        started = time.perf_counter()
        data = snapshot.to_dict(include_memory_text=self.persist_memory_text)
        try:
            atomic_write_text(self.memory_file, json.dumps(data, ensure_ascii=False, indent=2))
        except (OSError, TypeError, ValueError) as e:
            logger.error("snapshot_save_failed", path=str(self.memory_file), error=str(e))
            raise PersistenceError(f"Failed to save memory for {self.agent_name}: {e}", path=self.memory_file) from e
        logger.info(
            "snapshot_saved",
            path=str(self.memory_file),
            turns=len(snapshot.turns),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
        )

    def load(self) -> MemorySnapshot | None:
        """Return the saved snapshot, or ``None`` when the agent has never been saved."""
        if not self.memory_file.exists():
            logger.info("snapshot_missing", path=str(self.memory_file))
            return None
        try:
            data = json.loads(self.memory_file.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("snapshot root must be a JSON object")
            snapshot = MemorySnapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error("snapshot_load_failed", path=str(self.memory_file), error=str(e))
            raise PersistenceError(f"Failed to load memory for {self.agent_name}: {e}", path=self.memory_file) from e

        if not self.persist_memory_text:
            snapshot.memory_text = ""
        logger.info("snapshot_loaded", turns=len(snapshot.turns), memory=snapshot.memory_text)
        return snapshot

    def _ensure_audit_file(self) -> Path:
        if self.audit_file is None:
            path = self.histories_dir / f"{session_timestamp()}.json"
            if not path.exists():
                atomic_write_text(path, "[]")
            # Cached only once the file exists on disk.
            self.audit_file = path
            logger.debug("audit_log_created", path=str(path))
        return self.audit_file

    def append_audit(self, chunk: list[Turn]) -> None:
        """Append evicted turns to this session's audit file (whole-file read-modify-write)."""
        try:
            path = self._ensure_audit_file()
            history = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(history, list):
                raise ValueError("audit log root must be a JSON array")
            history.extend(t.to_dict() for t in chunk)
            atomic_write_text(path, json.dumps(history, ensure_ascii=False, indent=4))
        except (OSError, ValueError) as e:
            logger.error("audit_append_failed", path=str(self.audit_file), error=str(e))
            raise PersistenceError(
                f"Error updating {self.agent_name}'s full history file: {e}", path=self.audit_file,
            ) from e

    def list_audit_files(self) -> list[Path]:
        """Audit files for this agent, most recently modified first."""
        if not self.histories_dir.is_dir():
            return []
        return sorted(self.histories_dir.glob("*.json"), key=lambda p: p.stat().st_mtime, reverse=True)
