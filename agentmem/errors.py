"""Exception hierarchy for the memory subsystem.

Write-path failures (persistence, summarization) propagate to the caller.
Read-path failures (embedding, vector queries) are caught by the backends and
degrade to empty results.
"""


class AgentMemoryError(Exception):
    """Base class for all agentmem errors."""


class PersistenceError(AgentMemoryError):
    """Reading or writing a snapshot or audit file failed."""

    def __init__(self, message: str, *, path: object = None) -> None:
        super().__init__(message)
        self.path = path


class SummarizationError(AgentMemoryError):
    """The external summarizer failed to produce memory text."""


class EmbeddingError(AgentMemoryError):
    """The external embedder failed."""


class VectorIndexError(AgentMemoryError):
    """An upsert or query against the vector index failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
