"""Configuration schema using Pydantic."""

import os
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_ENV_REF_RE = re.compile(r"^\$\{?([A-Za-z_][A-Za-z0-9_]*)\}?$")


def _resolve_env(value: str) -> str:
    """Resolve ``$VAR`` / ``${VAR}`` references; unresolved references are returned unchanged."""
    if not value:
        return value
    m = _ENV_REF_RE.match(value.strip())
    if not m:
        return value
    return os.environ.get(m.group(1), value)


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MemoryConfig(Base):
    """Short-term window and long-term memory settings."""

    max_messages: int = Field(default=32, ge=2)
    summary_chunk_size: int = Field(default=5, ge=1)
    memory_max_chars: int = Field(default=1024, ge=1)
    backend: Literal["inline", "vector"] = "inline"
    top_k: int = Field(default=3, ge=1)
    bots_dir: str = "./bots"
    load_memory: bool = True


class VectorIndexConfig(Base):
    """Qdrant connection settings."""

    url: str = "http://localhost:6333"
    api_key: str = ""
    collection: str = "bot_memories"
    vector_size: int = Field(default=1536, ge=1)
    timeout: float = 10.0

    @property
    def resolved_api_key(self) -> str:
        return _resolve_env(self.api_key)


class ResilienceConfig(Base):
    """Timeout / retry / circuit-breaker settings for provider calls."""

    timeout: int = 120
    max_retries: int = 3
    circuit_breaker_threshold: int = 5
    circuit_breaker_cooldown: int = 60


class ProviderConfig(Base):
    """LLM provider used for summarization and embeddings."""

    model: str = "openai/gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    api_key: str = ""
    api_base: str | None = None
    resilience: ResilienceConfig = Field(default_factory=ResilienceConfig)

    @property
    def resolved_api_key(self) -> str:
        return _resolve_env(self.api_key)


class Config(Base):
    """Root configuration for agentmem."""

    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    vector: VectorIndexConfig = Field(default_factory=VectorIndexConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)

    @model_validator(mode="after")
    def _chunk_fits_window(self) -> "Config":
        if self.memory.summary_chunk_size > self.memory.max_messages:
            raise ValueError("memory.summary_chunk_size must not exceed memory.max_messages")
        return self
