"""Summarization and embedding providers."""

from agentmem.providers.base import Embedder, Summarizer
from agentmem.providers.litellm_provider import LiteLLMProvider

__all__ = ["Embedder", "LiteLLMProvider", "Summarizer"]
