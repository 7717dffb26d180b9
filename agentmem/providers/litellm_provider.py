"""LiteLLM-backed summarizer and embedder."""

from __future__ import annotations

import asyncio
import time
from typing import Any

import litellm
from litellm import acompletion, aembedding

from agentmem.config.schema import ProviderConfig, ResilienceConfig
from agentmem.errors import EmbeddingError, SummarizationError
from agentmem.logging import get_logger, mask_secret
from agentmem.memory.turns import Turn
from agentmem.providers.base import Embedder, Summarizer

logger = get_logger("agentmem.providers.litellm")


DEFAULT_MEMORY_PROMPT = (
    "You are an agent named $NAME that has been chatting and acting in a shared world. "
    "Update your memory by summarizing the following conversation and your old memory in your next response. "
    "Prioritize preserving important facts, things you've learned, useful tips, and long term reminders. "
    "Do not record stats, inventory, or docs. Only save transient information from your chat history. "
    "Be extremely brief and minimize words. Compress useful information.\n"
    "Old Memory: '$MEMORY'\n"
    "Recent conversation: \n$TO_SUMMARIZE\n"
    "Summarize your old memory and recent conversation into a new memory, "
    "and respond only with the unwrapped memory text: "
)

_ROLE_LABELS = {
    "assistant": "Your output:\n",
    "system": "System output: ",
    "user": "User input: ",
}


def format_turns(turns: list[Turn]) -> str:
    """Render turns as plain text for the memory-saving prompt."""
    parts = []
    for t in turns:
        parts.append(f"\n\n{_ROLE_LABELS.get(t.role, 'User input: ')}{t.content}")
    return "".join(parts).strip()


class LiteLLMProvider(Summarizer, Embedder):
    """
    Summarization and embeddings through LiteLLM.

    Supports any chat/embedding model LiteLLM can route to. Timeouts, retries
    and a simple circuit breaker are driven by ``ResilienceConfig``.
    """

    def __init__(
        self,
        agent_name: str,
        model: str = "openai/gpt-4o-mini",
        embedding_model: str | None = "text-embedding-3-small",
        api_key: str | None = None,
        api_base: str | None = None,
        prompt_template: str = DEFAULT_MEMORY_PROMPT,
        resilience_config: ResilienceConfig | None = None,
    ) -> None:
        self.agent_name = agent_name
        self.model = model
        self.embedding_model = embedding_model
        self.api_key = api_key
        self.api_base = api_base
        self.prompt_template = prompt_template

        self._resilience = resilience_config
        self._consecutive_failures: int = 0
        self._circuit_open_until: float = 0.0

        if api_key:
            logger.info("provider_initialized", model=model, api_key=mask_secret(api_key))

        # Disable LiteLLM logging noise
        litellm.suppress_debug_info = True
        litellm.drop_params = True

    @classmethod
    def from_config(cls, agent_name: str, config: ProviderConfig) -> LiteLLMProvider:
        return cls(
            agent_name,
            model=config.model,
            embedding_model=config.embedding_model or None,
            api_key=config.resolved_api_key or None,
            api_base=config.api_base,
            resilience_config=config.resilience,
        )

    def build_prompt(self, turns: list[Turn], memory: str = "") -> str:
        return (
            self.prompt_template
            .replace("$NAME", self.agent_name)
            .replace("$MEMORY", memory)
            .replace("$TO_SUMMARIZE", format_turns(turns))
        )

    def _check_circuit_breaker(self) -> str | None:
        """Return an error message if the circuit is open, else None."""
        rc = self._resilience
        if not rc or rc.circuit_breaker_threshold <= 0:
            return None
        if self._consecutive_failures < rc.circuit_breaker_threshold:
            return None
        now = time.monotonic()
        if now < self._circuit_open_until:
            return (
                f"Circuit breaker open: {self._consecutive_failures} consecutive failures. "
                f"Retry after {int(self._circuit_open_until - now)}s cooldown."
            )
        # Cooldown expired → half-open: allow one trial request
        return None

    def _record_result(self, success: bool) -> None:
        """Update circuit-breaker counters after a call."""
        rc = self._resilience
        if not rc or rc.circuit_breaker_threshold <= 0:
            return
        if success:
            self._consecutive_failures = 0
            self._circuit_open_until = 0.0
        else:
            self._consecutive_failures += 1
            if self._consecutive_failures >= rc.circuit_breaker_threshold:
                self._circuit_open_until = time.monotonic() + rc.circuit_breaker_cooldown
                logger.warning(
                    "circuit_breaker_opened",
                    failures=self._consecutive_failures,
                    cooldown=rc.circuit_breaker_cooldown,
                )

    def _request_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        rc = self._resilience
        if rc:
            kwargs["timeout"] = rc.timeout
            kwargs["num_retries"] = rc.max_retries
        return kwargs

    async def _call(self, coro: Any) -> Any:
        rc = self._resilience
        safety_timeout = (rc.timeout + 30) if rc else None
        if safety_timeout:
            return await asyncio.wait_for(coro, timeout=safety_timeout)
        return await coro

    def _mask(self, error_msg: str) -> str:
        # Mask any API keys that may appear in exception messages
        if self.api_key and self.api_key in error_msg:
            return error_msg.replace(self.api_key, mask_secret(self.api_key))
        return error_msg

    @staticmethod
    def _value(obj: Any, key: str, default: Any = None) -> Any:
        if isinstance(obj, dict):
            return obj.get(key, default)
        return getattr(obj, key, default)

    async def summarize(self, turns: list[Turn], memory: str = "") -> str:
        cb_error = self._check_circuit_breaker()
        if cb_error:
            raise SummarizationError(cb_error)

        kwargs = self._request_kwargs()
        kwargs.update(
            model=self.model,
            messages=[{"role": "system", "content": self.build_prompt(turns, memory)}],
            temperature=0.0,
        )
        try:
            response = await self._call(acompletion(**kwargs))
        except asyncio.TimeoutError as e:
            self._record_result(False)
            logger.error("summarize_timeout", model=self.model)
            raise SummarizationError("Summarization request timed out") from e
        except Exception as e:
            self._record_result(False)
            error_msg = self._mask(str(e))
            logger.error("summarize_failed", model=self.model, error=error_msg)
            raise SummarizationError(f"Error calling LLM: {error_msg}") from e

        choices = self._value(response, "choices") or []
        message = self._value(choices[0], "message") if choices else None
        content = self._value(message, "content") if message is not None else None
        if not isinstance(content, str) or not content.strip():
            self._record_result(False)
            raise SummarizationError("LLM returned an empty memory summary")

        self._record_result(True)
        return content.strip()

    async def embed(self, text: str) -> list[float]:
        if not self.embedding_model:
            raise EmbeddingError("No embedding model configured")
        if not text:
            return []

        kwargs = self._request_kwargs()
        kwargs.update(model=self.embedding_model, input=[text])
        try:
            response = await self._call(aembedding(**kwargs))
        except asyncio.TimeoutError as e:
            logger.error("embedding_timeout", model=self.embedding_model)
            raise EmbeddingError("Embedding request timed out") from e
        except Exception as e:
            error_msg = self._mask(str(e))
            logger.error("embedding_failed", model=self.embedding_model, error=error_msg)
            raise EmbeddingError(f"Error calling embedding model: {error_msg}") from e

        data = self._value(response, "data") or []
        if not data:
            return []
        embedding = self._value(data[0], "embedding")
        return list(embedding) if isinstance(embedding, (list, tuple)) else []
