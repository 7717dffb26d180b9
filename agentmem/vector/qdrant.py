"""Qdrant REST client for memory records."""

from __future__ import annotations

from typing import Any

import httpx

from agentmem.config.schema import VectorIndexConfig
from agentmem.errors import VectorIndexError
from agentmem.logging import get_logger
from agentmem.vector.base import MemoryRecord, VectorIndex

logger = get_logger(__name__)


class QdrantIndex(VectorIndex):
    """Talks to a Qdrant server over its HTTP API. Records are filtered by the ``bot`` payload key."""

    def __init__(
        self,
        url: str = "http://localhost:6333",
        *,
        collection: str = "bot_memories",
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.collection = collection
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config: VectorIndexConfig) -> QdrantIndex:
        return cls(
            config.url,
            collection=config.collection,
            api_key=config.resolved_api_key or None,
            timeout=config.timeout,
        )

    def _client(self) -> httpx.AsyncClient:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["api-key"] = self.api_key
        return httpx.AsyncClient(
            base_url=self.url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            async with self._client() as client:
                r = await client.request(method, path, json=payload)
        except httpx.HTTPError as e:
            raise VectorIndexError(f"Qdrant request failed: {e}") from e
        try:
            body = r.json()
        except ValueError:
            body = {}
        if r.is_error:
            status = body.get("status") if isinstance(body, dict) else None
            detail = status.get("error") if isinstance(status, dict) else r.text
            raise VectorIndexError(f"Qdrant {method} {path} returned {r.status_code}: {detail}", status_code=r.status_code)
        return body if isinstance(body, dict) else {}

    async def ensure_collection(self, vector_size: int) -> bool:
        """Create the collection with cosine distance. Returns True if it exists afterwards."""
        try:
            await self._request(
                "PUT",
                f"/collections/{self.collection}",
                {"vectors": {"size": vector_size, "distance": "Cosine"}},
            )
        except VectorIndexError as e:
            if e.status_code == 409 or "already exists" in str(e):
                logger.info("qdrant_collection_exists", collection=self.collection)
                return True
            logger.error("qdrant_collection_create_failed", collection=self.collection, error=str(e))
            return False
        logger.info("qdrant_collection_created", collection=self.collection, vector_size=vector_size)
        return True

    async def upsert(self, record: MemoryRecord) -> None:
        await self._request(
            "PUT",
            f"/collections/{self.collection}/points?wait=true",
            {"points": [{"id": record.id, "vector": record.vector, "payload": record.payload}]},
        )

    async def query(self, owner_id: str, vector: list[float], top_k: int) -> list[dict[str, Any]]:
        body = await self._request(
            "POST",
            f"/collections/{self.collection}/points/search",
            {
                "vector": vector,
                "limit": top_k,
                "with_payload": True,
                "filter": {"must": [{"key": "bot", "match": {"value": owner_id}}]},
            },
        )
        result = body.get("result")
        return result if isinstance(result, list) else []
