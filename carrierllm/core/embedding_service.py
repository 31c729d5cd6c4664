"""
Embedding service for generating vector embeddings of chunks and queries.
Uses Fireworks AI text embedding models.
"""

import asyncio
import logging
from functools import lru_cache
from typing import List, Optional

from carrierllm.config import get_settings
from .fireworks_client import FireworksClient, get_fireworks_client


logger = logging.getLogger(__name__)


class EmbeddingService:
    """
    Service for generating embeddings for document chunks and search queries.

    Failures never raise: an empty vector is returned and the caller
    skips the chunk or short-circuits the query.
    """

    DOCUMENT_PREFIX = "search_document: "
    QUERY_PREFIX = "search_query: "

    def __init__(
        self,
        client: Optional[FireworksClient] = None,
        timeout_seconds: Optional[float] = None,
    ):
        """Initialize with a Fireworks client and per-call timeout."""
        self.client = client or get_fireworks_client()
        self.timeout_seconds = timeout_seconds or get_settings().external_call_timeout_seconds

    async def embed(self, text: str, prefix: str = "") -> List[float]:
        """
        Generate an embedding for one text.

        Args:
            text: Text to embed
            prefix: Task prefix for the embedding model

        Returns:
            Embedding vector, or [] if the call failed or timed out
        """
        if not text or not text.strip():
            return []

        try:
            vector = await asyncio.wait_for(
                asyncio.to_thread(self.client.generate_embedding, text, prefix),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Embedding timed out after {self.timeout_seconds}s for text of length {len(text)}"
            )
            return []
        except Exception as e:
            logger.error(f"Embedding generation failed for text of length {len(text)}: {e}")
            return []

        return list(vector or [])

    async def embed_document(self, text: str) -> List[float]:
        """Embed a document chunk."""
        return await self.embed(text, prefix=self.DOCUMENT_PREFIX)

    async def embed_query(self, text: str) -> List[float]:
        """Embed a search query."""
        return await self.embed(text, prefix=self.QUERY_PREFIX)


@lru_cache()
def get_embedding_service() -> EmbeddingService:
    """Get cached embedding service instance."""
    return EmbeddingService(get_fireworks_client())
