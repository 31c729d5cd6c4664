"""
Vector index service for carrier guideline chunks.
Stores and searches embeddings with MongoDB Atlas Vector Search.
"""

import asyncio
import logging
from functools import lru_cache
from typing import List, Optional, Sequence

from pymongo import ReplaceOne
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from carrierllm.config import get_settings
from carrierllm.pipeline.models import VectorMatch, VectorRecord
from .mongodb_client import get_collection


logger = logging.getLogger(__name__)


class VectorIndexError(RuntimeError):
    """Raised when vectors could not be written to the index."""


class VectorSearchService:
    """
    Upsert and nearest-neighbour query over the chunk collection.

    Each stored document has the shape
    {"_id": <vector id>, "embedding": [...], "metadata": {"carrierId", "sourceKey", "text"}}.
    """

    def __init__(
        self,
        collection: Optional[Collection] = None,
        index_name: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        vector_field: str = "embedding",
    ):
        """Initialize with the chunk collection and the Atlas search index name."""
        settings = get_settings()
        self.collection = collection if collection is not None else get_collection(settings.vector_collection)
        self.index_name = index_name or settings.vector_index_name
        self.timeout_seconds = timeout_seconds or settings.external_call_timeout_seconds
        self.vector_field = vector_field

    def _to_document(self, record: VectorRecord) -> dict:
        return {
            "_id": record.id,
            self.vector_field: record.vector,
            "metadata": record.metadata.model_dump(by_alias=True),
        }

    async def upsert(self, records: Sequence[VectorRecord]) -> int:
        """
        Insert or overwrite records by id.

        Returns:
            Number of records written

        Raises:
            VectorIndexError: if the write fails or times out
        """
        if not records:
            return 0

        operations = [
            ReplaceOne({"_id": record.id}, self._to_document(record), upsert=True)
            for record in records
        ]

        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.collection.bulk_write, operations, ordered=False),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise VectorIndexError(
                f"Vector upsert timed out after {self.timeout_seconds}s ({len(records)} records)"
            ) from e
        except PyMongoError as e:
            raise VectorIndexError(f"Vector upsert failed: {e}") from e

        return len(records)

    def _build_pipeline(self, vector: List[float], top_k: int) -> List[dict]:
        return [
            {
                "$vectorSearch": {
                    "queryVector": vector,
                    "path": self.vector_field,
                    "numCandidates": top_k * 10,  # Oversample for better recall
                    "limit": top_k,
                    "index": self.index_name,
                }
            },
            {
                "$project": {
                    "_id": 1,
                    "metadata": 1,
                    "score": {"$meta": "vectorSearchScore"},
                }
            },
        ]

    def _run_query(self, pipeline: List[dict]) -> List[dict]:
        return list(self.collection.aggregate(pipeline))

    async def query(self, vector: List[float], top_k: int) -> List[VectorMatch]:
        """
        Return the top_k nearest chunks with their metadata.

        Any failure is logged and reported as no evidence ([]).
        """
        if not vector:
            return []

        try:
            rows = await asyncio.wait_for(
                asyncio.to_thread(self._run_query, self._build_pipeline(vector, top_k)),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"Vector query timed out after {self.timeout_seconds}s")
            return []
        except Exception as e:
            logger.error(f"Vector query failed: {e}")
            return []

        matches = []
        for row in rows:
            try:
                matches.append(VectorMatch(
                    id=str(row.get("_id")) if row.get("_id") is not None else None,
                    score=float(row.get("score") or 0.0),
                    metadata=row.get("metadata") or {},
                ))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed vector match {row.get('_id')}: {e}")

        logger.info(f"Vector query returned {len(matches)} matches")
        return matches


@lru_cache()
def get_vector_search_service() -> VectorSearchService:
    """Get cached vector search service instance."""
    return VectorSearchService()
