"""
Core services for the recommendation engine.
"""

from .mongodb_client import get_mongodb_client, get_database, get_collection
from .fireworks_client import get_fireworks_client, FireworksClient
from .embedding_service import EmbeddingService, get_embedding_service
from .vector_search import VectorSearchService, VectorIndexError, get_vector_search_service
from .document_store import (
    LocalDocumentStore,
    PdfTextExtractor,
    DocumentStoreError,
    TextExtractionError,
)

__all__ = [
    "get_mongodb_client",
    "get_database",
    "get_collection",
    "get_fireworks_client",
    "FireworksClient",
    "EmbeddingService",
    "get_embedding_service",
    "VectorSearchService",
    "VectorIndexError",
    "get_vector_search_service",
    "LocalDocumentStore",
    "PdfTextExtractor",
    "DocumentStoreError",
    "TextExtractionError",
]
