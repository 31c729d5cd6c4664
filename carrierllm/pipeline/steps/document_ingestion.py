"""
Document ingestion step.
Turns one source document into indexed vector records.
"""

import logging
from typing import List, Optional

from carrierllm.core.document_store import LocalDocumentStore, PdfTextExtractor, TextExtractionError
from carrierllm.core.embedding_service import EmbeddingService
from carrierllm.core.vector_search import VectorSearchService
from carrierllm.pipeline.models import Chunk, ChunkMetadata, SourceDocument, VectorRecord
from .carrier_ids import derive_carrier_id, placeholder_text, vector_id
from .text_chunker import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE, chunk_text


logger = logging.getLogger(__name__)


class DocumentIngestionStep:
    """
    Fetch -> extract -> chunk -> embed -> upsert for a single document.

    Extraction problems never abort the document: a filename-based
    placeholder is indexed instead. Chunks whose embedding fails are skipped.
    Index write failures propagate as VectorIndexError.
    """

    def __init__(
        self,
        store: LocalDocumentStore,
        extractor: PdfTextExtractor,
        embedding_service: EmbeddingService,
        vector_search: VectorSearchService,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        max_chunks: int = 10,
    ):
        """Initialize with required services."""
        self.store = store
        self.extractor = extractor
        self.embedding_service = embedding_service
        self.vector_search = vector_search
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.max_chunks = max_chunks

    def extract_text(self, key: str, data: bytes) -> str:
        """Extracted text, or the placeholder when extraction is empty or fails."""
        try:
            text = self.extractor.extract(data)
        except TextExtractionError as e:
            logger.warning(f"Text extraction failed for {key}: {e}")
            return placeholder_text(key, reason="PDF parsing failed")

        if not text.strip():
            logger.warning(f"No text extracted from {key}, using placeholder")
            return placeholder_text(key)
        return text

    def build_chunks(self, key: str, text: str) -> List[Chunk]:
        carrier_id = derive_carrier_id(key)
        windows = chunk_text(text, self.chunk_size, self.chunk_overlap)[: self.max_chunks]
        return [
            Chunk(source_key=key, ordinal=ordinal, text=window, carrier_id=carrier_id)
            for ordinal, window in enumerate(windows)
        ]

    async def embed_chunks(self, chunks: List[Chunk]) -> List[VectorRecord]:
        records = []
        for chunk in chunks:
            vector = await self.embedding_service.embed_document(chunk.text)
            if not vector:
                logger.warning(f"Skipping chunk {chunk.ordinal} of {chunk.source_key}: no embedding")
                continue
            records.append(VectorRecord(
                id=vector_id(chunk.source_key, chunk.ordinal),
                vector=vector,
                metadata=ChunkMetadata(
                    carrier_id=chunk.carrier_id,
                    source_key=chunk.source_key,
                    text=chunk.text,
                ),
            ))
        return records

    async def execute(self, document: SourceDocument) -> Optional[int]:
        """
        Ingest one document.

        Args:
            document: Listed source document

        Returns:
            Number of vectors upserted, or None if the document no longer exists

        Raises:
            VectorIndexError: if the index write fails
            DocumentStoreError: if the document cannot be read
        """
        data = self.store.get(document.key)
        if data is None:
            logger.warning(f"Document {document.key} disappeared before ingestion, skipping")
            return None

        text = self.extract_text(document.key, data)
        chunks = self.build_chunks(document.key, text)
        records = await self.embed_chunks(chunks)

        inserted = await self.vector_search.upsert(records)
        logger.info(
            f"Indexed {inserted}/{len(chunks)} chunks from {document.key} "
            f"(carrier={derive_carrier_id(document.key)})"
        )
        return inserted
