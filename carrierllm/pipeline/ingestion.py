"""
Ingestion Pipeline
Indexes carrier underwriting guides into the vector store, one page of documents per run.
"""

import logging
from typing import List, Optional

from carrierllm.config import get_settings
from carrierllm.core.document_store import DocumentStoreError, LocalDocumentStore, PdfTextExtractor
from carrierllm.core.embedding_service import EmbeddingService, get_embedding_service
from carrierllm.core.vector_search import VectorIndexError, VectorSearchService, get_vector_search_service
from carrierllm.pipeline.models import IngestionSummary, SourceDocument
from carrierllm.pipeline.steps.document_ingestion import DocumentIngestionStep
from carrierllm.utils.pacing import FixedDelayPacer, Pacer


logger = logging.getLogger(__name__)


class IngestionPipeline:
    """
    Sequential batch ingestion with pagination.

    Documents are processed one at a time; each document's upsert completes
    before the next document starts, and the pacer is awaited in between.
    """

    def __init__(
        self,
        store: Optional[LocalDocumentStore] = None,
        extractor: Optional[PdfTextExtractor] = None,
        embedding_service: Optional[EmbeddingService] = None,
        vector_search: Optional[VectorSearchService] = None,
        pacer: Optional[Pacer] = None,
    ):
        """
        Initialize the pipeline with required services.

        Args:
            store: Document store (local documents directory if not provided)
            extractor: Text extractor (PyPDF2 if not provided)
            embedding_service: Embedding service (uses default if not provided)
            vector_search: Vector index service (uses default if not provided)
            pacer: Pause policy between documents (fixed delay from settings if not provided)
        """
        settings = get_settings()
        self.settings = settings
        self.store = store or LocalDocumentStore()
        self.pacer = pacer or FixedDelayPacer(settings.ingest_delay_seconds)

        self.step = DocumentIngestionStep(
            store=self.store,
            extractor=extractor or PdfTextExtractor(),
            embedding_service=embedding_service or get_embedding_service(),
            vector_search=vector_search or get_vector_search_service(),
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            max_chunks=settings.max_chunks_per_document,
        )

    def list_documents(self) -> List[SourceDocument]:
        """Ingestible documents sorted by key. Listing failures propagate."""
        extension = self.settings.document_extension.lower()
        documents = [d for d in self.store.list() if d.key.lower().endswith(extension)]
        return sorted(documents, key=lambda d: d.key)

    async def run(self, offset: int = 0, limit: Optional[int] = None) -> IngestionSummary:
        """
        Ingest one page of documents.

        Args:
            offset: Index of the first document to process
            limit: Page size (settings.ingest_batch_size if not provided)

        Returns:
            IngestionSummary with counts and the offset of the next page
        """
        if offset < 0:
            raise ValueError("offset must be >= 0")
        limit = limit or self.settings.ingest_batch_size

        documents = self.list_documents()
        page = documents[offset: offset + limit]
        logger.info(
            f"Found {len(documents)} documents, processing {len(page)} starting at offset {offset}"
        )

        inserted_total = 0
        processed = 0
        failed: List[str] = []

        for idx, document in enumerate(page):
            if idx > 0:
                await self.pacer.wait()

            logger.info(f"Processing {document.key} ({document.size} bytes)")
            try:
                inserted = await self.step.execute(document)
            except (VectorIndexError, DocumentStoreError) as e:
                logger.error(f"Failed to ingest {document.key}: {e}")
                failed.append(document.key)
                continue
            except Exception as e:
                logger.exception(f"Unexpected error ingesting {document.key}: {e}")
                failed.append(document.key)
                continue

            if inserted is None:
                continue
            inserted_total += inserted
            processed += 1

        end = offset + len(page)
        summary = IngestionSummary(
            inserted_vector_count=inserted_total,
            documents_found=len(documents),
            documents_processed=processed,
            documents_failed=len(failed),
            failed_documents=failed,
            offset=offset,
            next_offset=end if end < len(documents) else None,
        )
        logger.info(summary.message)
        return summary
