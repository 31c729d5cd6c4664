"""
Tests for the ingestion pipeline.
"""

from unittest.mock import AsyncMock

import pytest

from carrierllm.core.document_store import LocalDocumentStore, TextExtractionError
from carrierllm.core.vector_search import VectorIndexError
from carrierllm.pipeline.ingestion import IngestionPipeline
from carrierllm.utils.pacing import FixedDelayPacer, NoDelayPacer


GUIDE_TEXT = "Preferred Plus requires no nicotine in 60 months. " * 20  # 1000 chars


@pytest.fixture
def docs_dir(tmp_path):
    for name in ("acme-term-guide.pdf", "sentinel_life.PDF", "notes.txt"):
        (tmp_path / name).write_bytes(b"%PDF-1.4 fake")
    return tmp_path


@pytest.fixture
def extractor(mocker):
    extractor = mocker.MagicMock()
    extractor.extract.return_value = GUIDE_TEXT
    return extractor


def make_pipeline(docs_dir, extractor, embedding_service, vector_search, pacer=None):
    return IngestionPipeline(
        store=LocalDocumentStore(docs_dir),
        extractor=extractor,
        embedding_service=embedding_service,
        vector_search=vector_search,
        pacer=pacer or NoDelayPacer(),
    )


def upserted_records(vector_search):
    return [record for call in vector_search.upsert.await_args_list for record in call.args[0]]


class TestIngestionPipeline:
    """Tests for batch ingestion."""

    @pytest.mark.asyncio
    async def test_ingests_pdfs_only(self, docs_dir, extractor, mock_embedding_service, mock_vector_search):
        pipeline = make_pipeline(docs_dir, extractor, mock_embedding_service, mock_vector_search)

        summary = await pipeline.run()

        assert summary.documents_found == 2
        assert summary.documents_processed == 2
        assert summary.documents_failed == 0
        assert summary.inserted_vector_count == 6
        assert summary.next_offset is None
        assert mock_vector_search.upsert.await_count == 2

        records = upserted_records(mock_vector_search)
        assert [r.id for r in records[:3]] == ["acme-term-guide-0", "acme-term-guide-1", "acme-term-guide-2"]
        assert {r.metadata.carrier_id for r in records} == {"acme", "sentinel"}
        assert records[0].metadata.source_key == "acme-term-guide.pdf"
        assert records[1].metadata.text == GUIDE_TEXT[462:974]

    @pytest.mark.asyncio
    async def test_reingestion_produces_the_same_ids(self, docs_dir, extractor, mock_embedding_service, mock_vector_search):
        pipeline = make_pipeline(docs_dir, extractor, mock_embedding_service, mock_vector_search)

        await pipeline.run()
        first = [r.id for r in upserted_records(mock_vector_search)]
        mock_vector_search.upsert.reset_mock()
        await pipeline.run()
        second = [r.id for r in upserted_records(mock_vector_search)]

        assert first == second
        assert len(set(first)) == len(first)

    @pytest.mark.asyncio
    async def test_only_first_chunks_are_indexed(self, docs_dir, extractor, mock_embedding_service, mock_vector_search):
        extractor.extract.return_value = "x" * 10000
        pipeline = make_pipeline(docs_dir, extractor, mock_embedding_service, mock_vector_search)

        summary = await pipeline.run()

        assert summary.inserted_vector_count == 20
        assert mock_embedding_service.embed_document.await_count == 20

    @pytest.mark.asyncio
    async def test_empty_extraction_uses_placeholder(self, docs_dir, extractor, mock_embedding_service, mock_vector_search):
        extractor.extract.return_value = "   "
        pipeline = make_pipeline(docs_dir, extractor, mock_embedding_service, mock_vector_search)

        await pipeline.run(limit=1)

        (record,) = upserted_records(mock_vector_search)
        assert record.id == "acme-term-guide-0"
        assert record.metadata.text == (
            "ACME UNDERWRITING GUIDELINES - PDF parsing returned empty text, "
            "using filename-based content"
        )

    @pytest.mark.asyncio
    async def test_failed_extraction_uses_placeholder(self, docs_dir, extractor, mock_embedding_service, mock_vector_search):
        extractor.extract.side_effect = TextExtractionError("EOF marker not found")
        pipeline = make_pipeline(docs_dir, extractor, mock_embedding_service, mock_vector_search)

        summary = await pipeline.run()

        assert summary.documents_processed == 2
        texts = [r.metadata.text for r in upserted_records(mock_vector_search)]
        assert texts[1].startswith("SENTINEL UNDERWRITING GUIDELINES - PDF parsing failed")

    @pytest.mark.asyncio
    async def test_failed_embeddings_are_skipped(self, docs_dir, extractor, mock_embedding_service, mock_vector_search):
        mock_embedding_service.embed_document.side_effect = [[0.1], [], [0.3], [0.4], [], []]
        pipeline = make_pipeline(docs_dir, extractor, mock_embedding_service, mock_vector_search)

        summary = await pipeline.run()

        assert summary.inserted_vector_count == 3
        assert [r.id for r in upserted_records(mock_vector_search)] == [
            "acme-term-guide-0", "acme-term-guide-2", "sentinel_life-0",
        ]

    @pytest.mark.asyncio
    async def test_index_failure_aborts_only_that_document(self, docs_dir, extractor, mock_embedding_service, mock_vector_search):
        async def upsert(records):
            if records[0].metadata.carrier_id == "acme":
                raise VectorIndexError("bulk write failed")
            return len(records)

        mock_vector_search.upsert = AsyncMock(side_effect=upsert)
        pipeline = make_pipeline(docs_dir, extractor, mock_embedding_service, mock_vector_search)

        summary = await pipeline.run()

        assert summary.documents_failed == 1
        assert summary.failed_documents == ["acme-term-guide.pdf"]
        assert summary.documents_processed == 1
        assert summary.inserted_vector_count == 3

    @pytest.mark.asyncio
    async def test_pagination(self, tmp_path, extractor, mock_embedding_service, mock_vector_search):
        for i in range(7):
            (tmp_path / f"carrier{i}-guide.pdf").write_bytes(b"%PDF")
        pipeline = make_pipeline(tmp_path, extractor, mock_embedding_service, mock_vector_search)

        first = await pipeline.run()
        second = await pipeline.run(offset=first.next_offset)

        assert first.documents_processed == 5
        assert first.next_offset == 5
        assert second.documents_processed == 2
        assert second.next_offset is None
        assert first.documents_found == second.documents_found == 7

        keys = {r.metadata.source_key for r in upserted_records(mock_vector_search)}
        assert keys == {f"carrier{i}-guide.pdf" for i in range(7)}

    @pytest.mark.asyncio
    async def test_pacer_runs_between_documents(self, docs_dir, extractor, mock_embedding_service, mock_vector_search, mocker):
        pacer = mocker.MagicMock()
        pacer.wait = AsyncMock()
        pipeline = make_pipeline(docs_dir, extractor, mock_embedding_service, mock_vector_search, pacer)

        await pipeline.run()

        assert pacer.wait.await_count == 1

    @pytest.mark.asyncio
    async def test_summary_serializes_with_camel_case(self, docs_dir, extractor, mock_embedding_service, mock_vector_search):
        pipeline = make_pipeline(docs_dir, extractor, mock_embedding_service, mock_vector_search)

        data = (await pipeline.run(limit=1)).model_dump(by_alias=True)

        assert data["insertedVectorCount"] == 3
        assert data["nextOffset"] == 1
        assert (await pipeline.run(limit=1)).message == (
            "Ingestion complete. Processed 1 of 2 files and inserted 3 vectors."
        )


class TestPacers:
    """Tests for pacing policies."""

    @pytest.mark.asyncio
    async def test_fixed_delay_sleeps(self, mocker):
        sleep = mocker.patch("carrierllm.utils.pacing.asyncio.sleep", new_callable=AsyncMock)

        await FixedDelayPacer(1.0).wait()

        sleep.assert_awaited_once_with(1.0)

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            FixedDelayPacer(-1)
