"""
Pytest configuration and fixtures.
"""

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Required settings; no test talks to a real service
os.environ.setdefault("FIREWORKS_API_KEY", "test-fireworks-key")
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")

from carrierllm.pipeline.models import ChunkMetadata, ClientProfile, VectorMatch


ACME_GUIDE_TEXT = (
    "ACME LIFE TERM UNDERWRITING GUIDE. Preferred Plus requires no nicotine use in the "
    "last 60 months, build within the Preferred Plus table, blood pressure below 135/85 "
    "treated or untreated, cholesterol below 250, and no family history of cardiovascular "
    "disease before age 60. Face amounts up to $1,000,000 are available to age 50 without "
    "paramedical exam when the applicant qualifies for accelerated underwriting."
)


@pytest.fixture
def make_match():
    """Factory for vector matches."""
    def _make(carrier_id="acme", score=0.9, text=ACME_GUIDE_TEXT,
              source_key="acme-term-guide.pdf", match_id=None):
        return VectorMatch(
            id=match_id or f"{source_key}-{int(score * 100)}",
            score=score,
            metadata=ChunkMetadata(carrier_id=carrier_id, source_key=source_key, text=text),
        )
    return _make


@pytest.fixture
def sample_profile():
    """Healthy 40 year old applicant."""
    return ClientProfile(
        age=40,
        gender="Female",
        state="TX",
        height=65,
        weight=140,
        health="Excellent",
        occupation="Software Engineer",
        nicotine_use="never",
        coverage_amount=750000,
        coverage_type="term",
        term_length=20,
        income=145000,
    )


@pytest.fixture
def mock_llm(mocker):
    """Mock Fireworks client for unit tests."""
    client = mocker.MagicMock()
    client.generate.return_value = ""
    client.generate_embedding.return_value = [0.1] * 8
    return client


@pytest.fixture
def mock_embedding_service(mocker):
    """Embedding service returning a fixed vector."""
    service = mocker.MagicMock()
    service.embed = AsyncMock(return_value=[0.1] * 8)
    service.embed_query = AsyncMock(return_value=[0.1] * 8)
    service.embed_document = AsyncMock(return_value=[0.2] * 8)
    return service


@pytest.fixture
def mock_vector_search(mocker):
    """Vector search service with an empty index."""
    service = mocker.MagicMock()
    service.query = AsyncMock(return_value=[])
    service.upsert = AsyncMock(side_effect=lambda records: len(records))
    return service


@pytest.fixture
def mock_collection(mocker):
    """Mock MongoDB collection for unit tests."""
    collection = mocker.MagicMock()
    collection.aggregate.return_value = []
    return collection
