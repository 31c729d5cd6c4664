"""
Ingestion and recommendation pipeline components.

The pipelines themselves live in `carrierllm.pipeline.ingestion` and
`carrierllm.pipeline.orchestrator`.
"""

from .models import (
    SourceDocument,
    Chunk,
    ChunkMetadata,
    VectorRecord,
    VectorMatch,
    IngestionSummary,
    ClientProfile,
    CarrierGroup,
    CarrierAnalysis,
    Recommendation,
    RecommendationSummary,
    RecommendationMetrics,
    RecommendationResult,
)

__all__ = [
    "SourceDocument",
    "Chunk",
    "ChunkMetadata",
    "VectorRecord",
    "VectorMatch",
    "IngestionSummary",
    "ClientProfile",
    "CarrierGroup",
    "CarrierAnalysis",
    "Recommendation",
    "RecommendationSummary",
    "RecommendationMetrics",
    "RecommendationResult",
]
