"""
FastAPI dependency providers.
Tests override these with app.dependency_overrides.
"""

from carrierllm.pipeline.ingestion import IngestionPipeline
from carrierllm.pipeline.orchestrator import RecommendationPipeline


def get_ingestion_pipeline() -> IngestionPipeline:
    return IngestionPipeline()


def get_recommendation_pipeline() -> RecommendationPipeline:
    return RecommendationPipeline()
