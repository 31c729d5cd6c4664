"""
API routes for the recommendation engine.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from carrierllm import __version__
from carrierllm.config import get_settings
from carrierllm.core.document_store import DocumentStoreError
from carrierllm.core.mongodb_client import ping
from carrierllm.pipeline.ingestion import IngestionPipeline
from carrierllm.pipeline.orchestrator import RecommendationPipeline
from carrierllm.pipeline.models import ClientProfile, IngestionSummary, RecommendationResult
from carrierllm.api.dependencies import get_ingestion_pipeline, get_recommendation_pipeline
from carrierllm.api.schemas import ErrorResponse, HealthResponse


logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """
    Check the health status of the API and its dependencies.
    """
    settings = get_settings()

    # Check MongoDB connection
    mongodb_connected = False
    try:
        mongodb_connected = ping()
    except Exception as e:
        logger.warning(f"MongoDB connection check failed: {e}")

    # Check Fireworks configuration
    fireworks_configured = bool(settings.fireworks_api_key and
                                settings.fireworks_api_key != "your_fireworks_api_key_here")

    return HealthResponse(
        status="healthy" if mongodb_connected and fireworks_configured else "degraded",
        version=__version__,
        mongodb_connected=mongodb_connected,
        fireworks_configured=fireworks_configured,
        timestamp=datetime.now(timezone.utc),
    )


@router.post(
    "/api/ingest",
    response_model=IngestionSummary,
    response_model_by_alias=True,
    responses={500: {"model": ErrorResponse}},
    tags=["Ingestion"],
    summary="Ingest carrier underwriting guides",
    description="Index one page of documents from the document store into the vector index"
)
async def ingest_documents(
    offset: int = Query(default=0, ge=0, description="Index of the first document to process"),
    limit: Optional[int] = Query(default=None, ge=1, description="Documents to process in this run"),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
):
    """
    Run one ingestion batch. Call again with `nextOffset` until it is null.
    """
    try:
        return await pipeline.run(offset=offset, limit=limit)
    except DocumentStoreError as e:
        logger.error(f"Document listing failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.exception(f"Error during ingestion: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post(
    "/api/recommendations",
    response_model=RecommendationResult,
    response_model_by_alias=True,
    responses={500: {"model": ErrorResponse}},
    tags=["Recommendations"],
    summary="Recommend carriers for a client profile",
    description="Retrieve underwriting evidence and score each matching carrier"
)
async def recommend_carriers(
    profile: ClientProfile,
    pipeline: RecommendationPipeline = Depends(get_recommendation_pipeline),
):
    """
    Generate ranked, evidence-cited carrier recommendations.
    A profile with no matching evidence returns an empty list, not an error.
    """
    try:
        return await pipeline.recommend(profile)
    except Exception as e:
        logger.exception(f"Error generating recommendations: {e}")
        raise HTTPException(status_code=500, detail=str(e))
