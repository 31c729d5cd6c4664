"""
FastAPI application entry point.
CarrierLLM Recommendation Engine
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from carrierllm import __version__
from carrierllm.config import get_settings
from carrierllm.api.routes import router
from carrierllm.core.mongodb_client import ping, close_mongodb_client


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting CarrierLLM API...")
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"API Version: {__version__}")
    logger.info(f"LLM model: {settings.fireworks_llm_model}")

    # Test MongoDB connection
    try:
        ping()
        logger.info("MongoDB connection established")
    except Exception as e:
        logger.warning(f"MongoDB connection failed: {e}")
        logger.warning("API will start but ingestion and recommendations will fail")

    yield

    # Shutdown
    logger.info("Shutting down CarrierLLM API...")
    close_mongodb_client()
    logger.info("Cleanup complete")


# Create FastAPI application
app = FastAPI(
    title="CarrierLLM API",
    description="""
    Retrieval-augmented life insurance carrier recommendations

    This API matches client profiles to carriers using:
    - **Fireworks AI** for embeddings and underwriting analysis
    - **MongoDB Atlas Vector Search** over chunked carrier underwriting guides
    - **RAG** (Retrieval-Augmented Generation) for evidence-cited fit scores

    ## Quick Start

    1. POST `/api/ingest` until `nextOffset` is null to index the guides
    2. POST a client profile to `/api/recommendations`
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routes
app.include_router(router)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "CarrierLLM API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "carrierllm.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
