"""
Configuration management using Pydantic Settings.
Loads environment variables from .env file with validation.
"""

from pathlib import Path
from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, model_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Fireworks AI Configuration
    fireworks_api_key: str = Field(
        ...,
        description="Fireworks AI API key"
    )
    fireworks_llm_model: str = Field(
        default="accounts/fireworks/models/llama-v3p1-8b-instruct",
        description="Model used for carrier underwriting analysis"
    )
    fireworks_embedding_model: str = Field(
        default="nomic-ai/nomic-embed-text-v1.5",
        description="Model used for chunk and query embeddings"
    )

    # MongoDB Configuration
    mongodb_uri: str = Field(
        ...,
        description="MongoDB Atlas connection URI"
    )
    mongodb_database: str = Field(
        default="carrierllm",
        description="MongoDB database name"
    )
    vector_collection: str = Field(
        default="carrier_chunks",
        description="Collection holding chunk embeddings"
    )
    vector_index_name: str = Field(
        default="vector_index",
        description="Atlas Vector Search index on the embedding field"
    )
    similarity_score_range: Literal["unit", "cosine"] = Field(
        default="unit",
        description="'unit' if the index reports scores in [0,1], 'cosine' for [-1,1]"
    )

    # Source documents
    documents_dir: Path = Field(
        default=Path("data/carrier_docs"),
        description="Directory holding carrier underwriting guides"
    )
    document_extension: str = Field(
        default=".pdf",
        description="Extension of ingestible documents (case-insensitive)"
    )

    # Ingestion limits
    ingest_batch_size: int = Field(default=5, ge=1)
    max_chunks_per_document: int = Field(default=10, ge=1)
    chunk_size: int = Field(default=512, ge=1)
    chunk_overlap: int = Field(default=50, ge=0)
    ingest_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Pause between documents to respect inference rate limits"
    )

    # Recommendation limits
    retrieval_top_k: int = Field(default=15, ge=1)
    max_recommendations: int = Field(default=10, ge=1)
    evidence_char_limit: int = Field(default=2000, ge=1)
    citation_snippet_chars: int = Field(default=200, ge=1)
    synthesis_concurrency: int = Field(
        default=4,
        ge=1,
        description="Carrier groups analysed concurrently"
    )
    analysis_max_tokens: int = Field(default=1000, ge=1)
    analysis_temperature: float = Field(default=0.1, ge=0)
    external_call_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for each embedding, vector query and LLM call"
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)

    # Logging
    log_level: str = Field(default="INFO")

    @property
    def project_root(self) -> Path:
        """Get project root directory."""
        return Path(__file__).parent.parent

    @property
    def resolved_documents_dir(self) -> Path:
        """Documents directory, relative paths resolved against the project root."""
        if self.documents_dir.is_absolute():
            return self.documents_dir
        return self.project_root / self.documents_dir

    @model_validator(mode="after")
    def validate_chunking(self) -> "Settings":
        """Chunk windows must advance."""
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        return self

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
