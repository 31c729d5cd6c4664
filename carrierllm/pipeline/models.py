"""
Pydantic models for the ingestion and recommendation pipelines.
These models define the data structures passed between pipeline steps.

API-facing models serialize with camelCase aliases; Python attributes stay snake_case.
"""

from typing import List, Optional, Dict, Any, Literal
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from pydantic.alias_generators import to_camel


UNKNOWN_CARRIER_ID = "unknown"


class CamelModel(BaseModel):
    """Base model accepting snake_case or camelCase input, emitting camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------

class SourceDocument(BaseModel):
    """An underwriting guide as listed by the document store."""
    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Storage key (file name, possibly with sub-directories)")
    size: int = Field(default=0, ge=0, description="Length in bytes")
    content_type: str = Field(default="application/pdf")


class Chunk(BaseModel):
    """A window of extracted document text, the unit of retrieval."""
    model_config = ConfigDict(frozen=True)

    source_key: str
    ordinal: int = Field(ge=0)
    text: str
    carrier_id: str


class ChunkMetadata(CamelModel):
    """Metadata stored alongside every vector."""
    carrier_id: str = Field(default=UNKNOWN_CARRIER_ID)
    source_key: str = Field(
        default="",
        validation_alias=AliasChoices("sourceKey", "source_key", "source"),
    )
    text: str = Field(default="")


class VectorRecord(BaseModel):
    """The unit upserted into the vector index."""
    id: str = Field(max_length=64)
    vector: List[float]
    metadata: ChunkMetadata


class VectorMatch(BaseModel):
    """A nearest-neighbour hit returned by the vector index."""
    id: Optional[str] = Field(default=None)
    score: float = Field(default=0.0)
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)


class IngestionSummary(CamelModel):
    """Outcome of one ingestion run (one page of documents)."""
    inserted_vector_count: int = Field(default=0)
    documents_found: int = Field(default=0, description="Matching documents in the store")
    documents_processed: int = Field(default=0)
    documents_failed: int = Field(default=0)
    failed_documents: List[str] = Field(default_factory=list)
    offset: int = Field(default=0)
    next_offset: Optional[int] = Field(
        default=None,
        description="Offset for the next run, None when every document has been visited"
    )

    @property
    def message(self) -> str:
        return (
            f"Ingestion complete. Processed {self.documents_processed} of "
            f"{self.documents_found} files and inserted {self.inserted_vector_count} vectors."
        )


# ---------------------------------------------------------------------------
# Recommendation input
# ---------------------------------------------------------------------------

class ClientProfile(CamelModel):
    """Structured intake answers for one recommendation request."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    age: Optional[int] = Field(default=None, ge=0, le=120)
    gender: Optional[str] = Field(default=None)
    state: Optional[str] = Field(default=None, description="US state of residence")
    height: Optional[float] = Field(default=None, gt=0, description="Height in inches")
    weight: Optional[float] = Field(default=None, gt=0, description="Weight in pounds")
    health: Optional[str] = Field(default=None, description="Self-reported health class")
    occupation: Optional[str] = Field(default=None)
    nicotine_use: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("nicotineUse", "nicotine_use", "nicotine"),
        description="never, past24Months, current",
    )
    marijuana_use: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("marijuanaUse", "marijuana_use", "marijuana"),
    )
    major_conditions: Optional[str] = Field(default=None)
    cardiac_history: Optional[bool] = Field(default=None)
    diabetes: Optional[bool] = Field(default=None)
    cancer_history: Optional[bool] = Field(default=None)
    dui_history: Optional[bool] = Field(default=None)
    risk_activities: Optional[str] = Field(default=None)
    coverage_amount: Optional[float] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("coverageAmount", "coverage_amount", "coverage"),
    )
    coverage_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("coverageType", "coverage_type", "type"),
    )
    term_length: Optional[int] = Field(default=None, ge=1, description="Term in years")
    income: Optional[float] = Field(default=None, ge=0, description="Annual household income")


# ---------------------------------------------------------------------------
# Retrieval and analysis
# ---------------------------------------------------------------------------

class CarrierGroup(BaseModel):
    """Retrieved matches that share one carrier id."""
    carrier_id: str
    matches: List[VectorMatch] = Field(default_factory=list)

    @property
    def top_match(self) -> VectorMatch:
        """Highest scoring match; groups are never built empty."""
        return max(self.matches, key=lambda m: m.score)

    def evidence_text(self, limit: int) -> str:
        """Chunk texts joined by blank lines, capped at `limit` characters."""
        combined = "\n\n".join(m.metadata.text for m in self.matches if m.metadata.text)
        return combined[:limit]


AnalysisSource = Literal["json", "regex", "retrieval_fallback"]


class CarrierAnalysis(BaseModel):
    """Parsed output of the underwriting analysis for one carrier."""
    fit_pct: float = Field(description="Raw fit percentage, clamped later")
    reasons: List[str] = Field(default_factory=list)
    advisories: List[str] = Field(default_factory=list)
    confidence: float = Field(default=70.0, description="Numeric confidence 0-100")
    product: Optional[str] = Field(default=None)
    underwriting_path: Optional[str] = Field(default=None)
    citations: List[Dict[str, Any]] = Field(default_factory=list)
    source: AnalysisSource = Field(description="Parse strategy that produced this analysis")


# ---------------------------------------------------------------------------
# Recommendation output
# ---------------------------------------------------------------------------

class Reasoning(CamelModel):
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)
    summary: str


class EstimatedPremium(CamelModel):
    monthly: int
    annual: int


class Citation(CamelModel):
    snippet: str
    document_title: str
    score: float


class Recommendation(CamelModel):
    """One carrier's fit for the client profile."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    carrier_id: str
    carrier_name: str
    fit_score: int = Field(ge=0, le=100)
    reasoning: Reasoning
    estimated_premium: EstimatedPremium
    confidence: Literal["high", "medium", "low"]
    citations: List[Citation] = Field(min_length=1)
    product: Optional[str] = Field(default=None)
    underwriting_path: Optional[str] = Field(default=None)
    analysis_source: AnalysisSource


class RecommendationSummary(CamelModel):
    average_fit: int = Field(default=0)
    top_carrier_id: str = Field(default="none")
    total_carriers_evaluated: int = Field(default=0)
    tier2_recommended: bool = Field(default=False, description="Average fit below 70")
    premium_suggestion: str = Field(default="")
    notes: str = Field(default="")


class RecommendationMetrics(CamelModel):
    """Metrics about one recommendation run."""
    total_duration_seconds: float = Field(default=0.0)
    step_durations: Dict[str, float] = Field(default_factory=dict)
    matches_retrieved: int = Field(default=0)
    carriers_analyzed: int = Field(default=0)
    carriers_failed: int = Field(default=0)
    llm_calls: int = Field(default=0)
    fallback_analyses: int = Field(default=0)
    citations_found: int = Field(default=0)


class RecommendationResult(CamelModel):
    """Complete result from the recommendation pipeline."""
    recommendations: List[Recommendation] = Field(default_factory=list)
    summary: RecommendationSummary = Field(default_factory=RecommendationSummary)
    metrics: Optional[RecommendationMetrics] = Field(default=None)
