"""
Pipeline steps for ingestion and recommendation.
Each step is a self-contained module that performs a specific task.
"""

from .text_chunker import chunk_text
from .carrier_ids import derive_carrier_id, format_carrier_name, placeholder_text, vector_id
from .document_ingestion import DocumentIngestionStep
from .query_builder import build_profile_query
from .retrieval import RetrievalStep, group_by_carrier
from .analysis_parser import (
    ParseFailure,
    JsonObjectStrategy,
    FieldRegexStrategy,
    RetrievalScoreFallback,
    parse_analysis,
)
from .carrier_analysis import CarrierAnalysisStep
from .normalization import build_recommendation
from .ranking import RankingStep

__all__ = [
    "chunk_text",
    "derive_carrier_id",
    "format_carrier_name",
    "placeholder_text",
    "vector_id",
    "DocumentIngestionStep",
    "build_profile_query",
    "RetrievalStep",
    "group_by_carrier",
    "ParseFailure",
    "JsonObjectStrategy",
    "FieldRegexStrategy",
    "RetrievalScoreFallback",
    "parse_analysis",
    "CarrierAnalysisStep",
    "build_recommendation",
    "RankingStep",
]
