"""
Recommendation normalization.
Turns a parsed CarrierAnalysis into a validated, frozen Recommendation.
"""

from typing import Any, Dict, List

from carrierllm.pipeline.models import (
    CarrierAnalysis,
    CarrierGroup,
    Citation,
    EstimatedPremium,
    Reasoning,
    Recommendation,
)
from carrierllm.utils.numbers import clamp, round_half_up
from .carrier_ids import format_carrier_name


BASE_MONTHLY_PREMIUM = 1200
PREMIUM_PER_FIT_POINT = 10
DEFAULT_DOCUMENT_TITLE = "Carrier Underwriting Guide"


def confidence_label(confidence: float) -> str:
    if confidence >= 80:
        return "high"
    if confidence >= 60:
        return "medium"
    return "low"


def estimate_monthly_premium(fit_score: float) -> int:
    """Placeholder affine premium heuristic: lower fit, higher premium."""
    return round_half_up(BASE_MONTHLY_PREMIUM + (100 - fit_score) * PREMIUM_PER_FIT_POINT)


def build_citations(
    raw_citations: List[Dict[str, Any]],
    group: CarrierGroup,
    snippet_chars: int = 200,
) -> List[Citation]:
    """
    Citations from the model when at least one is usable, otherwise one
    citation built from the top retrieved chunk.
    """
    top = group.top_match
    citations = []
    for raw in raw_citations:
        snippet = str(raw.get("text") or raw.get("snippet") or "").strip()
        if not snippet:
            continue
        citations.append(Citation(
            snippet=snippet,
            document_title=str(raw.get("source") or raw.get("document_title") or DEFAULT_DOCUMENT_TITLE),
            score=top.score,
        ))

    if citations:
        return citations

    return [Citation(
        snippet=top.metadata.text[:snippet_chars],
        document_title=top.metadata.source_key or DEFAULT_DOCUMENT_TITLE,
        score=top.score,
    )]


def build_recommendation(
    analysis: CarrierAnalysis,
    group: CarrierGroup,
    snippet_chars: int = 200,
) -> Recommendation:
    """
    Build a Recommendation in one step from an analysis and its evidence.

    Args:
        analysis: Parsed analysis (any strategy)
        group: Non-empty carrier group the analysis was made from
        snippet_chars: Length of the fallback citation snippet

    Returns:
        Frozen Recommendation with a clamped integer fit score
    """
    fit_score = int(clamp(round_half_up(analysis.fit_pct), 0, 100))
    monthly = estimate_monthly_premium(fit_score)

    return Recommendation(
        carrier_id=group.carrier_id,
        carrier_name=format_carrier_name(group.carrier_id),
        fit_score=fit_score,
        reasoning=Reasoning(
            pros=analysis.reasons or [f"{group.carrier_id} guidelines applicable"],
            cons=analysis.advisories,
            summary=f"Fit score of {fit_score}% based on underwriting criteria.",
        ),
        estimated_premium=EstimatedPremium(monthly=monthly, annual=monthly * 12),
        confidence=confidence_label(analysis.confidence),
        citations=build_citations(analysis.citations, group, snippet_chars),
        product=analysis.product,
        underwriting_path=analysis.underwriting_path,
        analysis_source=analysis.source,
    )
