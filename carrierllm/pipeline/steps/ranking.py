"""
Ranking and summary.
Orders recommendations by fit and summarizes the result set.
"""

from typing import List, Tuple

from carrierllm.pipeline.models import Recommendation, RecommendationSummary
from carrierllm.utils.numbers import round_half_up
from .normalization import estimate_monthly_premium


TIER2_THRESHOLD = 70
NO_CARRIER = "none"


class RankingStep:
    """Sort, truncate and summarize recommendations."""

    def __init__(self, max_recommendations: int = 10):
        self.max_recommendations = max_recommendations

    def premium_suggestion(self, average_fit: int) -> str:
        monthly = estimate_monthly_premium(average_fit)
        return (
            f"Based on your profile, we recommend starting with a monthly premium "
            f"of ${monthly:,} for optimal coverage."
        )

    def notes(self, ranked: List[Recommendation], average_fit: int) -> str:
        if not ranked:
            return "No carrier guidelines matched this profile."
        if average_fit < TIER2_THRESHOLD:
            return (
                f"Average fit of {average_fit}% is below {TIER2_THRESHOLD}%; "
                f"consider a broader carrier search."
            )
        return f"{ranked[0].carrier_name} is the strongest match."

    def execute(
        self,
        recommendations: List[Recommendation],
    ) -> Tuple[List[Recommendation], RecommendationSummary]:
        """
        Rank recommendations and build the summary.

        Sorting is stable, so carriers with equal fit keep their input order.

        Args:
            recommendations: Recommendations in group order

        Returns:
            (top recommendations, summary of the kept recommendations)
        """
        ranked = sorted(recommendations, key=lambda r: r.fit_score, reverse=True)
        ranked = ranked[: self.max_recommendations]

        average_fit = (
            round_half_up(sum(r.fit_score for r in ranked) / len(ranked)) if ranked else 0
        )

        summary = RecommendationSummary(
            average_fit=average_fit,
            top_carrier_id=ranked[0].carrier_id if ranked else NO_CARRIER,
            total_carriers_evaluated=len(ranked),
            tier2_recommended=average_fit < TIER2_THRESHOLD,
            premium_suggestion=self.premium_suggestion(average_fit),
            notes=self.notes(ranked, average_fit),
        )
        return ranked, summary
