"""
Pipeline Orchestrator
Coordinates query construction, retrieval, per-carrier analysis and ranking.
"""

import asyncio
import time
import logging
from typing import Callable, List, Optional, Tuple

from carrierllm.config import get_settings
from carrierllm.core.embedding_service import EmbeddingService, get_embedding_service
from carrierllm.core.fireworks_client import FireworksClient, get_fireworks_client
from carrierllm.core.vector_search import VectorSearchService, get_vector_search_service

from carrierllm.pipeline.models import (
    CarrierGroup,
    ClientProfile,
    Recommendation,
    RecommendationMetrics,
    RecommendationResult,
)
from carrierllm.pipeline.steps import (
    CarrierAnalysisStep,
    RankingStep,
    RetrievalStep,
    build_profile_query,
    build_recommendation,
    group_by_carrier,
)


logger = logging.getLogger(__name__)


class RecommendationPipeline:
    """
    Orchestrates the recommendation pipeline for one client profile.

    Carrier groups are analysed concurrently up to `concurrency`; a failure in
    one group is logged and that carrier is omitted from the result.
    """

    def __init__(
        self,
        llm_client: Optional[FireworksClient] = None,
        embedding_service: Optional[EmbeddingService] = None,
        vector_search: Optional[VectorSearchService] = None,
        concurrency: Optional[int] = None,
        progress_callback: Optional[Callable[[int, str, str], None]] = None,
    ):
        """
        Initialize the pipeline with required services.

        Args:
            llm_client: Fireworks client (uses default if not provided)
            embedding_service: Embedding service (uses default if not provided)
            vector_search: Vector search service (uses default if not provided)
            concurrency: Carrier groups analysed at once (settings if not provided)
            progress_callback: Optional callback for progress updates
                             (step_number, step_name, status)
        """
        settings = get_settings()
        self.settings = settings
        self.llm_client = llm_client or get_fireworks_client()
        self.embedding_service = embedding_service or get_embedding_service()
        self.vector_search = vector_search or get_vector_search_service()
        self.concurrency = concurrency or settings.synthesis_concurrency
        self.progress_callback = progress_callback

        self.steps = {
            "retrieval": RetrievalStep(
                self.embedding_service,
                self.vector_search,
                top_k=settings.retrieval_top_k,
                score_range=settings.similarity_score_range,
            ),
            "carrier_analysis": CarrierAnalysisStep(
                self.llm_client,
                evidence_char_limit=settings.evidence_char_limit,
                max_tokens=settings.analysis_max_tokens,
                temperature=settings.analysis_temperature,
                timeout_seconds=settings.external_call_timeout_seconds,
            ),
            "ranking": RankingStep(max_recommendations=settings.max_recommendations),
        }

    def _report_progress(self, step: int, name: str, status: str):
        """Report progress if callback is set."""
        if self.progress_callback:
            self.progress_callback(step, name, status)

    async def _recommend_for_group(
        self,
        group: CarrierGroup,
        client_profile: str,
        semaphore: asyncio.Semaphore,
    ) -> Tuple[Optional[Recommendation], bool]:
        """Recommendation for one group (None on failure) and whether the LLM output was unusable."""
        async with semaphore:
            try:
                analysis = await self.steps["carrier_analysis"].execute(group, client_profile)
                recommendation = build_recommendation(
                    analysis, group, snippet_chars=self.settings.citation_snippet_chars
                )
            except Exception as e:
                logger.exception(f"Error generating recommendation for {group.carrier_id}: {e}")
                return None, False
        return recommendation, analysis.source == "retrieval_fallback"

    async def recommend(self, profile: ClientProfile) -> RecommendationResult:
        """
        Produce ranked, evidence-cited carrier recommendations.

        Args:
            profile: Client intake answers

        Returns:
            RecommendationResult; zero recommendations when no evidence is found
        """
        start_time = time.time()
        step_durations = {}

        # Step 1: Build query
        self._report_progress(1, "Query Construction", "running")
        client_profile = build_profile_query(profile)
        self._report_progress(1, "Query Construction", "complete")
        logger.info(f"Generated client profile query:\n{client_profile}")

        # Step 2: Retrieve evidence
        self._report_progress(2, "Retrieval", "running")
        step_start = time.time()
        matches = await self.steps["retrieval"].execute(client_profile)
        step_durations["retrieval"] = time.time() - step_start
        self._report_progress(2, "Retrieval", "complete")
        logger.info(f"Step 2 complete: {len(matches)} matches retrieved")

        # Step 3: Group by carrier
        self._report_progress(3, "Grouping", "running")
        groups = group_by_carrier(matches)
        self._report_progress(3, "Grouping", "complete")
        logger.info(f"Step 3 complete: grouped results into {len(groups)} carriers")

        recommendations: List[Recommendation] = []
        carriers_failed = 0
        fallback_analyses = 0

        if groups:
            # Step 4: Analyse each carrier
            self._report_progress(4, "Carrier Analysis", "running")
            step_start = time.time()
            semaphore = asyncio.Semaphore(self.concurrency)
            outcomes = await asyncio.gather(*[
                self._recommend_for_group(group, client_profile, semaphore)
                for group in groups
            ])
            step_durations["carrier_analysis"] = time.time() - step_start
            for recommendation, used_fallback in outcomes:
                if recommendation is None:
                    carriers_failed += 1
                    continue
                recommendations.append(recommendation)
                fallback_analyses += int(used_fallback)
            self._report_progress(4, "Carrier Analysis", "complete")
            logger.info(f"Step 4 complete: {len(recommendations)} recommendations generated")
        else:
            logger.info("No RAG results found, returning empty recommendations")

        # Step 5: Rank and summarise
        self._report_progress(5, "Ranking", "running")
        step_start = time.time()
        ranked, summary = self.steps["ranking"].execute(recommendations)
        step_durations["ranking"] = time.time() - step_start
        self._report_progress(5, "Ranking", "complete")

        total_duration = time.time() - start_time
        metrics = RecommendationMetrics(
            total_duration_seconds=round(total_duration, 2),
            step_durations={k: round(v, 2) for k, v in step_durations.items()},
            matches_retrieved=len(matches),
            carriers_analyzed=len(groups),
            carriers_failed=carriers_failed,
            llm_calls=len(groups),
            fallback_analyses=fallback_analyses,
            citations_found=sum(len(r.citations) for r in ranked),
        )

        logger.info(
            f"Recommendation complete in {total_duration:.2f}s: "
            f"{summary.total_carriers_evaluated} carriers, average fit {summary.average_fit}%"
        )
        return RecommendationResult(recommendations=ranked, summary=summary, metrics=metrics)
