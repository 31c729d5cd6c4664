"""
Retrieval and grouping.
Embeds the profile query, fetches the nearest guideline chunks and partitions them by carrier.
"""

import logging
from typing import Dict, List

from carrierllm.core.embedding_service import EmbeddingService
from carrierllm.core.vector_search import VectorSearchService
from carrierllm.pipeline.models import UNKNOWN_CARRIER_ID, CarrierGroup, VectorMatch
from carrierllm.utils.numbers import clamp


logger = logging.getLogger(__name__)


def to_unit_score(score: float, score_range: str = "unit") -> float:
    """Map an index similarity score onto [0, 1]."""
    if score_range == "cosine":
        score = (score + 1.0) / 2.0
    return clamp(score, 0.0, 1.0)


def group_by_carrier(matches: List[VectorMatch]) -> List[CarrierGroup]:
    """
    Partition matches by carrier id, in order of first appearance.
    Missing or blank ids are grouped under "unknown".
    """
    groups: Dict[str, List[VectorMatch]] = {}
    for match in matches:
        carrier_id = (match.metadata.carrier_id or "").strip() or UNKNOWN_CARRIER_ID
        groups.setdefault(carrier_id, []).append(match)

    return [
        CarrierGroup(carrier_id=carrier_id, matches=group_matches)
        for carrier_id, group_matches in groups.items()
    ]


class RetrievalStep:
    """
    Retrieves guideline chunks relevant to a client profile.
    An empty result means "no evidence" and ends the request early.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_search: VectorSearchService,
        top_k: int = 15,
        score_range: str = "unit",
    ):
        """Initialize with required services."""
        self.embedding_service = embedding_service
        self.vector_search = vector_search
        self.top_k = top_k
        self.score_range = score_range

    async def execute(self, query: str) -> List[VectorMatch]:
        """
        Embed the query and return the top-k matches with unit-range scores.

        Args:
            query: Profile paragraph from build_profile_query

        Returns:
            Matches ordered as returned by the index ([] on any failure)
        """
        vector = await self.embedding_service.embed_query(query)
        if not vector:
            logger.warning("Query embedding failed, no evidence retrieved")
            return []

        matches = await self.vector_search.query(vector, self.top_k)
        return [
            match.model_copy(update={"score": to_unit_score(match.score, self.score_range)})
            for match in matches
        ]
