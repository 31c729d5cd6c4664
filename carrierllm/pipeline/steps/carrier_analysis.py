"""
Per-carrier underwriting analysis.
Prompts the LLM with one carrier's evidence and parses the response.
"""

import asyncio
import logging
from typing import Optional

from carrierllm.core.fireworks_client import FireworksClient
from carrierllm.prompts import CARRIER_ANALYSIS_SYSTEM, CARRIER_ANALYSIS_PROMPT
from carrierllm.pipeline.models import CarrierAnalysis, CarrierGroup
from .analysis_parser import parse_analysis


logger = logging.getLogger(__name__)


class CarrierAnalysisStep:
    """
    Produces a CarrierAnalysis for one carrier group.
    A failed or timed-out LLM call is treated as an empty response.
    """

    def __init__(
        self,
        llm_client: FireworksClient,
        evidence_char_limit: int = 2000,
        max_tokens: int = 1000,
        temperature: float = 0.1,
        timeout_seconds: Optional[float] = 30.0,
    ):
        """Initialize with required services."""
        self.llm_client = llm_client
        self.evidence_char_limit = evidence_char_limit
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds

    def build_prompt(self, group: CarrierGroup, client_profile: str) -> str:
        return CARRIER_ANALYSIS_PROMPT.format(
            client_profile=client_profile,
            carrier_id=group.carrier_id,
            evidence=group.evidence_text(self.evidence_char_limit),
        )

    async def generate(self, prompt: str, carrier_id: str) -> str:
        """Raw model output, or "" if the call failed."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(
                    self.llm_client.generate,
                    prompt,
                    system_prompt=CARRIER_ANALYSIS_SYSTEM,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout_seconds,
            ) or ""
        except asyncio.TimeoutError:
            logger.error(f"LLM analysis for {carrier_id} timed out after {self.timeout_seconds}s")
            return ""
        except Exception as e:
            logger.error(f"LLM analysis for {carrier_id} failed: {e}")
            return ""

    async def execute(self, group: CarrierGroup, client_profile: str) -> CarrierAnalysis:
        """
        Analyze how well the client fits one carrier.

        Args:
            group: Retrieved matches for the carrier
            client_profile: Profile paragraph from build_profile_query

        Returns:
            Parsed CarrierAnalysis (never raises for bad model output)
        """
        logger.info(f"Generating analysis for {group.carrier_id} ({len(group.matches)} matches)")
        raw = await self.generate(self.build_prompt(group, client_profile), group.carrier_id)
        logger.debug(f"LLM response for {group.carrier_id}: {raw[:200]}")

        analysis = parse_analysis(raw, group)
        logger.info(f"{group.carrier_id}: fit {analysis.fit_pct} via {analysis.source}")
        return analysis
