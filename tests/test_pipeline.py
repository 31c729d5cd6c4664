"""
Tests for the recommendation pipeline.
"""

import json
import time

import pytest

from carrierllm.pipeline.models import CarrierGroup
from carrierllm.pipeline.orchestrator import RecommendationPipeline
from carrierllm.pipeline.steps import normalization
from carrierllm.pipeline.steps.carrier_analysis import CarrierAnalysisStep
from carrierllm.pipeline.steps.retrieval import RetrievalStep, group_by_carrier, to_unit_score


def analysis_json(fit_pct, reasons=("Meets preferred criteria",), confidence=85):
    return json.dumps({
        "fitPct": fit_pct,
        "reasons": list(reasons),
        "advisories": [],
        "confidence": confidence,
        "product": "Term Life",
        "underwritingPath": "standard",
        "citations": [],
    })


def make_pipeline(mock_llm, mock_embedding_service, mock_vector_search, **kwargs):
    return RecommendationPipeline(
        llm_client=mock_llm,
        embedding_service=mock_embedding_service,
        vector_search=mock_vector_search,
        **kwargs,
    )


class TestGrouping:
    """Tests for carrier grouping and score handling."""

    def test_groups_in_first_appearance_order(self, make_match):
        matches = [
            make_match(carrier_id="sentinel", score=0.8),
            make_match(carrier_id="acme", score=0.9),
            make_match(carrier_id="sentinel", score=0.7),
        ]
        groups = group_by_carrier(matches)

        assert [g.carrier_id for g in groups] == ["sentinel", "acme"]
        assert len(groups[0].matches) == 2

    def test_blank_carrier_ids_group_as_unknown(self, make_match):
        groups = group_by_carrier([make_match(carrier_id=""), make_match(carrier_id="  ")])

        assert [g.carrier_id for g in groups] == ["unknown"]
        assert len(groups[0].matches) == 2

    def test_evidence_is_joined_and_truncated(self, make_match):
        group = CarrierGroup(carrier_id="acme", matches=[
            make_match(text="first"), make_match(text="second"),
        ])
        assert group.evidence_text(2000) == "first\n\nsecond"
        assert group.evidence_text(8) == "first\n\ns"

    def test_score_ranges(self):
        assert to_unit_score(0.8) == 0.8
        assert to_unit_score(0.8, "cosine") == pytest.approx(0.9)
        assert to_unit_score(-1.0, "cosine") == 0.0
        assert to_unit_score(1.3) == 1.0

    @pytest.mark.asyncio
    async def test_retrieval_rescales_cosine_scores(self, make_match, mock_embedding_service, mock_vector_search):
        mock_vector_search.query.return_value = [make_match(score=0.6)]
        step = RetrievalStep(mock_embedding_service, mock_vector_search, top_k=15, score_range="cosine")

        matches = await step.execute("Client Profile:")

        assert matches[0].score == pytest.approx(0.8)
        mock_vector_search.query.assert_awaited_once_with([0.1] * 8, 15)


class TestCarrierAnalysisStep:
    """Tests for the per-carrier LLM call."""

    @pytest.mark.asyncio
    async def test_timeout_falls_back_to_retrieval_score(self, make_match, mock_llm):
        def slow_generate(*args, **kwargs):
            time.sleep(0.5)
            return analysis_json(20)

        mock_llm.generate.side_effect = slow_generate
        group = CarrierGroup(carrier_id="acme", matches=[make_match(score=0.91)])
        step = CarrierAnalysisStep(mock_llm, timeout_seconds=0.05)

        assert await step.generate("prompt", "acme") == ""
        analysis = await step.execute(group, "Client Profile:")
        assert analysis.source == "retrieval_fallback"
        assert analysis.fit_pct == 91


class TestRecommendationPipeline:
    """Tests for end-to-end recommendation with mocked services."""

    @pytest.mark.asyncio
    async def test_no_evidence_returns_empty_result(self, sample_profile, mock_llm, mock_embedding_service, mock_vector_search):
        pipeline = make_pipeline(mock_llm, mock_embedding_service, mock_vector_search)

        result = await pipeline.recommend(sample_profile)

        assert result.recommendations == []
        assert result.summary.total_carriers_evaluated == 0
        assert result.summary.top_carrier_id == "none"
        assert result.summary.average_fit == 0
        assert result.metrics.llm_calls == 0
        mock_llm.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_query_embedding_short_circuits(self, sample_profile, mock_llm, mock_embedding_service, mock_vector_search):
        mock_embedding_service.embed_query.return_value = []
        pipeline = make_pipeline(mock_llm, mock_embedding_service, mock_vector_search)

        result = await pipeline.recommend(sample_profile)

        assert result.recommendations == []
        mock_vector_search.query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_llm_failure_uses_retrieval_score(self, sample_profile, make_match, mock_llm, mock_embedding_service, mock_vector_search):
        top = make_match(carrier_id="acme", score=0.91)
        mock_vector_search.query.return_value = [make_match(carrier_id="acme", score=0.62), top]
        mock_llm.generate.side_effect = RuntimeError("inference unavailable")
        pipeline = make_pipeline(mock_llm, mock_embedding_service, mock_vector_search)

        result = await pipeline.recommend(sample_profile)

        (rec,) = result.recommendations
        assert rec.carrier_id == "acme"
        assert rec.fit_score == 91
        assert rec.confidence == "medium"
        assert rec.analysis_source == "retrieval_fallback"
        assert rec.reasoning.pros == ["Acme underwriting guidelines match client profile"]
        assert rec.citations[0].snippet == top.metadata.text[:200]
        assert rec.citations[0].score == 0.91
        assert rec.estimated_premium.monthly == 1290
        assert result.metrics.fallback_analyses == 1

    @pytest.mark.asyncio
    async def test_two_carriers_ranked_by_fit(self, sample_profile, make_match, mock_llm, mock_embedding_service, mock_vector_search):
        mock_vector_search.query.return_value = [
            make_match(carrier_id="sentinel", score=0.83, text="DUI in the last 5 years is rated Table 2.",
                       source_key="sentinel_guide.pdf"),
            make_match(carrier_id="acme", score=0.8),
        ]

        def generate(prompt, **kwargs):
            return analysis_json(88) if "CARRIER: acme" in prompt else analysis_json(45, confidence=50)

        mock_llm.generate.side_effect = generate
        pipeline = make_pipeline(mock_llm, mock_embedding_service, mock_vector_search)

        result = await pipeline.recommend(sample_profile)

        assert [r.carrier_id for r in result.recommendations] == ["acme", "sentinel"]
        assert [r.fit_score for r in result.recommendations] == [88, 45]
        assert result.recommendations[1].confidence == "low"
        assert result.summary.average_fit == 67
        assert result.summary.top_carrier_id == "acme"
        assert result.summary.total_carriers_evaluated == 2
        assert result.summary.tier2_recommended is True
        assert result.metrics.llm_calls == 2
        assert result.metrics.citations_found == 2

    @pytest.mark.asyncio
    async def test_prompt_contains_profile_and_evidence(self, sample_profile, make_match, mock_llm, mock_embedding_service, mock_vector_search):
        mock_vector_search.query.return_value = [make_match(carrier_id="acme", text="Preferred Plus build table")]
        mock_llm.generate.return_value = analysis_json(80)
        pipeline = make_pipeline(mock_llm, mock_embedding_service, mock_vector_search)

        await pipeline.recommend(sample_profile)

        prompt = mock_llm.generate.call_args.args[0]
        kwargs = mock_llm.generate.call_args.kwargs
        assert "- Age: 40" in prompt
        assert "CARRIER: acme" in prompt
        assert "Preferred Plus build table" in prompt
        assert kwargs["max_tokens"] == 1000

    @pytest.mark.asyncio
    async def test_failing_carrier_is_omitted(self, sample_profile, make_match, mock_llm, mock_embedding_service, mock_vector_search, mocker):
        mock_vector_search.query.return_value = [
            make_match(carrier_id="acme", score=0.9),
            make_match(carrier_id="sentinel", score=0.8),
        ]
        mock_llm.generate.return_value = analysis_json(75)
        real_build = normalization.build_recommendation

        def build(analysis, group, **kwargs):
            if group.carrier_id == "sentinel":
                raise ValueError("unexpected analysis shape")
            return real_build(analysis, group, **kwargs)

        mocker.patch("carrierllm.pipeline.orchestrator.build_recommendation", side_effect=build)
        pipeline = make_pipeline(mock_llm, mock_embedding_service, mock_vector_search)

        result = await pipeline.recommend(sample_profile)

        assert [r.carrier_id for r in result.recommendations] == ["acme"]
        assert result.metrics.carriers_failed == 1
        assert result.summary.total_carriers_evaluated == 1

    @pytest.mark.asyncio
    async def test_unknown_carrier_is_processed(self, sample_profile, make_match, mock_llm, mock_embedding_service, mock_vector_search):
        mock_vector_search.query.return_value = [make_match(carrier_id="", score=0.7)]
        pipeline = make_pipeline(mock_llm, mock_embedding_service, mock_vector_search)

        result = await pipeline.recommend(sample_profile)

        assert [r.carrier_id for r in result.recommendations] == ["unknown"]
        assert result.recommendations[0].fit_score == 70

    @pytest.mark.asyncio
    async def test_progress_callback(self, sample_profile, mock_llm, mock_embedding_service, mock_vector_search, mocker):
        callback = mocker.MagicMock()
        pipeline = make_pipeline(mock_llm, mock_embedding_service, mock_vector_search, progress_callback=callback)

        await pipeline.recommend(sample_profile)

        callback.assert_any_call(1, "Query Construction", "complete")
        callback.assert_any_call(3, "Grouping", "complete")
        callback.assert_any_call(5, "Ranking", "complete")

    @pytest.mark.asyncio
    async def test_progress_reports_every_step(self, sample_profile, make_match, mock_llm, mock_embedding_service, mock_vector_search, mocker):
        mock_vector_search.query.return_value = [make_match(carrier_id="acme")]
        mock_llm.generate.return_value = analysis_json(80)
        callback = mocker.MagicMock()
        pipeline = make_pipeline(mock_llm, mock_embedding_service, mock_vector_search, progress_callback=callback)

        await pipeline.recommend(sample_profile)

        completed = [c.args[0] for c in callback.call_args_list if c.args[2] == "complete"]
        assert completed == [1, 2, 3, 4, 5]
