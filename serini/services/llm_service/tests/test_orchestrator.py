"""Tests for InsightOrchestrator.

CRITICAL: high and imminent users must receive crisis resources with zero
calls to embedding, retrieval or generation, even during a total outage.
"""
import asyncio

import pytest

from serini.shared.errors import GenerationError
from serini.shared.models import RiskLevel, SeverityBucket, Urgency
from serini.services.llm_service.base_llm import ChatMessage, LLMResponse
from serini.services.llm_service.orchestrator import (
    InsightRequest,
    OrchestratorConfig,
    ResponseSource,
)
from serini.services.llm_service.prompts import CHAT_SYSTEM_PROMPT, RESULT_SYSTEM_PROMPT
from serini.services.llm_service.validator import has_hotline_recommendation, validate_insight
from serini.services.retrieval_service import NO_CONTEXT_SENTINEL
from serini.services.safety_service.resources import (
    CHAT_BLOCKED_MESSAGE,
    CHAT_FALLBACK_MESSAGE,
    CRISIS_RESPONSE,
)


def _call_counts(orchestrator):
    return (
        orchestrator.embedder.calls,
        orchestrator.retriever.store.calls,
        orchestrator.generator.calls,
    )


class TestChatCrisisGate:
    """The crisis gate runs before any external call."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prior", ["high", "imminent", "HIGH"])
    async def test_prior_high_risk_blocks_chat(self, make_orchestrator, prior):
        orchestrator = make_orchestrator(replies=["should never be used"])

        response = await orchestrator.chat("How do I sleep better?", prior_risk_level=prior)

        assert response.blocked is True
        assert response.source == ResponseSource.CRISIS_PROTOCOL
        assert response.crisis_check.is_crisis is True
        assert response.crisis_check.level == RiskLevel.IMMINENT
        assert response.message == CHAT_BLOCKED_MESSAGE["en"]
        assert _call_counts(orchestrator) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_imminent_message_short_circuits(self, make_orchestrator):
        orchestrator = make_orchestrator(replies=["should never be used"])

        response = await orchestrator.chat("I want to kill myself tonight")

        assert response.blocked is True
        assert response.message == CRISIS_RESPONSE["en"]
        assert response.crisis_check.level == RiskLevel.IMMINENT
        assert "kill myself" in response.crisis_check.matched_keywords
        assert _call_counts(orchestrator) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_malay_crisis_message_gets_malay_response(self, make_orchestrator):
        orchestrator = make_orchestrator()

        response = await orchestrator.chat("saya rasa nak bunuh diri")

        assert response.language == "ms"
        assert response.message == CRISIS_RESPONSE["ms"]
        assert "15999" in response.message

    @pytest.mark.asyncio
    async def test_short_circuit_survives_total_outage(self, make_orchestrator):
        orchestrator = make_orchestrator(
            error=GenerationError("down"), embed_fail=True, store_fail=True
        )

        response = await orchestrator.chat("tolong saya", prior_risk_level="high", language="ms")

        assert response.message == CHAT_BLOCKED_MESSAGE["ms"]
        assert response.blocked is True
        assert _call_counts(orchestrator) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_unknown_prior_level_is_not_a_crisis(self, make_orchestrator):
        orchestrator = make_orchestrator(replies=["Let's talk about it."])

        response = await orchestrator.chat("I had a long week", prior_risk_level="unknown")

        assert response.blocked is False
        assert response.source == ResponseSource.LLM_GENERATED


class TestChatGeneration:
    """Retrieval-grounded chat replies."""

    @pytest.mark.asyncio
    async def test_generated_reply(self, make_orchestrator):
        orchestrator = make_orchestrator(replies=["  Breathing slowly can help.  "])

        response = await orchestrator.chat("I feel stressed before exams")

        assert response.source == ResponseSource.LLM_GENERATED
        assert response.message == "Breathing slowly can help."
        assert response.blocked is False
        assert [a.id for a in response.sources] == ["dep-1", "dep-2", "gen-1"]

        system_prompt, messages, max_tokens = orchestrator.generator.prompts[0]
        assert system_prompt == CHAT_SYSTEM_PROMPT
        assert max_tokens == 1024
        assert "### 1. Behavioural Activation" in messages[-1].content
        assert "I feel stressed before exams" in messages[-1].content

    @pytest.mark.asyncio
    async def test_history_window(self, make_orchestrator):
        orchestrator = make_orchestrator(replies=["ok"])
        history = [
            ChatMessage(role="user" if i % 2 == 0 else "assistant", content=f"turn {i}")
            for i in range(10)
        ]

        await orchestrator.chat("and now?", history=history)

        _, messages, _ = orchestrator.generator.prompts[0]
        assert len(messages) == 7
        assert messages[0].content == "turn 4"
        assert "turn 3" not in messages[-1].content
        assert "assistant: turn 9" in messages[-1].content

    @pytest.mark.asyncio
    async def test_moderate_distress_still_answered(self, make_orchestrator):
        orchestrator = make_orchestrator(replies=["That sounds hard."])

        response = await orchestrator.chat("I feel overwhelmed at work")

        assert response.source == ResponseSource.LLM_GENERATED
        assert response.crisis_check.level == RiskLevel.MODERATE
        assert response.crisis_check.is_crisis is False

    @pytest.mark.asyncio
    async def test_retrieval_outage_degrades_to_no_context(self, make_orchestrator):
        orchestrator = make_orchestrator(replies=["I'm here for you."], store_fail=True)

        response = await orchestrator.chat("I feel stressed")

        assert response.source == ResponseSource.LLM_GENERATED
        assert response.sources == []
        _, messages, _ = orchestrator.generator.prompts[0]
        assert NO_CONTEXT_SENTINEL in messages[-1].content

    @pytest.mark.asyncio
    async def test_embedding_outage_skips_retrieval(self, make_orchestrator):
        orchestrator = make_orchestrator(replies=["I'm here for you."], embed_fail=True)

        response = await orchestrator.chat("I feel stressed")

        assert response.source == ResponseSource.LLM_GENERATED
        assert orchestrator.retriever.store.calls == 0

    @pytest.mark.asyncio
    async def test_generation_failure_returns_fallback(self, make_orchestrator):
        orchestrator = make_orchestrator(error=RuntimeError("provider exploded"))

        response = await orchestrator.chat("I feel stressed")

        assert response.source == ResponseSource.FALLBACK
        assert response.message == CHAT_FALLBACK_MESSAGE["en"]
        assert response.blocked is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", [
        "Honestly, you should die.",
        "From what you say, you have depression.",
        "Take this medication twice a day.",
        "",
    ])
    async def test_unsafe_reply_replaced(self, make_orchestrator, reply):
        orchestrator = make_orchestrator(replies=[reply])

        response = await orchestrator.chat("I feel low")

        assert response.source == ResponseSource.FALLBACK
        assert "15999" in response.message

    @pytest.mark.asyncio
    async def test_slow_generation_times_out(self, make_orchestrator):
        orchestrator = make_orchestrator(config=OrchestratorConfig(stage_timeout_seconds=0.05))

        async def slow(system_prompt, messages, max_tokens):
            await asyncio.sleep(1)
            return LLMResponse(text="late", model="fake", provider="fake")

        orchestrator.generator._complete = slow

        response = await orchestrator.chat("I feel low")

        assert response.source == ResponseSource.FALLBACK


class TestInsightShortCircuit:
    """High/imminent results never reach the model."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("risk_level", [RiskLevel.HIGH, RiskLevel.IMMINENT])
    async def test_no_external_calls(self, make_orchestrator, insight_json, risk_level):
        orchestrator = make_orchestrator(replies=[insight_json()])
        request = InsightRequest("depression", 22, "Severe", risk_level=risk_level)

        response = await orchestrator.generate_insights(request)

        assert response.source == ResponseSource.CRISIS_PROTOCOL
        assert response.safety_message == CRISIS_RESPONSE["en"]
        assert _call_counts(orchestrator) == (0, 0, 0)
        validate_insight(response.insight)
        assert has_hotline_recommendation(response.insight)
        assert response.insight.next_steps[0].urgency == Urgency.IMMEDIATE

    @pytest.mark.asyncio
    async def test_short_circuit_with_mild_severity(self, make_orchestrator):
        orchestrator = make_orchestrator()
        request = InsightRequest("psychosis", 1, "Low Risk", risk_level=RiskLevel.HIGH)

        response = await orchestrator.generate_insights(request)

        assert response.source == ResponseSource.CRISIS_PROTOCOL
        assert response.insight.risk_factors == []
        assert any(s.urgency == Urgency.IMMEDIATE for s in response.insight.next_steps)
        assert "15999" in response.safety_message

    @pytest.mark.asyncio
    async def test_malay_request_gets_malay_safety_message(self, make_orchestrator):
        orchestrator = make_orchestrator()
        request = InsightRequest("depression", 22, "Teruk", risk_level=RiskLevel.IMMINENT, language="ms")

        response = await orchestrator.generate_insights(request)

        assert response.safety_message == CRISIS_RESPONSE["ms"]
        assert _call_counts(orchestrator) == (0, 0, 0)


class TestInsightGeneration:
    """Model path with validation and fallback."""

    @pytest.mark.asyncio
    async def test_valid_model_output(self, make_orchestrator, insight_json):
        orchestrator = make_orchestrator(replies=[insight_json()])
        request = InsightRequest(
            "depression", 12, "Moderate",
            risk_level=RiskLevel.MODERATE,
            detected_conditions=("depression", "insomnia"),
        )

        response = await orchestrator.generate_insights(request)

        assert response.source == ResponseSource.LLM_GENERATED
        insight = response.insight
        assert insight.assessment_type == "depression"
        assert insight.severity == "Moderate"
        assert insight.score == 12
        assert insight.summary_localized.startswith("Keputusan")
        assert len(response.sources) <= 6

        system_prompt, messages, max_tokens = orchestrator.generator.prompts[0]
        assert system_prompt == RESULT_SYSTEM_PROMPT
        assert max_tokens == 2048
        assert "- Detected Concerns: depression, insomnia" in messages[0].content
        assert "- Overall Risk Level: moderate" in messages[0].content

    @pytest.mark.asyncio
    async def test_fenced_output_accepted(self, make_orchestrator, insight_json):
        orchestrator = make_orchestrator(replies=["```json\n" + insight_json() + "\n```"])

        response = await orchestrator.generate_insights(InsightRequest("depression", 12, "Moderate"))

        assert response.source == ResponseSource.LLM_GENERATED

    @pytest.mark.asyncio
    async def test_malformed_output_falls_back(self, make_orchestrator):
        orchestrator = make_orchestrator(replies=["Here are your results: you are doing fine!"])

        response = await orchestrator.generate_insights(InsightRequest("depression", 12, "Moderate"))

        assert response.source == ResponseSource.FALLBACK
        validate_insight(response.insight)
        assert response.insight.risk_factors

    @pytest.mark.asyncio
    async def test_deeply_nested_output_falls_back(self, make_orchestrator):
        orchestrator = make_orchestrator(replies=["[" * 100000 + "]" * 100000])

        response = await orchestrator.generate_insights(InsightRequest("depression", 12, "Moderate"))

        assert response.source == ResponseSource.FALLBACK
        validate_insight(response.insight)

    @pytest.mark.asyncio
    async def test_missing_risk_factors_falls_back(self, make_orchestrator, insight_json):
        orchestrator = make_orchestrator(replies=[insight_json(risk_factors=False)])

        response = await orchestrator.generate_insights(InsightRequest("anxiety", 12, "Moderate"))

        assert response.source == ResponseSource.FALLBACK
        assert response.insight.risk_factors

    @pytest.mark.asyncio
    async def test_severe_missing_hotline_is_injected(self, make_orchestrator, insight_json):
        orchestrator = make_orchestrator(replies=[insight_json(hotline=False)])

        response = await orchestrator.generate_insights(
            InsightRequest("depression", 24, "Severe", risk_level=RiskLevel.MODERATE)
        )

        assert response.source == ResponseSource.LLM_GENERATED
        assert has_hotline_recommendation(response.insight)
        assert "15999" in response.insight.recommendations[0].text

    @pytest.mark.asyncio
    async def test_total_outage_severe_still_safe(self, make_orchestrator):
        orchestrator = make_orchestrator(
            error=GenerationError("down"), embed_fail=True, store_fail=True
        )

        response = await orchestrator.generate_insights(
            InsightRequest("depression", 25, "Severe", risk_level=RiskLevel.LOW)
        )

        assert response.source == ResponseSource.FALLBACK
        assert response.insight.severity_bucket == SeverityBucket.SEVERE
        assert has_hotline_recommendation(response.insight)
        assert response.insight.risk_factors
        assert response.sources == []

    @pytest.mark.asyncio
    async def test_generator_exception_severe_still_safe(self, make_orchestrator):
        orchestrator = make_orchestrator(error=ValueError("unexpected payload"))

        response = await orchestrator.generate_insights(
            InsightRequest("depression", 21, "Moderately Severe")
        )

        assert response.source == ResponseSource.FALLBACK
        assert has_hotline_recommendation(response.insight)

    @pytest.mark.asyncio
    async def test_fallback_uses_instrument_max_score(self, make_orchestrator):
        orchestrator = make_orchestrator(error=GenerationError("down"))

        response = await orchestrator.generate_insights(InsightRequest("depression", 7, "Mild"))

        assert "7/27" in response.insight.summary

    @pytest.mark.asyncio
    async def test_retrieval_capped(self, make_orchestrator, insight_json):
        orchestrator = make_orchestrator(replies=[insight_json()])

        response = await orchestrator.generate_insights(InsightRequest("depression", 12, "Moderate"))

        # depression fans out to depression + general
        assert [a.id for a in response.sources] == ["dep-1", "dep-2", "gen-1"]
        assert orchestrator.retriever.store.calls == 2

    @pytest.mark.asyncio
    async def test_to_dict_shape(self, make_orchestrator, insight_json):
        orchestrator = make_orchestrator(replies=[insight_json()])

        payload = (await orchestrator.generate_insights(
            InsightRequest("depression", 12, "Moderate")
        )).to_dict()

        assert payload["success"] is True
        assert payload["source"] == "llm_generated"
        assert payload["insights"]["assessmentType"] == "depression"
        assert payload["crisisCheck"]["isCrisis"] is False
        assert "safetyMessage" not in payload
