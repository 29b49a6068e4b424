"""Deterministic fakes for the orchestrator's external services.

Every fake counts its calls so tests can assert that the crisis path
never touches embedding, retrieval or generation.
"""
import json
from typing import List, Optional, Sequence

import pytest

from serini.shared.errors import EmbeddingServiceError
from serini.shared.models import KnowledgeArticle
from serini.services.llm_service.base_llm import BaseLLM, LLMConfig, LLMResponse
from serini.services.llm_service.orchestrator import InsightOrchestrator
from serini.services.retrieval_service import Embedder, InMemoryVectorStore, RetrievalService


class FakeEmbedder(Embedder):
    """Returns a fixed vector."""

    def __init__(self, vector: Sequence[float] = (1.0, 0.0), fail: bool = False):
        self.vector = list(vector)
        self.fail = fail
        self.calls = 0

    async def embed(self, text: str) -> List[float]:
        self.calls += 1
        if self.fail:
            raise EmbeddingServiceError("embedding endpoint down")
        return list(self.vector)

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        return [await self.embed(t) for t in texts]


class FakeStore(InMemoryVectorStore):
    """In-memory store that can be switched off."""

    def __init__(self, articles=None, fail: bool = False):
        super().__init__(articles)
        self.fail = fail
        self.calls = 0

    async def match(self, vector, threshold, limit):
        self.calls += 1
        if self.fail:
            raise ConnectionError("vector store down")
        return await super().match(vector, threshold, limit)

    async def match_by_category(self, vector, category, threshold, limit):
        self.calls += 1
        if self.fail:
            raise ConnectionError("vector store down")
        return await super().match_by_category(vector, category, threshold, limit)


class FakeGenerator(BaseLLM):
    """Replays canned replies, or raises the configured error."""

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[Exception] = None):
        super().__init__(LLMConfig(api_key="test", timeout_seconds=1.0, max_retries=0))
        self.replies = list(replies or [])
        self.error = error
        self.calls = 0
        self.prompts = []

    async def _complete(self, system_prompt, messages, max_tokens):
        self.calls += 1
        self.prompts.append((system_prompt, list(messages), max_tokens))
        if self.error is not None:
            raise self.error
        text = self.replies.pop(0) if self.replies else ""
        return LLMResponse(text=text, model="fake", provider="fake")


def _article(article_id: str, category: str, title: str, embedding) -> KnowledgeArticle:
    return KnowledgeArticle(
        id=article_id,
        title=title,
        content=f"{title}: practice for ten minutes each day.",
        category=category,
        embedding=tuple(embedding),
    )


def _insight_json(hotline: bool = False, risk_factors: bool = True, **overrides) -> str:
    recommendations = [
        {"text": "Try daily breathing exercises.", "textMs": "Cuba latihan pernafasan harian.",
         "priority": "medium"},
    ]
    if hotline:
        recommendations.insert(0, {
            "text": "Call Talian Kasih 15999 or Befrienders KL 03-7956 8145.",
            "textMs": "Hubungi Talian Kasih 15999 atau Befrienders KL 03-7956 8145.",
            "priority": "high",
        })
    payload = {
        "summary": "Your screening results suggest moderate symptoms.",
        "summaryMs": "Keputusan saringan anda menunjukkan simptom sederhana.",
        "keyFindings": [
            {"text": "Sleep is affected.", "textMs": "Tidur terjejas.", "type": "concern"},
        ],
        "recommendations": recommendations,
        "copingStrategies": [
            {"title": "Deep Breathing", "titleMs": "Pernafasan Dalam",
             "description": "Breathe slowly.", "descriptionMs": "Bernafas perlahan."},
        ],
        "riskFactors": [
            {"text": "Low mood most days.", "textMs": "Emosi rendah hampir setiap hari.",
             "level": "moderate"},
        ] if risk_factors else [],
        "nextSteps": [
            {"action": "Talk to a counselor.", "actionMs": "Berbincang dengan kaunselor.",
             "urgency": "soon"},
        ],
    }
    payload.update(overrides)
    return json.dumps(payload)


@pytest.fixture
def insight_json():
    """Builder for well-formed model output."""
    return _insight_json


@pytest.fixture
def make_orchestrator():
    """Build an orchestrator over fakes; the fakes hang off the result."""

    def _make(replies=None, error=None, embed_fail=False, store_fail=False, config=None):
        store = FakeStore(
            [
                _article("dep-1", "depression", "Behavioural Activation", (1.0, 0.0)),
                _article("dep-2", "depression", "Thought Records", (0.9, 0.1)),
                _article("gen-1", "general", "Sleep Hygiene", (0.8, 0.2)),
            ],
            fail=store_fail,
        )
        return InsightOrchestrator(
            embedder=FakeEmbedder(fail=embed_fail),
            retriever=RetrievalService(store),
            generator=FakeGenerator(replies=replies, error=error),
            config=config,
        )

    return _make
