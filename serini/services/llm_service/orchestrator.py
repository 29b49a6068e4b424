"""Insight and chat orchestrator.

Drives one request through the pipeline:

    START -> CRISIS_GATE -> (SHORT_CIRCUIT | RETRIEVE) -> COMPOSE
          -> GENERATE -> VALIDATE -> (SUCCESS | FALLBACK) -> END

CRITICAL: the crisis gate runs before any embedding, retrieval or model
call. A high or imminent user is answered from canned text and
templates only, so a total outage of every external service cannot stop
them receiving crisis resources.

Each external stage returns a StageOutcome; the next transition is
decided by inspecting it. Neither entry point raises.
"""
import asyncio
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Dict, List, Optional, Sequence

from serini.shared.errors import ExternalServiceError, SchemaValidationError
from serini.shared.models import KnowledgeArticle, RiskAssessment, RiskLevel, StructuredInsight
from serini.shared.outcome import StageOutcome
from serini.shared.utils import hash_text_for_audit
from serini.services.assessment_service.instruments import get_instrument
from serini.services.retrieval_service import (
    Embedder,
    RetrievalService,
    compose_context,
    get_categories,
)
from serini.services.safety_service import CrisisClassifier
from serini.services.safety_service.config import (
    DIAGNOSTIC_RESPONSE_PATTERNS,
    HARMFUL_RESPONSE_PATTERNS,
)
from serini.services.safety_service.resources import (
    chat_blocked_message,
    chat_fallback_message,
    crisis_response,
    detect_language,
)
from .base_llm import BaseLLM, ChatMessage
from .fallback import generate_fallback_insight
from .prompts import (
    CHAT_SYSTEM_PROMPT,
    RESULT_SYSTEM_PROMPT,
    build_chat_prompt,
    build_insight_query,
    build_result_prompt,
)
from .validator import parse_insight

logger = logging.getLogger(__name__)


class ResponseSource(Enum):
    """Source of the response."""
    CRISIS_PROTOCOL = "crisis_protocol"  # Canned safety text, no model call
    LLM_GENERATED = "llm_generated"      # Validated model output
    FALLBACK = "fallback"                # Deterministic template on failure


@dataclass(frozen=True)
class OrchestratorConfig:
    """Pipeline parameters."""
    stage_timeout_seconds: float = 60.0
    history_window: int = 6
    chat_top_k: int = 4
    chat_threshold: float = 0.7
    chat_max_tokens: int = 1024
    insight_per_category_limit: int = 3
    insight_threshold: float = 0.5
    insight_max_articles: int = 6
    insight_max_tokens: int = 2048
    context_max_chars: int = 1500

    @classmethod
    def from_env(cls) -> "OrchestratorConfig":
        """Create config from environment variables.

        Environment variables:
            ORCHESTRATOR_STAGE_TIMEOUT_SECONDS: Upper bound per stage (default 60)
            CHAT_HISTORY_WINDOW: Prior turns sent to the model (default 6)
            CHAT_TOP_K / CHAT_SIMILARITY_THRESHOLD: Chat retrieval (4 / 0.7)
            INSIGHT_SIMILARITY_THRESHOLD: Insight retrieval threshold (0.5)
        """
        return cls(
            stage_timeout_seconds=float(os.getenv("ORCHESTRATOR_STAGE_TIMEOUT_SECONDS", "60")),
            history_window=int(os.getenv("CHAT_HISTORY_WINDOW", "6")),
            chat_top_k=int(os.getenv("CHAT_TOP_K", "4")),
            chat_threshold=float(os.getenv("CHAT_SIMILARITY_THRESHOLD", "0.7")),
            insight_threshold=float(os.getenv("INSIGHT_SIMILARITY_THRESHOLD", "0.5")),
        )


@dataclass(frozen=True)
class InsightRequest:
    """One scored assessment to explain."""
    assessment_type: str
    score: int
    severity: str
    risk_level: Optional[RiskLevel] = None
    detected_conditions: Sequence[str] = ()
    max_score: Optional[int] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class InsightResponse:
    insight: StructuredInsight
    source: ResponseSource
    crisis_check: RiskAssessment
    sources: List[KnowledgeArticle] = field(default_factory=list)
    safety_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "success": True,
            "insights": self.insight.to_dict(),
            "source": self.source.value,
            "crisisCheck": self.crisis_check.to_dict(),
            "sources": [a.to_dict() for a in self.sources],
        }
        if self.safety_message:
            payload["safetyMessage"] = self.safety_message
        return payload


@dataclass(frozen=True)
class ChatResponse:
    message: str
    source: ResponseSource
    crisis_check: RiskAssessment
    language: str = "en"
    sources: List[KnowledgeArticle] = field(default_factory=list)
    blocked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "source": self.source.value,
            "crisisCheck": self.crisis_check.to_dict(),
            "language": self.language,
            "sources": [a.to_dict() for a in self.sources],
            "blocked": self.blocked,
        }


class InsightOrchestrator:
    """Safety-gated retrieval-augmented generation for chat and results."""

    def __init__(
        self,
        embedder: Embedder,
        retriever: RetrievalService,
        generator: BaseLLM,
        classifier: Optional[CrisisClassifier] = None,
        config: Optional[OrchestratorConfig] = None,
    ):
        self.embedder = embedder
        self.retriever = retriever
        self.generator = generator
        self.classifier = classifier or CrisisClassifier()
        self.config = config or OrchestratorConfig()

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    async def chat(
        self,
        message: str,
        history: Sequence[ChatMessage] = (),
        prior_risk_level: Optional[Any] = None,
        language: Optional[str] = None,
    ) -> ChatResponse:
        """Answer one chat turn.

        Args:
            message: The user's message
            history: Prior turns, oldest first
            prior_risk_level: Standing risk level from screening, if known
            language: "en" or "ms"; detected from the message when None

        Returns:
            ChatResponse. High/imminent users get a canned safety message
            with blocked=True and no external call is made.
        """
        history = tuple(history)
        language = language or detect_language(message)
        message_hash = hash_text_for_audit(message if isinstance(message, str) else "")

        self._transition("chat", "CRISIS_GATE", message_hash=message_hash)

        prior = self.classifier.classify_from_known_level(prior_risk_level)
        if prior.level is RiskLevel.IMMINENT:
            self._transition("chat", "SHORT_CIRCUIT", reason="prior_risk_level")
            return ChatResponse(
                message=chat_blocked_message(language),
                source=ResponseSource.CRISIS_PROTOCOL,
                crisis_check=prior,
                language=language,
                blocked=True,
            )

        assessment = prior.escalate(self.classifier.classify(message))
        if assessment.level is RiskLevel.IMMINENT:
            self._transition("chat", "SHORT_CIRCUIT", reason="message_classified_imminent")
            return ChatResponse(
                message=crisis_response(language),
                source=ResponseSource.CRISIS_PROTOCOL,
                crisis_check=assessment,
                language=language,
                blocked=True,
            )

        self._transition("chat", "RETRIEVE", risk_level=assessment.level.value)
        articles = await self._retrieve_for_chat(message)

        self._transition("chat", "COMPOSE", articles=len(articles))
        context = compose_context(articles, self.config.context_max_chars)
        prompt = build_chat_prompt(message, context, history, self.config.history_window)
        window = history[-self.config.history_window:] if self.config.history_window > 0 else ()
        messages = list(window) + [ChatMessage(role="user", content=prompt)]

        self._transition("chat", "GENERATE")
        generated = await self._run_stage(
            "generate",
            self.generator.complete(CHAT_SYSTEM_PROMPT, messages, self.config.chat_max_tokens),
        )

        self._transition("chat", "VALIDATE")
        reply = generated.value.text.strip() if generated.ok else ""
        if not generated.ok or not self._is_safe_reply(reply):
            self._transition(
                "chat", "FALLBACK",
                error_type=generated.error_type or "UnsafeReply",
            )
            return ChatResponse(
                message=chat_fallback_message(language),
                source=ResponseSource.FALLBACK,
                crisis_check=assessment,
                language=language,
                sources=articles,
            )

        self._transition("chat", "SUCCESS", reply_length=len(reply))
        return ChatResponse(
            message=reply,
            source=ResponseSource.LLM_GENERATED,
            crisis_check=assessment,
            language=language,
            sources=articles,
        )

    async def _retrieve_for_chat(self, message: str) -> List[KnowledgeArticle]:
        embedded = await self._run_stage("embed", self.embedder.embed(message))
        if not embedded.ok:
            return []

        retrieved = await self._run_stage(
            "retrieve",
            self.retriever.retrieve(
                embedded.value,
                top_k=self.config.chat_top_k,
                similarity_threshold=self.config.chat_threshold,
            ),
        )
        return retrieved.value if retrieved.ok else []

    def _is_safe_reply(self, reply: str) -> bool:
        """Post-generation check for harmful or diagnostic content."""
        if not reply:
            logger.warning("LLM_RESPONSE_EMPTY")
            return False

        reply_lower = reply.lower()
        for pattern in HARMFUL_RESPONSE_PATTERNS:
            if pattern in reply_lower:
                logger.critical(
                    "HARMFUL_CONTENT_IN_LLM_RESPONSE",
                    extra={"pattern": pattern}
                )
                return False

        for pattern in DIAGNOSTIC_RESPONSE_PATTERNS:
            if pattern in reply_lower:
                logger.warning(
                    "MEDICAL_ADVICE_IN_LLM_RESPONSE",
                    extra={"pattern": pattern}
                )
                return False

        return True

    # ------------------------------------------------------------------
    # Assessment insights
    # ------------------------------------------------------------------

    async def generate_insights(self, request: InsightRequest) -> InsightResponse:
        """Explain one scored assessment.

        The crisis gate uses the caller-supplied risk level; there is no
        free text to classify. High/imminent results never reach the
        model: the insight comes from the fallback templates and the
        response carries the canned safety message.
        """
        max_score = request.max_score
        if max_score is None:
            instrument = get_instrument(request.assessment_type)
            max_score = instrument.max_score if instrument else None

        self._transition(
            "insights", "CRISIS_GATE",
            assessment_type=request.assessment_type,
            severity=request.severity,
        )
        assessment = self.classifier.classify_from_known_level(request.risk_level)
        risk_level = RiskLevel.parse(request.risk_level) or RiskLevel.NONE

        if assessment.level is RiskLevel.IMMINENT:
            self._transition("insights", "SHORT_CIRCUIT", risk_level=risk_level.value)
            return InsightResponse(
                insight=generate_fallback_insight(
                    request.assessment_type, request.score, max_score, request.severity, risk_level
                ),
                source=ResponseSource.CRISIS_PROTOCOL,
                crisis_check=assessment,
                safety_message=crisis_response(request.language or "en"),
            )

        self._transition("insights", "RETRIEVE")
        articles = await self._retrieve_for_insight(request)

        self._transition("insights", "COMPOSE", articles=len(articles))
        context = compose_context(articles, self.config.context_max_chars)
        prompt = build_result_prompt(
            request.assessment_type,
            request.score,
            request.severity,
            risk_level.value,
            request.detected_conditions,
            context,
        )

        self._transition("insights", "GENERATE")
        generated = await self._run_stage(
            "generate",
            self.generator.complete(
                RESULT_SYSTEM_PROMPT,
                [ChatMessage(role="user", content=prompt)],
                self.config.insight_max_tokens,
            ),
        )

        self._transition("insights", "VALIDATE")
        validated: StageOutcome[StructuredInsight] = (
            self._validate(generated.value.text, request) if generated.ok else generated
        )

        if not validated.ok:
            self._transition(
                "insights", "FALLBACK",
                stage=validated.stage,
                error_type=validated.error_type,
            )
            logger.warning(
                "INSIGHT_FALLBACK_USED",
                extra={
                    "assessment_type": request.assessment_type,
                    "failed_stage": validated.stage,
                    "error_type": validated.error_type,
                }
            )
            return InsightResponse(
                insight=generate_fallback_insight(
                    request.assessment_type, request.score, max_score, request.severity, risk_level
                ),
                source=ResponseSource.FALLBACK,
                crisis_check=assessment,
                sources=articles,
            )

        self._transition("insights", "SUCCESS")
        return InsightResponse(
            insight=validated.value,
            source=ResponseSource.LLM_GENERATED,
            crisis_check=assessment,
            sources=articles,
        )

    async def _retrieve_for_insight(self, request: InsightRequest) -> List[KnowledgeArticle]:
        query = build_insight_query(
            request.assessment_type, request.severity, request.detected_conditions
        )
        embedded = await self._run_stage("embed", self.embedder.embed(query))
        if not embedded.ok:
            return []

        retrieved = await self._run_stage(
            "retrieve",
            self.retriever.retrieve_across_categories(
                embedded.value,
                get_categories(request.assessment_type),
                per_category_limit=self.config.insight_per_category_limit,
                threshold=self.config.insight_threshold,
            ),
        )
        if not retrieved.ok:
            return []
        return retrieved.value[:self.config.insight_max_articles]

    def _validate(self, raw: str, request: InsightRequest) -> StageOutcome[StructuredInsight]:
        try:
            insight = parse_insight(raw, request.assessment_type, request.severity, request.score)
        except SchemaValidationError as e:
            logger.warning(
                "INSIGHT_SCHEMA_INVALID",
                extra={"path": e.path, "error": str(e), "raw_length": len(raw or "")}
            )
            return StageOutcome.failure("validate", e)
        return StageOutcome.success("validate", insight)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    async def _run_stage(self, stage: str, call: Awaitable[Any]) -> StageOutcome[Any]:
        """Await an external call and capture its result as a StageOutcome."""
        try:
            value = await asyncio.wait_for(call, timeout=self.config.stage_timeout_seconds)
        except (ExternalServiceError, asyncio.TimeoutError) as e:
            logger.warning(
                "STAGE_FAILED",
                extra={"stage": stage, "error_type": type(e).__name__, "error": str(e)}
            )
            return StageOutcome.failure(stage, e)
        except Exception as e:
            logger.exception(
                "STAGE_UNEXPECTED_ERROR",
                extra={"stage": stage, "error_type": type(e).__name__}
            )
            return StageOutcome.failure(stage, e)
        return StageOutcome.success(stage, value)

    def _transition(self, flow: str, state: str, **details: Any) -> None:
        logger.info(
            "ORCHESTRATOR_STATE",
            extra={"flow": flow, "state": state, **details}
        )
