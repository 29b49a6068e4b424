"""HTTP handler - scoring, crisis classification, insights and chat.

Endpoints:
    GET  /health, /ready
    POST /score            {assessmentType, answers}
    POST /screening        {answers, socialAnswers?}
    POST /classify         {message}
    POST /insights         {assessmentType, score, severity, riskLevel?, ...}
    POST /recommendations  {assessmentType, severity, limit?}
    POST /chat             {message, sessionId, userId?, priorRiskLevel?, ...}

User and session identifiers only ever reach the logs hashed.
"""
import logging
import os
from typing import Optional

from flask import Flask, jsonify, request

from serini.shared.errors import IncompleteAnswersError, ScoringError
from serini.shared.models import RiskLevel
from serini.shared.utils import configure_pii_salt, hash_pii
from serini.services.assessment_service import (
    INSTRUMENTS,
    calculate_functional_level,
    detect_conditions,
    evaluate_triage,
    get_overall_risk_level,
    score_assessment,
    score_social_function,
)
from serini.services.retrieval_service import (
    OpenAIEmbeddingClient,
    PgVectorStore,
    RetrievalConfig,
    RetrievalService,
    recommend_exercises,
)
from serini.services.safety_service import (
    SCREENING_DISCLAIMER,
    CrisisClassifier,
    SafetyConfig,
    chat_fallback_message,
    detect_language,
    hotlines_payload,
)
from serini.shared.database import ConnectionManager, DatabaseConfig
from .base_llm import ChatMessage, LLMConfig, create_llm
from .fallback import generate_fallback_insight
from .orchestrator import InsightOrchestrator, InsightRequest, OrchestratorConfig

logger = logging.getLogger(__name__)

DEV_PII_SALT = "default_dev_salt_change_in_production_32chars"


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def build_orchestrator_from_env() -> InsightOrchestrator:
    """Wire the production pipeline from environment configuration."""
    connection_manager = ConnectionManager(DatabaseConfig.from_env())
    connection_manager.initialize()

    return InsightOrchestrator(
        embedder=OpenAIEmbeddingClient(),
        retriever=RetrievalService(PgVectorStore(connection_manager), RetrievalConfig.from_env()),
        generator=create_llm(LLMConfig.from_env()),
        classifier=CrisisClassifier(SafetyConfig.from_env()),
        config=OrchestratorConfig.from_env(),
    )


def _parse_history(raw) -> list:
    history = []
    for item in raw or []:
        if not isinstance(item, dict):
            continue
        role = item.get("role")
        content = item.get("content")
        if role in ("user", "assistant") and isinstance(content, str) and content.strip():
            history.append(ChatMessage(role=role, content=content))
    return history


def create_app(orchestrator: Optional[InsightOrchestrator] = None) -> Flask:
    """Create the Flask application.

    Args:
        orchestrator: Pre-built orchestrator; built from the environment
            when None
    """
    configure_pii_salt(os.getenv("PII_HASH_SALT", DEV_PII_SALT))
    if orchestrator is None:
        orchestrator = build_orchestrator_from_env()

    app = Flask(__name__)
    app.config["ORCHESTRATOR"] = orchestrator

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({
            "status": "healthy",
            "service": "serini-engine",
        }), 200

    @app.route("/ready", methods=["GET"])
    def ready():
        """Readiness check."""
        if app.config.get("ORCHESTRATOR") is None:
            return jsonify({"status": "not_ready"}), 503
        return jsonify({
            "status": "ready",
            "instruments": len(INSTRUMENTS),
        }), 200

    @app.route("/score", methods=["POST"])
    def score():
        """Score a completed instrument.

        Request Body:
            {"assessmentType": "depression", "answers": {"phq9_1": 1, ...}}
        """
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return jsonify({"error": "Request body required"}), 400

        assessment_type = data.get("assessmentType")
        answers = data.get("answers")
        if not assessment_type or not isinstance(answers, dict):
            return jsonify({"error": "Missing required fields: assessmentType, answers"}), 400

        try:
            result = score_assessment(assessment_type, answers)
        except IncompleteAnswersError as e:
            return jsonify({"error": str(e), "missingIds": list(e.missing_ids)}), 400
        except ScoringError as e:
            return jsonify({"error": str(e)}), 400

        return jsonify({"success": True, "result": result.to_dict()}), 200

    @app.route("/screening", methods=["POST"])
    def screening():
        """Evaluate initial screening answers.

        Request Body:
            {"answers": {"ending_life": false, ...}, "socialAnswers": {...}}
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("answers"), dict):
            return jsonify({"error": "Missing required field: answers"}), 400

        answers = data["answers"]
        triage = evaluate_triage(answers)
        payload = {
            "success": True,
            "triage": triage.to_dict(),
            "detectedConditions": detect_conditions(answers),
            "overallRiskLevel": triage.risk_level.value,
            "disclaimer": SCREENING_DISCLAIMER,
        }

        social_answers = data.get("socialAnswers")
        if isinstance(social_answers, dict):
            try:
                social_score = score_social_function(social_answers)
            except ScoringError as e:
                return jsonify({"error": str(e)}), 400
            functional_level = calculate_functional_level(social_score)
            payload["socialFunctionScore"] = social_score
            payload["functionalLevel"] = functional_level.value
            payload["overallRiskLevel"] = get_overall_risk_level(
                triage.risk_level, functional_level
            ).value

        if triage.should_show_emergency:
            payload["hotlines"] = hotlines_payload()

        return jsonify(payload), 200

    @app.route("/classify", methods=["POST"])
    def classify():
        """Classify a free-text message for crisis risk."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("message"), str):
            return jsonify({"error": "Message is required"}), 400

        assessment = orchestrator.classifier.classify(data["message"])
        payload = assessment.to_dict()
        if assessment.is_crisis:
            payload["hotlines"] = hotlines_payload()
        return jsonify(payload), 200

    @app.route("/insights", methods=["POST"])
    async def insights():
        """Generate a structured insight for one scored assessment.

        Request Body:
            {
                "assessmentType": "depression",
                "score": 12,
                "severity": "Moderate",
                "riskLevel": "low",
                "detectedConditions": ["depression"],
                "maxScore": 27
            }
        """
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return jsonify({"error": "Request body required"}), 400

        assessment_type = data.get("assessmentType")
        score = data.get("score")
        severity = data.get("severity")
        if not assessment_type or score is None or not severity:
            return jsonify({"error": "Missing required fields: assessmentType, score, severity"}), 400
        if not isinstance(assessment_type, str) or not isinstance(severity, str):
            return jsonify({"error": "assessmentType and severity must be strings"}), 400
        if not _is_int(score):
            return jsonify({"error": "score must be an integer"}), 400

        max_score = data.get("maxScore")
        if max_score is not None and not _is_int(max_score):
            return jsonify({"error": "maxScore must be an integer"}), 400

        conditions = data.get("detectedConditions") or [assessment_type]
        if not isinstance(conditions, list) or not all(isinstance(c, str) for c in conditions):
            return jsonify({"error": "detectedConditions must be a list of strings"}), 400

        language = data.get("language") if data.get("language") in ("en", "ms") else None
        risk_level = RiskLevel.parse(data.get("riskLevel")) or RiskLevel.LOW
        insight_request = InsightRequest(
            assessment_type=assessment_type,
            score=score,
            severity=severity,
            risk_level=risk_level,
            detected_conditions=tuple(conditions),
            max_score=max_score,
            language=language,
        )

        try:
            response = await orchestrator.generate_insights(insight_request)
        except Exception as e:
            logger.error(
                "INSIGHTS_HANDLER_ERROR",
                extra={"assessment_type": assessment_type, "error_type": type(e).__name__}
            )
            insight = generate_fallback_insight(
                assessment_type, score, insight_request.max_score, severity, risk_level
            )
            return jsonify({"success": True, "insights": insight.to_dict(), "sources": []}), 200

        return jsonify(response.to_dict()), 200

    @app.route("/recommendations", methods=["POST"])
    async def recommendations():
        """Recommend exercises for an assessment result."""
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return jsonify({"error": "Request body required"}), 400

        assessment_type = data.get("assessmentType")
        severity = data.get("severity")
        if not assessment_type:
            return jsonify({"error": "Assessment type is required"}), 400
        if not severity:
            return jsonify({"error": "Severity level is required"}), 400
        if not isinstance(assessment_type, str) or not isinstance(severity, str):
            return jsonify({"error": "assessmentType and severity must be strings"}), 400
        if assessment_type not in INSTRUMENTS:
            return jsonify({"error": "Invalid assessment type"}), 400

        limit = data.get("limit")
        if limit is not None and (not _is_int(limit) or limit < 1):
            return jsonify({"error": "limit must be a positive integer"}), 400

        exercises = await recommend_exercises(
            orchestrator.embedder,
            orchestrator.retriever,
            assessment_type,
            severity,
            limit=limit,
        )
        return jsonify({"success": True, "data": [e.to_dict() for e in exercises]}), 200

    @app.route("/chat", methods=["POST"])
    async def chat():
        """Answer one chat turn.

        Request Body:
            {
                "message": "...",
                "sessionId": "sess_123",
                "userId": "user_abc",
                "priorRiskLevel": "moderate",
                "conversationHistory": [{"role": "user", "content": "..."}]
            }
        """
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return jsonify({"error": "Request body required"}), 400

        message = data.get("message")
        session_id = data.get("sessionId")
        if not message or not isinstance(message, str):
            return jsonify({"error": "Message is required"}), 400
        if not session_id:
            return jsonify({"error": "Session ID is required"}), 400

        user_id_hash = hash_pii(data.get("userId"))
        session_id_hash = hash_pii(str(session_id))
        language = data.get("language") if data.get("language") in ("en", "ms") else None

        logger.info(
            "CHAT_REQUEST_RECEIVED",
            extra={
                "user_id_hash": user_id_hash,
                "session_id_hash": session_id_hash,
                "message_length": len(message),
            }
        )

        try:
            response = await orchestrator.chat(
                message,
                history=_parse_history(data.get("conversationHistory")),
                prior_risk_level=data.get("priorRiskLevel"),
                language=language,
            )
        except Exception as e:
            logger.error(
                "CHAT_HANDLER_ERROR",
                extra={"session_id_hash": session_id_hash, "error_type": type(e).__name__}
            )
            return jsonify({
                "message": chat_fallback_message(language or detect_language(message)),
                "source": "fallback",
                "blocked": False,
                "sources": [],
            }), 200

        if response.crisis_check.is_crisis:
            logger.critical(
                "CHAT_CRISIS_RESPONSE",
                extra={
                    "user_id_hash": user_id_hash,
                    "session_id_hash": session_id_hash,
                    "risk_level": response.crisis_check.level.value,
                    "blocked": response.blocked,
                }
            )

        return jsonify(response.to_dict()), 200

    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    create_app().run(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
    )
