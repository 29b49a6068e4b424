"""LLM Service: safety-gated insight and chat generation.

CRITICAL: the crisis gate runs before any embedding, retrieval or model
call. High and imminent users are answered from canned text and
deterministic templates only.

Components:
- base_llm.py: BaseLLM interface, Anthropic / OpenAI / HuggingFace providers
- prompts.py: role-scoped system prompts and prompt builders
- validator.py: parse_insight(), validate_insight()
- fallback.py: generate_fallback_insight()
- orchestrator.py: InsightOrchestrator (chat, generate_insights)
- handler.py: Flask application

Usage:
    orchestrator = InsightOrchestrator(embedder, retriever, create_llm(LLMConfig.from_env()))
    response = await orchestrator.chat("I can't sleep", prior_risk_level="low")
"""

from .base_llm import (
    AnthropicLLM,
    BaseLLM,
    ChatMessage,
    HuggingFaceLLM,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    OpenAILLM,
    create_llm,
)
from .fallback import generate_fallback_insight
from .orchestrator import (
    ChatResponse,
    InsightOrchestrator,
    InsightRequest,
    InsightResponse,
    OrchestratorConfig,
    ResponseSource,
)
from .validator import parse_insight, validate_insight

__all__ = [
    "AnthropicLLM",
    "BaseLLM",
    "ChatMessage",
    "HuggingFaceLLM",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "OpenAILLM",
    "create_llm",
    "generate_fallback_insight",
    "ChatResponse",
    "InsightOrchestrator",
    "InsightRequest",
    "InsightResponse",
    "OrchestratorConfig",
    "ResponseSource",
    "parse_insight",
    "validate_insight",
]
