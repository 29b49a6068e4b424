"""Generative model interface and provider implementations.

Every provider is reached through `complete(system_prompt, messages)`.
The base class owns the call policy: prompt validation, an explicit
timeout, one retry on transient errors, and conversion of every failure
into GenerationError so callers only handle one exception type.
"""
import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Type

import aiohttp
import anthropic
import openai

from serini.shared.errors import GenerationError

logger = logging.getLogger(__name__)


class LLMProvider(Enum):
    """Supported LLM providers."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    HUGGINGFACE = "huggingface"


_DEFAULT_MODELS = {
    LLMProvider.ANTHROPIC: "claude-sonnet-4-20250514",
    LLMProvider.OPENAI: "gpt-4o-mini",
    LLMProvider.HUGGINGFACE: "mistralai/Mistral-7B-Instruct-v0.3",
}

_API_KEY_ENV = {
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.HUGGINGFACE: "HUGGINGFACE_API_KEY",
}


@dataclass(frozen=True)
class LLMConfig:
    """Configuration for LLM inference."""
    provider: LLMProvider = LLMProvider.ANTHROPIC
    model_name: Optional[str] = None
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    max_tokens: int = 1024
    temperature: float = 0.7
    top_p: float = 0.9
    timeout_seconds: float = 30.0
    max_retries: int = 1

    def __post_init__(self):
        if not self.model_name:
            object.__setattr__(self, "model_name", _DEFAULT_MODELS[self.provider])

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """Create config from environment variables.

        Environment variables:
            LLM_PROVIDER: anthropic (default), openai or huggingface
            LLM_MODEL_NAME: Model id (provider default when unset)
            LLM_ENDPOINT: Inference endpoint URL (huggingface only)
            LLM_API_KEY: API key; falls back to ANTHROPIC_API_KEY,
                OPENAI_API_KEY or HUGGINGFACE_API_KEY per provider
            LLM_MAX_TOKENS: Token budget per call (default 1024)
            LLM_TIMEOUT_SECONDS: Per-call timeout (default 30)
        """
        provider = LLMProvider(os.getenv("LLM_PROVIDER", "anthropic").lower())
        return cls(
            provider=provider,
            model_name=os.getenv("LLM_MODEL_NAME", _DEFAULT_MODELS[provider]),
            endpoint=os.getenv("LLM_ENDPOINT"),
            api_key=os.getenv("LLM_API_KEY") or os.getenv(_API_KEY_ENV[provider]),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", "1024")),
            timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
        )


@dataclass(frozen=True)
class ChatMessage:
    """One conversation turn."""
    role: str       # "user" or "assistant"
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class LLMResponse:
    """Response from LLM inference."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None
    latency_ms: Optional[float] = None


class BaseLLM(ABC):
    """Abstract base class for generative model providers."""

    MAX_PROMPT_CHARS = 60000

    # Provider errors that warrant the single retry
    transient_errors: Tuple[Type[BaseException], ...] = (asyncio.TimeoutError,)

    def __init__(self, config: LLMConfig):
        self.config = config
        logger.info(
            "LLM_INITIALIZED",
            extra={"provider": config.provider.value, "model": config.model_name}
        )

    async def complete(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate the next assistant turn.

        Args:
            system_prompt: Role-scoped system prompt
            messages: Conversation, ending with the user turn to answer
            max_tokens: Override the configured token budget

        Returns:
            LLMResponse with the generated text

        Raises:
            GenerationError: invalid prompt, provider failure or timeout
        """
        messages = tuple(messages)
        if not self.validate_messages(messages):
            raise GenerationError("Invalid prompt")

        budget = max_tokens or self.config.max_tokens
        attempts = self.config.max_retries + 1
        start_time = time.perf_counter()

        for attempt in range(1, attempts + 1):
            try:
                response = await asyncio.wait_for(
                    self._complete(system_prompt, messages, budget),
                    timeout=self.config.timeout_seconds,
                )
            except self.transient_errors as e:
                logger.warning(
                    "LLM_TRANSIENT_ERROR",
                    extra={
                        "provider": self.config.provider.value,
                        "attempt": attempt,
                        "error_type": type(e).__name__,
                    }
                )
                if attempt == attempts:
                    raise GenerationError("Generative model unavailable", cause=e) from e
                continue
            except Exception as e:
                logger.error(
                    "LLM_GENERATION_FAILED",
                    extra={
                        "provider": self.config.provider.value,
                        "model": self.config.model_name,
                        "error_type": type(e).__name__,
                        "error": str(e),
                    }
                )
                raise GenerationError("Generative model call failed", cause=e) from e

            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "LLM_GENERATION_COMPLETED",
                extra={
                    "provider": self.config.provider.value,
                    "model": self.config.model_name,
                    "tokens_used": response.tokens_used,
                    "latency_ms": latency_ms,
                }
            )
            return LLMResponse(
                text=response.text,
                model=response.model,
                provider=response.provider,
                tokens_used=response.tokens_used,
                latency_ms=latency_ms,
            )

        raise GenerationError("Generative model unavailable")

    @abstractmethod
    async def _complete(
        self,
        system_prompt: str,
        messages: Tuple[ChatMessage, ...],
        max_tokens: int,
    ) -> LLMResponse:
        """Provider-specific call; may raise provider exceptions."""

    def validate_messages(self, messages: Sequence[ChatMessage]) -> bool:
        """The last turn must be a non-empty user message within length limits."""
        if not messages:
            logger.warning("LLM_PROMPT_EMPTY")
            return False

        last = messages[-1]
        if last.role != "user" or not last.content or not last.content.strip():
            logger.warning("LLM_PROMPT_EMPTY")
            return False

        total = sum(len(m.content) for m in messages)
        if total > self.MAX_PROMPT_CHARS:
            logger.warning("LLM_PROMPT_TOO_LONG", extra={"length": total})
            return False

        return True


class AnthropicLLM(BaseLLM):
    """Anthropic Messages API implementation (Claude)."""

    transient_errors = (
        asyncio.TimeoutError,
        anthropic.APIConnectionError,
        anthropic.RateLimitError,
        anthropic.InternalServerError,
    )

    def __init__(self, config: LLMConfig, client: Optional[anthropic.AsyncAnthropic] = None):
        super().__init__(config)

        if client is None and not config.api_key:
            raise ValueError("Anthropic API key required")

        self.client = client or anthropic.AsyncAnthropic(api_key=config.api_key, max_retries=0)

    async def _complete(
        self,
        system_prompt: str,
        messages: Tuple[ChatMessage, ...],
        max_tokens: int,
    ) -> LLMResponse:
        payload = [m.to_dict() for m in messages]
        # The Messages API expects the conversation to open with a user turn
        while payload and payload[0]["role"] != "user":
            payload.pop(0)

        response = await self.client.messages.create(
            model=self.config.model_name,
            max_tokens=max_tokens,
            system=system_prompt,
            messages=payload,
            temperature=self.config.temperature,
        )

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        usage = getattr(response, "usage", None)
        tokens_used = None
        if usage is not None:
            tokens_used = (usage.input_tokens or 0) + (usage.output_tokens or 0)

        return LLMResponse(
            text=text,
            model=self.config.model_name,
            provider=self.config.provider.value,
            tokens_used=tokens_used,
        )


class OpenAILLM(BaseLLM):
    """OpenAI Chat Completions implementation."""

    transient_errors = (
        asyncio.TimeoutError,
        openai.APIConnectionError,
        openai.RateLimitError,
        openai.InternalServerError,
    )

    def __init__(self, config: LLMConfig, client: Optional[openai.AsyncOpenAI] = None):
        super().__init__(config)

        if client is None and not config.api_key:
            raise ValueError("OpenAI API key required")

        self.client = client or openai.AsyncOpenAI(api_key=config.api_key, max_retries=0)

    async def _complete(
        self,
        system_prompt: str,
        messages: Tuple[ChatMessage, ...],
        max_tokens: int,
    ) -> LLMResponse:
        payload: List[Dict[str, str]] = [{"role": "system", "content": system_prompt}]
        payload.extend(m.to_dict() for m in messages)

        response = await self.client.chat.completions.create(
            model=self.config.model_name,
            messages=payload,
            max_tokens=max_tokens,
            temperature=self.config.temperature,
            top_p=self.config.top_p,
        )

        usage = getattr(response, "usage", None)
        return LLMResponse(
            text=response.choices[0].message.content or "",
            model=self.config.model_name,
            provider=self.config.provider.value,
            tokens_used=getattr(usage, "total_tokens", None),
        )


class HuggingFaceLLM(BaseLLM):
    """HuggingFace Inference endpoint implementation."""

    transient_errors = (
        asyncio.TimeoutError,
        aiohttp.ClientConnectionError,
    )

    def __init__(self, config: LLMConfig):
        super().__init__(config)

        if not config.endpoint:
            raise ValueError("HuggingFace endpoint required")

        self.endpoint = config.endpoint
        self.headers = {}
        if config.api_key:
            self.headers["Authorization"] = f"Bearer {config.api_key}"

    def _format_prompt(self, system_prompt: str, messages: Tuple[ChatMessage, ...]) -> str:
        turns = "\n\n".join(f"{m.role}: {m.content}" for m in messages)
        return f"{system_prompt}\n\n{turns}\n\nassistant:"

    async def _complete(
        self,
        system_prompt: str,
        messages: Tuple[ChatMessage, ...],
        max_tokens: int,
    ) -> LLMResponse:
        payload = {
            "inputs": self._format_prompt(system_prompt, messages),
            "parameters": {
                "max_new_tokens": max_tokens,
                "temperature": self.config.temperature,
                "top_p": self.config.top_p,
                "return_full_text": False,
            },
        }

        async with aiohttp.ClientSession() as session:
            async with session.post(
                self.endpoint,
                headers=self.headers,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            ) as response:
                response.raise_for_status()
                result = await response.json()

        if isinstance(result, list) and result:
            generated_text = result[0].get("generated_text", "")
        elif isinstance(result, dict):
            generated_text = result.get("generated_text", "")
        else:
            generated_text = ""

        return LLMResponse(
            text=generated_text,
            model=self.config.model_name,
            provider=self.config.provider.value,
        )


def create_llm(config: LLMConfig) -> BaseLLM:
    """Factory function to create an LLM instance.

    Raises:
        ValueError: If provider not supported or credentials are missing
    """
    if config.provider == LLMProvider.ANTHROPIC:
        return AnthropicLLM(config)
    elif config.provider == LLMProvider.OPENAI:
        return OpenAILLM(config)
    elif config.provider == LLMProvider.HUGGINGFACE:
        return HuggingFaceLLM(config)
    else:
        raise ValueError(f"Unsupported provider: {config.provider}")
