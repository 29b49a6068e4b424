"""Embedding client for knowledge base retrieval.

Wraps the OpenAI embeddings endpoint (text-embedding-3-small). Every call
is bounded by an explicit timeout and retried once on transient errors;
anything else surfaces as EmbeddingServiceError, which the orchestrator
turns into "no context".
"""
import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import openai

from serini.shared.errors import EmbeddingServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbeddingConfig:
    """Configuration for the embedding endpoint."""
    api_key: Optional[str] = None
    model_name: str = "text-embedding-3-small"
    timeout_seconds: float = 10.0
    max_retries: int = 1

    @classmethod
    def from_env(cls) -> "EmbeddingConfig":
        """Create config from environment variables.

        Environment variables:
            OPENAI_API_KEY: API key for the embeddings endpoint
            EMBEDDING_MODEL: Model id (default text-embedding-3-small)
            EMBEDDING_TIMEOUT_SECONDS: Per-call timeout (default 10)
        """
        return cls(
            api_key=os.getenv("OPENAI_API_KEY"),
            model_name=os.getenv("EMBEDDING_MODEL", "text-embedding-3-small"),
            timeout_seconds=float(os.getenv("EMBEDDING_TIMEOUT_SECONDS", "10")),
        )


# Errors worth a second attempt; auth and bad-request errors are not
_TRANSIENT_ERRORS = (
    asyncio.TimeoutError,
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


class Embedder(ABC):
    """Interface the orchestrator depends on."""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """Embed one text."""

    @abstractmethod
    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed several texts; output order matches input order."""


class OpenAIEmbeddingClient(Embedder):
    """AsyncOpenAI-backed embedder."""

    def __init__(self, config: Optional[EmbeddingConfig] = None, client: Any = None):
        """Initialize the client.

        Args:
            config: Embedding configuration (defaults from environment)
            client: Pre-built AsyncOpenAI client, mainly for tests
        """
        self.config = config or EmbeddingConfig.from_env()
        # SDK retries are disabled; retry policy lives in _create()
        self.client = client or openai.AsyncOpenAI(api_key=self.config.api_key, max_retries=0)

        logger.info(
            "EMBEDDING_CLIENT_INITIALIZED",
            extra={"model": self.config.model_name, "timeout_seconds": self.config.timeout_seconds}
        )

    async def embed(self, text: str) -> List[float]:
        if not isinstance(text, str) or not text.strip():
            raise EmbeddingServiceError("Cannot embed empty text")
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed several texts in one request.

        Raises:
            EmbeddingServiceError: endpoint failure, timeout, or a payload
                that does not carry one vector per input
        """
        inputs = list(texts)
        if not inputs:
            return []

        start_time = time.perf_counter()
        response = await self._create(inputs)

        try:
            items = sorted(response.data, key=lambda item: item.index)
            vectors = [list(item.embedding) for item in items]
        except (AttributeError, TypeError) as e:
            raise EmbeddingServiceError("Malformed embedding response", cause=e) from e

        if len(vectors) != len(inputs):
            raise EmbeddingServiceError(
                f"Expected {len(inputs)} embeddings, received {len(vectors)}"
            )

        usage = getattr(response, "usage", None)
        logger.info(
            "EMBEDDING_COMPLETED",
            extra={
                "model": self.config.model_name,
                "input_count": len(inputs),
                "total_tokens": getattr(usage, "total_tokens", None),
                "latency_ms": (time.perf_counter() - start_time) * 1000,
            }
        )
        return vectors

    async def _create(self, inputs: List[str]) -> Any:
        attempts = self.config.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(
                    self.client.embeddings.create(model=self.config.model_name, input=inputs),
                    timeout=self.config.timeout_seconds,
                )
            except _TRANSIENT_ERRORS as e:
                logger.warning(
                    "EMBEDDING_TRANSIENT_ERROR",
                    extra={"attempt": attempt, "error_type": type(e).__name__}
                )
                if attempt == attempts:
                    raise EmbeddingServiceError("Embedding endpoint unavailable", cause=e) from e
            except Exception as e:
                logger.error(
                    "EMBEDDING_FAILED",
                    extra={"error_type": type(e).__name__, "error": str(e)}
                )
                raise EmbeddingServiceError("Embedding request failed", cause=e) from e


def chunk_text(text: str, max_chunk_size: int = 1000, overlap: int = 100) -> List[str]:
    """Split long corpus text into overlapping chunks for embedding.

    Chunks break after the last "." or newline inside the window when one
    exists; consecutive chunks share `overlap` characters. Empty chunks
    are dropped.

    Raises:
        ValueError: overlap is not smaller than max_chunk_size
    """
    if overlap >= max_chunk_size:
        raise ValueError("overlap must be smaller than max_chunk_size")

    chunks: List[str] = []
    start = 0
    length = len(text)

    while start < length:
        end = start + max_chunk_size
        if end < length:
            break_point = max(text.rfind(".", start, end), text.rfind("\n", start, end))
            if break_point > start:
                end = break_point + 1

        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)

        if end >= length:
            break
        # Always advance, even when a boundary sits inside the overlap
        start = max(end - overlap, start + 1)

    return chunks
