"""Vector retrieval service.

Nearest-neighbour search over the knowledge base with threshold and
top-k controls, plus a multi-category fan-out that de-duplicates and
re-ranks. Store failures surface as RetrievalServiceError; the
orchestrator is the one that turns them into an empty article list.
"""
import asyncio
import logging
import math
import os
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from serini.shared.errors import RetrievalServiceError
from serini.shared.models import KnowledgeArticle, RecommendedExercise, RetrievalQuery
from .categories import get_categories
from .embeddings import Embedder
from .vector_store import VectorStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetrievalConfig:
    """Configuration for vector retrieval."""
    timeout_seconds: float = 5.0
    default_top_k: int = 4
    default_threshold: float = 0.7
    max_retries: int = 1

    @classmethod
    def from_env(cls) -> "RetrievalConfig":
        """Create config from environment variables.

        Environment variables:
            RETRIEVAL_TIMEOUT_SECONDS: Per-query timeout (default 5)
            RETRIEVAL_TOP_K: Default result count (default 4)
            RETRIEVAL_THRESHOLD: Default similarity threshold (default 0.7)
        """
        return cls(
            timeout_seconds=float(os.getenv("RETRIEVAL_TIMEOUT_SECONDS", "5")),
            default_top_k=int(os.getenv("RETRIEVAL_TOP_K", "4")),
            default_threshold=float(os.getenv("RETRIEVAL_THRESHOLD", "0.7")),
        )


class RetrievalService:
    """Threshold / top-k retrieval over a VectorStore."""

    def __init__(self, store: VectorStore, config: Optional[RetrievalConfig] = None):
        self.store = store
        self.config = config or RetrievalConfig()

    async def retrieve(
        self,
        query_vector: Sequence[float],
        top_k: Optional[int] = None,
        similarity_threshold: Optional[float] = None,
        category: Optional[str] = None,
    ) -> List[KnowledgeArticle]:
        """Nearest-neighbour search.

        Args:
            query_vector: Embedding of the query text
            top_k: Maximum results (default from config)
            similarity_threshold: Minimum similarity, inclusive
            category: Restrict the search to one category

        Returns:
            Articles sorted by similarity descending, none below threshold,
            at most top_k

        Raises:
            RetrievalServiceError: store unavailable, query failed or timed out
        """
        query = RetrievalQuery(
            text="",
            embedding=tuple(query_vector),
            category_filters=(category,) if category else (),
            top_k=top_k if top_k is not None else self.config.default_top_k,
            similarity_threshold=(
                similarity_threshold if similarity_threshold is not None
                else self.config.default_threshold
            ),
        )

        articles = await self._match(query, category)

        # Re-apply the contract locally; store implementations may be lax
        filtered = [a for a in articles if a.similarity >= query.similarity_threshold]
        filtered.sort(key=lambda a: a.similarity, reverse=True)
        results = filtered[:query.top_k]

        logger.info(
            "RETRIEVAL_COMPLETED",
            extra={
                "category": category,
                "top_k": query.top_k,
                "threshold": query.similarity_threshold,
                "results": len(results),
            }
        )
        return results

    async def retrieve_across_categories(
        self,
        query_vector: Sequence[float],
        categories: Sequence[str],
        per_category_limit: int,
        threshold: float,
    ) -> List[KnowledgeArticle]:
        """Fan out one retrieval per category and merge.

        Categories are queried concurrently. Results are concatenated in
        category order, de-duplicated by article id (first occurrence wins)
        and re-sorted by similarity descending. A failing category is
        logged and skipped.

        Raises:
            RetrievalServiceError: every category failed
        """
        if not categories:
            return []

        outcomes = await asyncio.gather(
            *(
                self.retrieve(query_vector, per_category_limit, threshold, category)
                for category in categories
            ),
            return_exceptions=True,
        )

        merged: List[KnowledgeArticle] = []
        seen_ids = set()
        failures = 0
        for category, outcome in zip(categories, outcomes):
            if isinstance(outcome, BaseException):
                failures += 1
                logger.warning(
                    "RETRIEVAL_CATEGORY_FAILED",
                    extra={"category": category, "error_type": type(outcome).__name__}
                )
                continue
            for article in outcome:
                if article.id not in seen_ids:
                    seen_ids.add(article.id)
                    merged.append(article)

        if failures == len(categories):
            raise RetrievalServiceError(
                f"Retrieval failed for all categories: {', '.join(categories)}"
            )

        # sort() is stable, so equal similarities keep category order
        merged.sort(key=lambda a: a.similarity, reverse=True)

        logger.info(
            "RETRIEVAL_FANOUT_COMPLETED",
            extra={
                "categories": list(categories),
                "failed_categories": failures,
                "results": len(merged),
            }
        )
        return merged

    async def _match(self, query: RetrievalQuery, category: Optional[str]) -> List[KnowledgeArticle]:
        attempts = self.config.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                if category:
                    call = self.store.match_by_category(
                        query.embedding, category, query.similarity_threshold, query.top_k
                    )
                else:
                    call = self.store.match(
                        query.embedding, query.similarity_threshold, query.top_k
                    )
                return await asyncio.wait_for(call, timeout=self.config.timeout_seconds)
            except (asyncio.TimeoutError, ConnectionError) as e:
                logger.warning(
                    "RETRIEVAL_TRANSIENT_ERROR",
                    extra={"attempt": attempt, "category": category, "error_type": type(e).__name__}
                )
                if attempt == attempts:
                    raise RetrievalServiceError("Vector store unavailable", cause=e) from e
            except Exception as e:
                logger.error(
                    "RETRIEVAL_FAILED",
                    extra={"category": category, "error_type": type(e).__name__, "error": str(e)}
                )
                raise RetrievalServiceError("Vector store query failed", cause=e) from e


# Exercise recommendations

EXERCISE_COUNT_BY_SEVERITY = {
    "minimal": 2,
    "mild": 3,
    "moderate": 4,
    "moderately_severe": 5,
    "severe": 6,
}
DEFAULT_EXERCISE_COUNT = 3
EXERCISE_THRESHOLD = 0.3
FREE_EXERCISE_COUNT = 2
MAX_EXERCISE_STEPS = 5

_STEP_RE = re.compile(r"^(?:\d+\.|[-•])\s*(.+)$", re.MULTILINE)


def _exercise_count(severity: str) -> int:
    # "Minimal/None" -> "minimal", "Moderately Severe" -> "moderately_severe"
    key = (severity or "").split("/")[0].strip().lower().replace(" ", "_")
    return EXERCISE_COUNT_BY_SEVERITY.get(key, DEFAULT_EXERCISE_COUNT)


def _estimate_duration(content: str) -> str:
    word_count = len(content.split())
    if word_count < 200:
        return "5 min"
    if word_count < 500:
        return "10 min"
    if word_count < 1000:
        return "15 min"
    return "20 min"


def article_to_exercise(article: KnowledgeArticle, assessment_type: str, index: int) -> RecommendedExercise:
    """Turn a knowledge base article into an exercise card.

    Corpus content is already bilingual, so the localized fields repeat
    the source text.
    """
    lines = [line for line in article.content.split("\n") if line.strip()]
    description = lines[0][:200] if lines else article.title
    steps = [m.group(1).strip() for m in _STEP_RE.finditer(article.content)][:MAX_EXERCISE_STEPS]
    source_name = assessment_type.replace("_", " ").capitalize() + " Module"

    return RecommendedExercise(
        id=article.id,
        title=article.title,
        title_localized=article.title,
        description=description,
        description_localized=description,
        category=article.category,
        source_name=source_name,
        duration=_estimate_duration(article.content),
        is_premium=index >= FREE_EXERCISE_COUNT,
        steps=steps,
    )


async def recommend_exercises(
    embedder: Embedder,
    retriever: RetrievalService,
    assessment_type: str,
    severity: str,
    limit: Optional[int] = None,
) -> List[RecommendedExercise]:
    """Self-help exercises for an assessment result.

    The count scales with severity unless limit is given. The first two
    exercises are a free preview; the rest are premium. Never raises: any
    embedding or retrieval failure yields an empty list.
    """
    count = limit or _exercise_count(severity)
    categories = get_categories(assessment_type)
    per_category_limit = math.ceil(count / len(categories)) + 1
    query_text = f"{assessment_type} teknik latihan exercise strategy coping intervention"

    try:
        vector = await embedder.embed(query_text)
        articles = await retriever.retrieve_across_categories(
            vector, categories, per_category_limit, EXERCISE_THRESHOLD
        )
    except Exception as e:
        logger.error(
            "EXERCISE_RECOMMENDATION_FAILED",
            extra={"assessment_type": assessment_type, "error_type": type(e).__name__}
        )
        return []

    exercises = [
        article_to_exercise(article, assessment_type, index)
        for index, article in enumerate(articles[:count])
    ]

    logger.info(
        "EXERCISES_RECOMMENDED",
        extra={"assessment_type": assessment_type, "severity": severity, "count": len(exercises)}
    )
    return exercises
