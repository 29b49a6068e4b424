"""Vector store backends for the knowledge base.

Two implementations behind one interface:
- InMemoryVectorStore: cosine similarity over articles held in memory,
  used for tests and local development
- PgVectorStore: PostgreSQL + pgvector through the shared psycopg2 pool

The corpus is read-only from the engine's point of view; content
authoring happens elsewhere.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence

from serini.shared.database import ConnectionManager
from serini.shared.models import KnowledgeArticle

logger = logging.getLogger(__name__)


class VectorStore(ABC):
    """Similarity-search primitive over knowledge base articles."""

    @abstractmethod
    async def match(
        self,
        vector: Sequence[float],
        threshold: float,
        limit: int,
    ) -> List[KnowledgeArticle]:
        """Articles with similarity >= threshold, best first, at most limit."""

    @abstractmethod
    async def match_by_category(
        self,
        vector: Sequence[float],
        category: str,
        threshold: float,
        limit: int,
    ) -> List[KnowledgeArticle]:
        """Same as match(), restricted to one category."""


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """Cosine similarity; 0.0 for mismatched or zero-length vectors."""
    if len(vec1) != len(vec2) or not vec1:
        return 0.0

    dot_product = sum(a * b for a, b in zip(vec1, vec2))
    norm1 = sum(a * a for a in vec1) ** 0.5
    norm2 = sum(b * b for b in vec2) ** 0.5

    if norm1 == 0 or norm2 == 0:
        return 0.0

    return dot_product / (norm1 * norm2)


class InMemoryVectorStore(VectorStore):
    """In-memory store using cosine similarity.

    Production uses PgVectorStore; this one keeps tests and local runs
    free of a database.
    """

    def __init__(self, articles: Optional[Iterable[KnowledgeArticle]] = None):
        self._articles: Dict[str, KnowledgeArticle] = {}
        for article in articles or ():
            self.add_article(article)

        logger.info(
            "VECTOR_STORE_INITIALIZED",
            extra={"backend": "memory", "article_count": len(self._articles)}
        )

    def add_article(self, article: KnowledgeArticle) -> None:
        if not article.embedding:
            raise ValueError(f"Article {article.id} has no embedding")
        self._articles[article.id] = article

    @property
    def article_count(self) -> int:
        return len(self._articles)

    async def match(
        self,
        vector: Sequence[float],
        threshold: float,
        limit: int,
    ) -> List[KnowledgeArticle]:
        return self._search(vector, threshold, limit, category=None)

    async def match_by_category(
        self,
        vector: Sequence[float],
        category: str,
        threshold: float,
        limit: int,
    ) -> List[KnowledgeArticle]:
        return self._search(vector, threshold, limit, category=category)

    def _search(
        self,
        vector: Sequence[float],
        threshold: float,
        limit: int,
        category: Optional[str],
    ) -> List[KnowledgeArticle]:
        candidates = [
            a for a in self._articles.values()
            if category is None or a.category == category
        ]

        results = []
        for article in candidates:
            similarity = cosine_similarity(vector, article.embedding)
            if similarity >= threshold:
                results.append(article.with_similarity(similarity))

        results.sort(key=lambda a: a.similarity, reverse=True)

        logger.debug(
            "VECTOR_SEARCH_COMPLETED",
            extra={
                "backend": "memory",
                "category": category,
                "candidates": len(candidates),
                "results": min(len(results), limit),
            }
        )
        return results[:limit]


class PgVectorStore(VectorStore):
    """pgvector-backed store.

    Expects two SQL functions in the knowledge base schema, each returning
    (id, title, content, category, language, similarity) ordered by
    similarity descending:

        match_kb_articles(query_embedding vector, match_threshold float,
                          match_count int)
        match_kb_articles_by_category(query_embedding vector,
                                      match_category text,
                                      match_threshold float, match_count int)

    psycopg2 is blocking, so each query runs in a worker thread.
    """

    MATCH_SQL = (
        "SELECT id, title, content, category, language, similarity "
        "FROM match_kb_articles(%s::vector, %s, %s)"
    )
    MATCH_BY_CATEGORY_SQL = (
        "SELECT id, title, content, category, language, similarity "
        "FROM match_kb_articles_by_category(%s::vector, %s, %s, %s)"
    )

    def __init__(self, connection_manager: ConnectionManager):
        self.connection_manager = connection_manager
        logger.info("VECTOR_STORE_INITIALIZED", extra={"backend": "pgvector"})

    async def match(
        self,
        vector: Sequence[float],
        threshold: float,
        limit: int,
    ) -> List[KnowledgeArticle]:
        params = (self._vector_literal(vector), threshold, limit)
        return await asyncio.to_thread(self._query, self.MATCH_SQL, params)

    async def match_by_category(
        self,
        vector: Sequence[float],
        category: str,
        threshold: float,
        limit: int,
    ) -> List[KnowledgeArticle]:
        params = (self._vector_literal(vector), category, threshold, limit)
        return await asyncio.to_thread(self._query, self.MATCH_BY_CATEGORY_SQL, params)

    def _query(self, sql: str, params: tuple) -> List[KnowledgeArticle]:
        with self.connection_manager.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                rows = cur.fetchall()

        return [
            KnowledgeArticle(
                id=str(row[0]),
                title=row[1],
                content=row[2] or "",
                category=row[3] or "general",
                language=row[4] or "en",
                similarity=float(row[5]),
            )
            for row in rows
        ]

    @staticmethod
    def _vector_literal(vector: Sequence[float]) -> str:
        """pgvector text input format: [0.1,0.2,...]"""
        return "[" + ",".join(repr(float(v)) for v in vector) + "]"
