"""Knowledge base article models.

Articles are owned by the knowledge corpus (external store). The engine
queries them but never mutates them.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class KnowledgeArticle:
    """A knowledge base article, optionally carrying a query similarity."""
    id: str
    title: str
    content: str
    category: str
    language: str = "en"
    embedding: Tuple[float, ...] = field(default_factory=tuple, repr=False)
    similarity: float = 0.0

    def with_similarity(self, similarity: float) -> "KnowledgeArticle":
        return replace(self, similarity=similarity)

    def to_dict(self) -> Dict[str, Any]:
        """Source citation shape returned to callers (no content, no vector)."""
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "language": self.language,
            "similarity": round(self.similarity, 4),
        }


@dataclass(frozen=True)
class RetrievalQuery:
    """Transient per-request retrieval parameters."""
    text: str
    embedding: Tuple[float, ...] = field(default_factory=tuple, repr=False)
    category_filters: Tuple[str, ...] = field(default_factory=tuple)
    top_k: int = 4
    similarity_threshold: float = 0.7

    def __post_init__(self):
        if self.top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {self.top_k}")
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be 0.0-1.0, got {self.similarity_threshold}"
            )


@dataclass(frozen=True)
class RecommendedExercise:
    """A self-help exercise derived from a knowledge base article."""
    id: str
    title: str
    title_localized: str
    description: str
    description_localized: str
    category: str
    source_name: str
    duration: Optional[str] = None
    is_premium: bool = False
    steps: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "titleMs": self.title_localized,
            "description": self.description,
            "descriptionMs": self.description_localized,
            "category": self.category,
            "source": "kb_article",
            "sourceId": self.id,
            "sourceName": self.source_name,
            "duration": self.duration,
            "isPremium": self.is_premium,
            "steps": list(self.steps),
        }
