"""Retrieval Service: embeddings, vector search and context composition.

Components:
- embeddings.py: Embedder interface, OpenAIEmbeddingClient, chunk_text()
- vector_store.py: VectorStore interface, in-memory and pgvector backends
- categories.py: assessment type -> knowledge base categories
- retriever.py: RetrievalService, recommend_exercises()
- composer.py: compose_context()
"""

from .categories import ASSESSMENT_CATEGORIES, get_categories
from .composer import NO_CONTEXT_SENTINEL, compose_context
from .embeddings import Embedder, EmbeddingConfig, OpenAIEmbeddingClient, chunk_text
from .retriever import RetrievalConfig, RetrievalService, recommend_exercises
from .vector_store import InMemoryVectorStore, PgVectorStore, VectorStore

__all__ = [
    "ASSESSMENT_CATEGORIES",
    "get_categories",
    "NO_CONTEXT_SENTINEL",
    "compose_context",
    "Embedder",
    "EmbeddingConfig",
    "OpenAIEmbeddingClient",
    "chunk_text",
    "RetrievalConfig",
    "RetrievalService",
    "recommend_exercises",
    "InMemoryVectorStore",
    "PgVectorStore",
    "VectorStore",
]
