"""Context composer - bounds retrieved articles into a prompt-safe block."""
from typing import Sequence

from serini.shared.models import KnowledgeArticle

NO_CONTEXT_SENTINEL = "No specific knowledge base articles found for this query."
TRUNCATION_MARKER = "... [truncated]"
DEFAULT_MAX_CHARS = 1500


def compose_context(articles: Sequence[KnowledgeArticle], max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Format articles as numbered, titled sections.

    Each article's content is cut to max_chars with an explicit marker.
    An empty list yields a sentinel sentence so the prompt always has a
    well-formed context section.
    """
    if not articles:
        return NO_CONTEXT_SENTINEL

    sections = []
    for number, article in enumerate(articles, start=1):
        content = article.content or ""
        if len(content) > max_chars:
            content = content[:max_chars] + TRUNCATION_MARKER
        sections.append(f"### {number}. {article.title}\n{content}")

    return "\n\n".join(sections)
