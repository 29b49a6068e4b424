"""Assessment type -> knowledge base categories.

Static lookup used by the multi-category retrieval fan-out. The first
category is the assessment's own; "general" is always last.
"""
from typing import Dict, List, Tuple

GENERAL_CATEGORY = "general"

ASSESSMENT_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "depression": ("depression", GENERAL_CATEGORY),
    "anxiety": ("anxiety", GENERAL_CATEGORY),
    "insomnia": ("insomnia", GENERAL_CATEGORY),
    "ocd": ("ocd", "anxiety", GENERAL_CATEGORY),
    "ptsd": ("ptsd", "anxiety", GENERAL_CATEGORY),
    "suicidal": ("suicidal", "depression", GENERAL_CATEGORY),
    "psychosis": ("psychosis", GENERAL_CATEGORY),
    "sexual_addiction": ("sexual_addiction", GENERAL_CATEGORY),
    "marital_distress": ("marital_distress", GENERAL_CATEGORY),
}


def get_categories(assessment_type: str) -> List[str]:
    """Categories to search for an assessment type; unknown types get [general]."""
    return list(ASSESSMENT_CATEGORIES.get(assessment_type, (GENERAL_CATEGORY,)))
