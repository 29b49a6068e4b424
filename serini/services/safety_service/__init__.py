"""Safety Service: deterministic crisis classification and crisis resources.

Every free-text message passes through the CrisisClassifier BEFORE any
embedding, retrieval or model call. Imminent and high risk never reach
the generative model.

Components:
- classifier.py: CrisisClassifier with bilingual keyword tiers
- config.py: SafetyConfig and the phrase sets
- resources.py: Malaysian hotlines, canned messages, detect_language()

Usage:
    from serini.services.safety_service import CrisisClassifier
    assessment = CrisisClassifier().classify("saya rasa putus asa")
"""

from .classifier import CrisisClassifier
from .config import (
    SafetyConfig,
    IMMINENT_KEYWORDS,
    HIGH_KEYWORDS,
    MODERATE_KEYWORDS,
)
from .resources import (
    MALAYSIA_HOTLINES,
    CRISIS_RESPONSE,
    SCREENING_DISCLAIMER,
    chat_blocked_message,
    chat_fallback_message,
    crisis_response,
    detect_language,
    hotlines_payload,
)

__all__ = [
    "CrisisClassifier",
    "SafetyConfig",
    "IMMINENT_KEYWORDS",
    "HIGH_KEYWORDS",
    "MODERATE_KEYWORDS",
    "MALAYSIA_HOTLINES",
    "CRISIS_RESPONSE",
    "SCREENING_DISCLAIMER",
    "chat_blocked_message",
    "chat_fallback_message",
    "crisis_response",
    "detect_language",
    "hotlines_payload",
]
