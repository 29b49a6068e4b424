"""Safety Service configuration and bilingual crisis phrase sets.

Phrases are matched as lowercase substrings, English and Bahasa Malaysia
side by side. Tiers are evaluated imminent -> high -> moderate and the
first tier with a match decides the level.
"""
import os
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SafetyConfig:
    """Configuration for crisis classification behavior."""

    # Version tracking for audit trail
    pattern_version: str = "2026.02.01"

    # Log matched phrases (never the message itself)
    log_matched_keywords: bool = True

    @classmethod
    def from_env(cls) -> "SafetyConfig":
        """Create config from environment variables.

        Environment variables:
            SAFETY_PATTERN_VERSION: Override the pattern version tag
            SAFETY_LOG_MATCHED_KEYWORDS: "false" to omit matches from logs
        """
        return cls(
            pattern_version=os.getenv("SAFETY_PATTERN_VERSION", cls.pattern_version),
            log_matched_keywords=os.getenv("SAFETY_LOG_MATCHED_KEYWORDS", "true").lower() != "false",
        )


# Tuples keep declaration order so the first matching phrase is stable
# across runs; matched_keywords in logs and responses depend on it.

# Explicit intent to die or self-harm. The model is never called.
IMMINENT_KEYWORDS: Tuple[str, ...] = (
    "kill myself",
    "bunuh diri",
    "want to die",
    "mahu mati",
    "ingin mati",
    "end my life",
    "tamatkan hidup",
    "suicide plan",
    "rancangan bunuh diri",
    "hurt myself",
    "cederakan diri",
    "self-harm",
    "harm myself",
    "no reason to live",
    "tiada sebab untuk hidup",
    "better off dead",
    "goodbye forever",
    "selamat tinggal selamanya",
)

# Passive ideation, hopelessness, psychotic features
HIGH_KEYWORDS: Tuple[str, ...] = (
    "suicidal",
    "thoughts of death",
    "fikiran kematian",
    "hopeless",
    "putus asa",
    "hearing voices",
    "dengar suara",
    "seeing things",
    "lihat benda",
    "paranoid",
    "want to disappear",
    "mahu hilang",
    "worthless",
    "tidak berguna",
)

# Distress without crisis - conversation continues normally
MODERATE_KEYWORDS: Tuple[str, ...] = (
    "depressed",
    "murung",
    "anxious",
    "cemas",
    "panic attack",
    "serangan panik",
    "cannot sleep",
    "tidak boleh tidur",
    "cannot function",
    "tidak dapat berfungsi",
    "overwhelmed",
    "terbeban",
)


# Output-side check on generated chat replies
HARMFUL_RESPONSE_PATTERNS: Tuple[str, ...] = (
    "kill yourself",
    "end your life",
    "you should die",
    "no one cares about you",
    "you're worthless",
    "give up on life",
    "how to hurt yourself",
    "commit suicide",
    "lethal dose",
)

DIAGNOSTIC_RESPONSE_PATTERNS: Tuple[str, ...] = (
    "you have depression",
    "you have anxiety",
    "you are bipolar",
    "you have bipolar",
    "you have ptsd",
    "you have ocd",
    "you are schizophrenic",
    "you have schizophrenia",
    "i diagnose you",
    "my diagnosis is",
    "you should take medication",
    "take this medication",
    "stop taking your medication",
    "anda menghidap kemurungan",
    "anda mengalami kemurungan klinikal",
)
