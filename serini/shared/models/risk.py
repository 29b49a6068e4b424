"""Risk level domain models.

This file defines the core enums and data structures for risk triage.
Risk levels are ordered: imminent > high > moderate > low > none.
A request can only ever move UP this ladder - nothing downstream of the
crisis gate is allowed to downgrade an imminent assessment.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RiskLevel(Enum):
    """Coarse safety classification, distinct from clinical severity."""
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    IMMINENT = "imminent"     # Immediate danger - model is never called

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]

    @property
    def requires_short_circuit(self) -> bool:
        """High and imminent standing risk bypass retrieval and generation."""
        return self.rank >= _RISK_RANK[RiskLevel.HIGH]

    @classmethod
    def highest(cls, *levels: "RiskLevel") -> "RiskLevel":
        """Return the most severe of the given levels (NONE if empty)."""
        result = cls.NONE
        for level in levels:
            if level.rank > result.rank:
                result = level
        return result

    @classmethod
    def parse(cls, value: Optional[Any]) -> Optional["RiskLevel"]:
        """Parse a caller-supplied level.

        Unknown strings return None so the caller decides the default;
        the crisis gate treats None as "no standing risk".
        """
        if value is None:
            return None
        if isinstance(value, RiskLevel):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


_RISK_RANK = {
    RiskLevel.NONE: 0,
    RiskLevel.LOW: 1,
    RiskLevel.MODERATE: 2,
    RiskLevel.HIGH: 3,
    RiskLevel.IMMINENT: 4,
}


@dataclass(frozen=True)
class RiskAssessment:
    """Result of the crisis classifier.

    Immutable - an assessment is replaced, never edited, when a later
    stage escalates it.
    """
    is_crisis: bool
    level: RiskLevel
    matched_keywords: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def safe(cls) -> "RiskAssessment":
        return cls(is_crisis=False, level=RiskLevel.NONE)

    @classmethod
    def imminent(cls, matched_keywords: Tuple[str, ...] = ()) -> "RiskAssessment":
        return cls(is_crisis=True, level=RiskLevel.IMMINENT, matched_keywords=matched_keywords)

    def escalate(self, other: "RiskAssessment") -> "RiskAssessment":
        """Combine with another assessment, keeping the higher level."""
        if other.level.rank > self.level.rank:
            return RiskAssessment(
                is_crisis=self.is_crisis or other.is_crisis,
                level=other.level,
                matched_keywords=self.matched_keywords + other.matched_keywords,
            )
        return RiskAssessment(
            is_crisis=self.is_crisis or other.is_crisis,
            level=self.level,
            matched_keywords=self.matched_keywords + other.matched_keywords,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isCrisis": self.is_crisis,
            "level": self.level.value,
            "matchedKeywords": list(self.matched_keywords),
        }
