"""Structured assessment insight - the engine's output contract.

Both the generative path and the deterministic fallback produce a
StructuredInsight. Invariants (checked by llm_service.validator):
- every user-facing text has a localized (Bahasa Malaysia) counterpart
- risk_factors is non-empty whenever the severity bucket is >= moderate
- recommendations include a crisis hotline item whenever the bucket is severe
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List


class SeverityBucket(Enum):
    """The three severity buckets the fallback templates branch on."""
    MILD = "mild"           # Mild or below: minimal, none, low
    MODERATE = "moderate"
    SEVERE = "severe"       # Includes moderately severe, high and very high bands

    @property
    def rank(self) -> int:
        return {"mild": 0, "moderate": 1, "severe": 2}[self.value]

    @classmethod
    def from_label(cls, severity: str) -> "SeverityBucket":
        """Map an instrument band label to a bucket.

        Band labels differ per instrument ("Moderately Severe", "High Risk",
        "Very High Distress"), so the mapping works on keywords. "severe" and
        "high" are checked first so "Moderately Severe" lands in SEVERE.
        """
        label = (severity or "").lower()
        if "severe" in label or "high" in label:
            return cls.SEVERE
        if "moderate" in label:
            return cls.MODERATE
        return cls.MILD


class FindingKind(Enum):
    POSITIVE = "positive"
    CONCERN = "concern"
    NEUTRAL = "neutral"


class Priority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskFactorLevel(Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class Urgency(Enum):
    IMMEDIATE = "immediate"
    SOON = "soon"
    WHEN_READY = "when_ready"


@dataclass(frozen=True)
class KeyFinding:
    text: str
    text_localized: str
    kind: FindingKind

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "textMs": self.text_localized, "type": self.kind.value}


@dataclass(frozen=True)
class Recommendation:
    text: str
    text_localized: str
    priority: Priority

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "textMs": self.text_localized, "priority": self.priority.value}


@dataclass(frozen=True)
class CopingStrategy:
    title: str
    title_localized: str
    description: str
    description_localized: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "titleMs": self.title_localized,
            "description": self.description,
            "descriptionMs": self.description_localized,
        }


@dataclass(frozen=True)
class RiskFactor:
    text: str
    text_localized: str
    level: RiskFactorLevel

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "textMs": self.text_localized, "level": self.level.value}


@dataclass(frozen=True)
class NextStep:
    action: str
    action_localized: str
    urgency: Urgency

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action, "actionMs": self.action_localized, "urgency": self.urgency.value}


@dataclass(frozen=True)
class StructuredInsight:
    """Bilingual, professionally-bounded explanation of one assessment."""
    summary: str
    summary_localized: str
    key_findings: List[KeyFinding]
    recommendations: List[Recommendation]
    coping_strategies: List[CopingStrategy]
    risk_factors: List[RiskFactor]
    next_steps: List[NextStep]
    assessment_type: str
    severity: str
    score: int
    generated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def severity_bucket(self) -> SeverityBucket:
        return SeverityBucket.from_label(self.severity)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase shape consumed by the presentation layer."""
        return {
            "summary": self.summary,
            "summaryMs": self.summary_localized,
            "keyFindings": [f.to_dict() for f in self.key_findings],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "copingStrategies": [c.to_dict() for c in self.coping_strategies],
            "riskFactors": [r.to_dict() for r in self.risk_factors],
            "nextSteps": [s.to_dict() for s in self.next_steps],
            "generatedAt": self.generated_at.isoformat() + "Z",
            "assessmentType": self.assessment_type,
            "severity": self.severity,
            "score": self.score,
        }
