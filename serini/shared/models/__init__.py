"""Shared domain models for the Serini engine."""
from .risk import RiskLevel, RiskAssessment
from .knowledge import KnowledgeArticle, RetrievalQuery, RecommendedExercise
from .insight import (
    SeverityBucket,
    FindingKind,
    Priority,
    RiskFactorLevel,
    Urgency,
    KeyFinding,
    Recommendation,
    CopingStrategy,
    RiskFactor,
    NextStep,
    StructuredInsight,
)

__all__ = [
    "RiskLevel",
    "RiskAssessment",
    "KnowledgeArticle",
    "RetrievalQuery",
    "RecommendedExercise",
    "SeverityBucket",
    "FindingKind",
    "Priority",
    "RiskFactorLevel",
    "Urgency",
    "KeyFinding",
    "Recommendation",
    "CopingStrategy",
    "RiskFactor",
    "NextStep",
    "StructuredInsight",
]
