"""Assessment Service: instrument catalog, scoring and screening triage.

Pure and synchronous - nothing in this package performs I/O.

Components:
- instruments.py: Malaysian-validated instrument catalog (EN/MS)
- scoring.py: score_assessment() -> ScoreResult
- triage.py: screening questions, triage rules, social functioning

Usage:
    from serini.services.assessment_service import score_assessment
    result = score_assessment("depression", {"phq9_1": 1, ...})
"""

from .instruments import (
    ASSESSMENT_TYPE_INFO,
    INSTRUMENTS,
    Instrument,
    InstrumentQuestion,
    ScaleOption,
    ScoringRange,
    display_name,
    get_instrument,
)
from .scoring import ScoreResult, score_assessment
from .triage import (
    FunctionalLevel,
    TriageAction,
    TriageResult,
    calculate_functional_level,
    detect_conditions,
    evaluate_triage,
    get_overall_risk_level,
    score_social_function,
)

__all__ = [
    "ASSESSMENT_TYPE_INFO",
    "INSTRUMENTS",
    "Instrument",
    "InstrumentQuestion",
    "ScaleOption",
    "ScoringRange",
    "display_name",
    "get_instrument",
    "ScoreResult",
    "score_assessment",
    "FunctionalLevel",
    "TriageAction",
    "TriageResult",
    "calculate_functional_level",
    "detect_conditions",
    "evaluate_triage",
    "get_overall_risk_level",
    "score_social_function",
]
