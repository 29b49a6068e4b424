"""Deterministic scoring engine.

Pure and synchronous: no I/O, no model calls. A standardized
questionnaire score is a clinical artifact, so any malformed input is
rejected loudly rather than scored as best effort.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from serini.shared.errors import (
    IncompleteAnswersError,
    InvalidAnswerError,
    ScoringRangeError,
    UnknownInstrumentError,
)
from .instruments import get_instrument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreResult:
    """Total score and severity band of one completed instrument."""
    score: int
    severity: str
    severity_localized: str
    max_score: int
    assessment_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "severity": self.severity,
            "severityMs": self.severity_localized,
            "maxScore": self.max_score,
            "assessmentType": self.assessment_type,
        }


def score_assessment(instrument_type: str, answers: Mapping[str, int]) -> ScoreResult:
    """Score a completed instrument.

    Args:
        instrument_type: Catalog key, e.g. "depression"
        answers: Question id -> selected scale value. Every question of the
            instrument must be answered exactly once.

    Returns:
        ScoreResult with the summed score and its severity band

    Raises:
        UnknownInstrumentError: instrument_type is not in the catalog
        IncompleteAnswersError: one or more questions were not answered
        InvalidAnswerError: unknown question id or value outside the scale
        ScoringRangeError: the sum matched no band (catalog defect)
    """
    instrument = get_instrument(instrument_type)
    if instrument is None:
        raise UnknownInstrumentError(instrument_type)

    expected_ids = set(instrument.question_ids)
    answered_ids = set(answers)

    missing = expected_ids - answered_ids
    if missing:
        raise IncompleteAnswersError(instrument_type, missing)

    unknown = answered_ids - expected_ids
    if unknown:
        raise InvalidAnswerError(
            f"Unknown question ids for {instrument_type}: {', '.join(sorted(unknown))}"
        )

    allowed_values = set(instrument.scale_values)
    total = 0
    for question_id in instrument.question_ids:
        value = answers[question_id]
        # bool is an int subclass; True must not score as 1
        if isinstance(value, bool) or not isinstance(value, int) or value not in allowed_values:
            raise InvalidAnswerError(
                f"Answer {value!r} for {question_id} is outside the "
                f"{instrument_type} scale {sorted(allowed_values)}"
            )
        total += value

    band = instrument.find_range(total)
    if band is None:
        logger.error(
            "SCORING_RANGE_NOT_FOUND",
            extra={"assessment_type": instrument_type, "score": total}
        )
        raise ScoringRangeError(instrument_type, total)

    logger.info(
        "ASSESSMENT_SCORED",
        extra={
            "assessment_type": instrument_type,
            "score": total,
            "max_score": instrument.max_score,
            "severity": band.severity,
        }
    )

    return ScoreResult(
        score=total,
        severity=band.severity,
        severity_localized=band.severity_localized,
        max_score=instrument.max_score,
        assessment_type=instrument_type,
    )
