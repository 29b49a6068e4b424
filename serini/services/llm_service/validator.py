"""Insight validator - the boundary between model text and StructuredInsight.

Model output is untrusted. parse_insight() turns raw text into a
StructuredInsight or raises SchemaValidationError; nothing downstream
ever sees an unvalidated dict. validate_insight() holds the invariants
shared by the model path and the fallback generator.
"""
import json
import logging
import re
from dataclasses import replace
from enum import Enum
from typing import Any, Dict, List, Type, TypeVar

from serini.shared.errors import SchemaValidationError
from serini.shared.models import (
    CopingStrategy,
    FindingKind,
    KeyFinding,
    NextStep,
    Priority,
    Recommendation,
    RiskFactor,
    RiskFactorLevel,
    SeverityBucket,
    StructuredInsight,
    Urgency,
)
from serini.services.safety_service.resources import BEFRIENDERS_KL, TALIAN_KASIH

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)

HOTLINE_NUMBERS = (TALIAN_KASIH.number, BEFRIENDERS_KL.number)

HOTLINE_RECOMMENDATION = Recommendation(
    text=(
        f"Please reach out for support now: {TALIAN_KASIH.name} {TALIAN_KASIH.number} (24/7) "
        f"or {BEFRIENDERS_KL.name} {BEFRIENDERS_KL.number} (24/7)."
    ),
    text_localized=(
        f"Sila dapatkan sokongan sekarang: {TALIAN_KASIH.name_localized} {TALIAN_KASIH.number} (24/7) "
        f"atau {BEFRIENDERS_KL.name_localized} {BEFRIENDERS_KL.number} (24/7)."
    ),
    priority=Priority.HIGH,
)


def strip_code_fences(raw: str) -> str:
    """Remove a single surrounding markdown code fence, if any."""
    match = _FENCE_RE.match(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()


def _require_text(data: Dict[str, Any], key: str, path: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise SchemaValidationError(f"Missing or empty text field '{key}'", path=f"{path}.{key}".lstrip("."))
    return value.strip()


def _require_enum(data: Dict[str, Any], key: str, enum_type: Type[E], path: str) -> E:
    value = data.get(key)
    try:
        return enum_type(value)
    except ValueError:
        raise SchemaValidationError(
            f"Invalid value {value!r} for '{key}'", path=f"{path}.{key}"
        ) from None


def _require_items(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    items = data.get(key)
    if not isinstance(items, list):
        raise SchemaValidationError(f"'{key}' must be a list", path=key)
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise SchemaValidationError("List item must be an object", path=f"{key}[{index}]")
    return items


def _parse_findings(data: Dict[str, Any]) -> List[KeyFinding]:
    return [
        KeyFinding(
            text=_require_text(item, "text", f"keyFindings[{i}]"),
            text_localized=_require_text(item, "textMs", f"keyFindings[{i}]"),
            kind=_require_enum(item, "type", FindingKind, f"keyFindings[{i}]"),
        )
        for i, item in enumerate(_require_items(data, "keyFindings"))
    ]


def _parse_recommendations(data: Dict[str, Any]) -> List[Recommendation]:
    return [
        Recommendation(
            text=_require_text(item, "text", f"recommendations[{i}]"),
            text_localized=_require_text(item, "textMs", f"recommendations[{i}]"),
            priority=_require_enum(item, "priority", Priority, f"recommendations[{i}]"),
        )
        for i, item in enumerate(_require_items(data, "recommendations"))
    ]


def _parse_strategies(data: Dict[str, Any]) -> List[CopingStrategy]:
    return [
        CopingStrategy(
            title=_require_text(item, "title", f"copingStrategies[{i}]"),
            title_localized=_require_text(item, "titleMs", f"copingStrategies[{i}]"),
            description=_require_text(item, "description", f"copingStrategies[{i}]"),
            description_localized=_require_text(item, "descriptionMs", f"copingStrategies[{i}]"),
        )
        for i, item in enumerate(_require_items(data, "copingStrategies"))
    ]


def _parse_risk_factors(data: Dict[str, Any]) -> List[RiskFactor]:
    return [
        RiskFactor(
            text=_require_text(item, "text", f"riskFactors[{i}]"),
            text_localized=_require_text(item, "textMs", f"riskFactors[{i}]"),
            level=_require_enum(item, "level", RiskFactorLevel, f"riskFactors[{i}]"),
        )
        for i, item in enumerate(_require_items(data, "riskFactors"))
    ]


def _parse_next_steps(data: Dict[str, Any]) -> List[NextStep]:
    return [
        NextStep(
            action=_require_text(item, "action", f"nextSteps[{i}]"),
            action_localized=_require_text(item, "actionMs", f"nextSteps[{i}]"),
            urgency=_require_enum(item, "urgency", Urgency, f"nextSteps[{i}]"),
        )
        for i, item in enumerate(_require_items(data, "nextSteps"))
    ]


def has_hotline_recommendation(insight: StructuredInsight) -> bool:
    """True when a high-priority recommendation names a 24/7 hotline."""
    for rec in insight.recommendations:
        if rec.priority is Priority.HIGH and any(
            number in rec.text for number in HOTLINE_NUMBERS
        ):
            return True
    return False


def validate_insight(insight: StructuredInsight) -> StructuredInsight:
    """Check the invariants every served insight must satisfy.

    - summary and every list item carry both English and Malay text
    - risk_factors is non-empty when the severity bucket is moderate or severe
    - a hotline recommendation is present when the bucket is severe

    Raises:
        SchemaValidationError: on the first violated invariant
    """
    if not insight.summary.strip() or not insight.summary_localized.strip():
        raise SchemaValidationError("Summary must be bilingual", path="summary")

    pairs = (
        [("keyFindings", f.text, f.text_localized) for f in insight.key_findings]
        + [("recommendations", r.text, r.text_localized) for r in insight.recommendations]
        + [("copingStrategies", c.title, c.title_localized) for c in insight.coping_strategies]
        + [("copingStrategies", c.description, c.description_localized) for c in insight.coping_strategies]
        + [("riskFactors", r.text, r.text_localized) for r in insight.risk_factors]
        + [("nextSteps", s.action, s.action_localized) for s in insight.next_steps]
    )
    for path, text, localized in pairs:
        if not text.strip() or not localized.strip():
            raise SchemaValidationError("Item must be bilingual", path=path)

    bucket = insight.severity_bucket
    if bucket.rank >= SeverityBucket.MODERATE.rank and not insight.risk_factors:
        raise SchemaValidationError(
            f"riskFactors required for {bucket.value} severity", path="riskFactors"
        )

    if bucket is SeverityBucket.SEVERE and not has_hotline_recommendation(insight):
        raise SchemaValidationError(
            "Hotline recommendation required for severe severity", path="recommendations"
        )

    return insight


def parse_insight(raw: str, assessment_type: str, severity: str, score: int) -> StructuredInsight:
    """Parse and validate raw model output.

    Strips an accidental code fence, parses JSON and checks every required
    key, list item shape, enum value and bilingual pair. For severe results
    a missing hotline recommendation is injected rather than rejected.

    Raises:
        SchemaValidationError: output cannot be trusted; caller falls back
    """
    if not isinstance(raw, str) or not raw.strip():
        raise SchemaValidationError("Empty model output")

    try:
        data = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as e:
        raise SchemaValidationError(f"Model output is not valid JSON: {e.msg}") from e
    except RecursionError as e:
        raise SchemaValidationError("Model output is nested too deeply") from e

    if not isinstance(data, dict):
        raise SchemaValidationError("Model output must be a JSON object")

    insight = StructuredInsight(
        summary=_require_text(data, "summary", ""),
        summary_localized=_require_text(data, "summaryMs", ""),
        key_findings=_parse_findings(data),
        recommendations=_parse_recommendations(data),
        coping_strategies=_parse_strategies(data),
        risk_factors=_parse_risk_factors(data),
        next_steps=_parse_next_steps(data),
        assessment_type=assessment_type,
        severity=severity,
        score=score,
    )

    if insight.severity_bucket is SeverityBucket.SEVERE and not has_hotline_recommendation(insight):
        logger.warning(
            "HOTLINE_RECOMMENDATION_INJECTED",
            extra={"assessment_type": assessment_type, "severity": severity}
        )
        insight = replace(
            insight,
            recommendations=[HOTLINE_RECOMMENDATION] + list(insight.recommendations),
        )

    return validate_insight(insight)
