"""Crisis classifier - deterministic, bilingual, safety-first.

Every free-text message passes through here BEFORE any embedding,
retrieval or model call. The classifier is pure and synchronous and never
raises: a classification failure must not open a path to the model.

Tiers are evaluated imminent -> high -> moderate; the first tier with a
matching phrase decides the level. Imminent and high are crises.
"""
import logging
from typing import Any, Optional, Tuple

from serini.shared.models import RiskAssessment, RiskLevel
from serini.shared.utils import hash_text_for_audit
from .config import (
    HIGH_KEYWORDS,
    IMMINENT_KEYWORDS,
    MODERATE_KEYWORDS,
    SafetyConfig,
)

logger = logging.getLogger(__name__)


class CrisisClassifier:
    """Keyword-tier crisis classifier for English and Bahasa Malaysia."""

    def __init__(self, config: Optional[SafetyConfig] = None):
        self.config = config or SafetyConfig()
        self._tiers: Tuple[Tuple[RiskLevel, Tuple[str, ...], bool], ...] = (
            (RiskLevel.IMMINENT, IMMINENT_KEYWORDS, True),
            (RiskLevel.HIGH, HIGH_KEYWORDS, True),
            (RiskLevel.MODERATE, MODERATE_KEYWORDS, False),
        )

        logger.info(
            "CRISIS_CLASSIFIER_INITIALIZED",
            extra={
                "pattern_version": self.config.pattern_version,
                "imminent_pattern_count": len(IMMINENT_KEYWORDS),
                "high_pattern_count": len(HIGH_KEYWORDS),
                "moderate_pattern_count": len(MODERATE_KEYWORDS),
            }
        )

    def classify(self, text: Any) -> RiskAssessment:
        """Classify a message.

        Args:
            text: Raw user message. Non-string or empty input is treated
                as carrying no risk signal.

        Returns:
            RiskAssessment with the first matching tier's level and the
            phrase that matched

        Logs:
            - CRISIS_DETECTED: imminent or high (critical level)
            - DISTRESS_DETECTED: moderate
        """
        if not isinstance(text, str) or not text.strip():
            return RiskAssessment.safe()

        lowered = text.lower()

        for level, keywords, is_crisis in self._tiers:
            matched = next((k for k in keywords if k in lowered), None)
            if matched is None:
                continue

            log_extra = {
                "risk_level": level.value,
                "text_hash": hash_text_for_audit(text),
                "text_length": len(text),
                "pattern_version": self.config.pattern_version,
            }
            if self.config.log_matched_keywords:
                log_extra["matched_keyword"] = matched

            if is_crisis:
                logger.critical("CRISIS_DETECTED", extra=log_extra)
            else:
                logger.warning("DISTRESS_DETECTED", extra=log_extra)

            return RiskAssessment(
                is_crisis=is_crisis,
                level=level,
                matched_keywords=(matched,),
            )

        return RiskAssessment.safe()

    def classify_from_known_level(self, prior_level: Any) -> RiskAssessment:
        """Build an assessment from a standing risk level.

        Used when the caller already knows the user's level (screening
        triage) and there is no new free text. High and imminent both map
        to imminent so the short-circuit path is taken; anything else is
        carried through as a non-crisis assessment. Unknown values count
        as no standing risk.
        """
        level = RiskLevel.parse(prior_level)
        if level is None:
            return RiskAssessment.safe()

        if level.requires_short_circuit:
            logger.critical(
                "CRISIS_PRIOR_RISK_LEVEL",
                extra={"prior_risk_level": level.value}
            )
            return RiskAssessment.imminent()

        return RiskAssessment(is_crisis=False, level=level)
