"""Tests for CrisisClassifier - safety-critical code.

Covers both languages, tier precedence and degenerate input. The
classifier must never raise.
"""
import logging

import pytest

from serini.shared.models import RiskLevel
from serini.services.safety_service.classifier import CrisisClassifier
from serini.services.safety_service.config import (
    HIGH_KEYWORDS,
    IMMINENT_KEYWORDS,
    MODERATE_KEYWORDS,
    SafetyConfig,
)


@pytest.fixture
def classifier():
    return CrisisClassifier()


class TestSafeMessages:
    """Messages without risk language."""

    def test_tired_message_is_none(self, classifier):
        result = classifier.classify("I feel a bit tired lately")

        assert result.level == RiskLevel.NONE
        assert result.is_crisis is False
        assert result.matched_keywords == ()

    def test_empty_message(self, classifier):
        assert classifier.classify("").level == RiskLevel.NONE
        assert classifier.classify("   ").level == RiskLevel.NONE

    @pytest.mark.parametrize("value", [None, 42, ["kill myself"], {"text": "x"}])
    def test_non_string_input_never_raises(self, classifier, value):
        result = classifier.classify(value)

        assert result.level == RiskLevel.NONE
        assert result.is_crisis is False


class TestImminent:
    """Explicit intent - highest tier."""

    def test_english_imminent(self, classifier):
        result = classifier.classify("I want to kill myself")

        assert result.level == RiskLevel.IMMINENT
        assert result.is_crisis is True
        assert result.matched_keywords == ("kill myself",)

    def test_malay_imminent(self, classifier):
        result = classifier.classify("Saya rasa nak bunuh diri malam ini")

        assert result.level == RiskLevel.IMMINENT
        assert result.is_crisis is True

    def test_case_insensitive(self, classifier):
        assert classifier.classify("I WANT TO DIE").level == RiskLevel.IMMINENT

    @pytest.mark.parametrize("keyword", IMMINENT_KEYWORDS)
    def test_every_imminent_phrase(self, classifier, keyword):
        assert classifier.classify(f"lately {keyword} again").level == RiskLevel.IMMINENT


class TestHigh:
    """Passive ideation and psychotic features."""

    def test_hopeless_is_high_crisis(self, classifier):
        result = classifier.classify("Everything feels hopeless")

        assert result.level == RiskLevel.HIGH
        assert result.is_crisis is True

    def test_malay_high(self, classifier):
        assert classifier.classify("Saya rasa putus asa").level == RiskLevel.HIGH

    @pytest.mark.parametrize("keyword", HIGH_KEYWORDS)
    def test_every_high_phrase(self, classifier, keyword):
        assert classifier.classify(f"i am {keyword}").level == RiskLevel.HIGH


class TestModerate:
    """Distress without crisis."""

    def test_anxious_is_moderate_not_crisis(self, classifier):
        result = classifier.classify("I'm anxious about work")

        assert result.level == RiskLevel.MODERATE
        assert result.is_crisis is False

    @pytest.mark.parametrize("keyword", MODERATE_KEYWORDS)
    def test_every_moderate_phrase(self, classifier, keyword):
        assert classifier.classify(f"really {keyword} today").level == RiskLevel.MODERATE


class TestPrecedence:
    """Higher tiers win regardless of phrase position."""

    def test_imminent_beats_moderate(self, classifier):
        result = classifier.classify("I'm so depressed and anxious, I want to end my life")

        assert result.level == RiskLevel.IMMINENT
        assert result.matched_keywords == ("end my life",)

    def test_high_beats_moderate(self, classifier):
        result = classifier.classify("overwhelmed and worthless")

        assert result.level == RiskLevel.HIGH

    def test_tiers_do_not_overlap(self):
        tiers = [set(IMMINENT_KEYWORDS), set(HIGH_KEYWORDS), set(MODERATE_KEYWORDS)]

        assert not tiers[0] & tiers[1]
        assert not tiers[0] & tiers[2]
        assert not tiers[1] & tiers[2]


class TestKnownLevel:
    """classify_from_known_level() for the insight path."""

    @pytest.mark.parametrize("prior", ["high", "imminent", RiskLevel.HIGH])
    def test_high_and_imminent_short_circuit(self, classifier, prior):
        result = classifier.classify_from_known_level(prior)

        assert result.level == RiskLevel.IMMINENT
        assert result.is_crisis is True

    @pytest.mark.parametrize("prior,expected", [
        ("moderate", RiskLevel.MODERATE),
        ("low", RiskLevel.LOW),
        ("none", RiskLevel.NONE),
    ])
    def test_lower_levels_carried_through(self, classifier, prior, expected):
        result = classifier.classify_from_known_level(prior)

        assert result.level == expected
        assert result.is_crisis is False

    @pytest.mark.parametrize("prior", [None, "", "unknown"])
    def test_unknown_prior_is_no_risk(self, classifier, prior):
        assert classifier.classify_from_known_level(prior).level == RiskLevel.NONE


class TestLogging:
    """Crisis detection is logged without the message text."""

    def test_crisis_logged_critical_without_text(self, classifier, caplog):
        with caplog.at_level(logging.CRITICAL, logger="serini.services.safety_service.classifier"):
            classifier.classify("I want to kill myself tonight")

        records = [r for r in caplog.records if r.getMessage() == "CRISIS_DETECTED"]
        assert len(records) == 1
        assert records[0].matched_keyword == "kill myself"
        assert "tonight" not in str(records[0].__dict__.values())

    def test_matched_keyword_omitted_when_disabled(self, caplog):
        classifier = CrisisClassifier(SafetyConfig(log_matched_keywords=False))

        with caplog.at_level(logging.CRITICAL, logger="serini.services.safety_service.classifier"):
            classifier.classify("I want to die")

        record = next(r for r in caplog.records if r.getMessage() == "CRISIS_DETECTED")
        assert not hasattr(record, "matched_keyword")
