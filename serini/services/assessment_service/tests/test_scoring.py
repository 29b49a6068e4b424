"""Tests for the instrument catalog and scoring engine."""
import pytest

from serini.shared.errors import (
    IncompleteAnswersError,
    InvalidAnswerError,
    ScoringError,
    UnknownInstrumentError,
)
from serini.services.assessment_service.instruments import (
    ASSESSMENT_TYPE_INFO,
    INSTRUMENTS,
    Instrument,
    display_name,
    get_instrument,
)
from serini.services.assessment_service.instruments import _questions, _ranges, _scale
from serini.services.assessment_service.scoring import ScoreResult, score_assessment


def _answers(instrument_type, values):
    instrument = get_instrument(instrument_type)
    return dict(zip(instrument.question_ids, values))


class TestInstrumentCatalog:
    """Every catalog instrument must be internally consistent."""

    def test_all_nine_instruments_present(self):
        assert set(INSTRUMENTS) == {
            "depression", "anxiety", "insomnia", "ocd", "ptsd",
            "suicidal", "psychosis", "sexual_addiction", "marital_distress",
        }

    @pytest.mark.parametrize("instrument_type", sorted(INSTRUMENTS))
    def test_ranges_partition_score_span(self, instrument_type):
        """Every score 0..max maps to exactly one band."""
        instrument = INSTRUMENTS[instrument_type]

        for score in range(instrument.max_score + 1):
            matches = [r for r in instrument.scoring_ranges if r.contains(score)]
            assert len(matches) == 1, f"{instrument_type} score {score}"

        assert instrument.find_range(instrument.max_score + 1) is None

    @pytest.mark.parametrize("instrument_type", sorted(INSTRUMENTS))
    def test_max_score_matches_questions_and_scale(self, instrument_type):
        instrument = INSTRUMENTS[instrument_type]

        assert instrument.max_score == len(instrument.questions) * instrument.max_scale_value

    @pytest.mark.parametrize("instrument_type", sorted(INSTRUMENTS))
    def test_every_question_is_bilingual(self, instrument_type):
        for question in INSTRUMENTS[instrument_type].questions:
            assert question.text
            assert question.text_localized

    def test_question_counts(self):
        assert len(INSTRUMENTS["depression"].questions) == 9
        assert len(INSTRUMENTS["anxiety"].questions) == 19
        assert len(INSTRUMENTS["insomnia"].questions) == 11
        assert len(INSTRUMENTS["suicidal"].questions) == 10
        assert len(INSTRUMENTS["marital_distress"].questions) == 10

    def test_free_instruments(self):
        free = {t for t, i in INSTRUMENTS.items() if not i.is_premium}

        assert free == {"depression", "anxiety", "suicidal"}

    def test_display_names_cover_catalog(self):
        assert set(ASSESSMENT_TYPE_INFO) == set(INSTRUMENTS)
        assert display_name("depression") == ("Depression", "Kemurungan")

    def test_display_name_unknown_type(self):
        assert display_name("burnout_check") == ("Burnout Check", "Burnout Check")

    def test_gap_in_ranges_rejected(self):
        with pytest.raises(ValueError, match="gap"):
            Instrument(
                type="broken",
                name="Broken",
                name_localized="Rosak",
                questions=_questions(("q1", "a", "b"), ("q2", "c", "d")),
                scale_options=_scale((0, "No", "Tidak"), (1, "Yes", "Ya")),
                scoring_ranges=_ranges((0, 0, "Low", "Rendah"), (2, 2, "High", "Tinggi")),
                max_score=2,
                is_premium=False,
            )

    def test_max_score_mismatch_rejected(self):
        with pytest.raises(ValueError):
            Instrument(
                type="broken",
                name="Broken",
                name_localized="Rosak",
                questions=_questions(("q1", "a", "b")),
                scale_options=_scale((0, "No", "Tidak"), (1, "Yes", "Ya")),
                scoring_ranges=_ranges((0, 1, "Low", "Rendah"), (2, 2, "High", "Tinggi")),
                max_score=2,
                is_premium=False,
            )


class TestScoreAssessment:
    """Tests for score_assessment()."""

    def test_phq9_sum_six_is_mild(self):
        answers = _answers("depression", [1, 1, 1, 1, 1, 1, 0, 0, 0])

        result = score_assessment("depression", answers)

        assert isinstance(result, ScoreResult)
        assert result.score == 6
        assert result.severity == "Mild"
        assert result.severity_localized == "Ringan"
        assert result.max_score == 27
        assert result.assessment_type == "depression"

    def test_phq9_all_zero_is_minimal(self):
        result = score_assessment("depression", _answers("depression", [0] * 9))

        assert result.score == 0
        assert result.severity == "Minimal/None"

    def test_phq9_boundaries(self):
        assert score_assessment("depression", _answers("depression", [3, 3, 3, 3, 3, 0, 0, 0, 0])).severity == "Moderately Severe"
        assert score_assessment("depression", _answers("depression", [3] * 9)).severity == "Severe"

    def test_anxiety_maximum(self):
        result = score_assessment("anxiety", _answers("anxiety", [4] * 19))

        assert result.score == 76
        assert result.severity == "Very High"

    def test_marital_uses_zero_to_five_scale(self):
        result = score_assessment("marital_distress", _answers("marital_distress", [5] * 10))

        assert result.score == 50
        assert result.severity == "Very High Distress"

    def test_suicidal_ideation_band(self):
        result = score_assessment("suicidal", _answers("suicidal", [2, 2, 2, 2, 0, 0, 0, 0, 0, 0]))

        assert result.score == 8
        assert result.severity == "Moderate Risk - Ideation Present"

    def test_to_dict(self):
        result = score_assessment("depression", _answers("depression", [0] * 9))

        assert result.to_dict() == {
            "score": 0,
            "severity": "Minimal/None",
            "severityMs": "Minimum/Tiada",
            "maxScore": 27,
            "assessmentType": "depression",
        }

    def test_unknown_instrument(self):
        with pytest.raises(UnknownInstrumentError):
            score_assessment("burnout", {})

    def test_missing_answers_listed(self):
        answers = _answers("depression", [1] * 9)
        del answers["phq9_9"]
        del answers["phq9_3"]

        with pytest.raises(IncompleteAnswersError) as exc_info:
            score_assessment("depression", answers)

        assert exc_info.value.missing_ids == ["phq9_3", "phq9_9"]

    def test_out_of_scale_value_rejected(self):
        answers = _answers("depression", [1] * 9)
        answers["phq9_1"] = 4

        with pytest.raises(InvalidAnswerError):
            score_assessment("depression", answers)

    def test_negative_value_rejected(self):
        answers = _answers("depression", [1] * 9)
        answers["phq9_2"] = -1

        with pytest.raises(InvalidAnswerError):
            score_assessment("depression", answers)

    def test_boolean_value_rejected(self):
        answers = _answers("depression", [1] * 9)
        answers["phq9_2"] = True

        with pytest.raises(InvalidAnswerError):
            score_assessment("depression", answers)

    def test_unknown_question_rejected(self):
        answers = _answers("depression", [1] * 9)
        answers["ast_1"] = 1

        with pytest.raises(InvalidAnswerError):
            score_assessment("depression", answers)

    def test_all_scoring_errors_share_base(self):
        with pytest.raises(ScoringError):
            score_assessment("burnout", {})
