"""Screening triage - runs on every screening answer submission.

The yes/no screening questions decide which full instruments a user is
offered and whether the session starts with a standing risk level. That
level is the prior risk the insight orchestrator honours: high and
imminent users never reach the generative model.

Risk Levels:
- imminent: emergency modal, chat blocked, redirect to emergency resources
- high: warning banner, professional help recommended
- moderate: resources provided
- low: normal flow
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from serini.shared.errors import IncompleteAnswersError, InvalidAnswerError
from serini.shared.models import RiskLevel

logger = logging.getLogger(__name__)


class TriageAction(Enum):
    SHOW_EMERGENCY_MODAL = "show_emergency_modal"
    BLOCK_CHAT = "block_chat"
    LOG_EVENT = "log_event"
    REDIRECT_EMERGENCY = "redirect_emergency"
    SHOW_WARNING_BANNER = "show_warning_banner"


IMMINENT_ACTIONS: Tuple[TriageAction, ...] = (
    TriageAction.SHOW_EMERGENCY_MODAL,
    TriageAction.BLOCK_CHAT,
    TriageAction.LOG_EVENT,
    TriageAction.REDIRECT_EMERGENCY,
)
HIGH_ACTIONS: Tuple[TriageAction, ...] = (
    TriageAction.SHOW_WARNING_BANNER,
    TriageAction.LOG_EVENT,
)


class FunctionalLevel(Enum):
    """Social functioning band from the 8-item social function check."""
    HIGH = "high"           # 81-100%
    MODERATE = "moderate"   # 56-80%
    LOW = "low"             # 31-55%
    SEVERE = "severe"       # 0-30%


@dataclass(frozen=True)
class ScreeningQuestion:
    id: str
    text: str
    text_localized: str
    condition: str
    triage_risk: Optional[RiskLevel] = None
    triage_reason: str = ""

    @property
    def actions(self) -> Tuple[TriageAction, ...]:
        if self.triage_risk is RiskLevel.IMMINENT:
            return IMMINENT_ACTIONS
        if self.triage_risk is not None:
            return HIGH_ACTIONS
        return ()


SCREENING_QUESTIONS: Tuple[ScreeningQuestion, ...] = (
    ScreeningQuestion(
        id="sleep_wake_easily",
        text="Have you easily woken up from your sleep?",
        text_localized="Adakah anda mudah terjaga dari tidur?",
        condition="insomnia",
    ),
    ScreeningQuestion(
        id="thoughts_death_dying",
        text="Have you ever thought of death or dying recently?",
        text_localized="Pernahkah anda terfikir tentang kematian atau mati baru-baru ini?",
        condition="suicidal",
        triage_risk=RiskLevel.HIGH,
        triage_reason="User indicated thoughts of death or dying",
    ),
    ScreeningQuestion(
        id="hearing_voices",
        text="Do you frequently hear voices which no one else could hear them?",
        text_localized="Adakah anda kerap mendengar suara yang orang lain tidak dapat dengar?",
        condition="psychosis",
        triage_risk=RiskLevel.HIGH,
        triage_reason="User indicated hearing voices others cannot hear",
    ),
    ScreeningQuestion(
        id="sexual_fantasy",
        text="Have you been spending a lot of time fantasizing and fulfilling your sexual "
             "fantasy, urges and planning to involve in sexual related behaviour?",
        text_localized="Adakah anda menghabiskan banyak masa untuk berkhayal dan memenuhi "
                       "fantasi seksual, desakan dan merancang untuk terlibat dalam tingkah "
                       "laku berkaitan seksual?",
        condition="sexual_addiction",
    ),
    ScreeningQuestion(
        id="extraordinary_powers",
        text="Do you believe yourself to have extraordinary, gifts and power?",
        text_localized="Adakah anda percaya diri anda mempunyai bakat dan kuasa luar biasa?",
        condition="psychosis",
        triage_risk=RiskLevel.HIGH,
        triage_reason="User indicated belief in extraordinary powers",
    ),
    ScreeningQuestion(
        id="ending_life",
        text="Have you ever thought about ending your life?",
        text_localized="Pernahkah anda terfikir untuk menamatkan nyawa anda?",
        condition="suicidal",
        triage_risk=RiskLevel.IMMINENT,
        triage_reason="User indicated thoughts of ending their life",
    ),
    ScreeningQuestion(
        id="loss_interest",
        text="Have you lost interest or pleasure in doing things you used to enjoy?",
        text_localized="Adakah anda kehilangan minat atau keseronokan dalam melakukan perkara "
                       "yang anda biasa nikmati?",
        condition="depression",
    ),
    ScreeningQuestion(
        id="excessive_worry",
        text="Do you feel excessive worry or anxiety that is difficult to control?",
        text_localized="Adakah anda berasa bimbang atau cemas yang berlebihan yang sukar dikawal?",
        condition="anxiety",
    ),
    ScreeningQuestion(
        id="repetitive_thoughts",
        text="Do you have repetitive, unwanted thoughts that cause you distress?",
        text_localized="Adakah anda mempunyai fikiran berulang yang tidak diingini yang "
                       "menyebabkan anda tertekan?",
        condition="ocd",
    ),
    ScreeningQuestion(
        id="traumatic_memories",
        text="Do you experience distressing memories or flashbacks of a traumatic event?",
        text_localized="Adakah anda mengalami kenangan atau imbasan kembali yang menyedihkan "
                       "tentang peristiwa traumatik?",
        condition="ptsd",
    ),
    ScreeningQuestion(
        id="relationship_conflict",
        text="Are you experiencing significant conflict or distress in your marriage or "
             "relationship?",
        text_localized="Adakah anda mengalami konflik atau tekanan yang ketara dalam "
                       "perkahwinan atau hubungan anda?",
        condition="marital_distress",
    ),
)

_QUESTIONS_BY_ID: Dict[str, ScreeningQuestion] = {q.id: q for q in SCREENING_QUESTIONS}

SUICIDAL_IDEATION_QUESTIONS = frozenset({"ending_life", "thoughts_death_dying"})
PSYCHOSIS_QUESTIONS = frozenset({"hearing_voices", "extraordinary_powers"})

# 8 statements, Likert 0 (strongly disagree) - 4 (strongly agree)
SOCIAL_FUNCTION_QUESTION_IDS: Tuple[str, ...] = (
    "personal_hygiene",
    "emotion_management",
    "relationships",
    "social_activities",
    "work_focus",
    "daily_motivation",
    "community_involvement",
    "life_meaning",
)
SOCIAL_FUNCTION_MAX_VALUE = 4


@dataclass(frozen=True)
class TriageResult:
    """Outcome of evaluating the screening answers."""
    risk_level: RiskLevel
    actions: Tuple[TriageAction, ...] = field(default_factory=tuple)
    trigger_questions: Tuple[str, ...] = field(default_factory=tuple)
    highest_risk_reason: Optional[str] = None
    has_suicidal_ideation: bool = False
    has_psychosis_indicators: bool = False

    @property
    def should_block_chat(self) -> bool:
        return TriageAction.BLOCK_CHAT in self.actions

    @property
    def should_show_emergency(self) -> bool:
        return TriageAction.SHOW_EMERGENCY_MODAL in self.actions

    @property
    def should_redirect_emergency(self) -> bool:
        return TriageAction.REDIRECT_EMERGENCY in self.actions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "riskLevel": self.risk_level.value,
            "actions": [a.value for a in self.actions],
            "triggerQuestions": list(self.trigger_questions),
            "highestRiskReason": self.highest_risk_reason,
            "shouldBlockChat": self.should_block_chat,
            "shouldShowEmergency": self.should_show_emergency,
            "shouldRedirectEmergency": self.should_redirect_emergency,
            "hasSuicidalIdeation": self.has_suicidal_ideation,
            "hasPsychosisIndicators": self.has_psychosis_indicators,
        }


def evaluate_triage(answers: Mapping[str, bool]) -> TriageResult:
    """Evaluate triage rules against the screening answers so far.

    Partial answer sets are expected (this runs per answer). The highest
    triggered risk wins; ties keep the first reason in question order.

    Args:
        answers: Screening question id -> yes/no

    Returns:
        TriageResult, LOW when no rule is triggered
    """
    risk_level = RiskLevel.LOW
    reason: Optional[str] = None
    actions: List[TriageAction] = []
    triggered: List[str] = []

    for question in SCREENING_QUESTIONS:
        if question.triage_risk is None or answers.get(question.id) is not True:
            continue
        triggered.append(question.id)
        for action in question.actions:
            if action not in actions:
                actions.append(action)
        if question.triage_risk.rank > risk_level.rank:
            risk_level = question.triage_risk
            reason = question.triage_reason

    result = TriageResult(
        risk_level=risk_level,
        actions=tuple(actions),
        trigger_questions=tuple(triggered),
        highest_risk_reason=reason,
        has_suicidal_ideation=any(q in SUICIDAL_IDEATION_QUESTIONS for q in triggered),
        has_psychosis_indicators=any(q in PSYCHOSIS_QUESTIONS for q in triggered),
    )

    if triggered:
        log = logger.critical if risk_level is RiskLevel.IMMINENT else logger.warning
        log(
            "TRIAGE_RULE_TRIGGERED",
            extra={
                "risk_level": risk_level.value,
                "trigger_questions": list(triggered),
                "block_chat": result.should_block_chat,
            }
        )

    return result


def detect_conditions(answers: Mapping[str, bool]) -> List[str]:
    """Instrument types suggested by the "yes" screening answers, in question order."""
    conditions: List[str] = []
    for question in SCREENING_QUESTIONS:
        if answers.get(question.id) is True and question.condition not in conditions:
            conditions.append(question.condition)
    return conditions


def score_social_function(answers: Mapping[str, int]) -> int:
    """Sum the 8 social function answers (0-32).

    Raises:
        IncompleteAnswersError: a statement was not answered
        InvalidAnswerError: unknown id or value outside 0-4
    """
    missing = set(SOCIAL_FUNCTION_QUESTION_IDS) - set(answers)
    if missing:
        raise IncompleteAnswersError("social_function", missing)

    total = 0
    for question_id, value in answers.items():
        if question_id not in SOCIAL_FUNCTION_QUESTION_IDS:
            raise InvalidAnswerError(f"Unknown social function question: {question_id}")
        if isinstance(value, bool) or not isinstance(value, int) \
                or not 0 <= value <= SOCIAL_FUNCTION_MAX_VALUE:
            raise InvalidAnswerError(f"Answer {value!r} for {question_id} is outside 0-4")
        total += value
    return total


def calculate_functional_level(score: int) -> FunctionalLevel:
    """Map a social function score (0-32) to a functional level."""
    if score >= 26:
        return FunctionalLevel.HIGH
    if score >= 18:
        return FunctionalLevel.MODERATE
    if score >= 10:
        return FunctionalLevel.LOW
    return FunctionalLevel.SEVERE


def get_overall_risk_level(
    triage_level: RiskLevel,
    functional_level: FunctionalLevel,
) -> RiskLevel:
    """Combine screening triage with social functioning.

    Triage high/imminent always wins. Poor functioning can raise a lower
    triage level by one step but never lowers it.
    """
    if triage_level in (RiskLevel.IMMINENT, RiskLevel.HIGH):
        return triage_level

    if functional_level is FunctionalLevel.SEVERE:
        return RiskLevel.HIGH if triage_level is RiskLevel.MODERATE else RiskLevel.MODERATE

    if functional_level is FunctionalLevel.LOW:
        return RiskLevel.MODERATE if triage_level in (RiskLevel.LOW, RiskLevel.NONE) else triage_level

    return triage_level


def get_screening_question(question_id: str) -> Optional[ScreeningQuestion]:
    return _QUESTIONS_BY_ID.get(question_id)
