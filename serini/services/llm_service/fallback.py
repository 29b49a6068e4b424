"""Deterministic fallback insight generator.

Used whenever the model path cannot be trusted: short-circuited crisis
requests, retrieval or generation outages, and schema failures. The
templates branch only on the severity bucket and never touch the network.
"""
import logging
from typing import List, Optional

from serini.shared.models import (
    CopingStrategy,
    FindingKind,
    KeyFinding,
    NextStep,
    Priority,
    Recommendation,
    RiskFactor,
    RiskFactorLevel,
    RiskLevel,
    SeverityBucket,
    StructuredInsight,
    Urgency,
)
from serini.services.assessment_service.instruments import display_name
from .validator import HOTLINE_RECOMMENDATION

logger = logging.getLogger(__name__)


_COPING_STRATEGIES = [
    CopingStrategy(
        title="Deep Breathing",
        title_localized="Pernafasan Dalam",
        description="Breathe in slowly for 4 counts, hold for 4, and breathe out for 6. Repeat for two minutes.",
        description_localized="Tarik nafas perlahan selama 4 kiraan, tahan 4 kiraan, hembus 6 kiraan. Ulang selama dua minit.",
    ),
    CopingStrategy(
        title="Stay Connected",
        title_localized="Kekal Berhubung",
        description="Talk to someone you trust about how you have been feeling this week.",
        description_localized="Berbual dengan seseorang yang anda percayai tentang perasaan anda minggu ini.",
    ),
    CopingStrategy(
        title="Keep a Routine",
        title_localized="Kekalkan Rutin",
        description="Regular sleep, meals and light physical activity help steady your mood.",
        description_localized="Tidur, makan dan aktiviti fizikal ringan yang teratur membantu menstabilkan emosi anda.",
    ),
]

_RISK_FACTORS = {
    SeverityBucket.MODERATE: [
        RiskFactor(
            text="Your responses suggest symptoms that may be affecting daily life.",
            text_localized="Jawapan anda menunjukkan simptom yang mungkin menjejaskan kehidupan harian.",
            level=RiskFactorLevel.MODERATE,
        ),
    ],
    SeverityBucket.SEVERE: [
        RiskFactor(
            text="Your responses suggest significant distress that needs professional attention.",
            text_localized="Jawapan anda menunjukkan tekanan yang ketara dan memerlukan perhatian profesional.",
            level=RiskFactorLevel.HIGH,
        ),
        RiskFactor(
            text="Symptoms at this level can make everyday tasks much harder.",
            text_localized="Simptom pada tahap ini boleh menyukarkan tugasan harian.",
            level=RiskFactorLevel.HIGH,
        ),
    ],
}


def _summary(name: str, name_localized: str, score: int, max_score: Optional[int], severity: str):
    score_text = f"{score}/{max_score}" if max_score else str(score)
    return (
        f"Your {name} screening results suggest a {severity.lower()} level "
        f"(score {score_text}). This is a screening, not a diagnosis.",
        f"Keputusan saringan {name_localized} anda menunjukkan tahap {severity.lower()} "
        f"(skor {score_text}). Ini adalah saringan, bukan diagnosis.",
    )


def _key_findings(bucket: SeverityBucket) -> List[KeyFinding]:
    if bucket is SeverityBucket.MILD:
        return [
            KeyFinding(
                text="Your results fall in a lower range on this screening.",
                text_localized="Keputusan anda berada dalam julat yang lebih rendah untuk saringan ini.",
                kind=FindingKind.POSITIVE,
            ),
        ]
    return [
        KeyFinding(
            text="Your results suggest symptoms worth discussing with a professional.",
            text_localized="Keputusan anda menunjukkan simptom yang wajar dibincangkan dengan profesional.",
            kind=FindingKind.CONCERN,
        ),
    ]


def _recommendations(bucket: SeverityBucket) -> List[Recommendation]:
    if bucket is SeverityBucket.SEVERE:
        return [
            HOTLINE_RECOMMENDATION,
            Recommendation(
                text="Arrange a consultation with a mental health professional as soon as possible.",
                text_localized="Atur konsultasi dengan profesional kesihatan mental secepat mungkin.",
                priority=Priority.HIGH,
            ),
        ]
    if bucket is SeverityBucket.MODERATE:
        return [
            Recommendation(
                text="Consider scheduling a consultation with a mental health professional.",
                text_localized="Pertimbangkan untuk menjadualkan konsultasi dengan profesional kesihatan mental.",
                priority=Priority.MEDIUM,
            ),
            Recommendation(
                text="Practice one coping exercise daily and note how you feel.",
                text_localized="Amalkan satu latihan daya tindak setiap hari dan catat perasaan anda.",
                priority=Priority.MEDIUM,
            ),
        ]
    return [
        Recommendation(
            text="Keep up healthy habits and check in with yourself regularly.",
            text_localized="Teruskan tabiat sihat dan sentiasa peka dengan perasaan anda.",
            priority=Priority.LOW,
        ),
    ]


def _next_steps(bucket: SeverityBucket, risk_level: RiskLevel) -> List[NextStep]:
    steps = []
    if risk_level.requires_short_circuit:
        steps.append(NextStep(
            action="Contact Talian Kasih (15999) or Befrienders KL (03-7956 8145) now. In an emergency, call 999.",
            action_localized="Hubungi Talian Kasih (15999) atau Befrienders KL (03-7956 8145) sekarang. Dalam kecemasan, hubungi 999.",
            urgency=Urgency.IMMEDIATE,
        ))

    if bucket is SeverityBucket.SEVERE:
        steps.append(NextStep(
            action="Book an appointment with a mental health professional this week.",
            action_localized="Buat temujanji dengan profesional kesihatan mental minggu ini.",
            urgency=Urgency.SOON,
        ))
    elif bucket is SeverityBucket.MODERATE:
        steps.append(NextStep(
            action="Talk to a counselor or doctor about your results.",
            action_localized="Bincangkan keputusan anda dengan kaunselor atau doktor.",
            urgency=Urgency.SOON,
        ))
    else:
        steps.append(NextStep(
            action="Retake this screening in a few weeks to track how you feel.",
            action_localized="Ambil semula saringan ini dalam beberapa minggu untuk memantau perasaan anda.",
            urgency=Urgency.WHEN_READY,
        ))
    return steps


def generate_fallback_insight(
    assessment_type: str,
    score: int,
    max_score: Optional[int],
    severity: str,
    risk_level: Optional[RiskLevel] = None,
) -> StructuredInsight:
    """Build a template insight that satisfies validate_insight().

    risk_factors are present only for moderate and severe buckets, and the
    hotline recommendation only for severe. A high or imminent risk_level
    adds an immediate next step pointing to crisis support.
    """
    bucket = SeverityBucket.from_label(severity)
    risk_level = risk_level or RiskLevel.NONE
    name, name_localized = display_name(assessment_type)
    summary, summary_localized = _summary(name, name_localized, score, max_score, severity)

    logger.info(
        "FALLBACK_INSIGHT_GENERATED",
        extra={
            "assessment_type": assessment_type,
            "severity_bucket": bucket.value,
            "risk_level": risk_level.value,
        }
    )

    return StructuredInsight(
        summary=summary,
        summary_localized=summary_localized,
        key_findings=_key_findings(bucket),
        recommendations=_recommendations(bucket),
        coping_strategies=list(_COPING_STRATEGIES),
        risk_factors=list(_RISK_FACTORS.get(bucket, [])),
        next_steps=_next_steps(bucket, risk_level),
        assessment_type=assessment_type,
        severity=severity,
        score=score,
    )
