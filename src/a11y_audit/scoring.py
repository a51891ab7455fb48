"""Penalty-based accessibility score."""

from typing import Mapping, Union

from .models import Counts, ScoreBreakdown, ScoreResult


ERROR_WEIGHT, ERROR_CAP = 10, 60
WARNING_WEIGHT, WARNING_CAP = 3, 25
NOTICE_WEIGHT, NOTICE_CAP = 1, 15

# (minimum score, grade), highest first
GRADES = (
    (95, "A+"),
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
    (0, "F"),
)

GRADE_COLORS = {
    "A+": "#059669",
    "A": "#10b981",
    "B": "#84cc16",
    "C": "#f59e0b",
    "D": "#f97316",
    "F": "#dc2626",
}

ASSESSMENTS = (
    (90, "Hervorragend! Ihre Website ist weitgehend barrierefrei."),
    (80, "Sehr gut. Es wurden nur wenige Barrieren gefunden."),
    (70, "Gut. Einige Verbesserungen sind noch nötig."),
    (60, "Befriedigend. Mehrere Barrieren sollten behoben werden."),
    (40, "Ausbaufähig. Deutliche Barrieren erschweren die Nutzung."),
    (0, "Kritisch. Dringender Handlungsbedarf bei der Barrierefreiheit."),
)


def _penalty(count: int, weight: int, cap: int) -> int:
    return min(cap, max(0, int(count or 0)) * weight)


def grade_for(score: int) -> str:
    for minimum, grade in GRADES:
        if score >= minimum:
            return grade
    return "F"


def assessment_for(score: int) -> str:
    for minimum, text in ASSESSMENTS:
        if score >= minimum:
            return text
    return ASSESSMENTS[-1][1]


def score(counts: Union[Counts, Mapping[str, int]]) -> ScoreResult:
    """Turn raw error/warning/notice counts into a 0-100 score and grade.

    Each penalty is capped on its own before summing, so the total penalty
    never exceeds 100:

    - errors: 10 points each, at most 60
    - warnings: 3 points each, at most 25
    - notices: 1 point each, at most 15
    """
    if not isinstance(counts, Counts):
        counts = Counts(
            errors=counts.get("errors", 0),
            warnings=counts.get("warnings", 0),
            notices=counts.get("notices", 0),
        )

    breakdown = ScoreBreakdown(
        error_penalty=_penalty(counts.errors, ERROR_WEIGHT, ERROR_CAP),
        warning_penalty=_penalty(counts.warnings, WARNING_WEIGHT, WARNING_CAP),
        notice_penalty=_penalty(counts.notices, NOTICE_WEIGHT, NOTICE_CAP),
    )
    value = max(0, 100 - breakdown.total_penalty)
    grade = grade_for(value)

    return ScoreResult(
        score=value,
        grade=grade,
        grade_color=GRADE_COLORS[grade],
        breakdown=breakdown,
        assessment=assessment_for(value),
    )
