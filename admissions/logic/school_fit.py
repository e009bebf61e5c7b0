"""
School-Fit Scorer

Scores a student's test scores and GPA against a school's statistical ranges,
producing a per-metric match classification, a 0-100 fit score and a tier.
All logic is deterministic - no AI/ML components.
"""

from typing import Optional, Tuple

from .contracts import StudentSnapshot, SchoolStatistics, MatchResult
from .constants import (
    SchoolTier,
    MetricMatch,
    NEUTRAL_FIT_SCORE,
    MIN_FIT_SCORE,
    MAX_FIT_SCORE,
    TEST_ABOVE_POINTS,
    TEST_WITHIN_POINTS,
    TEST_BELOW_POINTS,
    GPA_BAND_BELOW,
    GPA_BAND_ABOVE,
    GPA_SCALE_MAX,
    GPA_ABOVE_POINTS,
    GPA_WITHIN_POINTS,
    GPA_BELOW_POINTS,
    SELECTIVE_RATE_THRESHOLD,
    SELECTIVE_RATE_PENALTY,
    ACCESSIBLE_RATE_THRESHOLD,
    ACCESSIBLE_RATE_BONUS,
    SAFETY_MIN_SCORE,
    TARGET_MIN_SCORE,
)


def match_test_score(
    student_score: Optional[int],
    range_25: Optional[int],
    range_75: Optional[int],
) -> Tuple[MetricMatch, int]:
    """
    Classify a SAT or ACT score against the school's 25th-75th percentile range.

    Returns:
        (classification, point adjustment)
    """
    if not student_score or not range_25 or not range_75:
        return MetricMatch.UNKNOWN, 0

    if student_score >= range_75:
        return MetricMatch.ABOVE, TEST_ABOVE_POINTS
    if student_score >= range_25:
        return MetricMatch.WITHIN, TEST_WITHIN_POINTS
    return MetricMatch.BELOW, TEST_BELOW_POINTS


def match_gpa(
    student_gpa: Optional[float],
    school_avg_gpa: Optional[float],
) -> Tuple[MetricMatch, int]:
    """
    Classify a GPA against a tolerance band around the school average.

    The band is [avg - 0.3, min(avg + 0.2, 4.0)].
    """
    if not student_gpa or not school_avg_gpa:
        return MetricMatch.UNKNOWN, 0

    # GPAs are reported to two decimals; 3.7 + 0.2 must compare equal to 3.9
    threshold_high = round(min(school_avg_gpa + GPA_BAND_ABOVE, GPA_SCALE_MAX), 2)
    threshold_low = round(school_avg_gpa - GPA_BAND_BELOW, 2)

    if student_gpa >= threshold_high:
        return MetricMatch.ABOVE, GPA_ABOVE_POINTS
    if student_gpa >= threshold_low:
        return MetricMatch.WITHIN, GPA_WITHIN_POINTS
    return MetricMatch.BELOW, GPA_BELOW_POINTS


def acceptance_rate_adjustment(acceptance_rate: Optional[float]) -> int:
    """Selectivity penalty below 10%, accessibility bonus above 50%."""
    if not acceptance_rate:
        return 0
    if acceptance_rate < SELECTIVE_RATE_THRESHOLD:
        return SELECTIVE_RATE_PENALTY
    if acceptance_rate > ACCESSIBLE_RATE_THRESHOLD:
        return ACCESSIBLE_RATE_BONUS
    return 0


def tier_for_score(fit_score: int) -> SchoolTier:
    """
    Map a clamped fit score to a tier.

    NOTE: a high fit score yields "safety" and a low one "reach".
    """
    if fit_score >= SAFETY_MIN_SCORE:
        return SchoolTier.SAFETY
    if fit_score >= TARGET_MIN_SCORE:
        return SchoolTier.TARGET
    return SchoolTier.REACH


def score(student: StudentSnapshot, school: SchoolStatistics) -> MatchResult:
    """
    Score how well a student's numbers fit a school.

    Args:
        student: Student snapshot (best SAT, best ACT, unweighted GPA)
        school: School statistics

    Returns:
        MatchResult with tier, per-metric matches and overall fit in [0, 100]
    """
    fit_score = NEUTRAL_FIT_SCORE

    sat_match, sat_points = match_test_score(student.sat_total, school.sat_range_25, school.sat_range_75)
    act_match, act_points = match_test_score(student.act_composite, school.act_range_25, school.act_range_75)
    gpa_match, gpa_points = match_gpa(student.gpa_unweighted, school.avg_gpa_unweighted)

    fit_score += sat_points + act_points + gpa_points
    fit_score += acceptance_rate_adjustment(school.acceptance_rate)

    fit_score = max(MIN_FIT_SCORE, min(MAX_FIT_SCORE, fit_score))

    return MatchResult(
        tier=tier_for_score(fit_score),
        sat_match=sat_match,
        act_match=act_match,
        gpa_match=gpa_match,
        overall_fit=fit_score,
    )
