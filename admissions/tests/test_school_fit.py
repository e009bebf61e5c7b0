"""
Tests for the school-fit scorer.
"""

from admissions.logic.constants import SchoolTier, MetricMatch
from admissions.logic.school_fit import (
    score,
    match_gpa,
    acceptance_rate_adjustment,
    tier_for_score,
)


def test_selective_school_scenario(make_student, make_school):
    student = make_student(sat_total=1520, gpa_unweighted=3.9)
    school = make_school(sat_range_25=1400, sat_range_75=1550, avg_gpa_unweighted=3.7, acceptance_rate=0.08)

    result = score(student, school)

    assert result.sat_match == MetricMatch.WITHIN
    assert result.act_match == MetricMatch.UNKNOWN
    assert result.gpa_match == MetricMatch.ABOVE
    assert result.overall_fit == 60
    assert result.tier == SchoolTier.TARGET


def test_no_data_is_neutral_and_degraded(make_student, make_school):
    result = score(make_student(), make_school())

    assert result.overall_fit == 50
    assert result.tier == SchoolTier.TARGET
    assert result.degraded


def test_zero_values_count_as_missing(make_student, make_school):
    student = make_student(sat_total=0, gpa_unweighted=0.0)
    school = make_school(sat_range_25=1200, sat_range_75=1400, avg_gpa_unweighted=3.5, acceptance_rate=0.0)

    result = score(student, school)
    assert result.sat_match == MetricMatch.UNKNOWN
    assert result.gpa_match == MetricMatch.UNKNOWN
    assert result.overall_fit == 50


def test_act_scored_independently(make_student, make_school):
    student = make_student(sat_total=1300, act_composite=35)
    school = make_school(sat_range_25=1400, sat_range_75=1500, act_range_25=31, act_range_75=34)

    result = score(student, school)
    assert result.sat_match == MetricMatch.BELOW
    assert result.act_match == MetricMatch.ABOVE
    assert result.overall_fit == 50 - 15 + 15


def test_gpa_band_is_capped_at_four():
    assert match_gpa(4.0, 3.95) == (MetricMatch.ABOVE, 10)
    assert match_gpa(3.65, 3.95) == (MetricMatch.WITHIN, 5)
    assert match_gpa(3.64, 3.95) == (MetricMatch.BELOW, -10)


def test_acceptance_rate_adjustment_thresholds():
    assert acceptance_rate_adjustment(0.05) == -10
    assert acceptance_rate_adjustment(0.10) == 0
    assert acceptance_rate_adjustment(0.50) == 0
    assert acceptance_rate_adjustment(0.51) == 5
    assert acceptance_rate_adjustment(None) == 0


def test_tier_thresholds_put_high_fit_in_safety():
    # High fit means an easy admit for this student
    assert tier_for_score(100) == SchoolTier.SAFETY
    assert tier_for_score(70) == SchoolTier.SAFETY
    assert tier_for_score(69) == SchoolTier.TARGET
    assert tier_for_score(40) == SchoolTier.TARGET
    assert tier_for_score(39) == SchoolTier.REACH
    assert tier_for_score(0) == SchoolTier.REACH


def test_fit_stays_within_bounds(make_student, make_school):
    strong = make_student(sat_total=1600, act_composite=36, gpa_unweighted=4.0)
    weak = make_student(sat_total=900, act_composite=15, gpa_unweighted=2.0)
    easy = make_school(sat_range_25=1000, sat_range_75=1200, act_range_25=20, act_range_75=24,
                       avg_gpa_unweighted=3.0, acceptance_rate=0.8)
    hard = make_school(sat_range_25=1500, sat_range_75=1580, act_range_25=34, act_range_75=36,
                       avg_gpa_unweighted=3.95, acceptance_rate=0.04)

    best = score(strong, easy)
    worst = score(weak, hard)

    assert best.overall_fit == 95
    assert best.tier == SchoolTier.SAFETY
    assert worst.overall_fit == 10
    assert worst.tier == SchoolTier.REACH
    for result in (best, worst):
        assert 0 <= result.overall_fit <= 100


def test_higher_sat_never_lowers_fit(make_student, make_school):
    school = make_school(sat_range_25=1300, sat_range_75=1450, avg_gpa_unweighted=3.6, acceptance_rate=0.3)

    fits = [score(make_student(sat_total=sat, gpa_unweighted=3.5), school).overall_fit
            for sat in range(1000, 1610, 10)]
    assert fits == sorted(fits)


def test_scoring_is_deterministic(make_student, make_school):
    student = make_student(sat_total=1450, act_composite=32, gpa_unweighted=3.8)
    school = make_school(sat_range_25=1400, sat_range_75=1520, act_range_25=31, act_range_75=34,
                         avg_gpa_unweighted=3.85, acceptance_rate=0.15)

    assert score(student, school) == score(student, school)


def test_higher_gpa_never_moves_gpa_match_backwards(make_student, make_school):
    order = [MetricMatch.BELOW, MetricMatch.WITHIN, MetricMatch.ABOVE]
    for avg in (3.2, 3.7, 3.9):
        school = make_school(avg_gpa_unweighted=avg)
        ranks = [
            order.index(score(make_student(gpa_unweighted=round(2.0 + step * 0.05, 2)), school).gpa_match)
            for step in range(41)
        ]
        assert ranks == sorted(ranks)
        assert ranks[0] == 0 and ranks[-1] == 2
