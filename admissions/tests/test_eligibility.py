"""
Tests for the program eligibility evaluator.
"""

from datetime import date

from admissions.logic.constants import EligibilityStatus
from admissions.logic.eligibility import (
    evaluate,
    grade_to_number,
    age_on,
    check_citizenship,
    check_required_courses,
)


def _factor(verdict, rule):
    return next(f for f in verdict.factors if f.rule == rule)


def test_no_requirements_is_eligible(make_student, make_program):
    verdict = evaluate(make_student(grade="10th"), make_program())

    assert verdict.overall == EligibilityStatus.ELIGIBLE
    assert verdict.summary == "Eligible"
    assert {f.rule for f in verdict.factors} == {
        "grade", "age", "gpa", "citizenship", "required_courses", "notes",
    }


def test_grade_below_window_is_ineligible(make_student, make_program):
    verdict = evaluate(make_student(grade="10th"), make_program(min_grade=11, max_grade=12))

    assert verdict.overall == EligibilityStatus.INELIGIBLE
    assert "11" in verdict.summary


def test_grade_single_bounds(make_student, make_program):
    senior = make_student(grade="12th")
    assert evaluate(senior, make_program(min_grade=10)).overall == EligibilityStatus.ELIGIBLE
    assert evaluate(senior, make_program(max_grade=11)).overall == EligibilityStatus.INELIGIBLE


def test_grade_to_number_defaults_to_junior():
    assert grade_to_number("9th") == 9
    assert grade_to_number("Senior") == 12
    assert grade_to_number("10") == 10
    assert grade_to_number("gap year") == 11
    assert grade_to_number(None) == 11


def test_age_on_counts_birthdays():
    born = date(2009, 7, 15)
    assert age_on(born, date(2026, 7, 14)) == 16
    assert age_on(born, date(2026, 7, 15)) == 17


def test_age_uses_program_start_date(make_student, make_program):
    student = make_student(birth_date=date(2010, 8, 1))
    program = make_program(min_age=16, start_date=date(2026, 7, 1))

    # 15 on the start date, although 16 by the time of evaluation
    verdict = evaluate(student, program, today=date(2026, 10, 17))
    assert _factor(verdict, "age").status == EligibilityStatus.INELIGIBLE


def test_age_falls_back_to_today(make_student, make_program):
    student = make_student(birth_date=date(2010, 8, 1))
    program = make_program(min_age=16)

    verdict = evaluate(student, program, today=date(2026, 10, 17))
    assert _factor(verdict, "age").status == EligibilityStatus.ELIGIBLE


def test_missing_birth_date_with_age_bound_is_unknown(make_student, make_program):
    verdict = evaluate(make_student(), make_program(max_age=18))

    assert verdict.overall == EligibilityStatus.UNKNOWN
    assert _factor(verdict, "age").status == EligibilityStatus.UNKNOWN


def test_gpa_below_minimum_is_ineligible(make_student, make_program):
    verdict = evaluate(make_student(gpa_unweighted=3.2), make_program(min_gpa_unweighted=3.5))
    assert verdict.overall == EligibilityStatus.INELIGIBLE


def test_missing_gpa_with_minimum_is_unknown(make_student, make_program):
    verdict = evaluate(make_student(gpa_unweighted=3.9), make_program(min_gpa_weighted=4.0))
    assert _factor(verdict, "gpa").status == EligibilityStatus.UNKNOWN


def test_citizenship_matrix(make_student, make_program):
    cases = [
        ("us_only", "us_citizen", EligibilityStatus.ELIGIBLE),
        ("us_only", "us_permanent_resident", EligibilityStatus.CHECK_REQUIRED),
        ("us_permanent_resident", "us_permanent_resident", EligibilityStatus.ELIGIBLE),
        ("us_permanent_resident", "international", EligibilityStatus.CHECK_REQUIRED),
        ("us_only", None, EligibilityStatus.CHECK_REQUIRED),
        ("international_ok", None, EligibilityStatus.ELIGIBLE),
        (None, "international", EligibilityStatus.ELIGIBLE),
    ]
    for restriction, residency, expected in cases:
        factor = check_citizenship(
            make_student(residency_status=residency),
            make_program(citizenship=restriction),
        )
        assert factor.status == expected, (restriction, residency)


def test_required_courses_match_substrings_of_taken_courses(make_student, make_program):
    student = make_student(courses=[
        {"name": "AP Calculus BC", "status": "completed"},
        {"name": "Honors Chemistry", "status": "in_progress"},
        {"name": "AP Physics C", "status": "planned"},
    ])

    met = check_required_courses(student, make_program(required_courses=["calculus", "Chemistry"]))
    assert met.status == EligibilityStatus.ELIGIBLE

    # Planned courses do not count
    missing = check_required_courses(student, make_program(required_courses=["Physics"]))
    assert missing.status == EligibilityStatus.CHECK_REQUIRED
    assert "Physics" in missing.detail


def test_notes_force_check_required(make_student, make_program):
    student = make_student(
        grade="11th",
        birth_date=date(2009, 5, 1),
        residency_status="us_citizen",
        gpa_unweighted=3.9,
    )
    program = make_program(
        min_grade=10,
        max_grade=12,
        citizenship="us_only",
        eligibility_notes="Requires a counselor nomination",
    )

    verdict = evaluate(student, program, today=date(2026, 1, 1))
    assert verdict.overall == EligibilityStatus.CHECK_REQUIRED
    assert verdict.summary == "Requires a counselor nomination"


def test_most_restrictive_factor_wins(make_student, make_program):
    program = make_program(min_grade=12, eligibility_notes="Essay required", min_age=14)
    verdict = evaluate(make_student(grade="11th"), program)

    assert verdict.overall == EligibilityStatus.INELIGIBLE
    # Every flagged factor is listed, most severe first
    details = verdict.summary.split("; ")
    assert details[0].startswith("Requires grade 12")
    assert details[1] == "Essay required"
    assert len(details) == 3


def test_check_required_outranks_unknown(make_student, make_program):
    verdict = evaluate(make_student(), make_program(max_age=18, citizenship="us_only"))
    assert verdict.overall == EligibilityStatus.CHECK_REQUIRED


def test_evaluation_is_deterministic(make_student, make_program):
    student = make_student(grade="10th", gpa_unweighted=3.4, residency_status="international")
    program = make_program(min_grade=9, citizenship="us_only", min_gpa_unweighted=3.0)

    assert evaluate(student, program) == evaluate(student, program)
