"""
Eligibility Evaluator

Checks a student snapshot against a summer program's structural requirements.
Each rule produces a factor; the overall verdict is the most restrictive one:
ineligible > check_required > unknown > eligible.
All logic is deterministic - no AI/ML components.
"""

from datetime import date
from typing import List, Optional

from .contracts import StudentSnapshot, ProgramConstraint, EligibilityFactor, EligibilityVerdict
from .constants import (
    EligibilityStatus,
    Citizenship,
    ELIGIBILITY_SEVERITY,
    GRADE_NUMBER_MAP,
    DEFAULT_GRADE_NUMBER,
    CITIZENSHIP_ACCEPTED_RESIDENCY,
    COUNTED_COURSE_STATUSES,
)


def grade_to_number(grade: Optional[str]) -> int:
    """
    Map a grade label ("10th", "junior", "11") to 9-12.

    Anything unparseable is treated as a junior (11).
    """
    if grade is None:
        return DEFAULT_GRADE_NUMBER
    text = str(grade).strip().lower()
    if text in GRADE_NUMBER_MAP:
        return GRADE_NUMBER_MAP[text]
    if text.isdigit() and 9 <= int(text) <= 12:
        return int(text)
    return DEFAULT_GRADE_NUMBER


def age_on(birth_date: date, reference: date) -> int:
    """Age in whole years on the reference date."""
    had_birthday = (reference.month, reference.day) >= (birth_date.month, birth_date.day)
    return reference.year - birth_date.year - (0 if had_birthday else 1)


def _check_window(
    rule: str,
    label: str,
    value: Optional[int],
    low: Optional[int],
    high: Optional[int],
) -> EligibilityFactor:
    """Shared bound logic for grade and age windows."""
    if low is None and high is None:
        return EligibilityFactor(rule=rule, status=EligibilityStatus.ELIGIBLE, detail=f"No {label} restriction")

    if value is None:
        return EligibilityFactor(
            rule=rule,
            status=EligibilityStatus.UNKNOWN,
            detail=f"Your {label} is not on file",
        )

    if low is not None and value < low:
        return EligibilityFactor(
            rule=rule,
            status=EligibilityStatus.INELIGIBLE,
            detail=f"Requires {label} {low} or above (you: {value})",
        )
    if high is not None and value > high:
        return EligibilityFactor(
            rule=rule,
            status=EligibilityStatus.INELIGIBLE,
            detail=f"Requires {label} {high} or below (you: {value})",
        )

    return EligibilityFactor(rule=rule, status=EligibilityStatus.ELIGIBLE, detail=f"{label.capitalize()} requirement met")


def check_grade(student: StudentSnapshot, program: ProgramConstraint) -> EligibilityFactor:
    return _check_window("grade", "grade", grade_to_number(student.grade), program.min_grade, program.max_grade)


def check_age(
    student: StudentSnapshot,
    program: ProgramConstraint,
    today: Optional[date] = None,
) -> EligibilityFactor:
    """Age at the program start date (or today when the start date is unknown)."""
    reference = program.start_date or today or date.today()
    age = age_on(student.birth_date, reference) if student.birth_date else None
    return _check_window("age", "age", age, program.min_age, program.max_age)


def check_gpa(student: StudentSnapshot, program: ProgramConstraint) -> EligibilityFactor:
    """
    Compare unweighted/weighted GPA to the program minimums.

    Missing student GPA cannot disprove eligibility, so it yields unknown.
    """
    requirements = [
        ("unweighted", program.min_gpa_unweighted, student.gpa_unweighted),
        ("weighted", program.min_gpa_weighted, student.gpa_weighted),
    ]
    requirements = [r for r in requirements if r[1] is not None]

    if not requirements:
        return EligibilityFactor(rule="gpa", status=EligibilityStatus.ELIGIBLE, detail="No GPA minimum")

    failures = []
    missing = []
    for kind, minimum, actual in requirements:
        if actual is None:
            missing.append(kind)
        elif actual < minimum:
            failures.append(f"{kind} GPA {minimum:.2f} minimum (you: {actual:.2f})")

    if failures:
        return EligibilityFactor(
            rule="gpa",
            status=EligibilityStatus.INELIGIBLE,
            detail="Requires " + ", ".join(failures),
        )
    if missing:
        return EligibilityFactor(
            rule="gpa",
            status=EligibilityStatus.UNKNOWN,
            detail=f"Add your {' and '.join(missing)} GPA to confirm the GPA minimum",
        )
    return EligibilityFactor(rule="gpa", status=EligibilityStatus.ELIGIBLE, detail="GPA minimum met")


def check_citizenship(student: StudentSnapshot, program: ProgramConstraint) -> EligibilityFactor:
    """
    Match the citizenship restriction against residency status.

    Residency data is often incomplete, so a mismatch is never ineligible.
    """
    restriction = (program.citizenship or "").strip().lower()
    if not restriction or restriction == Citizenship.INTERNATIONAL_OK:
        return EligibilityFactor(rule="citizenship", status=EligibilityStatus.ELIGIBLE, detail="Open to all")

    accepted = CITIZENSHIP_ACCEPTED_RESIDENCY.get(restriction, ())
    residency = (student.residency_status or "").strip().lower()
    if residency and residency in accepted:
        return EligibilityFactor(rule="citizenship", status=EligibilityStatus.ELIGIBLE, detail="Citizenship requirement met")

    readable = restriction.replace("_", " ")
    return EligibilityFactor(
        rule="citizenship",
        status=EligibilityStatus.CHECK_REQUIRED,
        detail=f"Citizenship restriction ({readable}) - verify your residency status",
    )


def check_required_courses(student: StudentSnapshot, program: ProgramConstraint) -> EligibilityFactor:
    """Every required course must appear (substring, case-insensitive) in a completed/in-progress course."""
    required = [c for c in program.required_courses if c and c.strip()]
    if not required:
        return EligibilityFactor(rule="required_courses", status=EligibilityStatus.ELIGIBLE, detail="No required courses")

    taken = [
        course.name.lower()
        for course in student.courses
        if (course.status or "").lower() in COUNTED_COURSE_STATUSES
    ]
    missing = [req for req in required if not any(req.strip().lower() in name for name in taken)]

    if missing:
        return EligibilityFactor(
            rule="required_courses",
            status=EligibilityStatus.CHECK_REQUIRED,
            detail=f"Required courses not found on your profile: {', '.join(missing)}",
        )
    return EligibilityFactor(rule="required_courses", status=EligibilityStatus.ELIGIBLE, detail="Required courses on file")


def check_notes(program: ProgramConstraint) -> EligibilityFactor:
    """Free-text notes encode conditions we cannot check structurally."""
    notes = (program.eligibility_notes or "").strip()
    if notes:
        return EligibilityFactor(rule="notes", status=EligibilityStatus.CHECK_REQUIRED, detail=notes)
    return EligibilityFactor(rule="notes", status=EligibilityStatus.ELIGIBLE, detail="")


def severity(status) -> int:
    """Severity rank of a status given as an enum member or its string value."""
    return ELIGIBILITY_SEVERITY[getattr(status, "value", status)]


def combine_factors(factors: List[EligibilityFactor]) -> EligibilityVerdict:
    """Most restrictive factor wins; summary lists every factor that is not eligible."""
    if not factors:
        return EligibilityVerdict(overall=EligibilityStatus.ELIGIBLE, summary="Eligible", factors=[])

    overall = max(factors, key=lambda f: severity(f.status)).status

    flagged = sorted(
        (f for f in factors if f.status != EligibilityStatus.ELIGIBLE),
        key=lambda f: severity(f.status),
        reverse=True,
    )
    summary = "; ".join(f.detail for f in flagged if f.detail) or "Eligible"

    return EligibilityVerdict(overall=overall, summary=summary, factors=factors)


def evaluate(
    student: StudentSnapshot,
    program: ProgramConstraint,
    today: Optional[date] = None,
) -> EligibilityVerdict:
    """
    Evaluate a student's eligibility for a program.

    Args:
        student: Student snapshot
        program: Program requirements
        today: Age reference when the program has no start date

    Returns:
        EligibilityVerdict with the overall status, a summary and per-rule factors
    """
    factors = [
        check_grade(student, program),
        check_age(student, program, today=today),
        check_gpa(student, program),
        check_citizenship(student, program),
        check_required_courses(student, program),
        check_notes(program),
    ]
    return combine_factors(factors)
