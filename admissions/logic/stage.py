"""
Student Stage

Places a student in the admissions calendar (grade + season) so generators
and prompts can tailor advice, e.g. no summer programs for seniors in spring.
"""

from datetime import date
from typing import Dict, Optional

from .contracts import StudentStage
from .eligibility import grade_to_number

GRADE_LABELS: Dict[int, str] = {
    9: "freshman",
    10: "sophomore",
    11: "junior",
    12: "senior",
}

SEASON_BY_MONTH: Dict[int, str] = {
    1: "winter", 2: "winter", 3: "spring", 4: "spring", 5: "spring", 6: "summer",
    7: "summer", 8: "fall", 9: "fall", 10: "fall", 11: "fall", 12: "winter",
}

STAGE_GUIDANCE: Dict[str, tuple] = {
    "freshman": (
        "Focus on building strong academic habits and exploring interests.",
        ["grades", "exploring activities", "summer enrichment"],
    ),
    "sophomore": (
        "Deepen involvement in a few activities and start test preparation.",
        ["grades", "activity depth", "PSAT practice", "summer programs"],
    ),
    "junior": (
        "The most important academic year; testing and the college list take shape.",
        ["grades", "SAT/ACT", "college list", "leadership", "summer programs"],
    ),
    "senior": (
        "Applications, essays and final decisions.",
        ["applications", "essays", "deadlines", "financial aid"],
    ),
}

# School year rolls over in August
SCHOOL_YEAR_START_MONTH = 8


def _grade_from_graduation_year(graduation_year: int, today: date) -> int:
    school_year_end = today.year + 1 if today.month >= SCHOOL_YEAR_START_MONTH else today.year
    return max(9, min(12, 12 - (graduation_year - school_year_end)))


def get_student_stage(
    graduation_year: Optional[int] = None,
    grade: Optional[str] = None,
    today: Optional[date] = None,
) -> StudentStage:
    """
    Work out the student's stage.

    A stored grade wins over one derived from the graduation year;
    with neither the student is treated as a junior.
    """
    today = today or date.today()

    if grade:
        grade_number = grade_to_number(grade)
    elif graduation_year:
        grade_number = _grade_from_graduation_year(graduation_year, today)
    else:
        grade_number = grade_to_number(None)

    label = GRADE_LABELS[grade_number]
    season = SEASON_BY_MONTH[today.month]
    description, priorities = STAGE_GUIDANCE[label]

    # Next summer is in the following calendar year from August on
    target_year = today.year + 1 if today.month >= SCHOOL_YEAR_START_MONTH else today.year

    return StudentStage(
        stage=f"{label}_{season}",
        grade=label,
        season=season,
        description=description,
        priorities=list(priorities),
        target_program_year=target_year,
    )


def accepts_program_recommendations(stage: StudentStage) -> bool:
    """Too late for summer programs once a senior reaches spring."""
    return stage.stage != "senior_spring"