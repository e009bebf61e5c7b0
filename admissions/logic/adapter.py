"""
Data Adapter for the Admissions Engine

Reads student profiles, schools and summer programs from the database and
projects them into the read-only snapshots the scorers consume.

This is a pure READ + TRANSFORM layer:
- NO scoring logic
- NO ranking
- NO DB writes
- NO AI/LLM usage
"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence

from pydantic import ValidationError as SnapshotValidationError
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from admissions.models import (
    StudentProfile,
    StudentCourse,
    SatScore,
    ActScore,
    StudentSchool,
    StudentSummerProgram,
    School,
    SummerProgram,
)
from .contracts import CourseRecord, StudentSnapshot, SchoolStatistics, ProgramConstraint
from .errors import ProfileNotFound, ValidationError

logger = logging.getLogger(__name__)


# =============================================================================
# STUDENT
# =============================================================================

def load_student_snapshot(db: Session, profile_id: str) -> StudentSnapshot:
    """
    Build the snapshot for a profile: best SAT total, best ACT composite,
    course list and the ids already on the student's lists.

    Raises:
        ProfileNotFound: when the profile does not exist
    """
    profile = db.get(StudentProfile, profile_id)
    if profile is None:
        raise ProfileNotFound(profile_id)

    best_sat = db.query(func.max(SatScore.total)).filter(
        SatScore.student_profile_id == profile_id
    ).scalar()
    best_act = db.query(func.max(ActScore.composite)).filter(
        ActScore.student_profile_id == profile_id
    ).scalar()

    courses = [
        CourseRecord(name=c.name, level=c.level, status=c.status or "completed")
        for c in db.query(StudentCourse).filter(StudentCourse.student_profile_id == profile_id)
    ]

    school_ids = [
        row.school_id
        for row in db.query(StudentSchool.school_id).filter(StudentSchool.student_profile_id == profile_id)
        if row.school_id
    ]
    program_ids = [
        row.summer_program_id
        for row in db.query(StudentSummerProgram.summer_program_id).filter(
            StudentSummerProgram.student_profile_id == profile_id
        )
        if row.summer_program_id
    ]

    return StudentSnapshot(
        profile_id=profile.id,
        first_name=profile.first_name,
        birth_date=profile.birth_date,
        residency_status=profile.residency_status,
        grade=profile.grade,
        graduation_year=profile.graduation_year,
        gpa_unweighted=profile.gpa_unweighted,
        gpa_weighted=profile.gpa_weighted,
        sat_total=best_sat,
        act_composite=best_act,
        courses=courses,
        interests=list(profile.interests or []),
        existing_school_ids=school_ids,
        existing_summer_program_ids=program_ids,
    )


# =============================================================================
# SCHOOLS
# =============================================================================

def school_to_statistics(row: School) -> SchoolStatistics:
    return SchoolStatistics(
        id=row.id,
        name=row.name,
        short_name=row.short_name,
        city=row.city,
        state=row.state,
        type=row.type,
        undergrad_enrollment=row.undergrad_enrollment,
        sat_range_25=row.sat_range_25,
        sat_range_75=row.sat_range_75,
        act_range_25=row.act_range_25,
        act_range_75=row.act_range_75,
        avg_gpa_unweighted=row.avg_gpa_unweighted,
        avg_gpa_weighted=row.avg_gpa_weighted,
        acceptance_rate=row.acceptance_rate,
    )


def _project(rows: Iterable, projector, label: str) -> list:
    """Project rows, skipping the ones that fail validation."""
    projected = []
    for row in rows:
        try:
            projected.append(projector(row))
        except SnapshotValidationError as e:
            logger.debug(f"Skipping malformed {label} {getattr(row, 'id', '?')}: {e}")
    return projected


def load_school_candidates(
    db: Session,
    exclude_ids: Sequence[str] = (),
    limit: int = 100,
) -> List[SchoolStatistics]:
    """
    Fetch schools that carry at least some admissions statistics,
    skipping the ones already on the student's list.
    """
    query = db.query(School).filter(
        or_(
            School.sat_range_25.isnot(None),
            School.act_range_25.isnot(None),
            School.avg_gpa_unweighted.isnot(None),
            School.acceptance_rate.isnot(None),
        )
    )
    if exclude_ids:
        query = query.filter(School.id.notin_(list(exclude_ids)))

    rows = query.order_by(School.name).limit(limit).all()
    schools = _project(rows, school_to_statistics, "school")
    logger.info(f"Loaded {len(schools)} school candidates")
    return schools


def load_school(db: Session, school_id: str) -> Optional[SchoolStatistics]:
    """
    Project one school.

    Raises:
        ValidationError: when the stored statistics do not fit the snapshot (422)
    """
    row = db.get(School, school_id)
    if row is None:
        return None
    try:
        return school_to_statistics(row)
    except SnapshotValidationError as e:
        logger.warning(f"Malformed school {school_id}: {e}")
        raise ValidationError(f"School data is malformed: {school_id}", status_code=422)


def load_schools_by_ids(db: Session, school_ids: Sequence[str]) -> List[SchoolStatistics]:
    """The schools already on a student's list."""
    if not school_ids:
        return []
    rows = db.query(School).filter(School.id.in_(list(school_ids))).all()
    return _project(rows, school_to_statistics, "school")


# =============================================================================
# PROGRAMS
# =============================================================================

def program_to_constraint(row: SummerProgram) -> ProgramConstraint:
    return ProgramConstraint(
        id=row.id,
        name=row.name,
        short_name=row.short_name,
        organization=row.organization,
        category=row.category,
        focus_areas=list(row.focus_areas or []),
        program_year=row.program_year,
        start_date=row.start_date,
        application_deadline=row.application_deadline,
        is_active=bool(row.is_active),
        min_grade=row.min_grade,
        max_grade=row.max_grade,
        min_age=row.min_age,
        max_age=row.max_age,
        min_gpa_unweighted=row.min_gpa_unweighted,
        min_gpa_weighted=row.min_gpa_weighted,
        citizenship=row.citizenship,
        required_courses=list(row.required_courses or []),
        eligibility_notes=row.eligibility_notes,
        description=row.description,
        location=row.location,
        format=row.format,
        website_url=row.website_url,
        llm_context=row.llm_context,
    )


def _in_focus(row: SummerProgram, focus: str) -> bool:
    areas = row.focus_areas if isinstance(row.focus_areas, list) else []
    return focus in (str(area).lower() for area in areas)


def load_program_candidates(
    db: Session,
    today: Optional[date] = None,
    focus: Optional[str] = None,
    exclude_ids: Sequence[str] = (),
    program_year: Optional[int] = None,
    limit: int = 50,
) -> List[ProgramConstraint]:
    """
    Fetch up to `limit` active programs whose deadline has not passed, whose
    year is not in the past, that are not already on the student's list and
    that carry the `focus` area when one is given. With `program_year`, only
    programs for that year (or with no year) are kept.

    Ordered by nearest deadline (none last), then name.
    """
    today = today or date.today()
    query = (
        db.query(SummerProgram)
        .filter(SummerProgram.is_active.is_(True))
        .filter(or_(SummerProgram.application_deadline.is_(None), SummerProgram.application_deadline >= today))
        .filter(or_(SummerProgram.program_year.is_(None), SummerProgram.program_year >= today.year))
    )
    if exclude_ids:
        query = query.filter(SummerProgram.id.notin_(list(exclude_ids)))
    if program_year is not None:
        query = query.filter(or_(SummerProgram.program_year.is_(None), SummerProgram.program_year == program_year))
    query = query.order_by(SummerProgram.application_deadline.asc().nulls_last(), SummerProgram.name)

    # focus_areas is a JSON list, so the focus filter runs page by page
    wanted = focus.strip().lower() if focus and focus.strip() else None
    programs: List[ProgramConstraint] = []
    offset = 0
    while len(programs) < limit:
        rows = query.offset(offset).limit(limit).all()
        if not rows:
            break
        offset += len(rows)
        if wanted:
            rows = [row for row in rows if _in_focus(row, wanted)]
        programs.extend(_project(rows, program_to_constraint, "program"))

    programs = programs[:limit]
    logger.info(f"Loaded {len(programs)} program candidates (focus={wanted or 'any'})")
    return programs


def load_programs_by_terms(db: Session, terms: Sequence[str], limit: int = 50) -> List[ProgramConstraint]:
    """Active programs whose name or short name contains any of the terms."""
    if not terms:
        return []

    conditions = []
    for term in terms:
        pattern = f"%{term.lower()}%"
        conditions.append(func.lower(SummerProgram.name).like(pattern))
        conditions.append(func.lower(SummerProgram.short_name).like(pattern))

    rows = (
        db.query(SummerProgram)
        .filter(SummerProgram.is_active.is_(True))
        .filter(or_(*conditions))
        .limit(limit)
        .all()
    )
    return _project(rows, program_to_constraint, "program")
