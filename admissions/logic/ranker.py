"""
Ranker

Orders and filters candidate schools and programs using the school-fit scorer
and the eligibility evaluator, plus tie-break rules (selectivity, deadline
proximity). Candidates already on the student's lists are always excluded.
"""

from datetime import date
from typing import Dict, List, Optional, Sequence

from .contracts import (
    StudentSnapshot,
    SchoolStatistics,
    ProgramConstraint,
    RankedSchool,
    RankedProgram,
    SchoolRanking,
    ProgramRanking,
)
from .constants import (
    SchoolTier,
    EligibilityStatus,
    ELIGIBILITY_ORDER,
    DEFAULT_RESULT_LIMIT,
    MAX_PER_TIER_IN_SLATE,
    BALANCED_SLATE_ORDER,
    MISSING_ACCEPTANCE_RATE,
)
from .eligibility import evaluate
from .school_fit import score


# =============================================================================
# SCHOOLS
# =============================================================================

def score_schools(
    student: StudentSnapshot,
    schools: Sequence[SchoolStatistics],
) -> List[RankedSchool]:
    """Score every school not already on the student's list."""
    excluded = set(student.existing_school_ids)
    return [
        RankedSchool(school=school, match=score(student, school))
        for school in schools
        if school.id not in excluded
    ]


def sort_schools(
    ranked: List[RankedSchool],
    tier: Optional[str] = None,
) -> List[RankedSchool]:
    """
    Reach lists are ordered by selectivity (lowest acceptance rate first),
    everything else by descending fit score.
    """
    if tier == SchoolTier.REACH:
        return sorted(
            ranked,
            key=lambda r: r.school.acceptance_rate or MISSING_ACCEPTANCE_RATE,
        )
    return sorted(ranked, key=lambda r: r.match.overall_fit, reverse=True)


def select_balanced_slate(
    ranked: List[RankedSchool],
    limit: int = DEFAULT_RESULT_LIMIT,
    per_tier: int = MAX_PER_TIER_IN_SLATE,
) -> List[RankedSchool]:
    """
    Take up to `per_tier` schools from each tier, concatenated
    reach -> target -> safety, then truncate to `limit`.
    """
    by_tier: Dict[str, List[RankedSchool]] = {tier.value: [] for tier in BALANCED_SLATE_ORDER}
    for item in ranked:
        bucket = by_tier.get(getattr(item.match.tier, "value", item.match.tier))
        if bucket is not None and len(bucket) < per_tier:
            bucket.append(item)

    slate: List[RankedSchool] = []
    for tier in BALANCED_SLATE_ORDER:
        slate.extend(by_tier[tier.value])
    return slate[:limit]


def rank_schools(
    student: StudentSnapshot,
    schools: Sequence[SchoolStatistics],
    tier: Optional[str] = None,
    limit: int = DEFAULT_RESULT_LIMIT,
) -> SchoolRanking:
    """
    Rank candidate schools for a student.

    Args:
        student: Student snapshot
        schools: Candidate schools
        tier: Optional tier filter (reach/target/safety)
        limit: Maximum number of schools to return

    Returns:
        SchoolRanking; without a tier filter the result is a balanced slate
    """
    ranked = score_schools(student, schools)

    if tier:
        ranked = [r for r in ranked if r.match.tier == tier]

    ranked = sort_schools(ranked, tier)

    if tier:
        selected = ranked[:limit]
    else:
        selected = select_balanced_slate(ranked, limit)

    return SchoolRanking(schools=selected, total_found=len(ranked))


# =============================================================================
# PROGRAMS
# =============================================================================

def is_open_candidate(
    program: ProgramConstraint,
    today: date,
    excluded: set,
    focus: Optional[str] = None,
) -> bool:
    """Active, not past its deadline, not already on the list, and in the requested focus area."""
    if not program.is_active or program.id in excluded:
        return False
    if program.application_deadline is not None and program.application_deadline < today:
        return False
    if program.program_year is not None and program.program_year < today.year:
        return False
    if focus:
        wanted = focus.strip().lower()
        if wanted not in (area.lower() for area in program.focus_areas):
            return False
    return True


def _program_sort_key(item: RankedProgram):
    overall = getattr(item.eligibility.overall, "value", item.eligibility.overall)
    deadline = item.program.application_deadline or date.max
    return ELIGIBILITY_ORDER[overall], deadline, item.program.name.lower()


def annotate_programs(
    student: StudentSnapshot,
    programs: Sequence[ProgramConstraint],
    today: Optional[date] = None,
) -> List[RankedProgram]:
    """Attach an eligibility verdict to each program, keeping order and every program."""
    return [
        RankedProgram(program=program, eligibility=evaluate(student, program, today=today))
        for program in programs
    ]


def rank_programs(
    student: StudentSnapshot,
    programs: Sequence[ProgramConstraint],
    focus: Optional[str] = None,
    limit: int = DEFAULT_RESULT_LIMIT,
    today: Optional[date] = None,
) -> ProgramRanking:
    """
    Rank candidate summer programs for a student.

    Ineligible programs are dropped. Survivors are ordered by verdict
    (eligible, check_required, unknown) and then by nearest deadline,
    programs without a deadline last.
    """
    today = today or date.today()
    excluded = set(student.existing_summer_program_ids)

    open_programs = [p for p in programs if is_open_candidate(p, today, excluded, focus)]
    annotated = annotate_programs(student, open_programs, today=today)

    survivors = [a for a in annotated if a.eligibility.overall != EligibilityStatus.INELIGIBLE]
    survivors.sort(key=_program_sort_key)

    return ProgramRanking(programs=survivors[:limit], total_found=len(survivors), mode="discovery")
