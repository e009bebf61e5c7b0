"""
Engine Runner

Orchestrates the recommendation pipeline:
1. Loads the student snapshot and candidates via the adapter
2. Runs the deterministic scorers and ranker
3. Runs the recommendation generators and merges their output
4. Persists and caches the resulting bundle

This is an orchestration layer - scoring lives in school_fit/eligibility/ranker,
row projection in the adapter.
"""

import logging
from datetime import date, datetime
from itertools import zip_longest
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from admissions import config
from admissions.models import Recommendation
from .adapter import (
    load_student_snapshot,
    load_school_candidates,
    load_school,
    load_schools_by_ids,
    load_program_candidates,
    load_programs_by_terms,
)
from .cache import RecommendationCache
from .chances import QuantitativeResult, calculate_quantitative
from .constants import EligibilityStatus
from .contracts import (
    StudentSnapshot,
    SchoolStatistics,
    SchoolRanking,
    ProgramRanking,
    RankedSchool,
    RankedProgram,
    GenerationRequest,
    GeneratedRecommendation,
    RecommendationBundle,
)
from .errors import SchoolNotFound, RecommendationNotFound, NotOwner, ValidationError
from .program_lookup import parse_program_names, extract_search_terms, match_programs_by_names
from .ranker import rank_schools, rank_programs, annotate_programs
from .stage import get_student_stage, accepts_program_recommendations

logger = logging.getLogger(__name__)

# How many screened programs the program advisor gets to choose from
GENERATOR_PROGRAM_POOL = 20

ACTION_STATUS = {
    "dismiss": "dismissed",
    "save": "saved",
    "acted_upon": "acted_upon",
}

TIER_PRIORITY = {
    "reach": "medium",
    "target": "high",
    "safety": "medium",
}


# =============================================================================
# RANKED LISTS
# =============================================================================

def run_school_recommendations(
    db: Session,
    profile_id: str,
    tier: Optional[str] = None,
    limit: int = config.DEFAULT_LIMIT,
) -> Tuple[StudentSnapshot, SchoolRanking]:
    """
    Rank schools for a profile.

    Returns:
        The student snapshot (for the stats echo) and the ranking
    """
    student = load_student_snapshot(db, profile_id)
    schools = load_school_candidates(db, exclude_ids=student.existing_school_ids, limit=config.SCHOOL_POOL_SIZE)

    ranking = rank_schools(student, schools, tier=tier, limit=limit)
    logger.info(
        f"Ranked schools for {profile_id}: tier={tier or 'balanced'} "
        f"found={ranking.total_found} returned={len(ranking.schools)}"
    )
    if len(ranking.schools) < limit:
        logger.warning(f"Only {len(ranking.schools)} schools available for {profile_id}")
    return student, ranking


def run_program_recommendations(
    db: Session,
    profile_id: str,
    focus: Optional[str] = None,
    limit: int = config.DEFAULT_LIMIT,
    program_names: Optional[str] = None,
    today: Optional[date] = None,
) -> ProgramRanking:
    """
    Rank summer programs for a profile.

    With `program_names` (comma-separated, as produced by an advisor) the
    named programs are looked up, annotated with eligibility and returned in
    the order given, ineligible ones included. Otherwise discovery mode ranks
    open candidates and drops ineligible ones.
    """
    student = load_student_snapshot(db, profile_id)

    names = parse_program_names(program_names) if program_names else []
    if names:
        terms = extract_search_terms(names)
        candidates = load_programs_by_terms(db, terms, limit=config.PROGRAM_POOL_SIZE)
        matched = match_programs_by_names(names, candidates, limit=limit)
        annotated = annotate_programs(student, matched, today=today)
        logger.info(f"Looked up {len(names)} program names for {profile_id}: matched {len(annotated)}")
        eligible_count = sum(1 for a in annotated if a.eligibility.overall != EligibilityStatus.INELIGIBLE)
        return ProgramRanking(programs=annotated, total_found=eligible_count, mode="llm")

    candidates = load_program_candidates(
        db, today=today, focus=focus,
        exclude_ids=student.existing_summer_program_ids, limit=config.PROGRAM_POOL_SIZE,
    )
    ranking = rank_programs(student, candidates, focus=focus, limit=limit, today=today)
    logger.info(
        f"Ranked programs for {profile_id}: focus={focus or 'any'} "
        f"found={ranking.total_found} returned={len(ranking.programs)}"
    )
    return ranking


def run_chances(db: Session, profile_id: str, school_id: Optional[str]) -> Tuple[StudentSnapshot, SchoolStatistics, QuantitativeResult]:
    """Rule-based admission chances for one school."""
    if not school_id:
        raise ValidationError("schoolId is required")

    student = load_student_snapshot(db, profile_id)
    school = load_school(db, school_id)
    if school is None:
        raise SchoolNotFound(school_id)

    result = calculate_quantitative(student, school)
    logger.info(f"Chances for {profile_id} at {school_id}: {result.base_probability}% ({result.tier})")
    return student, school, result


# =============================================================================
# DETERMINISTIC ITEMS
# =============================================================================

def school_to_recommendation(item: RankedSchool, grade: Optional[str] = None) -> GeneratedRecommendation:
    match = item.match
    tier = match.tier
    checks = [
        f"SAT {match.sat_match}" if match.sat_match != "unknown" else None,
        f"ACT {match.act_match}" if match.act_match != "unknown" else None,
        f"GPA {match.gpa_match}" if match.gpa_match != "unknown" else None,
    ]
    known = [c for c in checks if c]
    reasoning = f"Fit score {match.overall_fit}/100"
    if known:
        reasoning += f" ({', '.join(known)} the school's range)"

    return GeneratedRecommendation(
        category="school",
        title=item.school.name,
        subtitle=f"{tier.capitalize()} School",
        reasoning=reasoning,
        fit_score=match.overall_fit / 100,
        priority=TIER_PRIORITY.get(tier, "medium"),
        relevant_grade=grade,
        school_id=item.school.id,
    )


def program_to_recommendation(item: RankedProgram, grade: Optional[str] = None) -> GeneratedRecommendation:
    eligible = item.eligibility.overall == EligibilityStatus.ELIGIBLE
    return GeneratedRecommendation(
        category="program",
        title=item.program.name,
        subtitle=item.program.organization,
        reasoning=item.eligibility.summary,
        fit_score=0.8 if eligible else 0.5,
        priority="high" if eligible else "medium",
        action_items=[] if eligible else ["Confirm eligibility with the program"],
        relevant_grade=grade,
        summer_program_id=item.program.id,
        expires_at=item.program.application_deadline,
    )


def _dedupe_key(rec) -> Tuple[str, str]:
    """Identity of a recommendation, generated or stored."""
    return rec.category, rec.school_id or rec.summer_program_id or rec.title.lower()


def merge_recommendations(
    generated: Sequence[GeneratedRecommendation],
    deterministic: Sequence[GeneratedRecommendation],
) -> List[GeneratedRecommendation]:
    """Interleave generator output with deterministic items, first occurrence wins."""
    merged: List[GeneratedRecommendation] = []
    seen = set()
    for pair in zip_longest(generated, deterministic):
        for rec in pair:
            if rec is None:
                continue
            key = _dedupe_key(rec)
            if key in seen:
                continue
            seen.add(key)
            merged.append(rec)
    return merged


# =============================================================================
# BUNDLES
# =============================================================================

def recommendation_to_dict(row: Recommendation) -> Dict[str, Any]:
    return {
        "id": row.id,
        "category": row.category,
        "title": row.title,
        "subtitle": row.subtitle,
        "reasoning": row.reasoning,
        "fitScore": row.fit_score,
        "priority": row.priority,
        "actionItems": list(row.action_items or []),
        "relevantGrade": row.relevant_grade,
        "schoolId": row.school_id,
        "summerProgramId": row.summer_program_id,
        "eligibilityStatus": row.eligibility_status,
        "eligibilitySummary": row.eligibility_summary,
        "status": row.status,
        "feedback": row.feedback,
        "generatedAt": row.generated_at.isoformat() if row.generated_at else None,
        "expiresAt": row.expires_at.isoformat() if row.expires_at else None,
    }


def load_recommendations(db: Session, profile_id: str) -> List[Recommendation]:
    """Stored recommendations the student has not dismissed, newest first."""
    return (
        db.query(Recommendation)
        .filter(Recommendation.student_profile_id == profile_id)
        .filter(Recommendation.status != "dismissed")
        .order_by(Recommendation.generated_at.desc(), Recommendation.fit_score.desc())
        .all()
    )


def build_bundle(db: Session, student: StudentSnapshot, today: Optional[date] = None) -> RecommendationBundle:
    rows = load_recommendations(db, student.profile_id)
    stage = get_student_stage(student.graduation_year, student.grade, today=today)
    return RecommendationBundle(
        recommendations=[recommendation_to_dict(r) for r in rows],
        stage=stage,
        last_generated=rows[0].generated_at if rows else None,
    )


def get_recommendation_bundle(
    db: Session,
    cache: RecommendationCache,
    profile_id: str,
    today: Optional[date] = None,
) -> Tuple[RecommendationBundle, bool]:
    """
    Cached bundle for a profile, rebuilt from the database on a miss.

    Returns:
        (bundle, from_cache)
    """
    cached = cache.get(profile_id)
    if cached is not None:
        return cached, True

    student = load_student_snapshot(db, profile_id)
    bundle = build_bundle(db, student, today=today)
    cache.set(profile_id, bundle)
    return bundle, False


def generate_recommendations(
    db: Session,
    cache: RecommendationCache,
    profile_id: str,
    generators: Sequence,
    preferences: Optional[Dict[str, Any]] = None,
    today: Optional[date] = None,
) -> RecommendationBundle:
    """
    Main entry point: regenerate a profile's recommendations.

    Replaces the profile's active recommendations (saved and acted-upon ones
    are kept), then caches and returns the fresh bundle.
    """
    cache.invalidate(profile_id)

    student = load_student_snapshot(db, profile_id)
    stage = get_student_stage(student.graduation_year, student.grade, today=today)
    logger.info(f"Generating recommendations for {profile_id} at stage {stage.stage}")

    schools = load_school_candidates(db, exclude_ids=student.existing_school_ids, limit=config.SCHOOL_POOL_SIZE)
    school_ranking = rank_schools(student, schools, limit=config.DEFAULT_LIMIT)

    programs = load_program_candidates(
        db, today=today, exclude_ids=student.existing_summer_program_ids,
        program_year=stage.target_program_year, limit=config.PROGRAM_POOL_SIZE,
    )
    program_ranking = rank_programs(student, programs, limit=GENERATOR_PROGRAM_POOL, today=today)

    request = GenerationRequest(
        student=student,
        stage=stage,
        preferences=preferences or {},
        candidate_programs=[r.program for r in program_ranking.programs],
        candidate_schools=schools,
        listed_schools=load_schools_by_ids(db, student.existing_school_ids),
    )

    generated: List[GeneratedRecommendation] = []
    for generator in generators:
        produced = generator.generate(request)
        logger.info(f"Generator '{generator.name}' produced {len(produced)} recommendations")
        generated.extend(produced)

    deterministic = [school_to_recommendation(r, stage.grade) for r in school_ranking.schools]
    if accepts_program_recommendations(stage):
        deterministic.extend(
            program_to_recommendation(r, stage.grade)
            for r in program_ranking.programs[:config.DEFAULT_LIMIT]
        )
    merged = merge_recommendations(generated, deterministic)

    verdicts = {r.program.id: r.eligibility for r in program_ranking.programs}
    kept = {
        _dedupe_key(r)
        for r in db.query(Recommendation).filter(
            Recommendation.student_profile_id == profile_id,
            Recommendation.status != "active",
        )
    }

    db.query(Recommendation).filter(
        Recommendation.student_profile_id == profile_id,
        Recommendation.status == "active",
    ).delete(synchronize_session=False)

    generated_at = datetime.utcnow()
    created = 0
    for rec in merged:
        if _dedupe_key(rec) in kept:
            continue
        verdict = verdicts.get(rec.summer_program_id) if rec.summer_program_id else None
        db.add(Recommendation(
            student_profile_id=profile_id,
            category=rec.category,
            title=rec.title,
            subtitle=rec.subtitle,
            reasoning=rec.reasoning,
            fit_score=rec.fit_score,
            priority=rec.priority,
            action_items=rec.action_items,
            relevant_grade=rec.relevant_grade,
            school_id=rec.school_id,
            summer_program_id=rec.summer_program_id,
            eligibility_status=verdict.overall if verdict else None,
            eligibility_summary=verdict.summary if verdict else None,
            generated_at=generated_at,
            expires_at=rec.expires_at,
        ))
        created += 1
    db.flush()

    logger.info(f"Stored {created} recommendations for {profile_id}")
    if created == 0:
        logger.warning(f"No recommendations generated for {profile_id}")

    bundle = build_bundle(db, student, today=today)
    cache.set(profile_id, bundle)
    return bundle


def update_recommendation_status(
    db: Session,
    cache: RecommendationCache,
    profile_id: str,
    recommendation_id: str,
    action: Optional[str],
    feedback: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Apply a student action (dismiss / save / acted_upon) to a recommendation.

    Raises:
        RecommendationNotFound: unknown id
        NotOwner: the recommendation belongs to another profile
        ValidationError: unsupported action
    """
    row = db.get(Recommendation, recommendation_id)
    if row is None:
        raise RecommendationNotFound(recommendation_id)
    if row.student_profile_id != profile_id:
        raise NotOwner()

    status = ACTION_STATUS.get(action or "")
    if status is None:
        raise ValidationError("Invalid action")

    row.status = status
    if action == "dismiss" and feedback:
        row.feedback = feedback
    db.flush()

    cache.invalidate(profile_id)
    logger.info(f"Recommendation {recommendation_id} marked {status}")
    return recommendation_to_dict(row)
