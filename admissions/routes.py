"""
Admissions API Routes

Exposes the fit scorer, program eligibility ranking, the cached
recommendation bundle and the chances calculator via REST API.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from db import get_db
from admissions import config
from admissions.auth import current_profile_id
from admissions.ai.generators import RecommendationGenerator, default_generators
from admissions.models import StudentProfile
from .logic.cache import RecommendationCache
from .logic.contracts import RankedSchool, RankedProgram, RecommendationBundle
from .logic.errors import AdmissionsError, ProfileNotFound
from .logic.runner import (
    run_school_recommendations,
    run_program_recommendations,
    run_chances,
    get_recommendation_bundle,
    generate_recommendations,
    update_recommendation_status,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["admissions"])


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_cache(request: Request) -> RecommendationCache:
    """The per-process cache created in main.py."""
    return request.app.state.recommendation_cache


def get_generators() -> List[RecommendationGenerator]:
    return default_generators()


def clamp_limit(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return config.DEFAULT_LIMIT
    return min(limit, config.MAX_LIMIT)


def _error_response(e: AdmissionsError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))


def _server_error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class GenerateRequest(BaseModel):
    """Optional body for regenerating recommendations."""
    preferences: Dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form student preferences passed to the advisors",
        examples=[{"preferred_regions": ["Northeast"], "preferred_school_size": "medium"}],
    )


class RecommendationAction(BaseModel):
    action: Optional[str] = Field(default=None, description="dismiss, save or acted_upon")
    feedback: Optional[str] = None


class ChancesRequest(BaseModel):
    schoolId: Optional[str] = None


class ProfileUpdate(BaseModel):
    """The profile fields the scorers read."""
    grade: Optional[str] = None
    graduationYear: Optional[int] = None
    birthDate: Optional[date] = None
    residencyStatus: Optional[str] = None
    gpaUnweighted: Optional[float] = Field(default=None, ge=0, le=5)
    gpaWeighted: Optional[float] = Field(default=None, ge=0, le=6)
    interests: Optional[List[str]] = None


PROFILE_FIELDS = {
    "grade": "grade",
    "graduationYear": "graduation_year",
    "birthDate": "birth_date",
    "residencyStatus": "residency_status",
    "gpaUnweighted": "gpa_unweighted",
    "gpaWeighted": "gpa_weighted",
    "interests": "interests",
}


# =============================================================================
# SERIALIZERS
# =============================================================================

def _serialize_school(item: RankedSchool) -> Dict[str, Any]:
    school, match = item.school, item.match
    return {
        "id": school.id,
        "name": school.name,
        "shortName": school.short_name,
        "city": school.city,
        "state": school.state,
        "type": school.type,
        "acceptanceRate": school.acceptance_rate,
        "satRange25": school.sat_range_25,
        "satRange75": school.sat_range_75,
        "actRange25": school.act_range_25,
        "actRange75": school.act_range_75,
        "avgGpaUnweighted": school.avg_gpa_unweighted,
        "undergradEnrollment": school.undergrad_enrollment,
        "match": {
            "tier": match.tier,
            "satMatch": match.sat_match,
            "actMatch": match.act_match,
            "gpaMatch": match.gpa_match,
            "overallFit": match.overall_fit,
        },
    }


def _serialize_program(item: RankedProgram) -> Dict[str, Any]:
    program = item.program
    return {
        "id": program.id,
        "name": program.name,
        "shortName": program.short_name,
        "organization": program.organization,
        "description": program.description,
        "location": program.location,
        "format": program.format,
        "focusAreas": program.focus_areas,
        "category": program.category,
        "applicationDeadline": program.application_deadline.isoformat() if program.application_deadline else None,
        "websiteUrl": program.website_url,
        "eligibility": {
            "status": item.eligibility.overall,
            "summary": item.eligibility.summary,
            "factors": [f.model_dump() for f in item.eligibility.factors],
        },
    }


def _serialize_bundle(bundle: RecommendationBundle) -> Dict[str, Any]:
    stage = bundle.stage
    return {
        "recommendations": bundle.recommendations,
        "stage": {
            "stage": stage.stage,
            "grade": stage.grade,
            "season": stage.season,
            "description": stage.description,
            "priorities": stage.priorities,
            "targetProgramYear": stage.target_program_year,
        } if stage else None,
        "lastGenerated": bundle.last_generated.isoformat() if bundle.last_generated else None,
    }


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/recommendations/health", summary="Admissions engine health check")
def health_check(cache: RecommendationCache = Depends(get_cache)):
    """Check if the admissions engine is operational."""
    return {"status": "ok", "engine": "admissions", "version": "1.0.0", "cachedProfiles": len(cache)}


@router.get("/recommendations/schools", summary="Rank schools by fit")
def school_recommendations(
    tier: Optional[str] = Query(default=None, pattern="^(reach|target|safety)$"),
    limit: Optional[int] = Query(default=None),
    profile_id: str = Depends(current_profile_id),
    db: Session = Depends(get_db),
):
    """
    Schools ranked against the student's SAT/ACT/GPA.

    Without `tier` the result is a balanced slate of up to two reach,
    two target and two safety schools.
    """
    try:
        student, ranking = run_school_recommendations(db, profile_id, tier=tier, limit=clamp_limit(limit))
    except AdmissionsError as e:
        raise _error_response(e)
    except Exception:
        logger.exception("Error fetching school recommendations")
        return _server_error("Failed to fetch recommendations")

    return {
        "schools": [_serialize_school(s) for s in ranking.schools],
        "studentStats": {
            "sat": student.sat_total,
            "act": student.act_composite,
            "gpa": student.gpa_unweighted,
        },
    }


@router.get("/recommendations/programs", summary="Rank summer programs by eligibility")
def program_recommendations(
    focus: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    programs: Optional[str] = Query(default=None, description="Comma-separated program names to look up"),
    profile_id: str = Depends(current_profile_id),
    db: Session = Depends(get_db),
):
    try:
        ranking = run_program_recommendations(
            db, profile_id, focus=focus, limit=clamp_limit(limit), program_names=programs,
        )
    except AdmissionsError as e:
        raise _error_response(e)
    except Exception:
        logger.exception("Error fetching program recommendations")
        return _server_error("Failed to fetch recommendations")

    return {
        "programs": [_serialize_program(p) for p in ranking.programs],
        "totalFound": ranking.total_found,
        "mode": ranking.mode,
    }


@router.get("/recommendations", summary="Current recommendations")
def list_recommendations(
    profile_id: str = Depends(current_profile_id),
    db: Session = Depends(get_db),
    cache: RecommendationCache = Depends(get_cache),
):
    try:
        bundle, from_cache = get_recommendation_bundle(db, cache, profile_id)
    except AdmissionsError as e:
        raise _error_response(e)
    except Exception:
        logger.exception("Error fetching recommendations")
        return _server_error("Failed to fetch recommendations")

    response = _serialize_bundle(bundle)
    if from_cache:
        response["fromCache"] = True
    return response


@router.post("/recommendations", summary="Generate new recommendations")
def create_recommendations(
    request: Optional[GenerateRequest] = None,
    profile_id: str = Depends(current_profile_id),
    db: Session = Depends(get_db),
    cache: RecommendationCache = Depends(get_cache),
    generators: List[RecommendationGenerator] = Depends(get_generators),
):
    preferences = request.preferences if request else {}
    try:
        bundle = generate_recommendations(db, cache, profile_id, generators, preferences=preferences)
    except AdmissionsError as e:
        raise _error_response(e)
    except Exception:
        logger.exception("Error generating recommendations")
        return _server_error("Failed to generate recommendations")

    return _serialize_bundle(bundle)


@router.patch("/recommendations/{recommendation_id}", summary="Dismiss, save or act on a recommendation")
def patch_recommendation(
    recommendation_id: str,
    body: RecommendationAction,
    profile_id: str = Depends(current_profile_id),
    db: Session = Depends(get_db),
    cache: RecommendationCache = Depends(get_cache),
):
    try:
        return update_recommendation_status(
            db, cache, profile_id, recommendation_id, body.action, feedback=body.feedback,
        )
    except AdmissionsError as e:
        raise _error_response(e)


@router.post("/chances", summary="Rule-based admission chances")
def chances(
    body: ChancesRequest,
    profile_id: str = Depends(current_profile_id),
    db: Session = Depends(get_db),
):
    try:
        _, school, result = run_chances(db, profile_id, body.schoolId)
    except AdmissionsError as e:
        raise _error_response(e)

    return {
        "schoolId": school.id,
        "schoolName": school.name,
        "probability": result.base_probability,
        "tier": result.tier,
        "factors": {name: f.model_dump() for name, f in result.factors.items()},
        "confidence": result.confidence,
        "confidenceReason": result.confidence_reason,
    }


@router.put("/profile", summary="Update the scored profile fields")
def update_profile(
    body: ProfileUpdate,
    profile_id: str = Depends(current_profile_id),
    db: Session = Depends(get_db),
    cache: RecommendationCache = Depends(get_cache),
):
    profile = db.get(StudentProfile, profile_id)
    if profile is None:
        raise _error_response(ProfileNotFound(profile_id))

    changes = body.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(profile, PROFILE_FIELDS[key], value)
    db.flush()

    # Scorer inputs changed
    cache.invalidate(profile_id)
    logger.info(f"Profile {profile_id} updated: {sorted(changes)}")
    return {"id": profile.id, "updated": sorted(changes)}
