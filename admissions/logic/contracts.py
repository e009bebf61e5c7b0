"""
Data Contracts for the Admissions Scoring Engine

Defines Pydantic models for the read-only snapshots the engine consumes
(StudentSnapshot, ProgramConstraint, SchoolStatistics) and the verdicts,
match results and ranked outputs it produces.
These contracts are the API boundary for the scoring engine.
"""

from datetime import date, datetime
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field

from .constants import EligibilityStatus, SchoolTier, MetricMatch


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class CourseRecord(BaseModel):
    """A course the student has taken, is taking, or plans to take."""
    name: str
    level: Optional[str] = None  # regular/honors/ap/ib/dual_enrollment
    status: str = "completed"    # completed/in_progress/planned

    class Config:
        frozen = True


class StudentSnapshot(BaseModel):
    """
    Point-in-time projection of a student profile.
    Built fresh per request from persisted data and never mutated.
    """
    profile_id: str

    # Identity & status
    first_name: Optional[str] = None
    birth_date: Optional[date] = None
    residency_status: Optional[str] = None  # us_citizen/us_permanent_resident/international
    grade: Optional[str] = None             # "9th".."12th"
    graduation_year: Optional[int] = None

    # Academics
    gpa_unweighted: Optional[float] = None
    gpa_weighted: Optional[float] = None
    sat_total: Optional[int] = None
    act_composite: Optional[int] = None
    courses: List[CourseRecord] = Field(default_factory=list)

    # Interests (prompt context only, never scored)
    interests: List[str] = Field(default_factory=list)

    # Already on the student's lists
    existing_school_ids: List[str] = Field(default_factory=list)
    existing_summer_program_ids: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class ProgramConstraint(BaseModel):
    """
    Read-only projection of a summer program and its eligibility requirements.
    """
    id: str
    name: str
    short_name: Optional[str] = None
    organization: Optional[str] = None
    category: Optional[str] = None
    focus_areas: List[str] = Field(default_factory=list)

    # Timing
    program_year: Optional[int] = None
    start_date: Optional[date] = None
    application_deadline: Optional[date] = None
    is_active: bool = True

    # Structural requirements
    min_grade: Optional[int] = None
    max_grade: Optional[int] = None
    min_age: Optional[int] = None
    max_age: Optional[int] = None
    min_gpa_unweighted: Optional[float] = None
    min_gpa_weighted: Optional[float] = None
    citizenship: Optional[str] = None  # us_only/us_permanent_resident/international_ok
    required_courses: List[str] = Field(default_factory=list)
    eligibility_notes: Optional[str] = None

    # Display
    description: Optional[str] = None
    location: Optional[str] = None
    format: Optional[str] = None
    website_url: Optional[str] = None
    llm_context: Optional[str] = None

    class Config:
        frozen = True


class SchoolStatistics(BaseModel):
    """
    Read-only projection of a school's admissions statistics.
    """
    id: str
    name: str
    short_name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    type: Optional[str] = None
    undergrad_enrollment: Optional[int] = None

    sat_range_25: Optional[int] = None
    sat_range_75: Optional[int] = None
    act_range_25: Optional[int] = None
    act_range_75: Optional[int] = None
    avg_gpa_unweighted: Optional[float] = None
    avg_gpa_weighted: Optional[float] = None
    acceptance_rate: Optional[float] = None  # fraction, e.g. 0.08

    class Config:
        frozen = True


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class EligibilityFactor(BaseModel):
    """Outcome of a single eligibility rule."""
    rule: str
    status: EligibilityStatus
    detail: str = ""

    class Config:
        use_enum_values = True


class EligibilityVerdict(BaseModel):
    """Overall eligibility plus the per-rule factors that produced it."""
    overall: EligibilityStatus
    summary: str
    factors: List[EligibilityFactor] = Field(default_factory=list)

    class Config:
        use_enum_values = True


class MatchResult(BaseModel):
    """Fit of a student against one school's statistics."""
    tier: SchoolTier
    sat_match: MetricMatch = MetricMatch.UNKNOWN
    act_match: MetricMatch = MetricMatch.UNKNOWN
    gpa_match: MetricMatch = MetricMatch.UNKNOWN
    overall_fit: int = Field(ge=0, le=100)

    class Config:
        use_enum_values = True

    @property
    def degraded(self) -> bool:
        """True when at least one metric could not be evaluated."""
        return MetricMatch.UNKNOWN in (self.sat_match, self.act_match, self.gpa_match)


class RankedSchool(BaseModel):
    """School candidate annotated with its match."""
    school: SchoolStatistics
    match: MatchResult


class RankedProgram(BaseModel):
    """Program candidate annotated with its eligibility verdict."""
    program: ProgramConstraint
    eligibility: EligibilityVerdict


class SchoolRanking(BaseModel):
    """Result of a school ranking run."""
    schools: List[RankedSchool] = Field(default_factory=list)
    total_found: int = 0


class ProgramRanking(BaseModel):
    """Result of a program ranking run."""
    programs: List[RankedProgram] = Field(default_factory=list)
    total_found: int = 0
    mode: str = "discovery"  # discovery/llm


# =============================================================================
# GENERATOR & CACHE CONTRACTS
# =============================================================================

class StudentStage(BaseModel):
    """Where the student is in the admissions calendar."""
    stage: str          # e.g. "junior_fall"
    grade: str          # freshman/sophomore/junior/senior
    season: str         # fall/winter/spring/summer
    description: str = ""
    priorities: List[str] = Field(default_factory=list)
    target_program_year: int


class GenerationRequest(BaseModel):
    """Input handed to every recommendation generator."""
    student: StudentSnapshot
    stage: StudentStage
    preferences: Dict[str, Any] = Field(default_factory=dict)
    candidate_programs: List[ProgramConstraint] = Field(default_factory=list)
    candidate_schools: List[SchoolStatistics] = Field(default_factory=list)
    listed_schools: List[SchoolStatistics] = Field(default_factory=list)  # already on the student's list


class GeneratedRecommendation(BaseModel):
    """A single recommendation produced by a generator."""
    category: str  # school/program
    title: str
    subtitle: Optional[str] = None
    reasoning: str = ""
    fit_score: float = Field(default=0.5, ge=0.0, le=1.0)
    priority: str = "medium"  # high/medium/low
    action_items: List[str] = Field(default_factory=list)
    relevant_grade: Optional[str] = None
    school_id: Optional[str] = None
    summer_program_id: Optional[str] = None
    expires_at: Optional[date] = None


class RecommendationBundle(BaseModel):
    """What the cache stores per profile."""
    recommendations: List[Dict[str, Any]] = Field(default_factory=list)
    stage: Optional[StudentStage] = None
    last_generated: Optional[datetime] = None
