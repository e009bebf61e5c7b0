"""
Admissions Logic Module

Provides the deterministic scorers for school fit and summer-program
eligibility, the ranker that orders candidates, and the recommendation cache.
"""

from .contracts import (
    StudentSnapshot,
    CourseRecord,
    ProgramConstraint,
    SchoolStatistics,
    EligibilityVerdict,
    MatchResult,
    SchoolRanking,
    ProgramRanking,
)
from .eligibility import evaluate
from .school_fit import score
from .ranker import rank_schools, rank_programs
from .cache import RecommendationCache
from .constants import EligibilityStatus, SchoolTier, MetricMatch

__all__ = [
    # Scorers
    "evaluate",
    "score",
    "rank_schools",
    "rank_programs",
    "RecommendationCache",

    # Contracts
    "StudentSnapshot",
    "CourseRecord",
    "ProgramConstraint",
    "SchoolStatistics",
    "EligibilityVerdict",
    "MatchResult",
    "SchoolRanking",
    "ProgramRanking",

    # Enums
    "EligibilityStatus",
    "SchoolTier",
    "MetricMatch",
]
