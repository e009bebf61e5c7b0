"""
Scoring Engine Constants

Defines the enums, point adjustments, thresholds and tie-break tables used by the
eligibility evaluator, the school-fit scorer and the ranker.
All values are deterministic with no AI/ML components.
"""

from enum import Enum
from typing import Dict


# =============================================================================
# ENUMS
# =============================================================================

class EligibilityStatus(str, Enum):
    """Outcome of checking a student against a program's structural requirements."""
    ELIGIBLE = "eligible"
    CHECK_REQUIRED = "check_required"
    UNKNOWN = "unknown"
    INELIGIBLE = "ineligible"


class SchoolTier(str, Enum):
    """Classification of a school relative to the student's competitiveness."""
    REACH = "reach"
    TARGET = "target"
    SAFETY = "safety"


class MetricMatch(str, Enum):
    """Where a single student metric falls against a school's range."""
    BELOW = "below"
    WITHIN = "within"
    ABOVE = "above"
    UNKNOWN = "unknown"


class Citizenship(str, Enum):
    """Program citizenship restriction."""
    US_ONLY = "us_only"
    US_PERMANENT_RESIDENT = "us_permanent_resident"
    INTERNATIONAL_OK = "international_ok"


# =============================================================================
# ELIGIBILITY
# =============================================================================

# Severity used to combine factors: the highest value wins
ELIGIBILITY_SEVERITY: Dict[str, int] = {
    EligibilityStatus.ELIGIBLE.value: 0,
    EligibilityStatus.UNKNOWN.value: 1,
    EligibilityStatus.CHECK_REQUIRED.value: 2,
    EligibilityStatus.INELIGIBLE.value: 3,
}

# Sort key for program ranking (lower = better)
ELIGIBILITY_ORDER: Dict[str, int] = {
    EligibilityStatus.ELIGIBLE.value: 0,
    EligibilityStatus.CHECK_REQUIRED.value: 1,
    EligibilityStatus.UNKNOWN.value: 2,
    EligibilityStatus.INELIGIBLE.value: 3,
}

GRADE_NUMBER_MAP: Dict[str, int] = {
    "9th": 9,
    "10th": 10,
    "11th": 11,
    "12th": 12,
    "freshman": 9,
    "sophomore": 10,
    "junior": 11,
    "senior": 12,
}

# Unparseable grades are treated as a junior
DEFAULT_GRADE_NUMBER = 11

# Residency statuses that satisfy each citizenship restriction
CITIZENSHIP_ACCEPTED_RESIDENCY: Dict[str, tuple] = {
    Citizenship.US_ONLY.value: ("us_citizen",),
    Citizenship.US_PERMANENT_RESIDENT.value: ("us_citizen", "us_permanent_resident"),
}

# Course statuses that count toward required courses
COUNTED_COURSE_STATUSES = ("completed", "in_progress")


# =============================================================================
# SCHOOL FIT
# =============================================================================

NEUTRAL_FIT_SCORE = 50
MIN_FIT_SCORE = 0
MAX_FIT_SCORE = 100

# Test score adjustments (shared by SAT and ACT)
TEST_ABOVE_POINTS = 15
TEST_WITHIN_POINTS = 10
TEST_BELOW_POINTS = -15

# GPA tolerance band around the school's average unweighted GPA
GPA_BAND_BELOW = 0.3
GPA_BAND_ABOVE = 0.2
GPA_SCALE_MAX = 4.0
GPA_ABOVE_POINTS = 10
GPA_WITHIN_POINTS = 5
GPA_BELOW_POINTS = -10

# Acceptance rate adjustments
SELECTIVE_RATE_THRESHOLD = 0.10
SELECTIVE_RATE_PENALTY = -10
ACCESSIBLE_RATE_THRESHOLD = 0.50
ACCESSIBLE_RATE_BONUS = 5

# A high fit score maps to "safety"
SAFETY_MIN_SCORE = 70
TARGET_MIN_SCORE = 40


# =============================================================================
# RANKING CONFIGURATION
# =============================================================================

DEFAULT_RESULT_LIMIT = 6
MAX_PER_TIER_IN_SLATE = 2
BALANCED_SLATE_ORDER = (SchoolTier.REACH, SchoolTier.TARGET, SchoolTier.SAFETY)

# Missing acceptance rate sorts as least selective
MISSING_ACCEPTANCE_RATE = 1.0

# Unmatched names in lookup mode sort after every matched one
UNMATCHED_NAME_ORDER = 999
