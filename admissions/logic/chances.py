"""
Quantitative Chances Calculator

Rule-based admission chances from GPA, test scores and acceptance rate.
Produces a baseline probability with a per-factor breakdown and a confidence
level reflecting how much data was available.
All logic is deterministic - no AI/ML components.
"""

from typing import Dict, List, Tuple

from pydantic import BaseModel, Field

from .contracts import StudentSnapshot, SchoolStatistics


# =============================================================================
# CONTRACTS
# =============================================================================

class FactorAssessment(BaseModel):
    """Assessment of a single factor."""
    score: int = Field(ge=0, le=100)
    impact: str  # strong_positive/positive/neutral/negative/strong_negative
    details: str


class QuantitativeResult(BaseModel):
    """Rule-based chances result."""
    base_probability: int = Field(ge=0, le=100)
    tier: str
    factors: Dict[str, FactorAssessment]
    confidence: str  # high/medium/low
    confidence_reason: str


# =============================================================================
# CONSTANTS
# =============================================================================

# Academics 35%, Testing 35%, Base acceptance rate 30%
FACTOR_WEIGHTS: Dict[str, float] = {
    "academics": 0.35,
    "testing": 0.35,
    "acceptance_rate": 0.30,
}

# Chances can't exceed ~2.5x the acceptance rate, and never 80%
ACCEPTANCE_CEILING_MULTIPLIER = 2.5
MAX_PROBABILITY = 80
MIN_PROBABILITY = 1

ACT_TO_SAT: Dict[int, int] = {
    36: 1600, 35: 1570, 34: 1530, 33: 1500, 32: 1470,
    31: 1440, 30: 1410, 29: 1380, 28: 1350, 27: 1320,
    26: 1290, 25: 1260, 24: 1230, 23: 1200, 22: 1170,
    21: 1140, 20: 1110, 19: 1080, 18: 1050, 17: 1020,
}

# (max acceptance rate, target GPA, tolerance) when the school has no GPA average
GPA_BENCHMARKS: List[Tuple[float, float, float, str]] = [
    (0.15, 3.95, 0.1, "highly selective school"),
    (0.40, 3.7, 0.2, "selective school"),
]
DEFAULT_GPA_BENCHMARK = (3.3, 0.3)

# (max acceptance rate, target SAT, tolerance) when the school has no SAT range
SAT_BENCHMARKS: List[Tuple[float, int, int, str]] = [
    (0.10, 1550, 30, "highly selective school"),
    (0.25, 1480, 40, "very selective school"),
    (0.50, 1350, 60, "selective school"),
]
DEFAULT_SAT_BENCHMARK = (1200, 80)


# =============================================================================
# HELPERS
# =============================================================================

def act_to_sat(act: int) -> int:
    """Rough ACT composite to SAT total conversion."""
    return ACT_TO_SAT.get(act, 1000 + (act - 16) * 30)


def impact_level(score: float) -> str:
    if score >= 85:
        return "strong_positive"
    if score >= 70:
        return "positive"
    if score >= 50:
        return "neutral"
    if score >= 35:
        return "negative"
    return "strong_negative"


def tier_from_probability(probability: float) -> str:
    """Tier label for a probability in percent."""
    if probability < 15:
        return "unlikely"
    if probability < 30:
        return "reach"
    if probability < 50:
        return "target"
    if probability < 70:
        return "likely"
    return "safety"


def _relative_score(diff: float, tolerance: float, step: float) -> float:
    """Score a value relative to a target: 75 at target, falling to a floor of 20."""
    if diff >= 0:
        return min(100, 75 + diff / step * 10)
    if diff >= -tolerance:
        return 75 + (diff / tolerance) * 25
    return max(20, 50 + (diff + tolerance) / tolerance * 30)


def gpa_benchmark_score(gpa: float, target: float, tolerance: float) -> float:
    return _relative_score(gpa - target, tolerance, 0.1)


def sat_benchmark_score(sat: int, target: int, tolerance: int) -> float:
    return _relative_score(sat - target, tolerance, 30)


def _neutral(details: str) -> FactorAssessment:
    return FactorAssessment(score=50, impact="neutral", details=details)


def _assessment(score: float, details: str) -> FactorAssessment:
    return FactorAssessment(score=round(score), impact=impact_level(score), details=details)


# =============================================================================
# FACTOR ASSESSMENTS
# =============================================================================

def assess_academics(student: StudentSnapshot, school: SchoolStatistics) -> FactorAssessment:
    """Assess GPA against the school average, or against a selectivity benchmark."""
    gpa = student.gpa_unweighted
    if not gpa:
        return _neutral("GPA not provided - cannot assess academic standing")

    school_avg = school.avg_gpa_unweighted
    if not school_avg:
        rate = school.acceptance_rate
        for max_rate, target, tolerance, label in GPA_BENCHMARKS:
            if rate and rate < max_rate:
                return _assessment(gpa_benchmark_score(gpa, target, tolerance), f"GPA {gpa:.2f} for {label}")
        target, tolerance = DEFAULT_GPA_BENCHMARK
        return _assessment(gpa_benchmark_score(gpa, target, tolerance), f"GPA {gpa:.2f}")

    diff = gpa - school_avg
    if diff >= 0.1:
        score = 85 + min(diff * 50, 15)
        details = f"Your GPA {gpa:.2f} is above the school average of {school_avg:.2f}"
    elif diff >= 0:
        score = 70 + diff * 150
        details = f"Your GPA {gpa:.2f} is at the school average of {school_avg:.2f}"
    elif diff >= -0.2:
        score = 50 + diff * 100
        details = f"Your GPA {gpa:.2f} is slightly below the school average of {school_avg:.2f}"
    else:
        score = max(20, 50 + diff * 75)
        details = f"Your GPA {gpa:.2f} is below the school average of {school_avg:.2f}"

    return _assessment(score, details)


def assess_testing(student: StudentSnapshot, school: SchoolStatistics) -> FactorAssessment:
    """Assess SAT (or ACT converted to SAT) against the school's range."""
    sat = student.sat_total
    if not sat and student.act_composite:
        sat = act_to_sat(student.act_composite)
    if not sat:
        return _neutral("No test scores provided")

    range_25 = school.sat_range_25
    range_75 = school.sat_range_75

    if not range_25 or not range_75:
        rate = school.acceptance_rate
        for max_rate, target, tolerance, label in SAT_BENCHMARKS:
            if rate and rate < max_rate:
                return _assessment(sat_benchmark_score(sat, target, tolerance), f"SAT {sat} for {label}")
        target, tolerance = DEFAULT_SAT_BENCHMARK
        return _assessment(sat_benchmark_score(sat, target, tolerance), f"SAT {sat}")

    median = (range_25 + range_75) / 2

    if sat >= range_75:
        score = 85 + min((sat - range_75) / 30 * 15, 15)
        details = f"Your SAT {sat} is above the 75th percentile ({range_75})"
    elif sat >= median:
        position = (sat - median) / (range_75 - median)
        score = 70 + position * 15
        details = f"Your SAT {sat} is between the median and 75th percentile"
    elif sat >= range_25:
        position = (sat - range_25) / (median - range_25)
        score = 50 + position * 20
        details = f"Your SAT {sat} is between the 25th percentile and median"
    else:
        score = max(15, 50 - (range_25 - sat) / 50 * 25)
        details = f"Your SAT {sat} is below the 25th percentile ({range_25})"

    return _assessment(score, details)


def assess_acceptance_rate(school: SchoolStatistics) -> FactorAssessment:
    """Higher acceptance rate gives a higher baseline."""
    rate = school.acceptance_rate
    if not rate:
        return _neutral("Acceptance rate data not available")

    percent = rate * 100
    if percent < 10:
        score, label, impact = percent * 2, "extremely selective", "strong_negative"
    elif percent < 25:
        score, label, impact = 20 + (percent - 10) * 1.5, "highly selective", "negative"
    elif percent < 50:
        score, label, impact = 42.5 + (percent - 25) * 1.1, "selective", "neutral"
    elif percent < 75:
        score, label, impact = 70 + (percent - 50) * 0.6, "moderately selective", "positive"
    else:
        score, label, impact = 85 + (percent - 75) * 0.4, "less selective", "strong_positive"

    return FactorAssessment(
        score=round(min(score, 95)),
        impact=impact,
        details=f"{percent:.1f}% acceptance rate - {label}",
    )


def determine_confidence(student: StudentSnapshot, school: SchoolStatistics) -> Tuple[str, str]:
    issues = []
    if not student.gpa_unweighted:
        issues.append("GPA not provided")
    if not student.sat_total and not student.act_composite:
        issues.append("no test scores")
    if not school.acceptance_rate:
        issues.append("school acceptance rate unknown")
    if not school.sat_range_25 and not school.sat_range_75:
        issues.append("school test score ranges unknown")

    if not issues:
        return "high", "Complete data available for assessment"
    if len(issues) <= 2:
        return "medium", f"Limited by: {', '.join(issues)}"
    return "low", f"Significant data gaps: {', '.join(issues)}"


# =============================================================================
# MAIN CALCULATOR
# =============================================================================

def calculate_quantitative(
    student: StudentSnapshot,
    school: SchoolStatistics,
) -> QuantitativeResult:
    """
    Calculate quantitative chances based on hard metrics.

    Args:
        student: Student snapshot
        school: School statistics

    Returns:
        QuantitativeResult with base probability (1-80), factors and confidence
    """
    factors = {
        "academics": assess_academics(student, school),
        "testing": assess_testing(student, school),
        "acceptance_rate": assess_acceptance_rate(school),
    }

    probability: float = sum(factors[name].score * weight for name, weight in FACTOR_WEIGHTS.items())

    if school.acceptance_rate:
        ceiling = min(school.acceptance_rate * 100 * ACCEPTANCE_CEILING_MULTIPLIER, MAX_PROBABILITY)
        probability = min(probability, ceiling)

    probability = round(max(probability, MIN_PROBABILITY))
    confidence, reason = determine_confidence(student, school)

    return QuantitativeResult(
        base_probability=probability,
        tier=tier_from_probability(probability),
        factors=factors,
        confidence=confidence,
        confidence_reason=reason,
    )
