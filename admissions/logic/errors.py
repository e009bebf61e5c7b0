"""
Engine errors.

Business outcomes (ineligible, unknown metrics) are values, not exceptions.
These are only raised for missing or malformed input that the caller
maps to an HTTP status.
"""

from typing import Optional


class AdmissionsError(Exception):
    """Base class for engine errors."""
    status_code = 500


class ValidationError(AdmissionsError):
    """Required input to the engine is missing or malformed."""
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ProfileNotFound(ValidationError):
    status_code = 404

    def __init__(self, profile_id: str):
        super().__init__(f"Profile not found: {profile_id}")
        self.profile_id = profile_id


class SchoolNotFound(ValidationError):
    status_code = 404

    def __init__(self, school_id: str):
        super().__init__(f"School not found: {school_id}")
        self.school_id = school_id


class RecommendationNotFound(ValidationError):
    status_code = 404

    def __init__(self, recommendation_id: str):
        super().__init__(f"Recommendation not found: {recommendation_id}")
        self.recommendation_id = recommendation_id


class NotOwner(ValidationError):
    """The record belongs to another profile."""
    status_code = 403

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)
