# All admissions tables share the metadata on db.Base
from db import Base
from .school import School
from .summer_program import SummerProgram
from .student import (
    StudentProfile,
    StudentCourse,
    SatScore,
    ActScore,
    StudentSchool,
    StudentSummerProgram,
)
from .recommendation import Recommendation

__all__ = [
    "Base",
    "School",
    "SummerProgram",
    "StudentProfile",
    "StudentCourse",
    "SatScore",
    "ActScore",
    "StudentSchool",
    "StudentSummerProgram",
    "Recommendation",
]
