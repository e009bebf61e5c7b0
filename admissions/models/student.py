import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, JSON, ForeignKey

from db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class StudentProfile(Base):
    __tablename__ = "student_profiles"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, index=True)
    first_name = Column(String)
    last_name = Column(String)
    birth_date = Column(Date)
    residency_status = Column(String)  # us_citizen/us_permanent_resident/international
    grade = Column(String)             # 9th/10th/11th/12th
    graduation_year = Column(Integer)

    # Academics
    gpa_unweighted = Column(Float)
    gpa_weighted = Column(Float)

    interests = Column(JSON, default=list)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class StudentCourse(Base):
    __tablename__ = "student_courses"

    id = Column(String, primary_key=True, default=_uuid)
    student_profile_id = Column(String, ForeignKey("student_profiles.id"), index=True, nullable=False)
    name = Column(String, nullable=False)
    level = Column(String)   # regular/honors/ap/ib/dual_enrollment
    status = Column(String)  # completed/in_progress/planned
    grade = Column(String)


class SatScore(Base):
    __tablename__ = "sat_scores"

    id = Column(String, primary_key=True, default=_uuid)
    student_profile_id = Column(String, ForeignKey("student_profiles.id"), index=True, nullable=False)
    total = Column(Integer, nullable=False)
    math = Column(Integer)
    reading = Column(Integer)
    test_date = Column(Date)


class ActScore(Base):
    __tablename__ = "act_scores"

    id = Column(String, primary_key=True, default=_uuid)
    student_profile_id = Column(String, ForeignKey("student_profiles.id"), index=True, nullable=False)
    composite = Column(Integer, nullable=False)
    test_date = Column(Date)


class StudentSchool(Base):
    """A school on the student's list."""
    __tablename__ = "student_schools"

    id = Column(String, primary_key=True, default=_uuid)
    student_profile_id = Column(String, ForeignKey("student_profiles.id"), index=True, nullable=False)
    school_id = Column(String, ForeignKey("schools.id"))
    calculated_chance = Column(Float)
    chance_updated_at = Column(DateTime)


class StudentSummerProgram(Base):
    """A summer program on the student's list."""
    __tablename__ = "student_summer_programs"

    id = Column(String, primary_key=True, default=_uuid)
    student_profile_id = Column(String, ForeignKey("student_profiles.id"), index=True, nullable=False)
    summer_program_id = Column(String, ForeignKey("summer_programs.id"))
    status = Column(String)  # interested/applying/accepted
