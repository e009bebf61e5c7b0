import uuid
from datetime import datetime

from sqlalchemy import Column, String, Float, Text, Date, DateTime, JSON, ForeignKey

from db import Base


class Recommendation(Base):
    __tablename__ = "recommendations"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    student_profile_id = Column(String, ForeignKey("student_profiles.id"), index=True, nullable=False)

    category = Column(String, nullable=False)  # school/program
    title = Column(String, nullable=False)
    subtitle = Column(String)
    reasoning = Column(Text)
    fit_score = Column(Float)
    priority = Column(String)  # high/medium/low
    action_items = Column(JSON, default=list)
    relevant_grade = Column(String)

    school_id = Column(String, ForeignKey("schools.id"))
    summer_program_id = Column(String, ForeignKey("summer_programs.id"))

    # Eligibility at generation time (programs only)
    eligibility_status = Column(String)
    eligibility_summary = Column(Text)

    # Lifecycle
    status = Column(String, default="active", nullable=False)  # active/saved/dismissed/acted_upon
    feedback = Column(Text)
    generated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(Date)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
