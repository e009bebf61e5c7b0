import uuid

from sqlalchemy import Column, Integer, String, Float, Text, Boolean, Date, JSON

from db import Base


class SummerProgram(Base):
    __tablename__ = "summer_programs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    short_name = Column(String)
    organization = Column(String)
    description = Column(Text)
    location = Column(String)
    format = Column(String)  # residential/commuter/online
    category = Column(String)
    focus_areas = Column(JSON, default=list)
    website_url = Column(String)

    # Timing
    program_year = Column(Integer)
    start_date = Column(Date)
    application_deadline = Column(Date)
    is_active = Column(Boolean, default=True, nullable=False)

    # Eligibility
    min_grade = Column(Integer)
    max_grade = Column(Integer)
    min_age = Column(Integer)
    max_age = Column(Integer)
    min_gpa_unweighted = Column(Float)
    min_gpa_weighted = Column(Float)
    citizenship = Column(String)  # us_only/us_permanent_resident/international_ok
    required_courses = Column(JSON, default=list)
    eligibility_notes = Column(Text)

    # Context for the LLM advisor
    llm_context = Column(Text)
