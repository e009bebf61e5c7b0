import uuid

from sqlalchemy import Column, Integer, String, Float, Text, Boolean

from db import Base


class School(Base):
    __tablename__ = "schools"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    short_name = Column(String)
    city = Column(String)
    state = Column(String)
    type = Column(String)  # public/private
    undergrad_enrollment = Column(Integer)

    # Admissions statistics
    acceptance_rate = Column(Float)
    sat_range_25 = Column(Integer)
    sat_range_75 = Column(Integer)
    act_range_25 = Column(Integer)
    act_range_75 = Column(Integer)
    avg_gpa_unweighted = Column(Float)
    avg_gpa_weighted = Column(Float)

    # Application options
    has_early_decision = Column(Boolean, default=False)
    has_early_action = Column(Boolean, default=False)

    # Context for the LLM advisor
    notes = Column(Text)
