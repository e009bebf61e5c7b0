"""
Shared fixtures: snapshot factories for the pure scorers and an in-memory
SQLite database for the adapter, runner and route tests.
"""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import Base
import admissions.models  # noqa: F401  (registers tables)
from admissions.logic.contracts import (
    CourseRecord,
    StudentSnapshot,
    ProgramConstraint,
    SchoolStatistics,
)


@pytest.fixture
def make_student():
    def _make(**overrides) -> StudentSnapshot:
        fields = {"profile_id": "student-1"}
        fields.update(overrides)
        if "courses" in fields:
            fields["courses"] = [
                c if isinstance(c, CourseRecord) else CourseRecord(**c) for c in fields["courses"]
            ]
        return StudentSnapshot(**fields)
    return _make


@pytest.fixture
def make_program():
    counter = {"n": 0}

    def _make(**overrides) -> ProgramConstraint:
        counter["n"] += 1
        fields = {"id": f"program-{counter['n']}", "name": f"Program {counter['n']}"}
        fields.update(overrides)
        return ProgramConstraint(**fields)
    return _make


@pytest.fixture
def make_school():
    counter = {"n": 0}

    def _make(**overrides) -> SchoolStatistics:
        counter["n"] += 1
        fields = {"id": f"school-{counter['n']}", "name": f"School {counter['n']}"}
        fields.update(overrides)
        return SchoolStatistics(**fields)
    return _make


@pytest.fixture
def today():
    return date(2026, 10, 17)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
