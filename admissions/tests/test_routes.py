"""
API tests through FastAPI's TestClient against an in-memory database.
"""

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from db import get_db
from main import app
from admissions.auth import create_token
from admissions.ai.generators import StaticGenerator
from admissions.logic.cache import RecommendationCache
from admissions.logic.contracts import GeneratedRecommendation
from admissions.models import StudentProfile, SatScore, School, SummerProgram, Recommendation
from admissions.routes import get_generators, clamp_limit


@pytest.fixture
def seeded(db_session):
    next_month = date.today() + timedelta(days=30)
    db_session.add_all([
        StudentProfile(id="p1", grade="11th", gpa_unweighted=3.8, residency_status="us_citizen"),
        StudentProfile(id="p2", grade="10th"),
        SatScore(student_profile_id="p1", total=1500),
        # safety (80), target (65), reach (30)
        School(id="safe", name="Safe State", sat_range_25=1200, sat_range_75=1400,
               avg_gpa_unweighted=3.3, acceptance_rate=0.6),
        School(id="target", name="Target Tech", sat_range_25=1450, sat_range_75=1550,
               avg_gpa_unweighted=3.8, acceptance_rate=0.3),
        School(id="reach", name="Reach University", sat_range_25=1520, sat_range_75=1580,
               avg_gpa_unweighted=3.95, acceptance_rate=0.05),
        SummerProgram(id="rsi", name="Research Science Institute", short_name="RSI",
                      focus_areas=["STEM"], application_deadline=next_month, min_grade=11, max_grade=11),
        SummerProgram(id="young", name="Young Scholars", focus_areas=["STEM"], max_grade=10),
        SummerProgram(id="notes", name="Notes Camp", focus_areas=["Arts"],
                      eligibility_notes="Portfolio required"),
    ])
    db_session.flush()
    return db_session


@pytest.fixture
def generator():
    return StaticGenerator([
        GeneratedRecommendation(category="school", title="Advisor Pick College", reasoning="Fits interests.",
                                fit_score=0.7, priority="high"),
    ])


@pytest.fixture
def client(seeded, generator):
    def override_get_db():
        yield seeded

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_generators] = lambda: [generator]
    app.state.recommendation_cache = RecommendationCache()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth(profile_id="p1"):
    return {"Authorization": f"Bearer {create_token(profile_id)}"}


def test_health(client):
    resp = client.get("/api/recommendations/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_requires_token(client):
    assert client.get("/api/recommendations/schools").status_code == 401
    resp = client.get("/api/recommendations/schools", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_unknown_profile_is_404(client):
    resp = client.get("/api/recommendations/schools", headers=auth("ghost"))
    assert resp.status_code == 404


def test_school_slate(client):
    resp = client.get("/api/recommendations/schools", headers=auth())
    assert resp.status_code == 200

    body = resp.json()
    assert [s["id"] for s in body["schools"]] == ["reach", "target", "safe"]
    assert body["schools"][1]["match"] == {
        "tier": "target", "satMatch": "within", "actMatch": "unknown", "gpaMatch": "within", "overallFit": 65,
    }
    assert body["studentStats"] == {"sat": 1500, "act": None, "gpa": 3.8}


def test_school_tier_filter(client):
    resp = client.get("/api/recommendations/schools?tier=safety", headers=auth())
    assert [s["id"] for s in resp.json()["schools"]] == ["safe"]

    assert client.get("/api/recommendations/schools?tier=easy", headers=auth()).status_code == 422


def test_limit_is_clamped():
    assert clamp_limit(None) == 6
    assert clamp_limit(0) == 6
    assert clamp_limit(10) == 10
    assert clamp_limit(500) == 50


def test_program_discovery(client):
    resp = client.get("/api/recommendations/programs", headers=auth())
    body = resp.json()

    assert body["mode"] == "discovery"
    assert [p["id"] for p in body["programs"]] == ["rsi", "notes"]
    assert body["totalFound"] == 2
    assert body["programs"][1]["eligibility"]["status"] == "check_required"
    assert body["programs"][1]["eligibility"]["summary"] == "Portfolio required"


def test_program_focus_filter(client):
    resp = client.get("/api/recommendations/programs?focus=arts", headers=auth())
    assert [p["id"] for p in resp.json()["programs"]] == ["notes"]


def test_program_lookup_keeps_ineligible(client):
    resp = client.get("/api/recommendations/programs?programs=Young Scholars, RSI", headers=auth())
    body = resp.json()

    assert body["mode"] == "llm"
    assert [p["id"] for p in body["programs"]] == ["young", "rsi"]
    assert body["programs"][0]["eligibility"]["status"] == "ineligible"
    assert body["totalFound"] == 1


def test_generate_then_read_from_cache(client, generator):
    resp = client.post("/api/recommendations", headers=auth(), json={"preferences": {"region": "Northeast"}})
    assert resp.status_code == 200

    titles = [r["title"] for r in resp.json()["recommendations"]]
    assert "Advisor Pick College" in titles
    assert "Target Tech" in titles
    assert generator.calls[0].preferences == {"region": "Northeast"}

    resp = client.get("/api/recommendations", headers=auth())
    body = resp.json()
    assert body["fromCache"] is True
    assert body["stage"]["grade"] == "junior"


def test_get_rebuilds_on_cold_cache(client):
    resp = client.get("/api/recommendations", headers=auth())
    body = resp.json()

    assert resp.status_code == 200
    assert "fromCache" not in body
    assert body["recommendations"] == []
    assert client.get("/api/recommendations", headers=auth()).json()["fromCache"] is True


def test_regenerating_keeps_saved_recommendations(client, seeded):
    client.post("/api/recommendations", headers=auth())
    saved = seeded.query(Recommendation).filter_by(title="Advisor Pick College").one()
    assert client.patch(f"/api/recommendations/{saved.id}", headers=auth(), json={"action": "save"}).status_code == 200

    client.post("/api/recommendations", headers=auth())

    rows = seeded.query(Recommendation).filter_by(title="Advisor Pick College").all()
    assert [r.status for r in rows] == ["saved"]


def test_patch_actions(client, seeded):
    client.post("/api/recommendations", headers=auth())
    rec = seeded.query(Recommendation).filter_by(student_profile_id="p1").first()

    resp = client.patch(f"/api/recommendations/{rec.id}", headers=auth(),
                        json={"action": "dismiss", "feedback": "Too far away"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "dismissed"
    assert resp.json()["feedback"] == "Too far away"

    # Dismissing invalidated the cached bundle
    body = client.get("/api/recommendations", headers=auth()).json()
    assert "fromCache" not in body
    assert rec.id not in [r["id"] for r in body["recommendations"]]


def test_patch_errors(client, seeded):
    client.post("/api/recommendations", headers=auth())
    rec = seeded.query(Recommendation).filter_by(student_profile_id="p1").first()

    assert client.patch("/api/recommendations/missing", headers=auth(), json={"action": "save"}).status_code == 404
    assert client.patch(f"/api/recommendations/{rec.id}", headers=auth("p2"), json={"action": "save"}).status_code == 403
    assert client.patch(f"/api/recommendations/{rec.id}", headers=auth(), json={"action": "archive"}).status_code == 400


def test_chances(client):
    resp = client.post("/api/chances", headers=auth(), json={"schoolId": "target"})
    assert resp.status_code == 200

    body = resp.json()
    assert body["schoolName"] == "Target Tech"
    assert 1 <= body["probability"] <= 80
    assert set(body["factors"]) == {"academics", "testing", "acceptance_rate"}

    assert client.post("/api/chances", headers=auth(), json={}).status_code == 400
    assert client.post("/api/chances", headers=auth(), json={"schoolId": "nope"}).status_code == 404


def test_profile_update_invalidates_cache(client, seeded):
    client.get("/api/recommendations", headers=auth())
    assert "p1" in app.state.recommendation_cache

    resp = client.put("/api/profile", headers=auth(), json={"gpaUnweighted": 3.95, "birthDate": "2009-05-01"})
    assert resp.status_code == 200
    assert resp.json()["updated"] == ["birthDate", "gpaUnweighted"]
    assert "p1" not in app.state.recommendation_cache

    profile = seeded.get(StudentProfile, "p1")
    assert profile.gpa_unweighted == 3.95
    assert profile.birth_date == date(2009, 5, 1)


def test_chances_for_malformed_school(client, seeded):
    seeded.add(School(id="broken", name="Broken University", sat_range_25="n/a"))
    seeded.flush()

    resp = client.post("/api/chances", headers=auth(), json={"schoolId": "broken"})
    assert resp.status_code == 422
