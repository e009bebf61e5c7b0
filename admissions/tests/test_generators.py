"""
Tests for the LLM-backed recommendation generators with a stubbed OpenAI client.
"""

import json
from datetime import date
from types import SimpleNamespace

import httpx
import openai
import pytest

from admissions import config
from admissions.ai.generators import (
    OpenAIProgramGenerator,
    OpenAISchoolGenerator,
    StaticGenerator,
)
from admissions.logic.contracts import GenerationRequest, GeneratedRecommendation
from admissions.logic.stage import get_student_stage


class StubCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def stub_client(payload=None, raw=None, error=None):
    content = raw if raw is not None else json.dumps(payload)
    completions = StubCompletions(content=content, error=error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.fixture
def request_for(make_student, make_program, make_school):
    def _make(today=date(2026, 10, 17), grade="11th"):
        return GenerationRequest(
            student=make_student(grade=grade, sat_total=1450, gpa_unweighted=3.7),
            stage=get_student_stage(grade=grade, today=today),
            candidate_programs=[
                make_program(id="rsi", name="Research Science Institute", organization="CEE",
                             application_deadline=date(2027, 1, 15)),
                make_program(id="tasp", name="Telluride Association Summer Program"),
            ],
            candidate_schools=[make_school(id="mit", name="Massachusetts Institute of Technology", short_name="MIT")],
        )
    return _make


def test_program_generator_keeps_only_offered_programs(request_for):
    client = stub_client({"recommendations": [
        {"program_id": "rsi", "reasoning": "Strong research fit.", "fit_score": 0.9,
         "priority": "high", "action_items": ["Ask for recommendation letters"]},
        {"program_id": "made-up", "reasoning": "Not offered.", "fit_score": 0.8, "priority": "high"},
    ]})

    results = OpenAIProgramGenerator(client=client).generate(request_for())

    assert len(results) == 1
    rec = results[0]
    assert rec.category == "program"
    assert rec.title == "Research Science Institute"
    assert rec.subtitle == "CEE"
    assert rec.summer_program_id == "rsi"
    assert rec.expires_at == date(2027, 1, 15)
    assert rec.relevant_grade == "junior"
    assert rec.action_items == ["Ask for recommendation letters"]

    call = client.chat.completions.calls[0]
    assert call["response_format"] == {"type": "json_object"}
    assert "rsi" in call["messages"][1]["content"]


def test_program_generator_skips_seniors_in_spring(request_for):
    client = stub_client({"recommendations": []})

    results = OpenAIProgramGenerator(client=client).generate(request_for(today=date(2027, 4, 1), grade="12th"))

    assert results == []
    assert client.chat.completions.calls == []


def test_school_generator_resolves_known_schools(request_for):
    client = stub_client({"recommendations": [
        {"name": "MIT", "tier": "reach", "reasoning": "Robotics.", "fit_score": 1.7, "priority": "urgent"},
        {"name": "Unlisted College", "tier": "safety", "reasoning": "Good value.", "fit_score": 0.6},
        {"tier": "target"},
    ]})

    results = OpenAISchoolGenerator(client=client).generate(request_for())

    assert [r.title for r in results] == ["MIT", "Unlisted College"]
    assert results[0].school_id == "mit"
    assert results[0].subtitle == "Reach School"
    assert results[0].fit_score == 1.0
    assert results[0].priority == "medium"
    assert results[1].school_id is None
    assert results[1].subtitle == "Safety School"


def test_missing_api_key_yields_nothing(request_for, monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", None)

    assert OpenAISchoolGenerator().generate(request_for()) == []
    assert OpenAIProgramGenerator().generate(request_for()) == []


def test_unparseable_answer_yields_nothing(request_for):
    client = stub_client(raw="not json")
    assert OpenAISchoolGenerator(client=client).generate(request_for()) == []


def test_api_error_yields_nothing(request_for):
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    client = stub_client(error=error)

    assert OpenAIProgramGenerator(client=client).generate(request_for()) == []


def test_static_generator_records_requests(request_for):
    rec = GeneratedRecommendation(category="school", title="Static U")
    generator = StaticGenerator([rec])

    assert generator.generate(request_for()) == [rec]
    assert len(generator.calls) == 1


def test_malformed_items_are_skipped(request_for):
    client = stub_client({"recommendations": [
        {"name": "Good College", "reasoning": "fine"},
        {"name": "Bad College", "reasoning": ["not", "a", "string"]},
        {"name": 42, "reasoning": "numeric name"},
    ]})

    results = OpenAISchoolGenerator(client=client).generate(request_for())

    assert [r.title for r in results] == ["Good College"]


def test_malformed_program_pick_is_skipped(request_for):
    client = stub_client({"recommendations": [
        {"program_id": "rsi", "reasoning": {"why": "nested"}},
        {"program_id": "tasp", "reasoning": "Writing seminar."},
    ]})

    results = OpenAIProgramGenerator(client=client).generate(request_for())

    assert [r.summer_program_id for r in results] == ["tasp"]


def test_school_generator_drops_schools_already_listed(request_for, make_school):
    request = request_for().model_copy(update={
        "listed_schools": [make_school(id="stanford", name="Stanford University", short_name="Stanford")],
    })
    client = stub_client({"recommendations": [
        {"name": "Stanford", "tier": "reach", "reasoning": "Already applying."},
        {"name": "MIT", "tier": "reach", "reasoning": "Robotics."},
    ]})

    results = OpenAISchoolGenerator(client=client).generate(request)

    assert [r.title for r in results] == ["MIT"]
    assert results[0].school_id == "mit"
