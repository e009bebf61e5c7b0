"""
Recommendation Generators

Pluggable producers of recommendations. The OpenAI-backed generators ask an
LLM advisor for schools and summer programs; the static generator returns a
fixed list and stands in for them in tests and offline runs.

Generators never raise for provider trouble: a missing key, an API error or an
unparseable answer is logged and yields an empty list. A malformed item in an
otherwise good answer is skipped.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import openai
from pydantic import ValidationError

from admissions import config
from admissions.logic.contracts import GenerationRequest, GeneratedRecommendation, SchoolStatistics
from admissions.logic.stage import accepts_program_recommendations
from .prompt_builder import (
    build_school_system_prompt,
    build_school_user_prompt,
    build_program_system_prompt,
    build_program_user_prompt,
)

logger = logging.getLogger(__name__)

PRIORITIES = ("high", "medium", "low")
SCHOOL_TIERS = ("reach", "target", "safety")


class RecommendationGenerator(ABC):
    """Produces recommendations for one student."""

    name = "generator"

    @abstractmethod
    def generate(self, request: GenerationRequest) -> List[GeneratedRecommendation]:
        ...


class StaticGenerator(RecommendationGenerator):
    """Returns the same recommendations for every request."""

    name = "static"

    def __init__(self, recommendations: Optional[List[GeneratedRecommendation]] = None):
        self.recommendations = list(recommendations or [])
        self.calls: List[GenerationRequest] = []

    def generate(self, request: GenerationRequest) -> List[GeneratedRecommendation]:
        self.calls.append(request)
        return list(self.recommendations)


def _fit_score(value: Any) -> float:
    try:
        return max(0.0, min(1.0, float(value)))
    except (TypeError, ValueError):
        return 0.5


def _priority(value: Any) -> str:
    return value if value in PRIORITIES else "medium"


def _action_items(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]


def _school_names(schools: List[SchoolStatistics]) -> Dict[str, str]:
    names = {}
    for school in schools:
        names[school.name.lower()] = school.id
        if school.short_name:
            names.setdefault(school.short_name.lower(), school.id)
    return names


class OpenAIGenerator(RecommendationGenerator):
    """Shared OpenAI chat-completion plumbing."""

    def __init__(self, client=None, model: Optional[str] = None):
        self.api_key = config.OPENAI_API_KEY
        self.client = client
        if self.client is None and self.api_key:
            self.client = openai.OpenAI(api_key=self.api_key, timeout=config.LLM_TIMEOUT_SECONDS)

        self.model = model or config.OPENAI_MODEL
        self.max_tokens = config.OPENAI_MAX_TOKENS
        self.temperature = config.OPENAI_TEMPERATURE

    def complete(self, system_prompt: str, user_prompt: str) -> Optional[Dict[str, Any]]:
        """
        Run one JSON-mode completion.
        Returns None if API key is missing or error occurs.
        """
        if not self.client:
            logger.warning(f"OpenAI API key not found. Skipping {self.name} recommendations.")
            return None

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            logger.warning(f"Error generating {self.name} recommendations: {e}")
            return None

        content = response.choices[0].message.content
        if not content:
            return None

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Unparseable {self.name} advisor response: {e}")
            return None

        if not isinstance(parsed, dict):
            return None
        return parsed


class OpenAISchoolGenerator(OpenAIGenerator):
    """Asks the advisor for a balanced college list."""

    name = "school"

    def generate(self, request: GenerationRequest) -> List[GeneratedRecommendation]:
        parsed = self.complete(
            build_school_system_prompt(),
            build_school_user_prompt(request.student, request.stage, request.preferences),
        )
        if not parsed:
            return []

        # Resolve advisor names against known schools where possible
        known = _school_names(request.candidate_schools)
        listed = _school_names(request.listed_schools)

        results = []
        for rec in parsed.get("recommendations") or []:
            if not isinstance(rec, dict) or not rec.get("name"):
                continue
            try:
                key = str(rec["name"]).strip().lower()
                if key in listed:
                    logger.debug(f"Advisor named a school already on the list: {rec['name']}")
                    continue
                tier = rec.get("tier")
                results.append(GeneratedRecommendation(
                    category="school",
                    title=rec["name"],
                    subtitle=f"{tier.capitalize()} School" if tier in SCHOOL_TIERS else None,
                    reasoning=rec.get("reasoning") or "",
                    fit_score=_fit_score(rec.get("fit_score")),
                    priority=_priority(rec.get("priority")),
                    action_items=_action_items(rec.get("action_items")),
                    relevant_grade=request.stage.grade,
                    school_id=known.get(key),
                ))
            except ValidationError as e:
                logger.debug(f"Skipping malformed school recommendation {rec.get('name')!r}: {e}")

        logger.info(f"School advisor returned {len(results)} recommendations")
        return results


class OpenAIProgramGenerator(OpenAIGenerator):
    """Asks the advisor to pick from the pre-screened program list."""

    name = "program"

    def generate(self, request: GenerationRequest) -> List[GeneratedRecommendation]:
        if not accepts_program_recommendations(request.stage):
            return []
        if not request.candidate_programs:
            return []

        parsed = self.complete(
            build_program_system_prompt(),
            build_program_user_prompt(
                request.student, request.stage, request.preferences, request.candidate_programs
            ),
        )
        if not parsed:
            return []

        offered = {p.id: p for p in request.candidate_programs}
        results = []
        for rec in parsed.get("recommendations") or []:
            if not isinstance(rec, dict):
                continue
            program = offered.get(str(rec.get("program_id")))
            if program is None:
                logger.debug(f"Advisor picked a program that was not offered: {rec.get('program_id')}")
                continue
            try:
                results.append(GeneratedRecommendation(
                    category="program",
                    title=program.name,
                    subtitle=program.organization,
                    reasoning=rec.get("reasoning") or "",
                    fit_score=_fit_score(rec.get("fit_score")),
                    priority=_priority(rec.get("priority")),
                    action_items=_action_items(rec.get("action_items")),
                    relevant_grade=request.stage.grade,
                    summer_program_id=program.id,
                    expires_at=program.application_deadline,
                ))
            except ValidationError as e:
                logger.debug(f"Skipping malformed program recommendation {program.id}: {e}")

        logger.info(f"Program advisor returned {len(results)} recommendations")
        return results


def default_generators() -> List[RecommendationGenerator]:
    return [OpenAISchoolGenerator(), OpenAIProgramGenerator()]
