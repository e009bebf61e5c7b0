import json
from typing import Any, Dict, List

from admissions.logic.contracts import StudentSnapshot, StudentStage, ProgramConstraint
from .safety_rules import (
    SAFETY_RULES,
    SCHOOL_ROLE_DEFINITION,
    PROGRAM_ROLE_DEFINITION,
    SCHOOL_OUTPUT_FORMAT_INSTRUCTION,
    PROGRAM_OUTPUT_FORMAT_INSTRUCTION,
)


def _system_prompt(role: str, output_format: str) -> str:
    rules_str = "\n".join([f"- {rule}" for rule in SAFETY_RULES])

    return f"""{role}

SAFETY RULES (NON-NEGOTIABLE):
{rules_str}

OUTPUT FORMAT:
{output_format}
"""


def build_school_system_prompt() -> str:
    return _system_prompt(SCHOOL_ROLE_DEFINITION, SCHOOL_OUTPUT_FORMAT_INSTRUCTION)


def build_program_system_prompt() -> str:
    return _system_prompt(PROGRAM_ROLE_DEFINITION, PROGRAM_OUTPUT_FORMAT_INSTRUCTION)


def _profile_section(student: StudentSnapshot, stage: StudentStage) -> List[str]:
    parts = ["## Student Profile", ""]
    parts.append(f"**Grade:** {student.grade or 'Unknown'} (Class of {student.graduation_year or 'Unknown'})")

    parts.append("")
    parts.append("### Academics")
    if student.gpa_unweighted:
        parts.append(f"- GPA (Unweighted): {student.gpa_unweighted:.2f}")
    if student.gpa_weighted:
        parts.append(f"- GPA (Weighted): {student.gpa_weighted:.2f}")
    rigorous = [c.name for c in student.courses if c.level in ("ap", "ib", "honors", "dual_enrollment")]
    if rigorous:
        parts.append(f"- Advanced courses: {', '.join(rigorous)}")

    parts.append("")
    parts.append("### Testing")
    if student.sat_total:
        parts.append(f"- SAT: {student.sat_total}")
    if student.act_composite:
        parts.append(f"- ACT: {student.act_composite}")
    if not student.sat_total and not student.act_composite:
        parts.append("- No test scores on record yet")

    if student.interests:
        parts.append("")
        parts.append("### Interests")
        parts.append(f"- {', '.join(student.interests)}")

    parts.append("")
    parts.append("### Current Stage")
    parts.append(f"The student is a {stage.grade} in {stage.season}. {stage.description}")
    parts.append(f"Current priorities: {', '.join(stage.priorities)}")
    return parts


def _preferences_section(preferences: Dict[str, Any]) -> List[str]:
    if not preferences:
        return []
    parts = ["", "### Student Preferences"]
    for key, value in preferences.items():
        if value in (None, "", [], False):
            continue
        label = key.replace("_", " ")
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        parts.append(f"- {label}: {value}")
    return parts if len(parts) > 2 else []


def build_school_user_prompt(
    student: StudentSnapshot,
    stage: StudentStage,
    preferences: Dict[str, Any],
) -> str:
    """Prompt asking for a balanced college list."""
    parts = _profile_section(student, stage)
    parts.extend(_preferences_section(preferences))

    if student.existing_school_ids:
        parts.append("")
        parts.append(
            f"Note: The student already has {len(student.existing_school_ids)} schools on their list. "
            "Focus on schools that would complement their existing choices."
        )

    parts.append("")
    parts.append("TASK:")
    parts.append("Recommend 5-8 colleges that would be good fits. Include a mix of:")
    parts.append("- 2-3 Reach schools")
    parts.append("- 2-3 Target schools")
    parts.append("- 1-2 Safety schools")
    return "\n".join(parts)


def _minimize_program_data(programs: List[ProgramConstraint]) -> List[Dict[str, Any]]:
    """Helper to reduce program size for prompt."""
    minimized = []
    for p in programs:
        minimized.append({
            "id": p.id,
            "name": p.name,
            "organization": p.organization,
            "category": p.category,
            "focus_areas": p.focus_areas,
            "grades": [p.min_grade, p.max_grade],
            "deadline": p.application_deadline.isoformat() if p.application_deadline else None,
            "context": p.llm_context,
        })
    return minimized


def build_program_user_prompt(
    student: StudentSnapshot,
    stage: StudentStage,
    preferences: Dict[str, Any],
    programs: List[ProgramConstraint],
) -> str:
    """Prompt asking the advisor to pick from the pre-screened program list."""
    parts = _profile_section(student, stage)
    parts.extend(_preferences_section(preferences))

    parts.append("")
    parts.append("AVAILABLE PROGRAMS (already screened for eligibility):")
    parts.append(json.dumps(_minimize_program_data(programs), indent=2))

    parts.append("")
    parts.append("TASK:")
    parts.append("Pick the 3-5 programs from this list that best fit the student and explain why.")
    return "\n".join(parts)
