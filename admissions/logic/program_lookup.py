"""
Program Lookup

Finds programs by the free-form names an LLM advisor produced
(e.g. "MIT Research Science Institute (RSI)", "MITES/MOSTEC") and keeps them
in the order the names were given.
"""

import re
from typing import Dict, List, Sequence

from .contracts import ProgramConstraint
from .constants import UNMATCHED_NAME_ORDER, DEFAULT_RESULT_LIMIT

_PARENTHESIZED = re.compile(r"\(([^)]+)\)")
_PARENTHESIZED_WITH_SPACE = re.compile(r"\s*\([^)]+\)\s*")


def parse_program_names(raw: str) -> List[str]:
    """Split a comma-separated list of names."""
    return [name.strip() for name in (raw or "").split(",") if name.strip()]


def extract_search_terms(names: Sequence[str]) -> List[str]:
    """
    Expand each name into the search terms likely to hit a stored program.

    "MIT Research Science Institute (RSI)" ->
        the full name, "RSI", "MIT Research Science Institute",
        "(RSI)", "Institute (RSI)"
    """
    terms: List[str] = []
    for name in names:
        terms.append(name)

        match = _PARENTHESIZED.search(name)
        if match:
            terms.append(match.group(1))
            terms.append(_PARENTHESIZED_WITH_SPACE.sub("", name).strip())

        if "/" in name:
            terms.extend(part.strip() for part in name.split("/"))

        # Trailing words are often the program acronym
        words = name.split(" ")
        if len(words) > 1:
            terms.append(words[-1])
            if len(words) > 2:
                terms.append(" ".join(words[-2:]))

    unique: List[str] = []
    seen = set()
    for term in terms:
        if len(term) > 1 and term not in seen:
            seen.add(term)
            unique.append(term)
    return unique


def _matches_any(program: ProgramConstraint, terms: Sequence[str]) -> bool:
    name = program.name.lower()
    short_name = (program.short_name or "").lower()
    for term in terms:
        needle = term.lower()
        if needle in name or (short_name and needle in short_name):
            return True
    return False


def name_order(program: ProgramConstraint, order: Dict[str, int]) -> int:
    """Position of the first provided name that matches the program."""
    name = program.name.lower()
    short_name = (program.short_name or "").lower()
    for provided, position in order.items():
        if provided in name or name in provided:
            return position
        if short_name and (provided in short_name or short_name in provided):
            return position
    return UNMATCHED_NAME_ORDER


def match_programs_by_names(
    names: Sequence[str],
    programs: Sequence[ProgramConstraint],
    limit: int = DEFAULT_RESULT_LIMIT,
) -> List[ProgramConstraint]:
    """
    Find active programs matching the provided names.

    Args:
        names: Program names as given by the advisor
        programs: Candidate programs
        limit: Maximum number of programs to return

    Returns:
        Unique programs ordered by the position of the name they matched
    """
    terms = extract_search_terms(names)
    if not terms:
        return []

    found: List[ProgramConstraint] = []
    seen_ids = set()
    for program in programs:
        if not program.is_active or program.id in seen_ids:
            continue
        if _matches_any(program, terms):
            seen_ids.add(program.id)
            found.append(program)

    order = {name.lower(): i for i, name in enumerate(names)}
    found.sort(key=lambda p: name_order(p, order))
    return found[:limit]
