"""
Skill name helpers.

All skill comparisons in the directory, match engine and swap layer go
through normalize_skill (lowercase + trim), so matching semantics are the
same everywhere. Display order and original casing are never altered.
"""

from typing import Iterable, List, Optional, Set


def normalize_skill(skill: Optional[str]) -> str:
    """Canonical comparison key for a skill name."""
    if skill is None:
        return ""
    return skill.strip().lower()


def normalized_set(skills: Iterable[str]) -> Set[str]:
    """Comparison keys for a skill list, empty entries dropped."""
    return {key for key in (normalize_skill(s) for s in skills or []) if key}


def contains_skill(skills: Iterable[str], term: str) -> bool:
    """Exact (not substring) case-insensitive membership."""
    key = normalize_skill(term)
    if not key:
        return False
    return key in normalized_set(skills)


def skills_intersect(left: Iterable[str], right: Iterable[str]) -> bool:
    """True if any skill appears in both lists (case-insensitive)."""
    return bool(normalized_set(left) & normalized_set(right))


def find_skill(skills: Iterable[str], term: str) -> Optional[str]:
    """Return the stored spelling of term, or None if absent."""
    key = normalize_skill(term)
    for skill in skills or []:
        if normalize_skill(skill) == key:
            return skill
    return None


def append_unique(skills: List[str], skill: str) -> Optional[List[str]]:
    """
    Append a trimmed skill unless an equal one is already present.

    Returns the new list, or None if it would be a duplicate.
    """
    cleaned = skill.strip()
    if find_skill(skills, cleaned) is not None:
        return None
    return list(skills) + [cleaned]


def remove_skill(skills: List[str], skill: str) -> List[str]:
    """Drop every entry equal to skill (case-insensitive)."""
    key = normalize_skill(skill)
    return [s for s in skills if normalize_skill(s) != key]
