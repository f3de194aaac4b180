"""
Match Engine Models

Browse filters, the selection branch taken, and the paged result.

Version: match_engine_v1
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from skillswap.directory.models import AvailabilitySlot, UserProfile


class BrowseFilters(BaseModel):
    """
    Browse query.

    skill_term is an exact, case-insensitive match against skills offered.
    location is a case-insensitive substring. availability_slots use OR
    semantics. page_size None means "use the configured default".
    """
    skill_term: Optional[str] = None
    location: Optional[str] = None
    availability_slots: List[AvailabilitySlot] = Field(default_factory=list)
    show_all: bool = False
    page: int = 1
    page_size: Optional[int] = None

    class Config:
        extra = "forbid"

    @field_validator("skill_term", "location")
    @classmethod
    def _blank_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class SelectionBranch(str, Enum):
    """Which candidate-selection rule a browse call used."""
    ANONYMOUS_TERM = "anonymous_term"
    ANONYMOUS_ALL = "anonymous_all"
    TEACHERS_OF_TERM = "teachers_of_term"
    MUTUAL_TERM = "mutual_term"
    EVERYONE = "everyone"
    WANTS_MY_SKILLS = "wants_my_skills"


class BrowsePage(BaseModel):
    """One page of browse results. total counts the whole filtered set."""
    users: List[UserProfile]
    total: int
    page: int
    page_size: int
    branch: SelectionBranch
