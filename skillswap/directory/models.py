"""
User Directory Models

Pydantic models for user profiles, profile edits and the public view
returned by browse and profile lookups.

Version: directory_v1
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator

from skillswap.config import DEFAULT_DISPLAY_RATING


class AvailabilitySlot(str, Enum):
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    EVENINGS = "evenings"
    MORNINGS = "mornings"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Availability(BaseModel):
    """Named availability slots, each on or off."""
    weekdays: bool = False
    weekends: bool = False
    evenings: bool = False
    mornings: bool = False

    class Config:
        extra = "forbid"

    def any_of(self, slots: Iterable[AvailabilitySlot]) -> bool:
        """OR across the requested slots. No slots requested -> True."""
        requested = list(slots)
        if not requested:
            return True
        return any(getattr(self, AvailabilitySlot(slot).value) for slot in requested)


class User(BaseModel):
    """
    A registered user.

    rating/total_ratings are only written by the swap rating flow;
    is_banned only by an admin.
    """
    id: str
    name: str
    email: str
    location: Optional[str] = None
    skills_offered: List[str] = Field(default_factory=list)
    skills_wanted: List[str] = Field(default_factory=list)
    skill_descriptions: Dict[str, str] = Field(
        default_factory=dict,
        description="Offered skill -> free-text description. Absent key = no description."
    )
    availability: Availability = Field(default_factory=Availability)
    visibility: Visibility = Visibility.PUBLIC
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    total_ratings: int = Field(default=0, ge=0)
    is_banned: bool = False
    role: UserRole = UserRole.USER
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_public(self) -> bool:
        return self.visibility == Visibility.PUBLIC

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def display_rating(self, default: float = DEFAULT_DISPLAY_RATING) -> float:
        """Stored rating, or the fixed default while nobody has rated this user."""
        if self.total_ratings == 0:
            return default
        return self.rating

    def matches_location(self, term: Optional[str]) -> bool:
        """Case-insensitive substring match; an empty term matches everyone."""
        if not term or not term.strip():
            return True
        return term.strip().lower() in (self.location or "").lower()

    def to_profile(self, default_rating: float = DEFAULT_DISPLAY_RATING) -> "UserProfile":
        return UserProfile(
            id=self.id,
            name=self.name,
            location=self.location,
            skills_offered=list(self.skills_offered),
            skills_wanted=list(self.skills_wanted),
            skill_descriptions=dict(self.skill_descriptions),
            availability=self.availability.model_copy(),
            visibility=self.visibility,
            rating=self.display_rating(default_rating),
            total_ratings=self.total_ratings,
            role=self.role,
        )


class UserProfile(BaseModel):
    """What other users see. rating is already the display rating."""
    id: str
    name: str
    location: Optional[str] = None
    skills_offered: List[str]
    skills_wanted: List[str]
    skill_descriptions: Dict[str, str] = Field(default_factory=dict)
    availability: Availability
    visibility: Visibility
    rating: float
    total_ratings: int
    role: UserRole = UserRole.USER


# Request models

class RegisterRequest(BaseModel):
    name: str = Field(min_length=2)
    email: str = Field(min_length=3)
    location: Optional[str] = None

    class Config:
        extra = "forbid"

    @field_validator("name", "location")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value or value.startswith("@") or value.endswith("@"):
            raise ValueError("Please enter a valid email")
        return value


class ProfileUpdate(BaseModel):
    """Partial profile edit by the owning user. Omitted fields are left as is."""
    name: Optional[str] = Field(default=None, min_length=2)
    location: Optional[str] = None
    skills_offered: Optional[List[str]] = None
    skills_wanted: Optional[List[str]] = None
    availability: Optional[Availability] = None
    visibility: Optional[Visibility] = None

    class Config:
        extra = "forbid"


class SkillRequest(BaseModel):
    skill: str

    @field_validator("skill")
    @classmethod
    def _strip_skill(cls, value: str) -> str:
        return value.strip()


class SkillDescriptionRequest(BaseModel):
    description: str = ""


class SkillDescriptionEntry(BaseModel):
    """One row of the admin moderation listing."""
    user_id: str
    user_name: str
    skill: str
    description: str
