"""
User Directory

Profiles, skill lists, availability, visibility and the rating aggregate.
"""

from .models import (
    Availability,
    AvailabilitySlot,
    ProfileUpdate,
    RegisterRequest,
    User,
    UserProfile,
    UserRole,
    Visibility,
)
from .service import UserDirectory
from .store import InMemoryUserStore, UserStore

__all__ = [
    "Availability",
    "AvailabilitySlot",
    "ProfileUpdate",
    "RegisterRequest",
    "User",
    "UserProfile",
    "UserRole",
    "Visibility",
    "UserDirectory",
    "InMemoryUserStore",
    "UserStore",
]
