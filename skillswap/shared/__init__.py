"""SkillSwap Shared Utilities"""

from .errors import (
    ErrorCode,
    SkillSwapError,
    ValidationError,
    NotFoundError,
    AuthorizationError,
    InvalidTransitionError,
    StoreUnavailableError,
)
from .skills import (
    normalize_skill,
    normalized_set,
    contains_skill,
    skills_intersect,
)

__all__ = [
    "ErrorCode",
    "SkillSwapError",
    "ValidationError",
    "NotFoundError",
    "AuthorizationError",
    "InvalidTransitionError",
    "StoreUnavailableError",
    "normalize_skill",
    "normalized_set",
    "contains_skill",
    "skills_intersect",
]
