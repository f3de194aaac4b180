"""
SkillSwap Error Taxonomy
========================
Every domain failure is one of four kinds, so callers can render a specific
message per kind instead of a generic failure:

- ValidationError:        malformed or missing input
- NotFoundError:          unknown user or swap id
- AuthorizationError:     actor not permitted (wrong party, not admin)
- InvalidTransitionError: correct actor, wrong current state

StoreUnavailableError is the infrastructure branch: the backing store could
not be reached. It is the only retryable kind.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    # Validation
    INVALID_INPUT = "INVALID_INPUT"
    EMPTY_SKILL = "EMPTY_SKILL"
    DUPLICATE_SKILL = "DUPLICATE_SKILL"
    SKILL_NOT_OFFERED = "SKILL_NOT_OFFERED"
    SELF_SWAP = "SELF_SWAP"
    UNKNOWN_RECIPIENT = "UNKNOWN_RECIPIENT"
    RATING_OUT_OF_RANGE = "RATING_OUT_OF_RANGE"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    # Not found
    USER_NOT_FOUND = "USER_NOT_FOUND"
    SWAP_NOT_FOUND = "SWAP_NOT_FOUND"
    # Authorization
    NOT_A_PARTY = "NOT_A_PARTY"
    NOT_YOUR_REQUEST = "NOT_YOUR_REQUEST"
    NOT_ADMIN = "NOT_ADMIN"
    PROFILE_PRIVATE = "PROFILE_PRIVATE"
    ACCOUNT_BANNED = "ACCOUNT_BANNED"
    UNKNOWN_ACTOR = "UNKNOWN_ACTOR"
    # Invalid transition
    ALREADY_DECIDED = "ALREADY_DECIDED"
    NOT_ACCEPTED = "NOT_ACCEPTED"
    NOT_COMPLETED = "NOT_COMPLETED"
    ALREADY_RATED = "ALREADY_RATED"
    # HTTP layer
    UNAUTHENTICATED = "UNAUTHENTICATED"
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    HTTP_ERROR = "HTTP_ERROR"
    # Infrastructure
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class SkillSwapError(Exception):
    """Base exception for SkillSwap domain errors."""

    kind = "error"
    retryable = False

    def __init__(self, code: ErrorCode, detail: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(f"{code.value}: {detail}")
        self.code = code
        self.detail = detail
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "error": self.kind,
            "code": self.code.value,
            "detail": self.detail,
        }
        if self.context:
            body["context"] = self.context
        return body


class ValidationError(SkillSwapError):
    """Malformed or missing input (400)."""
    kind = "validation_error"


class NotFoundError(SkillSwapError):
    """Unknown user or swap (404)."""
    kind = "not_found"


class AuthorizationError(SkillSwapError):
    """Actor is not permitted to perform this operation (403)."""
    kind = "authorization_error"


class InvalidTransitionError(SkillSwapError):
    """Actor is permitted, but the swap is in the wrong state (409)."""
    kind = "invalid_transition"


class StoreUnavailableError(SkillSwapError):
    """Backing store failure (503). Safe to retry."""
    kind = "store_unavailable"
    retryable = True

    def __init__(self, detail: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.STORE_UNAVAILABLE, detail, context)
