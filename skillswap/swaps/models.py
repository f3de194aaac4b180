"""
Swap Models

A swap is one proposed skill exchange between a requester and a recipient.
Records are never deleted: rejection and cancellation are terminal statuses.

Version: swap_lifecycle_v1
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SwapStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Role(str, Enum):
    """A party's role on a specific swap."""
    REQUESTER = "requester"
    RECIPIENT = "recipient"

    @property
    def rating_field(self) -> str:
        return f"{self.value}_rating"

    @property
    def other(self) -> "Role":
        return Role.RECIPIENT if self == Role.REQUESTER else Role.REQUESTER


class SwapAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    CANCEL = "cancel"
    COMPLETE = "complete"
    RATE = "rate"


class SwapRating(BaseModel):
    """Rating left by one party about the other. Written at most once per role."""
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    date: datetime


class Swap(BaseModel):
    id: str
    requester_id: str
    recipient_id: str
    skill_offered: str = Field(description="What the requester will teach")
    skill_requested: str = Field(description="What the requester wants to learn")
    status: SwapStatus = SwapStatus.PENDING
    message: Optional[str] = None
    requester_rating: Optional[SwapRating] = None
    recipient_rating: Optional[SwapRating] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def party_id(self, role: Role) -> str:
        return self.requester_id if role == Role.REQUESTER else self.recipient_id

    def rating_slot(self, role: Role) -> Optional[SwapRating]:
        return getattr(self, role.rating_field)


# Request / response models

class SwapCreate(BaseModel):
    recipient_id: str
    skill_offered: str
    skill_requested: str
    message: Optional[str] = None

    class Config:
        extra = "forbid"


class RateRequest(BaseModel):
    # range is checked by the lifecycle manager so it surfaces as a ValidationError
    rating: int
    comment: Optional[str] = None

    class Config:
        extra = "forbid"


class SwapView(BaseModel):
    """A swap as seen by one of its parties."""
    swap: Swap
    role: Role
    can_rate: bool


class MySwaps(BaseModel):
    sent: List[SwapView]
    received: List[SwapView]
