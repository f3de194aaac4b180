"""
User Directory Store

Abstract directory query interface plus the in-memory implementation used
for local development and tests. PostgreSQL lives in pg_store.py.
"""

import logging
from abc import ABC, abstractmethod
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

from skillswap.shared.errors import ErrorCode, NotFoundError, ValidationError

from .models import Availability, AvailabilitySlot, User, Visibility

logger = logging.getLogger(__name__)


class UserStore(ABC):
    """Persistence contract for user documents."""

    @abstractmethod
    def insert(self, user: User) -> str:
        """Store a new user and return its id. A taken email (case-insensitive) raises EMAIL_TAKEN."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_public_candidates(
        self,
        exclude_id: Optional[str] = None,
        location: Optional[str] = None,
        availability_slots: Optional[Iterable[AvailabilitySlot]] = None,
    ) -> List[User]:
        """
        Public, non-banned users in insertion order.

        location and availability_slots are optional pre-filters
        (substring match, OR across slots).
        """

    @abstractmethod
    def list_all(self) -> List[User]:
        ...

    @abstractmethod
    def update(self, user_id: str, patch: Dict[str, Any]) -> User:
        """Apply a field patch and return the updated user."""

    @abstractmethod
    def apply_rating(self, user_id: str, rating: float) -> User:
        """
        Fold one submitted rating into the running average, atomically:
        rating = (rating * total_ratings + submitted) / (total_ratings + 1)
        """

    # Named helpers over update()

    def update_skills(
        self,
        user_id: str,
        skills_offered: Optional[List[str]] = None,
        skills_wanted: Optional[List[str]] = None,
        skill_descriptions: Optional[Dict[str, str]] = None,
    ) -> User:
        patch: Dict[str, Any] = {}
        if skills_offered is not None:
            patch["skills_offered"] = list(skills_offered)
        if skills_wanted is not None:
            patch["skills_wanted"] = list(skills_wanted)
        if skill_descriptions is not None:
            patch["skill_descriptions"] = dict(skill_descriptions)
        return self.update(user_id, patch)

    def update_availability(self, user_id: str, availability: Availability) -> User:
        return self.update(user_id, {"availability": availability.model_dump()})

    def update_visibility(self, user_id: str, visibility: Visibility) -> User:
        return self.update(user_id, {"visibility": Visibility(visibility).value})


def running_average(current: float, count: int, submitted: float) -> float:
    return (current * count + submitted) / (count + 1)


class InMemoryUserStore(UserStore):
    """
    Dict-backed store. Thread-safe; reads return copies so callers work
    on a snapshot.
    """

    def __init__(self):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()

    def _load(self, doc: Dict[str, Any]) -> User:
        return User.model_validate(doc)

    def insert(self, user: User) -> str:
        with self._lock:
            if user.id in self._docs:
                raise ValueError(f"Duplicate user id {user.id}")
            key = user.email.strip().lower()
            if any(doc["email"].lower() == key for doc in self._docs.values()):
                raise ValidationError(ErrorCode.EMAIL_TAKEN, "User already exists")
            self._docs[user.id] = user.model_dump()
        return user.id

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            doc = self._docs.get(user_id)
            return self._load(doc) if doc is not None else None

    def find_by_email(self, email: str) -> Optional[User]:
        key = email.strip().lower()
        with self._lock:
            for doc in self._docs.values():
                if doc["email"].lower() == key:
                    return self._load(doc)
        return None

    def find_public_candidates(
        self,
        exclude_id: Optional[str] = None,
        location: Optional[str] = None,
        availability_slots: Optional[Iterable[AvailabilitySlot]] = None,
    ) -> List[User]:
        slots = list(availability_slots or [])
        with self._lock:
            snapshot = [self._load(doc) for doc in self._docs.values()]
        return [
            user for user in snapshot
            if user.is_public
            and not user.is_banned
            and user.id != exclude_id
            and user.matches_location(location)
            and user.availability.any_of(slots)
        ]

    def list_all(self) -> List[User]:
        with self._lock:
            return [self._load(doc) for doc in self._docs.values()]

    def update(self, user_id: str, patch: Dict[str, Any]) -> User:
        with self._lock:
            doc = self._docs.get(user_id)
            if doc is None:
                raise NotFoundError(ErrorCode.USER_NOT_FOUND, f"User {user_id} not found")
            merged = {**doc, **patch}
            # validate before committing so a bad patch leaves the doc untouched
            user = self._load(merged)
            self._docs[user_id] = user.model_dump()
            return user

    def apply_rating(self, user_id: str, rating: float) -> User:
        with self._lock:
            doc = self._docs.get(user_id)
            if doc is None:
                raise NotFoundError(ErrorCode.USER_NOT_FOUND, f"User {user_id} not found")
            count = doc["total_ratings"]
            doc["rating"] = running_average(doc["rating"], count, rating)
            doc["total_ratings"] = count + 1
            logger.info(f"User {user_id} rating now {doc['rating']:.2f} over {count + 1} rating(s)")
            return self._load(doc)
