"""
User Directory Service

Registration, profile edits, skill lists and per-skill descriptions for the
owning user, plus the admin moderation actions (ban, promote, description
removal). Actor resolution for the HTTP layer lives here too.

Version: directory_v1
"""

import logging
import random
import uuid
from typing import Dict, List, Optional

from skillswap.config import SkillSwapConfig
from skillswap.shared.errors import (
    AuthorizationError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from skillswap.shared.skills import append_unique, find_skill, normalize_skill, remove_skill

from .models import (
    ProfileUpdate,
    RegisterRequest,
    SkillDescriptionEntry,
    User,
    UserRole,
)
from .store import UserStore

logger = logging.getLogger(__name__)


def dedupe_skills(skills: List[str]) -> List[str]:
    """Trim, drop empties and case-insensitive duplicates, keep first spelling."""
    result: List[str] = []
    for skill in skills:
        if not skill or not skill.strip():
            continue
        extended = append_unique(result, skill)
        if extended is not None:
            result = extended
    return result


def prune_descriptions(descriptions: Dict[str, str], offered: List[str]) -> Dict[str, str]:
    """Keep only descriptions whose skill is still offered, keyed by the offered spelling."""
    pruned: Dict[str, str] = {}
    for skill, text in descriptions.items():
        stored = find_skill(offered, skill)
        if stored is not None:
            pruned[stored] = text
    return pruned


class UserDirectory:
    """Owns every write to user profiles except the rating aggregate."""

    def __init__(self, store: UserStore, config: SkillSwapConfig, rng: Optional[random.Random] = None):
        self.store = store
        self.config = config
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> User:
        user = self.store.find_by_id(user_id)
        if user is None:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, f"User {user_id} not found")
        return user

    def resolve_actor(self, actor_id: str) -> User:
        """The authenticated caller. Unknown or banned callers are refused."""
        user = self.store.find_by_id(actor_id)
        if user is None:
            raise AuthorizationError(ErrorCode.UNKNOWN_ACTOR, "Unknown user")
        if user.is_banned:
            raise AuthorizationError(ErrorCode.ACCOUNT_BANNED, "Account has been banned")
        return user

    def resolve_viewer(self, actor_id: Optional[str]) -> Optional[User]:
        """Optional authentication: unknown or banned callers browse anonymously."""
        if not actor_id:
            return None
        user = self.store.find_by_id(actor_id)
        if user is None or user.is_banned:
            return None
        return user

    def view_profile(self, user_id: str, viewer_id: Optional[str] = None) -> User:
        user = self.get_user(user_id)
        if not user.is_public and viewer_id != user.id:
            raise AuthorizationError(ErrorCode.PROFILE_PRIVATE, "Profile is private")
        return user

    # ------------------------------------------------------------------
    # Registration and profile
    # ------------------------------------------------------------------

    def initial_rating(self) -> float:
        low, high = self.config.initial_rating_range
        return round(self._rng.uniform(low, high), 1)

    def register(self, request: RegisterRequest) -> User:
        if self.store.find_by_email(request.email) is not None:
            raise ValidationError(ErrorCode.EMAIL_TAKEN, "User already exists")

        user = User(
            id=uuid.uuid4().hex,
            name=request.name,
            email=request.email,
            location=request.location,
            rating=self.initial_rating(),
            total_ratings=0,
        )
        self.store.insert(user)
        logger.info(f"Registered user {user.id} with initial rating {user.rating}")
        return user

    def update_profile(self, user_id: str, update: ProfileUpdate) -> User:
        user = self.get_user(user_id)
        patch = {}

        if update.name is not None:
            patch["name"] = update.name.strip()
        if update.location is not None:
            patch["location"] = update.location.strip()
        if update.skills_offered is not None:
            offered = dedupe_skills(update.skills_offered)
            patch["skills_offered"] = offered
            patch["skill_descriptions"] = prune_descriptions(user.skill_descriptions, offered)
        if update.skills_wanted is not None:
            patch["skills_wanted"] = dedupe_skills(update.skills_wanted)
        if update.availability is not None:
            patch["availability"] = update.availability.model_dump()
        if update.visibility is not None:
            patch["visibility"] = update.visibility.value

        if not patch:
            return user
        return self.store.update(user_id, patch)

    # ------------------------------------------------------------------
    # Skill lists
    # ------------------------------------------------------------------

    def _add_skill(self, user_id: str, field: str, skill: str) -> List[str]:
        if not skill or not skill.strip():
            raise ValidationError(ErrorCode.EMPTY_SKILL, "Skill is required")
        user = self.get_user(user_id)
        extended = append_unique(getattr(user, field), skill)
        if extended is None:
            raise ValidationError(ErrorCode.DUPLICATE_SKILL, "Skill already exists")
        updated = self.store.update(user_id, {field: extended})
        return getattr(updated, field)

    def add_offered_skill(self, user_id: str, skill: str) -> List[str]:
        return self._add_skill(user_id, "skills_offered", skill)

    def add_wanted_skill(self, user_id: str, skill: str) -> List[str]:
        return self._add_skill(user_id, "skills_wanted", skill)

    def remove_offered_skill(self, user_id: str, skill: str) -> List[str]:
        user = self.get_user(user_id)
        offered = remove_skill(user.skills_offered, skill)
        updated = self.store.update_skills(
            user_id,
            skills_offered=offered,
            skill_descriptions=prune_descriptions(user.skill_descriptions, offered),
        )
        return updated.skills_offered

    def remove_wanted_skill(self, user_id: str, skill: str) -> List[str]:
        user = self.get_user(user_id)
        updated = self.store.update_skills(
            user_id, skills_wanted=remove_skill(user.skills_wanted, skill)
        )
        return updated.skills_wanted

    # ------------------------------------------------------------------
    # Skill descriptions
    # ------------------------------------------------------------------

    def set_skill_description(self, user_id: str, skill: str, description: str) -> Dict[str, str]:
        """Set (or clear, with an empty description) the text for an offered skill."""
        user = self.get_user(user_id)
        stored = find_skill(user.skills_offered, skill)
        if stored is None:
            raise ValidationError(ErrorCode.SKILL_NOT_OFFERED, "You do not offer this skill")

        descriptions = prune_descriptions(user.skill_descriptions, user.skills_offered)
        text = (description or "").strip()
        if text:
            descriptions[stored] = text
        else:
            descriptions.pop(stored, None)
        updated = self.store.update_skills(user_id, skill_descriptions=descriptions)
        return updated.skill_descriptions

    def remove_skill_description(self, user_id: str, skill: str) -> Dict[str, str]:
        user = self.get_user(user_id)
        key = normalize_skill(skill)
        descriptions = {
            s: text for s, text in user.skill_descriptions.items()
            if normalize_skill(s) != key
        }
        updated = self.store.update_skills(user_id, skill_descriptions=descriptions)
        return updated.skill_descriptions

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def require_admin(self, actor_id: str) -> User:
        actor = self.resolve_actor(actor_id)
        if not actor.is_admin:
            raise AuthorizationError(ErrorCode.NOT_ADMIN, "Admin access required")
        return actor

    def set_banned(self, actor_id: str, user_id: str, banned: bool) -> User:
        actor = self.require_admin(actor_id)
        target = self.get_user(user_id)
        if target.id == actor.id:
            raise ValidationError(ErrorCode.INVALID_INPUT, "Admins cannot ban themselves")
        updated = self.store.update(user_id, {"is_banned": banned})
        logger.warning(f"Admin {actor.id} set banned={banned} on user {user_id}")
        return updated

    def promote_to_admin(self, email: str) -> User:
        user = self.store.find_by_email(email)
        if user is None:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, f"No user with email {email}")
        if user.is_admin:
            return user
        updated = self.store.update(user.id, {"role": UserRole.ADMIN.value})
        logger.warning(f"User {user.id} promoted to admin")
        return updated

    def list_skill_descriptions(self, actor_id: str) -> List[SkillDescriptionEntry]:
        self.require_admin(actor_id)
        entries = []
        for user in self.store.list_all():
            for skill in user.skills_offered:
                text = user.skill_descriptions.get(skill)
                if text:
                    entries.append(SkillDescriptionEntry(
                        user_id=user.id,
                        user_name=user.name,
                        skill=skill,
                        description=text,
                    ))
        return entries

    def moderate_skill_description(self, actor_id: str, user_id: str, skill: str) -> Dict[str, str]:
        actor = self.require_admin(actor_id)
        self.get_user(user_id)
        result = self.remove_skill_description(user_id, skill)
        logger.warning(f"Admin {actor.id} removed description for '{skill}' from user {user_id}")
        return result
