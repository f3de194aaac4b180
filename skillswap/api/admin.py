"""
Admin Endpoints

Moderation actions. All endpoints except make-admin require an actor with
role=admin (X-User-Id). make-admin is bootstrapped with the
X-Admin-API-Key header instead.

PUT    /api/v1/admin/users/{user_id}/ban
PUT    /api/v1/admin/users/{user_id}/unban
GET    /api/v1/admin/skills/descriptions
DELETE /api/v1/admin/users/{user_id}/skills/{skill}/description
PUT    /api/v1/admin/make-admin/{email}
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel

from skillswap.directory.models import SkillDescriptionEntry, User, UserRole

from .deps import SkillSwapServices, get_services, require_actor

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
)


def check_admin_key(expected_key: Optional[str], provided_key: Optional[str]) -> str:
    """
    Compare the X-Admin-API-Key header against the configured key.

    Raises 401 if missing or invalid.
    """
    if not expected_key:
        # Fail open in dev if ADMIN_API_KEY not set
        logger.warning("ADMIN_API_KEY not configured; admin key check skipped")
        return "dev_mode"

    if not provided_key:
        raise HTTPException(
            status_code=401,
            detail="Missing X-Admin-API-Key header"
        )

    if provided_key != expected_key:
        raise HTTPException(
            status_code=401,
            detail="Invalid admin API key"
        )

    return provided_key


def verify_admin_key(
    x_admin_api_key: Optional[str] = Header(None, alias="X-Admin-API-Key"),
    services: SkillSwapServices = Depends(get_services),
) -> str:
    return check_admin_key(services.config.admin_api_key, x_admin_api_key)


class ModerationResponse(BaseModel):
    user_id: str
    is_banned: bool
    role: UserRole


class DescriptionsResponse(BaseModel):
    user_id: str
    skill_descriptions: Dict[str, str]


def _moderation(user: User) -> ModerationResponse:
    return ModerationResponse(user_id=user.id, is_banned=user.is_banned, role=user.role)


@router.put("/users/{user_id}/ban", response_model=ModerationResponse)
def ban_user(user_id: str, actor: User = Depends(require_actor), services: SkillSwapServices = Depends(get_services)):
    return _moderation(services.directory.set_banned(actor.id, user_id, True))


@router.put("/users/{user_id}/unban", response_model=ModerationResponse)
def unban_user(user_id: str, actor: User = Depends(require_actor), services: SkillSwapServices = Depends(get_services)):
    return _moderation(services.directory.set_banned(actor.id, user_id, False))


@router.get("/skills/descriptions", response_model=List[SkillDescriptionEntry])
def list_skill_descriptions(actor: User = Depends(require_actor), services: SkillSwapServices = Depends(get_services)):
    return services.directory.list_skill_descriptions(actor.id)


@router.delete("/users/{user_id}/skills/{skill:path}/description", response_model=DescriptionsResponse)
def remove_skill_description(
    user_id: str,
    skill: str,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    descriptions = services.directory.moderate_skill_description(actor.id, user_id, skill)
    return DescriptionsResponse(user_id=user_id, skill_descriptions=descriptions)


@router.put("/make-admin/{email}", response_model=ModerationResponse)
def make_admin(
    email: str,
    admin_key: str = Depends(verify_admin_key),
    services: SkillSwapServices = Depends(get_services),
):
    return _moderation(services.directory.promote_to_admin(email))
