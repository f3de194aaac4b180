"""
User Endpoints

POST   /api/v1/users/register
GET    /api/v1/users/browse                             - optional X-User-Id
GET    /api/v1/users/{user_id}                          - private profiles: owner only
PUT    /api/v1/users/profile
POST   /api/v1/users/skills-offered
DELETE /api/v1/users/skills-offered/{skill:path}
POST   /api/v1/users/skills-wanted
DELETE /api/v1/users/skills-wanted/{skill:path}
PUT    /api/v1/users/skills-offered/{skill:path}/description
DELETE /api/v1/users/skills-offered/{skill:path}/description
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from skillswap.directory.models import (
    AvailabilitySlot,
    ProfileUpdate,
    RegisterRequest,
    SkillDescriptionRequest,
    SkillRequest,
    User,
    UserProfile,
)
from skillswap.matching.models import BrowseFilters, BrowsePage

from .deps import SkillSwapServices, get_services, optional_viewer, require_actor

router = APIRouter(
    prefix="/api/v1/users",
    tags=["users"],
)


class AccountResponse(BaseModel):
    """The caller's own account, including private fields."""
    user: User
    display_rating: float


class SkillListResponse(BaseModel):
    skills: List[str]


class SkillDescriptionsResponse(BaseModel):
    skill_descriptions: Dict[str, str]


def _account(user: User, services: SkillSwapServices) -> AccountResponse:
    return AccountResponse(
        user=user,
        display_rating=user.display_rating(services.config.default_display_rating),
    )


@router.post("/register", response_model=AccountResponse, status_code=201)
def register(request: RegisterRequest, services: SkillSwapServices = Depends(get_services)):
    user = services.directory.register(request)
    return _account(user, services)


@router.get("/browse", response_model=BrowsePage)
def browse(
    skill: Optional[str] = None,
    location: Optional[str] = None,
    availability: List[AvailabilitySlot] = Query(default=[]),
    show_all: bool = False,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    viewer: Optional[User] = Depends(optional_viewer),
    services: SkillSwapServices = Depends(get_services),
):
    """
    Browse public users.

    Anonymous callers get skill-term filtering only. Signed-in callers get
    mutual-benefit filtering unless show_all=true.
    """
    filters = BrowseFilters(
        skill_term=skill,
        location=location,
        availability_slots=availability,
        show_all=show_all,
        page=page,
        page_size=limit,
    )
    return services.engine.browse(viewer, filters)


@router.get("/me", response_model=AccountResponse)
def me(actor: User = Depends(require_actor), services: SkillSwapServices = Depends(get_services)):
    return _account(actor, services)


@router.put("/profile", response_model=AccountResponse)
def update_profile(
    update: ProfileUpdate,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    user = services.directory.update_profile(actor.id, update)
    return _account(user, services)


# Skill names may contain "/" (e.g. "UI/UX"); the description routes come
# first so their suffix is not read as part of a skill name.
@router.put("/skills-offered/{skill:path}/description", response_model=SkillDescriptionsResponse)
def set_skill_description(
    skill: str,
    request: SkillDescriptionRequest,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    descriptions = services.directory.set_skill_description(actor.id, skill, request.description)
    return SkillDescriptionsResponse(skill_descriptions=descriptions)


@router.delete("/skills-offered/{skill:path}/description", response_model=SkillDescriptionsResponse)
def remove_skill_description(
    skill: str,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    descriptions = services.directory.remove_skill_description(actor.id, skill)
    return SkillDescriptionsResponse(skill_descriptions=descriptions)


@router.post("/skills-offered", response_model=SkillListResponse)
def add_skill_offered(
    request: SkillRequest,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    return SkillListResponse(skills=services.directory.add_offered_skill(actor.id, request.skill))


@router.delete("/skills-offered/{skill:path}", response_model=SkillListResponse)
def remove_skill_offered(
    skill: str,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    return SkillListResponse(skills=services.directory.remove_offered_skill(actor.id, skill))


@router.post("/skills-wanted", response_model=SkillListResponse)
def add_skill_wanted(
    request: SkillRequest,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    return SkillListResponse(skills=services.directory.add_wanted_skill(actor.id, request.skill))


@router.delete("/skills-wanted/{skill:path}", response_model=SkillListResponse)
def remove_skill_wanted(
    skill: str,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    return SkillListResponse(skills=services.directory.remove_wanted_skill(actor.id, skill))


# Registered last so /browse, /me and /profile are not captured as ids
@router.get("/{user_id}", response_model=UserProfile)
def get_user(
    user_id: str,
    viewer: Optional[User] = Depends(optional_viewer),
    services: SkillSwapServices = Depends(get_services),
):
    user = services.directory.view_profile(user_id, viewer.id if viewer else None)
    return user.to_profile(services.config.default_display_rating)
