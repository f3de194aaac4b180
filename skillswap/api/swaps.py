"""
Swap Endpoints

POST /api/v1/swaps                  - create (caller is the requester)
GET  /api/v1/swaps/my-swaps         - sent / received, with can_rate
GET  /api/v1/swaps/{swap_id}
PUT  /api/v1/swaps/{swap_id}/accept - recipient, pending
PUT  /api/v1/swaps/{swap_id}/reject - recipient, pending
PUT  /api/v1/swaps/{swap_id}/cancel - requester, pending
PUT  /api/v1/swaps/{swap_id}/complete - either party, accepted
POST /api/v1/swaps/{swap_id}/rate   - either party, completed, once per role

All endpoints require X-User-Id.
"""

from fastapi import APIRouter, Depends

from skillswap.directory.models import User
from skillswap.swaps.models import MySwaps, RateRequest, Swap, SwapCreate, SwapView

from .deps import SkillSwapServices, get_services, require_actor

router = APIRouter(
    prefix="/api/v1/swaps",
    tags=["swaps"],
)


def _view(swap: Swap, actor: User, services: SkillSwapServices) -> SwapView:
    return services.lifecycle.get(swap.id, actor.id)


@router.post("", response_model=SwapView, status_code=201)
def create_swap(
    request: SwapCreate,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    swap = services.lifecycle.create(
        requester_id=actor.id,
        recipient_id=request.recipient_id,
        skill_offered=request.skill_offered,
        skill_requested=request.skill_requested,
        message=request.message,
    )
    return _view(swap, actor, services)


@router.get("/my-swaps", response_model=MySwaps)
def my_swaps(actor: User = Depends(require_actor), services: SkillSwapServices = Depends(get_services)):
    return services.lifecycle.partition(actor.id)


@router.get("/{swap_id}", response_model=SwapView)
def get_swap(
    swap_id: str,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    return services.lifecycle.get(swap_id, actor.id)


@router.put("/{swap_id}/accept", response_model=SwapView)
def accept_swap(swap_id: str, actor: User = Depends(require_actor), services: SkillSwapServices = Depends(get_services)):
    return _view(services.lifecycle.accept(swap_id, actor.id), actor, services)


@router.put("/{swap_id}/reject", response_model=SwapView)
def reject_swap(swap_id: str, actor: User = Depends(require_actor), services: SkillSwapServices = Depends(get_services)):
    return _view(services.lifecycle.reject(swap_id, actor.id), actor, services)


@router.put("/{swap_id}/cancel", response_model=SwapView)
def cancel_swap(swap_id: str, actor: User = Depends(require_actor), services: SkillSwapServices = Depends(get_services)):
    return _view(services.lifecycle.cancel(swap_id, actor.id), actor, services)


@router.put("/{swap_id}/complete", response_model=SwapView)
def complete_swap(swap_id: str, actor: User = Depends(require_actor), services: SkillSwapServices = Depends(get_services)):
    return _view(services.lifecycle.complete(swap_id, actor.id), actor, services)


@router.post("/{swap_id}/rate", response_model=SwapView)
def rate_swap(
    swap_id: str,
    request: RateRequest,
    actor: User = Depends(require_actor),
    services: SkillSwapServices = Depends(get_services),
):
    swap = services.lifecycle.rate(swap_id, actor.id, request.rating, request.comment)
    return _view(swap, actor, services)
