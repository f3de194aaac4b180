"""
Request dependencies: service container and actor resolution.

Authentication happens upstream; the resolved user id arrives in the
X-User-Id header.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from skillswap.config import SkillSwapConfig
from skillswap.directory.models import User
from skillswap.directory.service import UserDirectory
from skillswap.matching.match import MatchEngine
from skillswap.swaps.lifecycle import SwapLifecycleManager


@dataclass
class SkillSwapServices:
    config: SkillSwapConfig
    directory: UserDirectory
    engine: MatchEngine
    lifecycle: SwapLifecycleManager


def get_services(request: Request) -> SkillSwapServices:
    return request.app.state.services


def optional_viewer(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    services: SkillSwapServices = Depends(get_services),
) -> Optional[User]:
    """Caller if known and not banned, otherwise anonymous (None)."""
    return services.directory.resolve_viewer(x_user_id)


def require_actor(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    services: SkillSwapServices = Depends(get_services),
) -> User:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return services.directory.resolve_actor(x_user_id)
