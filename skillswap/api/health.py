"""
Health check.

GET /api/v1/health - public, reports the store backend in use.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from skillswap import __version__

from .deps import SkillSwapServices, get_services

router = APIRouter(prefix="/api/v1/health", tags=["health"])


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    store: str
    timestamp: str


@router.get("", response_model=HealthResponse)
def health(services: SkillSwapServices = Depends(get_services)):
    return HealthResponse(
        status="ok",
        version=__version__,
        store="postgres" if services.config.uses_postgres else "memory",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
