"""SkillSwap HTTP routers."""

from .admin import router as admin_router
from .health import router as health_router
from .swaps import router as swaps_router
from .users import router as users_router

__all__ = ["admin_router", "health_router", "swaps_router", "users_router"]
