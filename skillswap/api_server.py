"""
SkillSwap API Server
====================
App factory: wires stores, services and routers into a FastAPI app.

Stores:
- DATABASE_URL set   -> PostgreSQL (psycopg2, JSONB documents)
- DATABASE_URL unset -> in-memory (development and tests)
"""

import logging
import random
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillswap import __version__
from skillswap.api import admin_router, health_router, swaps_router, users_router
from skillswap.api.deps import SkillSwapServices
from skillswap.api.errors import register_error_handlers
from skillswap.config import SkillSwapConfig
from skillswap.db import ConnectionFactory
from skillswap.directory.pg_store import PostgresUserStore
from skillswap.directory.service import UserDirectory
from skillswap.directory.store import InMemoryUserStore, UserStore
from skillswap.matching.match import MatchEngine
from skillswap.swaps.lifecycle import Clock, SwapLifecycleManager
from skillswap.swaps.pg_store import PostgresSwapStore
from skillswap.swaps.store import InMemorySwapStore, SwapStore

logger = logging.getLogger(__name__)


def build_stores(config: SkillSwapConfig):
    """Pick the store backend from config."""
    if config.uses_postgres:
        connections = ConnectionFactory(config.database_url)
        return PostgresUserStore(connections), PostgresSwapStore(connections)
    return InMemoryUserStore(), InMemorySwapStore()


def build_services(
    config: SkillSwapConfig,
    user_store: UserStore,
    swap_store: SwapStore,
    rng: Optional[random.Random] = None,
    clock: Optional[Clock] = None,
) -> SkillSwapServices:
    return SkillSwapServices(
        config=config,
        directory=UserDirectory(user_store, config, rng=rng),
        engine=MatchEngine(user_store, config),
        lifecycle=SwapLifecycleManager(swap_store, user_store, clock=clock),
    )


def create_app(
    config: Optional[SkillSwapConfig] = None,
    user_store: Optional[UserStore] = None,
    swap_store: Optional[SwapStore] = None,
    rng: Optional[random.Random] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    config = config or SkillSwapConfig.from_env()
    if user_store is None or swap_store is None:
        default_users, default_swaps = build_stores(config)
        user_store = user_store or default_users
        swap_store = swap_store or default_swaps

    app = FastAPI(
        title="SkillSwap API",
        description="Skill-exchange matching and swap lifecycle",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.state.services = build_services(config, user_store, swap_store, rng=rng, clock=clock)
    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(swaps_router)
    app.include_router(admin_router)

    logger.info(
        f"SkillSwap API {__version__} ready "
        f"(store={'postgres' if config.uses_postgres else 'memory'})"
    )
    return app
