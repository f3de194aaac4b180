#!/usr/bin/env python3
"""
SkillSwap Dummy User Seeder
===========================
Registers demo users (demo1@example.com, demo2@example.com, ...) with random
skills, location and availability so browse has something to show.

Environment Variables:
- DATABASE_URL: target database (required)
- DUMMY_USER_COUNT: how many users to create (default 10)

Existing demo emails are skipped, so the script can be re-run.
"""

import logging
import os
import random
import sys
from typing import List, Optional

from skillswap.config import LOCATION_CATALOGUE, SKILL_CATALOGUE, SkillSwapConfig
from skillswap.db import ConnectionFactory
from skillswap.directory.models import Availability, AvailabilitySlot, ProfileUpdate, RegisterRequest, User
from skillswap.directory.pg_store import PostgresUserStore
from skillswap.directory.service import UserDirectory
from skillswap.directory.store import UserStore
from skillswap.shared.errors import SkillSwapError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def pick(rng: random.Random, items: List[str], low: int, high: int) -> List[str]:
    return rng.sample(items, rng.randint(low, high))


def random_availability(rng: random.Random) -> Availability:
    chosen = pick(rng, [slot.value for slot in AvailabilitySlot], 1, 2)
    return Availability(**{slot: True for slot in chosen})


def seed_users(
    store: UserStore,
    config: SkillSwapConfig,
    count: int,
    rng: Optional[random.Random] = None,
) -> List[User]:
    rng = rng or random.Random()
    directory = UserDirectory(store, config, rng=rng)
    created = []

    for i in range(1, count + 1):
        email = f"demo{i}@example.com"
        if store.find_by_email(email) is not None:
            logger.info(f"Skipping existing {email}")
            continue

        offered = pick(rng, SKILL_CATALOGUE, 2, 5)
        wanted = pick(rng, [s for s in SKILL_CATALOGUE if s not in offered], 2, 4)

        user = directory.register(RegisterRequest(
            name=f"Demo{i}",
            email=email,
            location=rng.choice(LOCATION_CATALOGUE),
        ))
        user = directory.update_profile(user.id, ProfileUpdate(
            skills_offered=offered,
            skills_wanted=wanted,
            availability=random_availability(rng),
        ))
        created.append(user)
        logger.info(f"Created {email}: offers {offered}, wants {wanted}, rating {user.rating}")

    return created


def main() -> int:
    config = SkillSwapConfig.from_env()
    if not config.uses_postgres:
        logger.error("DATABASE_URL is not set")
        return 1

    count = int(os.getenv("DUMMY_USER_COUNT", "10"))
    store = PostgresUserStore(ConnectionFactory(config.database_url))
    try:
        store.ensure_tables()
        created = seed_users(store, config, count)
    except SkillSwapError as e:
        logger.error(f"Seeding failed: {e}")
        return 1

    logger.info(f"Seeded {len(created)} user(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
