#!/usr/bin/env python3
"""
SkillSwap Table Bootstrap
=========================
Creates the skillswap_users and skillswap_swaps tables if missing.

Usage:
    DATABASE_URL=postgres://... python scripts/init_db.py
"""

import logging
import sys

from skillswap.config import SkillSwapConfig
from skillswap.db import ConnectionFactory
from skillswap.directory.pg_store import PostgresUserStore
from skillswap.shared.errors import StoreUnavailableError
from skillswap.swaps.pg_store import PostgresSwapStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def init_tables(config: SkillSwapConfig) -> None:
    connections = ConnectionFactory(config.database_url)
    PostgresUserStore(connections).ensure_tables()
    logger.info("skillswap_users ready")
    PostgresSwapStore(connections).ensure_tables()
    logger.info("skillswap_swaps ready")


def main() -> int:
    config = SkillSwapConfig.from_env()
    if not config.uses_postgres:
        logger.error("DATABASE_URL is not set")
        return 1
    try:
        init_tables(config)
    except StoreUnavailableError as e:
        logger.error(f"Table bootstrap failed: {e.detail}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
