"""
PostgreSQL connection helper shared by the directory and swap stores.

Connections use RealDictCursor so rows come back as dicts. Driver errors
are translated to StoreUnavailableError at this boundary.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2.extras import RealDictCursor

from skillswap.shared.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class ConnectionFactory:
    """Opens a fresh connection per unit of work."""

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("database_url is required for PostgreSQL stores")
        self.database_url = database_url

    def connect(self):
        try:
            return psycopg2.connect(self.database_url, cursor_factory=RealDictCursor)
        except psycopg2.Error as e:
            logger.error(f"Database connection error: {e}")
            raise StoreUnavailableError("Database connection failed") from e

    @contextmanager
    def transaction(self) -> Iterator:
        """
        Yield a cursor inside one transaction.

        Commits on success, rolls back on any exception, always closes.
        """
        conn = self.connect()
        try:
            with conn.cursor() as cur:
                yield cur
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Database error: {e}")
            raise StoreUnavailableError("Database operation failed") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
