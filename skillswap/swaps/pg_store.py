"""
PostgreSQL Swap Store

Swaps are JSONB documents; status and both party ids are columns so
participant lookups and conditional transitions are single indexed
statements.

Table:
    skillswap_swaps(seq BIGSERIAL, id TEXT PK, requester_id TEXT,
                    recipient_id TEXT, status TEXT, doc JSONB)
"""

import logging
from typing import Any, Dict, List, Optional

from psycopg2.extras import Json
from pydantic_core import to_jsonable_python

from skillswap.db import ConnectionFactory

from .models import Swap, SwapStatus
from .store import RATING_SLOTS, SwapStore

logger = logging.getLogger(__name__)

CREATE_SWAPS_SQL = """
CREATE TABLE IF NOT EXISTS skillswap_swaps (
    seq BIGSERIAL,
    id TEXT PRIMARY KEY,
    requester_id TEXT NOT NULL,
    recipient_id TEXT NOT NULL,
    status TEXT NOT NULL,
    doc JSONB NOT NULL,
    CHECK (requester_id <> recipient_id)
);

CREATE INDEX IF NOT EXISTS idx_skillswap_swaps_requester ON skillswap_swaps(requester_id);
CREATE INDEX IF NOT EXISTS idx_skillswap_swaps_recipient ON skillswap_swaps(recipient_id);
"""

SELECT_SWAP = "SELECT id, requester_id, recipient_id, status, doc FROM skillswap_swaps"
RETURNING_SWAP = "RETURNING id, requester_id, recipient_id, status, doc"

COLUMN_FIELDS = ("id", "requester_id", "recipient_id", "status")


def _row_to_swap(row: Dict[str, Any]) -> Swap:
    doc = dict(row["doc"])
    doc.update({
        "id": row["id"],
        "requester_id": row["requester_id"],
        "recipient_id": row["recipient_id"],
        "status": row["status"],
    })
    return Swap.model_validate(doc)


def _doc_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in COLUMN_FIELDS}


class PostgresSwapStore(SwapStore):

    def __init__(self, connections: ConnectionFactory):
        self._db = connections

    def ensure_tables(self) -> None:
        with self._db.transaction() as cur:
            cur.execute(CREATE_SWAPS_SQL)

    def insert(self, swap: Swap) -> str:
        data = swap.model_dump(mode="json")
        with self._db.transaction() as cur:
            cur.execute(
                """
                INSERT INTO skillswap_swaps (id, requester_id, recipient_id, status, doc)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (swap.id, swap.requester_id, swap.recipient_id, swap.status.value, Json(_doc_fields(data))),
            )
        return swap.id

    def find_by_id(self, swap_id: str) -> Optional[Swap]:
        with self._db.transaction() as cur:
            cur.execute(f"{SELECT_SWAP} WHERE id = %s", (swap_id,))
            row = cur.fetchone()
        return _row_to_swap(row) if row else None

    def find_by_participant(self, user_id: str) -> List[Swap]:
        with self._db.transaction() as cur:
            cur.execute(
                f"{SELECT_SWAP} WHERE requester_id = %s OR recipient_id = %s ORDER BY seq",
                (user_id, user_id),
            )
            rows = cur.fetchall()
        return [_row_to_swap(row) for row in rows]

    def conditional_update(
        self,
        swap_id: str,
        expected_status: SwapStatus,
        patch: Dict[str, Any],
        require_unset: Optional[str] = None,
    ) -> Optional[Swap]:
        if require_unset is not None and require_unset not in RATING_SLOTS:
            raise ValueError(f"Unknown slot {require_unset}")

        json_patch = to_jsonable_python(patch)
        new_status = json_patch.pop("status", SwapStatus(expected_status).value)

        sql = (
            "UPDATE skillswap_swaps SET status = %s, doc = doc || %s "
            "WHERE id = %s AND status = %s"
        )
        params: List[Any] = [new_status, Json(_doc_fields(json_patch)), swap_id, SwapStatus(expected_status).value]
        if require_unset is not None:
            # slot name is whitelisted above
            sql += f" AND COALESCE(jsonb_typeof(doc->'{require_unset}'), 'null') = 'null'"
        sql += f" {RETURNING_SWAP}"

        with self._db.transaction() as cur:
            cur.execute(sql, params)
            row = cur.fetchone()

        if row is None:
            logger.info(f"Conditional update conflict on swap {swap_id} (expected {expected_status})")
            return None
        return _row_to_swap(row)
