"""
PostgreSQL User Store

Users are stored as JSONB documents. Fields that are filtered on or
updated arithmetically live in their own columns (visibility, is_banned,
rating, total_ratings, email) and are merged back into the document on read.

Table:
    skillswap_users(seq BIGSERIAL, id TEXT PK, email TEXT UNIQUE,
                    visibility TEXT, is_banned BOOLEAN,
                    rating DOUBLE PRECISION, total_ratings INTEGER, doc JSONB)
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from psycopg2.errors import UniqueViolation
from psycopg2.extras import Json

from skillswap.db import ConnectionFactory, escape_like
from skillswap.shared.errors import ErrorCode, NotFoundError, ValidationError

from .models import AvailabilitySlot, User, Visibility
from .store import UserStore

logger = logging.getLogger(__name__)

COLUMN_FIELDS = ("email", "visibility", "is_banned", "rating", "total_ratings")

# rating and total_ratings change only through apply_rating
UPDATABLE_COLUMNS = ("email", "visibility", "is_banned")

CREATE_USERS_SQL = """
CREATE TABLE IF NOT EXISTS skillswap_users (
    seq BIGSERIAL,
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    visibility TEXT NOT NULL DEFAULT 'public',
    is_banned BOOLEAN NOT NULL DEFAULT FALSE,
    rating DOUBLE PRECISION NOT NULL DEFAULT 0,
    total_ratings INTEGER NOT NULL DEFAULT 0 CHECK (total_ratings >= 0),
    doc JSONB NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_skillswap_users_browse
ON skillswap_users(visibility, is_banned, seq);
"""

SELECT_USER = "SELECT id, email, visibility, is_banned, rating, total_ratings, doc FROM skillswap_users"


def _row_to_user(row: Dict[str, Any]) -> User:
    doc = dict(row["doc"])
    doc.update({
        "id": row["id"],
        "email": row["email"],
        "visibility": row["visibility"],
        "is_banned": row["is_banned"],
        "rating": float(row["rating"]),
        "total_ratings": row["total_ratings"],
    })
    return User.model_validate(doc)


def _split(data: Dict[str, Any]):
    columns = {k: v for k, v in data.items() if k in COLUMN_FIELDS}
    doc = {k: v for k, v in data.items() if k not in COLUMN_FIELDS and k != "id"}
    return columns, doc


class PostgresUserStore(UserStore):

    def __init__(self, connections: ConnectionFactory):
        self._db = connections

    def ensure_tables(self) -> None:
        with self._db.transaction() as cur:
            cur.execute(CREATE_USERS_SQL)

    def insert(self, user: User) -> str:
        columns, doc = _split(user.model_dump(mode="json"))
        with self._db.transaction() as cur:
            try:
                cur.execute(
                    """
                    INSERT INTO skillswap_users
                        (id, email, visibility, is_banned, rating, total_ratings, doc)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        user.id,
                        columns["email"],
                        columns["visibility"],
                        columns["is_banned"],
                        columns["rating"],
                        columns["total_ratings"],
                        Json(doc),
                    ),
                )
            except UniqueViolation as e:
                # ids are generated, so a collision here is the email
                logger.info(f"Duplicate registration for {columns['email']}: {e}")
                raise ValidationError(ErrorCode.EMAIL_TAKEN, "User already exists") from e
        return user.id

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._db.transaction() as cur:
            cur.execute(f"{SELECT_USER} WHERE id = %s", (user_id,))
            row = cur.fetchone()
        return _row_to_user(row) if row else None

    def find_by_email(self, email: str) -> Optional[User]:
        with self._db.transaction() as cur:
            cur.execute(f"{SELECT_USER} WHERE lower(email) = lower(%s)", (email.strip(),))
            row = cur.fetchone()
        return _row_to_user(row) if row else None

    def find_public_candidates(
        self,
        exclude_id: Optional[str] = None,
        location: Optional[str] = None,
        availability_slots: Optional[Iterable[AvailabilitySlot]] = None,
    ) -> List[User]:
        clauses = ["visibility = %s", "is_banned = FALSE"]
        params: List[Any] = [Visibility.PUBLIC.value]

        if exclude_id:
            clauses.append("id <> %s")
            params.append(exclude_id)

        if location and location.strip():
            clauses.append("COALESCE(doc->>'location', '') ILIKE %s")
            params.append(f"%{escape_like(location.strip())}%")

        slots = [AvailabilitySlot(s).value for s in (availability_slots or [])]
        if slots:
            # slot names come from the enum, never from raw input
            ors = " OR ".join(
                f"COALESCE((doc->'availability'->>'{slot}')::boolean, FALSE)" for slot in slots
            )
            clauses.append(f"({ors})")

        sql = f"{SELECT_USER} WHERE {' AND '.join(clauses)} ORDER BY seq"
        with self._db.transaction() as cur:
            cur.execute(sql, params)
            rows = cur.fetchall()
        return [_row_to_user(row) for row in rows]

    def list_all(self) -> List[User]:
        with self._db.transaction() as cur:
            cur.execute(f"{SELECT_USER} ORDER BY seq")
            rows = cur.fetchall()
        return [_row_to_user(row) for row in rows]

    def update(self, user_id: str, patch: Dict[str, Any]) -> User:
        current = self.find_by_id(user_id)
        if current is None:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, f"User {user_id} not found")
        # validate the merged result before writing
        merged = User.model_validate({**current.model_dump(), **patch})
        columns, doc = _split(merged.model_dump(mode="json"))

        # scalar columns are written only when the patch names them
        assignments = ["doc = %s"]
        params: List[Any] = [Json(doc)]
        for field in UPDATABLE_COLUMNS:
            if field in patch:
                assignments.append(f"{field} = %s")
                params.append(columns[field])
        params.append(user_id)

        with self._db.transaction() as cur:
            cur.execute(
                f"UPDATE skillswap_users SET {', '.join(assignments)} WHERE id = %s "
                "RETURNING id, email, visibility, is_banned, rating, total_ratings, doc",
                params,
            )
            row = cur.fetchone()
        if row is None:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, f"User {user_id} not found")
        return _row_to_user(row)

    def apply_rating(self, user_id: str, rating: float) -> User:
        with self._db.transaction() as cur:
            cur.execute(
                """
                UPDATE skillswap_users
                SET rating = (rating * total_ratings + %s) / (total_ratings + 1),
                    total_ratings = total_ratings + 1
                WHERE id = %s
                RETURNING id, email, visibility, is_banned, rating, total_ratings, doc
                """,
                (float(rating), user_id),
            )
            row = cur.fetchone()
        if row is None:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, f"User {user_id} not found")
        logger.info(f"User {user_id} rating now {float(row['rating']):.2f}")
        return _row_to_user(row)
