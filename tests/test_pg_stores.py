"""
PostgreSQL Store Tests

No database required: the connection factory is replaced with a fake that
hands out MagicMock cursors, so these tests check the SQL each store issues
and how rows are mapped back.

Tests validate:
- Conditional swap updates guard on status (and on the empty rating slot)
- A conflicting update returns None instead of raising
- Browse pre-filters: visibility, banned, location ILIKE, availability OR
- Rating aggregate is a single arithmetic UPDATE
- Driver errors surface as StoreUnavailableError, with rollback
- A duplicate email on insert is EMAIL_TAKEN, not an infrastructure error
- Profile updates only write the scalar columns they name
"""

import random
from contextlib import contextmanager
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import psycopg2
import pytest
from psycopg2.errors import UniqueViolation

from skillswap.config import SkillSwapConfig
from skillswap.db import ConnectionFactory, escape_like
from skillswap.directory.models import AvailabilitySlot, RegisterRequest, User
from skillswap.directory.pg_store import PostgresUserStore, _row_to_user
from skillswap.directory.service import UserDirectory
from skillswap.shared.errors import ErrorCode, StoreUnavailableError, ValidationError
from skillswap.swaps.models import Swap, SwapStatus
from skillswap.swaps.pg_store import PostgresSwapStore


class FakeConnections:
    """Stands in for ConnectionFactory; every transaction shares one cursor."""

    def __init__(self):
        self.cursor = MagicMock()

    @contextmanager
    def transaction(self):
        yield self.cursor


def swap_row(status: str = "completed", **doc_fields) -> dict:
    swap = Swap(
        id="s1",
        requester_id="alice",
        recipient_id="bob",
        skill_offered="Python",
        skill_requested="Guitar",
        status=SwapStatus(status),
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    data = swap.model_dump(mode="json")
    doc = {k: v for k, v in data.items() if k not in ("id", "requester_id", "recipient_id", "status")}
    doc.update(doc_fields)
    return {"id": "s1", "requester_id": "alice", "recipient_id": "bob", "status": status, "doc": doc}


def user_row(user_id: str = "bob", rating: float = 4.0, total: int = 1) -> dict:
    return {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "visibility": "public",
        "is_banned": False,
        "rating": rating,
        "total_ratings": total,
        "doc": {"name": user_id.title(), "skills_offered": ["Guitar"], "availability": {"weekends": True}},
    }


# ============================================================================
# Swap Store
# ============================================================================

class TestPostgresSwapStore:

    def test_transition_guards_on_status(self):
        db = FakeConnections()
        db.cursor.fetchone.return_value = swap_row("accepted")
        store = PostgresSwapStore(db)
        now = datetime(2024, 1, 2, tzinfo=timezone.utc)

        updated = store.conditional_update("s1", SwapStatus.PENDING, {"status": SwapStatus.ACCEPTED, "updated_at": now})

        assert updated.status == SwapStatus.ACCEPTED
        sql, params = db.cursor.execute.call_args[0]
        assert "WHERE id = %s AND status = %s" in sql
        assert "jsonb_typeof" not in sql
        assert params[0] == "accepted"
        assert params[1].adapted == {"updated_at": "2024-01-02T00:00:00Z"}
        assert params[2:] == ["s1", "pending"]

    def test_rating_guards_on_empty_slot(self):
        db = FakeConnections()
        db.cursor.fetchone.return_value = swap_row(
            requester_rating={"rating": 5, "comment": None, "date": "2024-01-02T00:00:00Z"}
        )
        store = PostgresSwapStore(db)

        updated = store.conditional_update(
            "s1",
            SwapStatus.COMPLETED,
            {"requester_rating": {"rating": 5, "comment": None, "date": datetime(2024, 1, 2, tzinfo=timezone.utc)}},
            require_unset="requester_rating",
        )

        sql, params = db.cursor.execute.call_args[0]
        assert "jsonb_typeof(doc->'requester_rating')" in sql
        # status is left as is
        assert params[0] == "completed"
        assert updated.requester_rating.rating == 5

    def test_conflict_returns_none(self):
        db = FakeConnections()
        db.cursor.fetchone.return_value = None
        store = PostgresSwapStore(db)

        assert store.conditional_update("s1", SwapStatus.PENDING, {"status": SwapStatus.ACCEPTED}) is None

    def test_unknown_slot_rejected(self):
        store = PostgresSwapStore(FakeConnections())

        with pytest.raises(ValueError):
            store.conditional_update("s1", SwapStatus.COMPLETED, {}, require_unset="doc; DROP TABLE x")

    def test_find_by_participant(self):
        db = FakeConnections()
        db.cursor.fetchall.return_value = [swap_row("pending")]
        store = PostgresSwapStore(db)

        swaps = store.find_by_participant("bob")

        assert [s.id for s in swaps] == ["s1"]
        sql, params = db.cursor.execute.call_args[0]
        assert "requester_id = %s OR recipient_id = %s" in sql
        assert params == ("bob", "bob")


# ============================================================================
# User Store
# ============================================================================

class TestPostgresUserStore:

    def test_row_mapping_prefers_columns(self):
        row = user_row(rating=4.5, total=2)
        row["doc"]["rating"] = 0.0

        user = _row_to_user(row)

        assert user.rating == 4.5
        assert user.total_ratings == 2
        assert user.availability.weekends

    def test_public_candidates_filters(self):
        db = FakeConnections()
        db.cursor.fetchall.return_value = [user_row()]
        store = PostgresUserStore(db)

        users = store.find_public_candidates(
            exclude_id="alice",
            location="new_york",
            availability_slots=[AvailabilitySlot.WEEKENDS, AvailabilitySlot.EVENINGS],
        )

        assert [u.id for u in users] == ["bob"]
        sql, params = db.cursor.execute.call_args[0]
        assert "is_banned = FALSE" in sql
        assert "ILIKE %s" in sql
        assert "doc->'availability'->>'weekends'" in sql
        assert " OR " in sql
        assert sql.endswith("ORDER BY seq")
        assert params == ["public", "alice", "%new\\_york%"]

    def test_apply_rating_is_arithmetic_update(self):
        db = FakeConnections()
        db.cursor.fetchone.return_value = user_row(rating=4.5, total=2)
        store = PostgresUserStore(db)

        user = store.apply_rating("bob", 5)

        sql, params = db.cursor.execute.call_args[0]
        assert "(rating * total_ratings + %s) / (total_ratings + 1)" in sql
        assert "total_ratings = total_ratings + 1" in sql
        assert params == (5.0, "bob")
        assert user.total_ratings == 2

    def test_insert_splits_columns_from_doc(self):
        db = FakeConnections()
        store = PostgresUserStore(db)
        user = User(id="u1", name="Ana", email="ana@example.com", rating=3.8)

        store.insert(user)

        _, params = db.cursor.execute.call_args[0]
        assert params[:6] == ("u1", "ana@example.com", "public", False, 3.8, 0)
        doc = params[6].adapted
        assert doc["name"] == "Ana"
        assert "rating" not in doc
        assert "id" not in doc

    def test_duplicate_email_insert_is_validation_error(self):
        db = FakeConnections()
        db.cursor.execute.side_effect = UniqueViolation("duplicate key value violates unique constraint")
        store = PostgresUserStore(db)

        with pytest.raises(ValidationError) as exc_info:
            store.insert(User(id="u2", name="Ana", email="ana@example.com"))

        assert exc_info.value.code == ErrorCode.EMAIL_TAKEN
        assert not exc_info.value.retryable

    def test_register_losing_email_race_reports_email_taken(self):
        """The pre-check saw no user, but a concurrent insert claimed the email first."""
        factory = ConnectionFactory("postgresql://localhost/skillswap")
        conn = MagicMock()
        cur = conn.cursor.return_value.__enter__.return_value
        cur.fetchone.return_value = None

        def execute(sql, params=None):
            if "INSERT INTO skillswap_users" in sql:
                raise UniqueViolation("duplicate key value violates unique constraint")

        cur.execute.side_effect = execute
        directory = UserDirectory(PostgresUserStore(factory), SkillSwapConfig(), rng=random.Random(3))

        with patch("skillswap.db.psycopg2.connect", return_value=conn):
            with pytest.raises(ValidationError) as exc_info:
                directory.register(RegisterRequest(name="Ana", email="ana@example.com"))

        assert exc_info.value.code == ErrorCode.EMAIL_TAKEN
        conn.rollback.assert_called_once()

    def test_profile_update_leaves_unpatched_columns(self):
        db = FakeConnections()
        db.cursor.fetchone.return_value = user_row()
        store = PostgresUserStore(db)

        store.update("bob", {"name": "Robert"})

        sql, params = db.cursor.execute.call_args[0]
        assert sql.startswith("UPDATE skillswap_users SET doc = %s WHERE id = %s")
        assert "is_banned" not in sql.split("RETURNING")[0]
        assert "visibility" not in sql.split("RETURNING")[0]
        assert params[0].adapted["name"] == "Robert"
        assert params[1:] == ["bob"]

    def test_ban_update_writes_column(self):
        db = FakeConnections()
        db.cursor.fetchone.return_value = user_row()
        store = PostgresUserStore(db)

        store.update("bob", {"is_banned": True})

        sql, params = db.cursor.execute.call_args[0]
        assert "doc = %s, is_banned = %s WHERE id = %s" in sql
        assert params[1:] == [True, "bob"]


# ============================================================================
# Connection Handling
# ============================================================================

class TestConnectionFactory:

    def test_requires_url(self):
        with pytest.raises(ValueError):
            ConnectionFactory("")

    def test_connect_failure_is_store_unavailable(self):
        factory = ConnectionFactory("postgresql://localhost/skillswap")

        with patch("skillswap.db.psycopg2.connect", side_effect=psycopg2.OperationalError("down")):
            with pytest.raises(StoreUnavailableError) as exc_info:
                factory.connect()

        assert exc_info.value.retryable

    def test_transaction_rolls_back_on_driver_error(self):
        factory = ConnectionFactory("postgresql://localhost/skillswap")
        conn = MagicMock()

        with patch("skillswap.db.psycopg2.connect", return_value=conn):
            with pytest.raises(StoreUnavailableError):
                with factory.transaction() as cur:
                    raise psycopg2.OperationalError("connection lost")

        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()
        conn.close.assert_called_once()

    def test_transaction_commits(self):
        factory = ConnectionFactory("postgresql://localhost/skillswap")
        conn = MagicMock()

        with patch("skillswap.db.psycopg2.connect", return_value=conn):
            with factory.transaction() as cur:
                cur.execute("SELECT 1")

        conn.commit.assert_called_once()
        conn.close.assert_called_once()

    def test_escape_like(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
