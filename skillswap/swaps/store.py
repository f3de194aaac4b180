"""
Swap Store

Abstract swap store interface plus the in-memory implementation.
PostgreSQL lives in pg_store.py.

conditional_update is the only write path after insert. It applies the
patch only if the swap is still in expected_status (and, for ratings, the
named slot is still empty), checked and written in one atomic step.
"""

from abc import ABC, abstractmethod
from threading import Lock
from typing import Any, Dict, List, Optional

from .models import Role, Swap, SwapStatus

RATING_SLOTS = frozenset(role.rating_field for role in Role)


class SwapStore(ABC):

    @abstractmethod
    def insert(self, swap: Swap) -> str:
        ...

    @abstractmethod
    def find_by_id(self, swap_id: str) -> Optional[Swap]:
        ...

    @abstractmethod
    def find_by_participant(self, user_id: str) -> List[Swap]:
        """Swaps where user_id is requester or recipient, in insertion order."""

    @abstractmethod
    def conditional_update(
        self,
        swap_id: str,
        expected_status: SwapStatus,
        patch: Dict[str, Any],
        require_unset: Optional[str] = None,
    ) -> Optional[Swap]:
        """
        Returns the updated swap, or None on conflict (status moved on,
        slot already set, or swap missing).
        """


class InMemorySwapStore(SwapStore):

    def __init__(self):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()

    def insert(self, swap: Swap) -> str:
        with self._lock:
            if swap.id in self._docs:
                raise ValueError(f"Duplicate swap id {swap.id}")
            self._docs[swap.id] = swap.model_dump()
        return swap.id

    def find_by_id(self, swap_id: str) -> Optional[Swap]:
        with self._lock:
            doc = self._docs.get(swap_id)
            return Swap.model_validate(doc) if doc is not None else None

    def find_by_participant(self, user_id: str) -> List[Swap]:
        with self._lock:
            return [
                Swap.model_validate(doc) for doc in self._docs.values()
                if user_id in (doc["requester_id"], doc["recipient_id"])
            ]

    def conditional_update(
        self,
        swap_id: str,
        expected_status: SwapStatus,
        patch: Dict[str, Any],
        require_unset: Optional[str] = None,
    ) -> Optional[Swap]:
        if require_unset is not None and require_unset not in RATING_SLOTS:
            raise ValueError(f"Unknown slot {require_unset}")
        with self._lock:
            doc = self._docs.get(swap_id)
            if doc is None or doc["status"] != expected_status:
                return None
            if require_unset is not None and doc.get(require_unset) is not None:
                return None
            swap = Swap.model_validate({**doc, **patch})
            self._docs[swap_id] = swap.model_dump()
            return swap
