"""
Swap Lifecycle Manager

Creates swaps and drives them through the state machine. Every transition
is a conditional write against the store (expected status, and for ratings
an empty role slot), so two racing requests cannot both succeed.

Rating side effect: once a rating lands in the rater's slot, the OTHER
party's aggregate is folded in as a running average. Only the request that
won the slot write applies it, so a double submission updates the
aggregate at most once.

Version: swap_lifecycle_v1
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from skillswap.directory.store import UserStore
from skillswap.shared.errors import (
    AuthorizationError,
    ErrorCode,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

from .models import MySwaps, Role, Swap, SwapAction, SwapRating, SwapStatus, SwapView
from .state_machine import RULES, can_rate, check_action, role_of
from .store import SwapStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SwapLifecycleManager:

    def __init__(self, swaps: SwapStore, users: UserStore, clock: Optional[Clock] = None):
        self.swaps = swaps
        self.users = users
        self._now = clock or utc_now

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(
        self,
        requester_id: str,
        recipient_id: str,
        skill_offered: str,
        skill_requested: str,
        message: Optional[str] = None,
    ) -> Swap:
        """
        Open a new pending swap.

        Repeated requests between the same pair are allowed; each is its
        own record.
        """
        requester = self.users.find_by_id(requester_id)
        if requester is None:
            raise AuthorizationError(ErrorCode.UNKNOWN_ACTOR, "Unknown user")
        if requester.is_banned:
            raise AuthorizationError(ErrorCode.ACCOUNT_BANNED, "Account has been banned")

        if requester_id == recipient_id:
            raise ValidationError(ErrorCode.SELF_SWAP, "You cannot request a swap with yourself")

        offered = (skill_offered or "").strip()
        requested = (skill_requested or "").strip()
        if not offered or not requested:
            raise ValidationError(ErrorCode.EMPTY_SKILL, "Both skill_offered and skill_requested are required")

        recipient = self.users.find_by_id(recipient_id)
        if recipient is None:
            raise ValidationError(ErrorCode.UNKNOWN_RECIPIENT, "Recipient does not exist")
        if recipient.is_banned:
            raise ValidationError(ErrorCode.UNKNOWN_RECIPIENT, "Recipient is not available")

        now = self._now()
        swap = Swap(
            id=uuid.uuid4().hex,
            requester_id=requester_id,
            recipient_id=recipient_id,
            skill_offered=offered,
            skill_requested=requested,
            status=SwapStatus.PENDING,
            message=(message or "").strip() or None,
            created_at=now,
            updated_at=now,
        )
        self.swaps.insert(swap)
        logger.info(f"Swap {swap.id} created: {requester_id} -> {recipient_id}")
        return swap

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _load(self, swap_id: str) -> Swap:
        swap = self.swaps.find_by_id(swap_id)
        if swap is None:
            raise NotFoundError(ErrorCode.SWAP_NOT_FOUND, f"Swap {swap_id} not found")
        return swap

    def _lost_race(self, swap_id: str, actor_id: str, action: SwapAction) -> InvalidTransitionError:
        """Re-run the checks against fresh state to report why the write lost."""
        check_action(self._load(swap_id), actor_id, action)
        return InvalidTransitionError(
            RULES[action].wrong_state,
            f"Swap {swap_id} changed while processing {action.value}",
        )

    def _transition(self, swap_id: str, actor_id: str, action: SwapAction) -> Swap:
        swap = self._load(swap_id)
        check_action(swap, actor_id, action)
        rule = RULES[action]

        now = self._now()
        patch = {"status": rule.to_status, "updated_at": now}
        if rule.to_status == SwapStatus.COMPLETED:
            patch["completed_at"] = now

        updated = self.swaps.conditional_update(swap_id, rule.from_status, patch)
        if updated is None:
            raise self._lost_race(swap_id, actor_id, action)

        logger.info(f"Swap {swap_id} {rule.from_status.value} -> {rule.to_status.value} by {actor_id}")
        return updated

    def accept(self, swap_id: str, actor_id: str) -> Swap:
        return self._transition(swap_id, actor_id, SwapAction.ACCEPT)

    def reject(self, swap_id: str, actor_id: str) -> Swap:
        return self._transition(swap_id, actor_id, SwapAction.REJECT)

    def cancel(self, swap_id: str, actor_id: str) -> Swap:
        return self._transition(swap_id, actor_id, SwapAction.CANCEL)

    def complete(self, swap_id: str, actor_id: str) -> Swap:
        return self._transition(swap_id, actor_id, SwapAction.COMPLETE)

    def rate(self, swap_id: str, actor_id: str, rating: int, comment: Optional[str] = None) -> Swap:
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError(ErrorCode.RATING_OUT_OF_RANGE, "Rating must be an integer from 1 to 5")

        swap = self._load(swap_id)
        role = check_action(swap, actor_id, SwapAction.RATE)

        entry = SwapRating(
            rating=rating,
            comment=(comment or "").strip() or None,
            date=self._now(),
        )
        updated = self.swaps.conditional_update(
            swap_id,
            SwapStatus.COMPLETED,
            {role.rating_field: entry.model_dump(), "updated_at": entry.date},
            require_unset=role.rating_field,
        )
        if updated is None:
            raise self._lost_race(swap_id, actor_id, SwapAction.RATE)

        rated_user_id = updated.party_id(role.other)
        self.users.apply_rating(rated_user_id, rating)
        logger.info(f"Swap {swap_id}: {role.value} {actor_id} rated {rated_user_id} {rating}/5")
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, swap_id: str, actor_id: str) -> SwapView:
        swap = self._load(swap_id)
        role = role_of(swap, actor_id)
        if role is None:
            raise AuthorizationError(ErrorCode.NOT_A_PARTY, "You are not part of this swap")
        return SwapView(swap=swap, role=role, can_rate=can_rate(swap, actor_id))

    def list_for_user(self, user_id: str) -> List[Swap]:
        """All swaps the user is a party to, newest first."""
        swaps = self.swaps.find_by_participant(user_id)
        return sorted(swaps, key=lambda s: s.created_at, reverse=True)

    def partition(self, user_id: str) -> MySwaps:
        """Split a user's swaps into sent (as requester) and received."""
        sent: List[SwapView] = []
        received: List[SwapView] = []
        for swap in self.list_for_user(user_id):
            role = role_of(swap, user_id)
            view = SwapView(swap=swap, role=role, can_rate=can_rate(swap, user_id))
            (sent if role == Role.REQUESTER else received).append(view)
        return MySwaps(sent=sent, received=received)
