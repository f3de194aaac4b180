"""Swap state machine: enforces who may do what, from which status.

Swap lifecycle:
    PENDING -> ACCEPTED -> COMPLETED
    PENDING -> REJECTED
    PENDING -> CANCELLED

REJECTED, CANCELLED and COMPLETED are terminal. Rating is not a status
change: it is allowed once per role while COMPLETED.

Fail-closed: a wrong actor raises AuthorizationError, the right actor in the
wrong status raises InvalidTransitionError.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Set

from skillswap.shared.errors import AuthorizationError, ErrorCode, InvalidTransitionError

from .models import Role, Swap, SwapAction, SwapStatus


_TRANSITIONS: Dict[SwapStatus, Set[SwapStatus]] = {
    SwapStatus.PENDING: {SwapStatus.ACCEPTED, SwapStatus.REJECTED, SwapStatus.CANCELLED},
    SwapStatus.ACCEPTED: {SwapStatus.COMPLETED},
    SwapStatus.REJECTED: set(),
    SwapStatus.CANCELLED: set(),
    SwapStatus.COMPLETED: set(),
}


@dataclass(frozen=True)
class ActionRule:
    roles: FrozenSet[Role]
    from_status: SwapStatus
    to_status: Optional[SwapStatus]
    wrong_state: ErrorCode


BOTH_PARTIES = frozenset({Role.REQUESTER, Role.RECIPIENT})

RULES: Dict[SwapAction, ActionRule] = {
    SwapAction.ACCEPT: ActionRule(
        frozenset({Role.RECIPIENT}), SwapStatus.PENDING, SwapStatus.ACCEPTED, ErrorCode.ALREADY_DECIDED
    ),
    SwapAction.REJECT: ActionRule(
        frozenset({Role.RECIPIENT}), SwapStatus.PENDING, SwapStatus.REJECTED, ErrorCode.ALREADY_DECIDED
    ),
    SwapAction.CANCEL: ActionRule(
        frozenset({Role.REQUESTER}), SwapStatus.PENDING, SwapStatus.CANCELLED, ErrorCode.ALREADY_DECIDED
    ),
    SwapAction.COMPLETE: ActionRule(
        BOTH_PARTIES, SwapStatus.ACCEPTED, SwapStatus.COMPLETED, ErrorCode.NOT_ACCEPTED
    ),
    SwapAction.RATE: ActionRule(
        BOTH_PARTIES, SwapStatus.COMPLETED, None, ErrorCode.NOT_COMPLETED
    ),
}


def role_of(swap: Swap, actor_id: str) -> Optional[Role]:
    """Derive the actor's role on this swap, or None for outsiders."""
    if actor_id == swap.requester_id:
        return Role.REQUESTER
    if actor_id == swap.recipient_id:
        return Role.RECIPIENT
    return None


def is_terminal(status: SwapStatus) -> bool:
    return not _TRANSITIONS[status]


def valid_transitions(status: SwapStatus) -> Set[SwapStatus]:
    return set(_TRANSITIONS[status])


def can_rate(swap: Swap, actor_id: str) -> bool:
    """Rating is available iff completed and the caller's own slot is empty."""
    role = role_of(swap, actor_id)
    if role is None:
        return False
    return swap.status == SwapStatus.COMPLETED and swap.rating_slot(role) is None


def check_action(swap: Swap, actor_id: str, action: SwapAction) -> Role:
    """
    Validate that actor_id may perform action on swap right now.

    Returns the actor's role. Actor checks run before state checks, so a
    wrong actor always gets AuthorizationError regardless of status.
    """
    rule = RULES[action]
    role = role_of(swap, actor_id)

    if role is None:
        raise AuthorizationError(
            ErrorCode.NOT_A_PARTY,
            "You are not part of this swap",
            {"swap_id": swap.id, "action": action.value},
        )
    if role not in rule.roles:
        allowed = " or ".join(sorted(r.value for r in rule.roles))
        raise AuthorizationError(
            ErrorCode.NOT_YOUR_REQUEST,
            f"Not your request: only the {allowed} may {action.value} this swap",
            {"swap_id": swap.id, "action": action.value, "role": role.value},
        )

    if swap.status != rule.from_status:
        raise InvalidTransitionError(
            rule.wrong_state,
            f"Cannot {action.value} a swap that is {swap.status.value}; "
            f"it must be {rule.from_status.value}",
            {"swap_id": swap.id, "action": action.value, "status": swap.status.value},
        )

    if rule.to_status is not None and rule.to_status not in _TRANSITIONS[swap.status]:
        # RULES and _TRANSITIONS must agree
        raise InvalidTransitionError(
            rule.wrong_state,
            f"Invalid swap transition: {swap.status.value} -> {rule.to_status.value}",
        )

    if action == SwapAction.RATE and swap.rating_slot(role) is not None:
        raise InvalidTransitionError(
            ErrorCode.ALREADY_RATED,
            "You have already rated this swap",
            {"swap_id": swap.id, "role": role.value},
        )

    return role
