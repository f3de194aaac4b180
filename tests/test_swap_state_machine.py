"""
Swap State Machine Tests

Tests validate:
- Role derivation from identity
- Terminal states and the transition table
- The full (status x action x role) precondition matrix: wrong actor is
  an AuthorizationError, right actor in the wrong status is an
  InvalidTransitionError
"""

from datetime import datetime, timezone

import pytest

from skillswap.shared.errors import AuthorizationError, ErrorCode, InvalidTransitionError
from skillswap.swaps.models import Role, Swap, SwapAction, SwapRating, SwapStatus
from skillswap.swaps.state_machine import (
    RULES,
    can_rate,
    check_action,
    is_terminal,
    role_of,
    valid_transitions,
)

REQUESTER = "alice"
RECIPIENT = "bob"
OUTSIDER = "carol"

ACTORS = {Role.REQUESTER: REQUESTER, Role.RECIPIENT: RECIPIENT}


def make_swap(status: SwapStatus = SwapStatus.PENDING, **kwargs) -> Swap:
    return Swap(
        id="s1",
        requester_id=REQUESTER,
        recipient_id=RECIPIENT,
        skill_offered="Python",
        skill_requested="Guitar",
        status=status,
        **kwargs,
    )


def a_rating() -> SwapRating:
    return SwapRating(rating=4, date=datetime(2024, 1, 1, tzinfo=timezone.utc))


# ============================================================================
# Role Tests
# ============================================================================

class TestRoles:

    def test_role_of(self):
        swap = make_swap()

        assert role_of(swap, REQUESTER) == Role.REQUESTER
        assert role_of(swap, RECIPIENT) == Role.RECIPIENT
        assert role_of(swap, OUTSIDER) is None

    def test_role_slots(self):
        assert Role.REQUESTER.rating_field == "requester_rating"
        assert Role.RECIPIENT.other == Role.REQUESTER


# ============================================================================
# Transition Table Tests
# ============================================================================

class TestTransitionTable:

    @pytest.mark.parametrize("status", [SwapStatus.REJECTED, SwapStatus.CANCELLED, SwapStatus.COMPLETED])
    def test_terminal_states(self, status):
        assert is_terminal(status)
        assert valid_transitions(status) == set()

    def test_non_terminal_states(self):
        assert valid_transitions(SwapStatus.PENDING) == {
            SwapStatus.ACCEPTED, SwapStatus.REJECTED, SwapStatus.CANCELLED,
        }
        assert valid_transitions(SwapStatus.ACCEPTED) == {SwapStatus.COMPLETED}
        assert not is_terminal(SwapStatus.PENDING)

    def test_rules_agree_with_table(self):
        for action, rule in RULES.items():
            if rule.to_status is not None:
                assert rule.to_status in valid_transitions(rule.from_status), action


# ============================================================================
# Precondition Matrix Tests
# ============================================================================

def expected_outcome(status: SwapStatus, action: SwapAction, role: Role) -> str:
    rule = RULES[action]
    if role not in rule.roles:
        return "auth"
    if status != rule.from_status:
        return "state"
    return "ok"


MATRIX = [
    (status, action, role)
    for status in SwapStatus
    for action in SwapAction
    for role in Role
]


class TestPreconditionMatrix:

    @pytest.mark.parametrize("status,action,role", MATRIX)
    def test_matrix(self, status, action, role):
        swap = make_swap(status)
        outcome = expected_outcome(status, action, role)

        if outcome == "auth":
            with pytest.raises(AuthorizationError) as exc_info:
                check_action(swap, ACTORS[role], action)
            assert exc_info.value.code == ErrorCode.NOT_YOUR_REQUEST
        elif outcome == "state":
            with pytest.raises(InvalidTransitionError):
                check_action(swap, ACTORS[role], action)
        else:
            assert check_action(swap, ACTORS[role], action) == role

    @pytest.mark.parametrize("action", list(SwapAction))
    def test_outsider_always_refused(self, action):
        for status in SwapStatus:
            with pytest.raises(AuthorizationError) as exc_info:
                check_action(make_swap(status), OUTSIDER, action)
            assert exc_info.value.code == ErrorCode.NOT_A_PARTY

    def test_wrong_state_details(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            check_action(make_swap(SwapStatus.ACCEPTED), RECIPIENT, SwapAction.ACCEPT)
        assert exc_info.value.code == ErrorCode.ALREADY_DECIDED

        with pytest.raises(InvalidTransitionError) as exc_info:
            check_action(make_swap(SwapStatus.PENDING), REQUESTER, SwapAction.COMPLETE)
        assert exc_info.value.code == ErrorCode.NOT_ACCEPTED

        with pytest.raises(InvalidTransitionError) as exc_info:
            check_action(make_swap(SwapStatus.ACCEPTED), REQUESTER, SwapAction.RATE)
        assert exc_info.value.code == ErrorCode.NOT_COMPLETED


# ============================================================================
# Rating Availability Tests
# ============================================================================

class TestRatingSlots:

    def test_rate_refused_when_own_slot_set(self):
        swap = make_swap(SwapStatus.COMPLETED, requester_rating=a_rating())

        with pytest.raises(InvalidTransitionError) as exc_info:
            check_action(swap, REQUESTER, SwapAction.RATE)
        assert exc_info.value.code == ErrorCode.ALREADY_RATED

        assert check_action(swap, RECIPIENT, SwapAction.RATE) == Role.RECIPIENT

    def test_can_rate(self):
        completed = make_swap(SwapStatus.COMPLETED, recipient_rating=a_rating())

        assert can_rate(completed, REQUESTER)
        assert not can_rate(completed, RECIPIENT)
        assert not can_rate(completed, OUTSIDER)
        assert not can_rate(make_swap(SwapStatus.ACCEPTED), REQUESTER)
