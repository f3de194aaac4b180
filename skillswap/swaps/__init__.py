"""
Swap Lifecycle

pending -> {accepted, rejected, cancelled}; accepted -> completed.
Completed swaps take one rating per party.
"""

from .models import (
    MySwaps,
    RateRequest,
    Role,
    Swap,
    SwapAction,
    SwapCreate,
    SwapRating,
    SwapStatus,
    SwapView,
)
from .lifecycle import SwapLifecycleManager
from .state_machine import can_rate, check_action, is_terminal, role_of, valid_transitions
from .store import InMemorySwapStore, SwapStore

__all__ = [
    "MySwaps",
    "RateRequest",
    "Role",
    "Swap",
    "SwapAction",
    "SwapCreate",
    "SwapRating",
    "SwapStatus",
    "SwapView",
    "SwapLifecycleManager",
    "can_rate",
    "check_action",
    "is_terminal",
    "role_of",
    "valid_transitions",
    "InMemorySwapStore",
    "SwapStore",
]
