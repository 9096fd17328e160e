"""Order status state machine.

Pure guards over ``VALID_TRANSITIONS``.  The model helper, the service
layer and the admin API all go through these functions so the rules
are checked the same way everywhere.
"""

from __future__ import annotations

from typing import List

from modules.orders.constants import VALID_TRANSITIONS, OrderStatus
from modules.orders.exceptions import InvalidOrderStatus


def is_valid_status(status: str) -> bool:
    return str(status) in OrderStatus.values


def allowed_transitions(status: str) -> List[str]:
    """Return the statuses reachable from *status*, sorted for stable output."""
    return sorted(VALID_TRANSITIONS.get(str(status), frozenset()))


def can_transition(current: str, requested: str) -> bool:
    # str() turns TextChoices members into their plain values.
    return str(requested) in VALID_TRANSITIONS.get(str(current), frozenset())


def ensure_transition(current: str, requested: str) -> None:
    """Raise ``InvalidOrderStatus`` unless *current* -> *requested* is allowed."""
    current, requested = str(current), str(requested)
    if can_transition(current, requested):
        return
    allowed = allowed_transitions(current)
    if not is_valid_status(requested):
        message = (
            f"'{requested}' is not a valid order status. "
            f"Valid statuses: {', '.join(OrderStatus.values)}."
        )
    else:
        message = (
            f"Cannot transition from '{current}' to '{requested}'. "
            f"Allowed: {', '.join(allowed) or 'none'}."
        )
    raise InvalidOrderStatus(
        message,
        current_status=current,
        requested_status=requested,
        allowed_transitions=allowed,
    )
