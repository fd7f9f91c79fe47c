"""
Order status workflow.

Static transition table for order statuses. The backend is authoritative;
the console uses the table to offer only legal next statuses and to reject
illegal ones before forwarding an update.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..exceptions import InvalidStatusTransition


class OrderStatus(str, Enum):
    """Lifecycle states of an order."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


TRANSITIONS: Dict[OrderStatus, Tuple[OrderStatus, ...]] = {
    OrderStatus.PENDING: (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    OrderStatus.CONFIRMED: (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
    OrderStatus.PROCESSING: (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
    OrderStatus.SHIPPED: (OrderStatus.DELIVERED,),
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
}

STATUS_COLORS: Dict[str, str] = {
    OrderStatus.PENDING.value: "warning",
    OrderStatus.CONFIRMED.value: "info",
    OrderStatus.PROCESSING.value: "primary",
    OrderStatus.SHIPPED.value: "secondary",
    OrderStatus.DELIVERED.value: "success",
    OrderStatus.CANCELLED.value: "error",
}


def _coerce(status: str) -> Optional[OrderStatus]:
    if isinstance(status, OrderStatus):
        return status
    try:
        return OrderStatus(str(status).lower())
    except ValueError:
        return None


def valid_next_statuses(status: str) -> List[str]:
    """
    Get the statuses an order may move to from ``status``.

    Args:
        status: Current order status

    Returns:
        Allowed next statuses in workflow order; empty for terminal or unknown statuses
    """
    current = _coerce(status)
    if current is None:
        return []
    return [target.value for target in TRANSITIONS[current]]


def can_transition(current: str, target: str) -> bool:
    """Check whether ``current`` -> ``target`` is a legal move."""
    target_status = _coerce(target)
    return target_status is not None and target_status.value in valid_next_statuses(current)


def is_cancellable(status: str) -> bool:
    return can_transition(status, OrderStatus.CANCELLED.value)


def is_terminal(status: str) -> bool:
    current = _coerce(status)
    return current is not None and not TRANSITIONS[current]


def status_color(status: str) -> str:
    """Badge color for an order status."""
    current = _coerce(status)
    return STATUS_COLORS.get(current.value, "default") if current else "default"


def ensure_transition(current: str, target: str) -> None:
    """
    Validate a status change against the transition table.

    Args:
        current: Current order status
        target: Requested order status

    Raises:
        InvalidStatusTransition: If the move is not allowed
    """
    if not can_transition(current, target):
        raise InvalidStatusTransition(
            current_status=current,
            target_status=target,
            allowed=valid_next_statuses(current),
        )
