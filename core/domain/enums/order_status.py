"""
Order Lifecycle Enums.

Status values for orders, payments and notifications, plus the
transition table that guards every status change.
"""
from enum import Enum
from typing import Dict, FrozenSet


class OrderStatus(str, Enum):
    """Fulfillment status of an order."""

    PENDING = "pending"
    PAID = "paid"
    COMMITTED = "committed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    def can_transition_to(self, target: "OrderStatus") -> bool:
        """Check whether ``self -> target`` is a defined transition."""
        return target in ALLOWED_TRANSITIONS[self]

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]


class PaymentStatus(str, Enum):
    """Payment side of an order, tracked independently of fulfillment."""

    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


class NotificationType(str, Enum):
    """Notification kinds written by the lifecycle services."""

    PAYMENT_SUCCESS = "payment_success"
    COMMIT_REMINDER = "commit_reminder"
    COLLECTION_REMINDER = "collection_reminder"
    ORDER_COMMITTED = "order_committed"
    ORDER_CANCELLED = "order_cancelled"
    RECEIPT_READY = "receipt_ready"
    ORDER_SHIPPED = "order_shipped"


class RefundRequestStatus(str, Enum):
    """Progress of a refund request handed to the payment provider."""

    REQUESTED = "requested"
    SUBMITTED = "submitted"
    FAILED = "failed"


ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID}),
    OrderStatus.PAID: frozenset({
        OrderStatus.COMMITTED,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    }),
    OrderStatus.COMMITTED: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    # Refund completion happens downstream of the sweeper.
    OrderStatus.CANCELLED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}
