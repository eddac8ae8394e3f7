"""Domain enums."""

from .order_status import (
    ALLOWED_TRANSITIONS,
    NotificationType,
    OrderStatus,
    PaymentStatus,
    RefundRequestStatus,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "NotificationType",
    "OrderStatus",
    "PaymentStatus",
    "RefundRequestStatus",
]
