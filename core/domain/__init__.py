"""Domain layer - pure domain models and interfaces."""

from .entities import AuditEntry, Notification, Order
from .enums import NotificationType, OrderStatus, PaymentStatus
from .errors import (
    CommitValidationError,
    InvalidOrderStateError,
    OrderLifecycleError,
    OrderNotFoundError,
    SweepCrashedError,
)
from .repositories import AuditLogRepository, NotificationRepository, OrderRepository
from .value_objects import EntityId, ExecutionID

__all__ = [
    "AuditEntry",
    "AuditLogRepository",
    "CommitValidationError",
    "EntityId",
    "ExecutionID",
    "InvalidOrderStateError",
    "Notification",
    "NotificationRepository",
    "NotificationType",
    "Order",
    "OrderLifecycleError",
    "OrderNotFoundError",
    "OrderRepository",
    "OrderStatus",
    "PaymentStatus",
    "SweepCrashedError",
]
