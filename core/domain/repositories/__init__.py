"""Domain repository interfaces."""

from .order_repository import AuditLogRepository, NotificationRepository, OrderRepository

__all__ = ["AuditLogRepository", "NotificationRepository", "OrderRepository"]
