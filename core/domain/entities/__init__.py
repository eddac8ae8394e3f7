"""Domain entities."""

from .notification import AuditEntry, Notification
from .order import AUTO_EXPIRE_REASON, Order

__all__ = ["AUTO_EXPIRE_REASON", "AuditEntry", "Notification", "Order"]
