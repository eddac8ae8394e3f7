"""SQLAlchemy repository implementations."""

from .sqlalchemy_book_repository import SQLAlchemyBookRepository, SQLAlchemyRefundRequestRepository
from .sqlalchemy_notification_repository import (
    SQLAlchemyAuditLogRepository,
    SQLAlchemyNotificationRepository,
)
from .sqlalchemy_order_repository import SQLAlchemyOrderRepository

__all__ = [
    "SQLAlchemyAuditLogRepository",
    "SQLAlchemyBookRepository",
    "SQLAlchemyNotificationRepository",
    "SQLAlchemyOrderRepository",
    "SQLAlchemyRefundRequestRepository",
]
