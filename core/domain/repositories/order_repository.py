"""Repository interfaces for the Order aggregate and its side-effect records."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional

from ..entities.notification import AuditEntry, Notification
from ..entities.order import Order
from ..enums import NotificationType, OrderStatus


class OrderRepository(ABC):
    """Abstract repository for Order aggregate persistence."""

    @abstractmethod
    async def add(self, order: Order) -> None:
        """Insert a new order (used by the payment flow and fixtures)."""
        pass

    @abstractmethod
    async def find_by_id(self, order_id: str) -> Optional[Order]:
        """Retrieve order by unique identifier."""
        pass

    @abstractmethod
    async def find_for_seller(self, order_id: str, seller_id: str) -> Optional[Order]:
        """Retrieve order only if it belongs to ``seller_id``.

        Returns:
            Order if it exists and is owned by the seller, None otherwise
        """
        pass

    @abstractmethod
    async def transition_status(
        self,
        order_id: str,
        expected_status: OrderStatus,
        new_status: OrderStatus,
        seller_id: Optional[str] = None,
        **changes: Any,
    ) -> bool:
        """Conditionally move an order between statuses.

        The write only lands if the row still has ``expected_status``
        at write time. Of two concurrent calls with the same expected
        status, exactly one returns True.

        Args:
            order_id: Order to update
            expected_status: Status the row must currently have
            new_status: Status to set
            seller_id: Optional ownership guard
            **changes: Extra columns to set in the same write

        Returns:
            True if one row was updated, False if the precondition failed
        """
        pass

    @abstractmethod
    async def find_expired_commits(self, now: datetime, limit: int = 500) -> List[Order]:
        """Orders still ``paid`` whose commit deadline is at or before ``now``."""
        pass

    @abstractmethod
    async def find_commit_deadlines_between(
        self, start: datetime, end: datetime, limit: int = 500
    ) -> List[Order]:
        """Paid orders with ``start < commit_deadline <= end`` and no commit reminder yet."""
        pass

    @abstractmethod
    async def find_committed_between(
        self, start: datetime, end: datetime, limit: int = 500
    ) -> List[Order]:
        """Committed orders with ``start < committed_at <= end`` and no collection reminder yet."""
        pass


class NotificationRepository(ABC):
    """Abstract repository for user notifications."""

    @abstractmethod
    async def add(self, notification: Notification) -> Notification:
        pass

    @abstractmethod
    async def exists_for_order(self, order_id: str, notification_type: NotificationType) -> bool:
        """Check if a notification of this type was already sent for the order."""
        pass

    @abstractmethod
    async def list_for_order(self, order_id: str) -> List[Notification]:
        pass


class AuditLogRepository(ABC):
    """Append-only audit trail."""

    @abstractmethod
    async def append(self, entry: AuditEntry) -> None:
        pass
