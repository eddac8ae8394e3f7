"""
Order aggregate root.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..clock import to_naive_utc
from ..enums import OrderStatus, PaymentStatus
from ..errors import InvalidOrderStateError


AUTO_EXPIRE_REASON = "auto-expired: seller did not commit within deadline"


@dataclass
class Order:
    """
    Textbook order between one buyer and one seller.

    The entity holds state and guards transitions. It never writes to
    the store: persistence goes through conditional updates in the
    repository so that concurrent writers cannot both win.
    """
    id: str
    buyer_id: str
    seller_id: str
    book_id: Optional[str]
    amount: int  # minor currency units (cents / kobo)

    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    committed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    commit_deadline: Optional[datetime] = None

    cancellation_reason: Optional[str] = None
    paystack_reference: Optional[str] = None
    buyer_email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValueError(f"Order amount must be integer minor units, got: {self.amount!r}")
        if self.amount < 0:
            raise ValueError(f"Order amount cannot be negative: {self.amount}")
        self.status = OrderStatus(self.status)
        self.payment_status = PaymentStatus(self.payment_status)

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def mark_paid(self, now: datetime, commit_window: timedelta) -> None:
        """
        Record successful payment capture and start the commit clock.

        The deadline is computed once; a second call is rejected so the
        deadline can never be reset.
        """
        if self.commit_deadline is not None:
            raise ValueError(f"Commit deadline already set for order {self.id}")
        self._ensure_transition(OrderStatus.PAID)

        now = to_naive_utc(now)
        self.status = OrderStatus.PAID
        self.payment_status = PaymentStatus.PAID
        self.paid_at = now
        self.commit_deadline = now + commit_window
        self.updated_at = now

    def commit(self, now: datetime) -> None:
        """Seller confirms they will fulfil the order."""
        self.ensure_status(OrderStatus.PAID, action="commit sale")
        now = to_naive_utc(now)
        self.status = OrderStatus.COMMITTED
        self.committed_at = now
        self.updated_at = now

    def expire(self, now: datetime, reason: str = AUTO_EXPIRE_REASON) -> None:
        """Cancel an order whose seller missed the commit deadline."""
        self.ensure_status(OrderStatus.PAID, action="expire order")
        now = to_naive_utc(now)
        self.status = OrderStatus.CANCELLED
        self.cancelled_at = now
        self.cancellation_reason = reason
        self.updated_at = now

    # =========================================================================
    # QUERIES
    # =========================================================================

    def ensure_status(self, expected: OrderStatus, action: str = "update order") -> None:
        """Raise InvalidOrderStateError unless the order is in ``expected``."""
        if self.status != expected:
            raise InvalidOrderStateError(
                self.status.value,
                f"Cannot {action} with status: {self.status.value}",
            )

    def is_commit_expired(self, now: datetime) -> bool:
        """True when the order is still ``paid`` and its deadline has passed."""
        if self.status != OrderStatus.PAID or self.commit_deadline is None:
            return False
        return self.commit_deadline <= to_naive_utc(now)

    def collection_deadline(self, collection_window: timedelta) -> Optional[datetime]:
        """Deadline for the buyer to collect a committed book."""
        if self.committed_at is None:
            return None
        return self.committed_at + collection_window

    def _ensure_transition(self, target: OrderStatus) -> None:
        if not self.status.can_transition_to(target):
            raise InvalidOrderStateError(
                self.status.value,
                f"Cannot move order from '{self.status.value}' to '{target.value}'",
            )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize order state for audit logs and API payloads."""
        def _iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "id": self.id,
            "buyer_id": self.buyer_id,
            "seller_id": self.seller_id,
            "book_id": self.book_id,
            "amount": self.amount,
            "status": self.status.value,
            "payment_status": self.payment_status.value,
            "paid_at": _iso(self.paid_at),
            "committed_at": _iso(self.committed_at),
            "cancelled_at": _iso(self.cancelled_at),
            "commit_deadline": _iso(self.commit_deadline),
            "cancellation_reason": self.cancellation_reason,
            "metadata": dict(self.metadata),
        }
