"""
SQLAlchemy ORM Models.

Maps domain entities to database tables.
"""
import uuid

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text
)
from sqlalchemy.orm import declarative_base

from core.domain.clock import utc_now


Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# BOOK MODEL
# =============================================================================

class BookModel(Base):
    """
    Book listing.

    Only the availability flags are touched by the order lifecycle.
    """

    __tablename__ = "books"

    id = Column(String(36), primary_key=True, default=_new_id)
    seller_id = Column(String(36), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    author = Column(String(255), nullable=True)
    price = Column(Integer, nullable=False, default=0)  # minor units

    sold = Column(Boolean, nullable=False, default=False)
    available = Column(Boolean, nullable=False, default=True)
    status = Column(String(30), nullable=False, default="available")

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return f"<BookModel(id={self.id}, sold={self.sold})>"


# =============================================================================
# ORDER MODEL
# =============================================================================

class OrderModel(Base):
    """
    Order database model.

    ``status`` is the only column written under contention; every write
    to it is a conditional update guarded by the expected prior status.
    """

    __tablename__ = "orders"

    # Primary key
    id = Column(String(36), primary_key=True, default=_new_id)

    # Parties and subject
    buyer_id = Column(String(36), nullable=False, index=True)
    seller_id = Column(String(36), nullable=False, index=True)
    book_id = Column(String(36), ForeignKey("books.id"), nullable=True)
    buyer_email = Column(String(255), nullable=True)

    # Money (minor units)
    amount = Column(Integer, nullable=False)

    # Status
    status = Column(String(30), nullable=False, default="pending", index=True)
    payment_status = Column(String(30), nullable=False, default="unpaid")

    # Lifecycle timestamps
    paid_at = Column(DateTime, nullable=True)
    committed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    commit_deadline = Column(DateTime, nullable=True)

    cancellation_reason = Column(Text, nullable=True)
    paystack_reference = Column(String(100), nullable=True, unique=True)

    # Opaque payload for receipts / notifications
    order_metadata = Column("metadata", JSON, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, nullable=False)

    # Indexes
    __table_args__ = (
        Index("ix_orders_status_commit_deadline", "status", "commit_deadline"),
        Index("ix_orders_status_committed_at", "status", "committed_at"),
    )

    def __repr__(self):
        return f"<OrderModel(id={self.id}, status={self.status})>"


# =============================================================================
# NOTIFICATION MODEL
# =============================================================================

class NotificationModel(Base):
    """In-app notification."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)

    type = Column(String(50), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    read = Column(Boolean, nullable=False, default=False)
    sent_at = Column(DateTime, default=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_notifications_order_type", "order_id", "type"),
    )

    def __repr__(self):
        return f"<NotificationModel(id={self.id}, type={self.type}, user={self.user_id})>"


# =============================================================================
# AUDIT LOG MODEL
# =============================================================================

class AuditLogModel(Base):
    """
    Audit log model.

    Append-only storage for state-changing actions.
    """

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    action = Column(String(100), nullable=False, index=True)
    table_name = Column(String(100), nullable=False)
    record_id = Column(String(36), nullable=True, index=True)
    user_id = Column(String(36), nullable=True)

    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLogModel(id={self.id}, action={self.action}, record={self.record_id})>"


# =============================================================================
# REFUND REQUEST MODEL
# =============================================================================

class RefundRequestModel(Base):
    """
    Refund request raised when an order auto-expires.

    The row is the record that a refund was asked for; the payment
    reversal itself completes asynchronously at the provider.
    """

    __tablename__ = "refund_requests"

    id = Column(String(36), primary_key=True, default=_new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, unique=True)

    amount = Column(Integer, nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(String(30), nullable=False, default="requested", index=True)

    provider_reference = Column(String(100), nullable=True)
    error = Column(Text, nullable=True)

    requested_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return f"<RefundRequestModel(id={self.id}, order={self.order_id}, status={self.status})>"
