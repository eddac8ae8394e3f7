"""
SQLAlchemy Order Repository Implementation.

Implements OrderRepository interface using SQLAlchemy.
"""
from datetime import datetime
from typing import Any, List, Optional
import logging

from sqlalchemy import and_, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities import Order
from core.domain.enums import NotificationType, OrderStatus, PaymentStatus
from core.domain.repositories import OrderRepository
from core.infrastructure.database.models import NotificationModel, OrderModel


logger = logging.getLogger(__name__)


def _not_reminded(reminder_type: NotificationType):
    """Filter out orders that already hold a notification of this type."""
    return ~exists(
        select(NotificationModel.id).where(
            NotificationModel.order_id == OrderModel.id,
            NotificationModel.type == reminder_type.value,
        )
    )


class SQLAlchemyOrderRepository(OrderRepository):
    """
    SQLAlchemy implementation of OrderRepository.

    Status changes never go through ORM attribute assignment. They are
    issued as single ``UPDATE ... WHERE id = ? AND status = ?``
    statements and the affected row count decides who won.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def add(self, order: Order) -> None:
        """
        Insert a new order.

        Args:
            order: Order entity to persist
        """
        self.session.add(self._to_model(order))
        await self.session.flush()
        logger.debug(f"Added order: {order.id}")

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        """
        Get order by ID.

        Args:
            order_id: Order ID to lookup

        Returns:
            Order entity if found, None otherwise
        """
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        )
        order_model = result.scalar_one_or_none()
        return self._to_domain_entity(order_model) if order_model else None

    async def find_for_seller(self, order_id: str, seller_id: str) -> Optional[Order]:
        """
        Get order by ID, scoped to its seller.

        Args:
            order_id: Order ID to lookup
            seller_id: Seller that must own the order

        Returns:
            Order entity if found and owned, None otherwise
        """
        result = await self.session.execute(
            select(OrderModel).where(
                and_(
                    OrderModel.id == order_id,
                    OrderModel.seller_id == seller_id,
                )
            )
            .execution_options(populate_existing=True)
        )
        order_model = result.scalar_one_or_none()
        return self._to_domain_entity(order_model) if order_model else None

    async def transition_status(
        self,
        order_id: str,
        expected_status: OrderStatus,
        new_status: OrderStatus,
        seller_id: Optional[str] = None,
        **changes: Any,
    ) -> bool:
        """
        Conditionally update an order's status.

        Args:
            order_id: Order to update
            expected_status: Status the row must still have
            new_status: Status to write
            seller_id: Optional ownership guard
            **changes: Extra column values written in the same statement

        Returns:
            True if exactly one row changed
        """
        if not expected_status.can_transition_to(new_status):
            raise ValueError(
                f"Undefined transition: {expected_status.value} -> {new_status.value}"
            )

        conditions = [
            OrderModel.id == order_id,
            OrderModel.status == expected_status.value,
        ]
        if seller_id is not None:
            conditions.append(OrderModel.seller_id == seller_id)

        values = {"status": new_status.value}
        for key, value in changes.items():
            if key == "metadata":
                key = "order_metadata"
            if isinstance(value, (OrderStatus, PaymentStatus)):
                value = value.value
            values[key] = value

        result = await self.session.execute(
            update(OrderModel)
            .where(and_(*conditions))
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        updated = result.rowcount == 1
        logger.debug(
            f"Conditional update {order_id}: {expected_status.value} -> "
            f"{new_status.value} ({'applied' if updated else 'no match'})"
        )
        return updated

    async def find_expired_commits(self, now: datetime, limit: int = 500) -> List[Order]:
        """
        Find paid orders whose commit deadline has passed.

        Args:
            now: Reference time (naive UTC)
            limit: Maximum number of results

        Returns:
            Orders ordered by deadline, oldest first
        """
        result = await self.session.execute(
            select(OrderModel)
            .where(
                and_(
                    OrderModel.status == OrderStatus.PAID.value,
                    OrderModel.commit_deadline.is_not(None),
                    OrderModel.commit_deadline <= now,
                )
            )
            .order_by(OrderModel.commit_deadline.asc())
            .limit(limit)
        )
        return [self._to_domain_entity(om) for om in result.scalars().all()]

    async def find_commit_deadlines_between(
        self, start: datetime, end: datetime, limit: int = 500
    ) -> List[Order]:
        """
        Find paid orders whose commit deadline falls in ``(start, end]``.

        Orders that already have a commit reminder are excluded.

        Args:
            start: Exclusive lower bound (usually now)
            end: Inclusive upper bound (now + lookahead)
            limit: Maximum number of results

        Returns:
            Orders ordered by deadline
        """
        result = await self.session.execute(
            select(OrderModel)
            .where(
                and_(
                    OrderModel.status == OrderStatus.PAID.value,
                    OrderModel.payment_status == PaymentStatus.PAID.value,
                    OrderModel.committed_at.is_(None),
                    OrderModel.commit_deadline > start,
                    OrderModel.commit_deadline <= end,
                    _not_reminded(NotificationType.COMMIT_REMINDER),
                )
            )
            .order_by(OrderModel.commit_deadline.asc())
            .limit(limit)
        )
        return [self._to_domain_entity(om) for om in result.scalars().all()]

    async def find_committed_between(
        self, start: datetime, end: datetime, limit: int = 500
    ) -> List[Order]:
        """
        Find committed orders whose ``committed_at`` falls in ``(start, end]``.

        Orders that already have a collection reminder are excluded.

        Args:
            start: Exclusive lower bound
            end: Inclusive upper bound
            limit: Maximum number of results

        Returns:
            Orders ordered by commit time
        """
        result = await self.session.execute(
            select(OrderModel)
            .where(
                and_(
                    OrderModel.status == OrderStatus.COMMITTED.value,
                    OrderModel.cancelled_at.is_(None),
                    OrderModel.committed_at > start,
                    OrderModel.committed_at <= end,
                    _not_reminded(NotificationType.COLLECTION_REMINDER),
                )
            )
            .order_by(OrderModel.committed_at.asc())
            .limit(limit)
        )
        return [self._to_domain_entity(om) for om in result.scalars().all()]

    # =========================================================================
    # PRIVATE METHODS
    # =========================================================================

    def _to_model(self, order: Order) -> OrderModel:
        """Convert domain entity to database model."""
        model = OrderModel(
            id=order.id,
            buyer_id=order.buyer_id,
            seller_id=order.seller_id,
            book_id=order.book_id,
            buyer_email=order.buyer_email,
            amount=order.amount,
            status=order.status.value,
            payment_status=order.payment_status.value,
            paid_at=order.paid_at,
            committed_at=order.committed_at,
            cancelled_at=order.cancelled_at,
            commit_deadline=order.commit_deadline,
            cancellation_reason=order.cancellation_reason,
            paystack_reference=order.paystack_reference,
            order_metadata=dict(order.metadata),
        )
        if order.created_at:
            model.created_at = order.created_at
        if order.updated_at:
            model.updated_at = order.updated_at
        return model

    def _to_domain_entity(self, order_model: OrderModel) -> Order:
        """Convert database model to domain entity."""
        return Order(
            id=order_model.id,
            buyer_id=order_model.buyer_id,
            seller_id=order_model.seller_id,
            book_id=order_model.book_id,
            amount=order_model.amount,
            status=OrderStatus(order_model.status),
            payment_status=PaymentStatus(order_model.payment_status),
            created_at=order_model.created_at,
            updated_at=order_model.updated_at,
            paid_at=order_model.paid_at,
            committed_at=order_model.committed_at,
            cancelled_at=order_model.cancelled_at,
            commit_deadline=order_model.commit_deadline,
            cancellation_reason=order_model.cancellation_reason,
            paystack_reference=order_model.paystack_reference,
            buyer_email=order_model.buyer_email,
            metadata=dict(order_model.order_metadata or {}),
        )
