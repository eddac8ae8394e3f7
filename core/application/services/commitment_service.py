"""
Commitment Transition Handler.

Lets a seller confirm they will fulfil a paid order.

Flow:
1. Validate identifiers (no store access on failure)
2. Load the order scoped to the seller
3. Check the order is still ``paid``
4. Conditional update ``paid -> committed`` (the authoritative write)
5. Best-effort side effects: book sold, buyer notification, audit entry
"""
from datetime import datetime
from typing import Optional

from core.application.dtos import CommitResult, CommittedOrderDTO
from core.domain.entities import AuditEntry, Notification, Order
from core.domain.enums import NotificationType, OrderStatus
from core.domain.errors import (
    CommitValidationError,
    InvalidOrderStateError,
    OrderNotFoundError,
)
from core.domain.value_objects import EntityId
from core.infrastructure.database.unit_of_work import UnitOfWork

from .base import LifecycleService


class CommitmentService(LifecycleService):
    """
    Seller commitment use case.

    Retrying is safe: a second call on a committed order fails the
    status precondition and changes nothing.
    """

    async def commit_to_sale(
        self,
        order_id: str,
        seller_id: str,
        now: Optional[datetime] = None,
    ) -> CommitResult:
        """
        Commit a seller to a paid order.

        Args:
            order_id: Order to commit
            seller_id: Seller performing the commit (must own the order)
            now: Override for the current time (defaults to the clock)

        Returns:
            CommitResult with the committed order and any failed side effects

        Raises:
            CommitValidationError: Identifier missing or blank
            OrderNotFoundError: Order missing or owned by another seller
            InvalidOrderStateError: Order is not ``paid``
        """
        order_ref = self._validate_id(order_id, "orderId")
        seller_ref = self._validate_id(seller_id, "sellerId")
        now = self._resolve_now(now)

        async with self._uow() as uow:
            order = await uow.orders.find_for_seller(order_ref.value, seller_ref.value)
            if order is None:
                self._logger.warning(
                    f"Commit rejected: order {order_ref} not found for seller {seller_ref}"
                )
                raise OrderNotFoundError()

            previous_status = order.status
            order.commit(now)

            applied = await uow.orders.transition_status(
                order.id,
                expected_status=OrderStatus.PAID,
                new_status=OrderStatus.COMMITTED,
                seller_id=seller_ref.value,
                committed_at=now,
                updated_at=now,
            )
            if not applied:
                # Lost the race to a sweeper or a concurrent commit
                current = await uow.orders.find_by_id(order.id)
                actual = current.status.value if current else "unknown"
                self._logger.info(f"[{order.id}] Commit lost race, status is now {actual}")
                raise InvalidOrderStateError(actual, f"Cannot commit sale with status: {actual}")

            await uow.commit()

        self._logger.info(f"✅ Sale committed: order {order.id} by seller {seller_ref}")

        failures = []
        if not await self._best_effort("book sold flag", order.id, lambda u: self._mark_book_sold(u, order, now)):
            failures.append("book_status")
        if not await self._best_effort("buyer notification", order.id, lambda u: self._notify_buyer(u, order, now)):
            failures.append("buyer_notification")
        if not await self._best_effort(
            "audit entry", order.id, lambda u: self._record_audit(u, order, previous_status, now)
        ):
            failures.append("audit_log")

        return CommitResult(
            order=CommittedOrderDTO(
                id=order.id,
                status=order.status.value,
                committed_at=order.committed_at,
            ),
            side_effect_failures=failures,
        )

    # =========================================================================
    # SIDE EFFECTS
    # =========================================================================

    async def _mark_book_sold(self, uow: UnitOfWork, order: Order, now: datetime) -> bool:
        if not order.book_id:
            return True
        return await uow.books.mark_sold(order.book_id, now)

    async def _notify_buyer(self, uow: UnitOfWork, order: Order, now: datetime) -> None:
        await uow.notifications.add(
            Notification(
                order_id=order.id,
                user_id=order.buyer_id,
                type=NotificationType.ORDER_COMMITTED,
                title="Seller Committed to Your Order",
                message=(
                    f"Great news! The seller has committed to your order "
                    f"#{order.id[:8]}. Your book will be prepared for delivery."
                ),
                sent_at=now,
            )
        )

    async def _record_audit(
        self, uow: UnitOfWork, order: Order, previous_status: OrderStatus, now: datetime
    ) -> None:
        await uow.audit_logs.append(
            AuditEntry(
                action="order_committed",
                table_name="orders",
                record_id=order.id,
                user_id=order.seller_id,
                old_values={"status": previous_status.value},
                new_values={
                    "status": order.status.value,
                    "committed_at": order.committed_at.isoformat(),
                },
                created_at=now,
            )
        )

    @staticmethod
    def _validate_id(value: Optional[str], label: str) -> EntityId:
        try:
            return EntityId(value=value, label=label)
        except ValueError as e:
            raise CommitValidationError(str(e)) from e
