"""
Expiry Sweeper.

Cancels paid orders whose seller missed the commit deadline and starts
a full refund for each one.

Every candidate is re-checked by a conditional ``paid -> cancelled``
update, so an order committed after the candidate list was read is
skipped rather than cancelled.
"""
from datetime import datetime
from typing import List, Optional, Tuple
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos import ExpiredOrderOutcome, SweepResult
from core.application.interfaces import IRefundGateway
from core.domain.clock import Clock, utc_now
from core.domain.entities import AUTO_EXPIRE_REASON, AuditEntry, Notification, Order
from core.domain.enums import NotificationType, OrderStatus, RefundRequestStatus
from core.domain.errors import SweepCrashedError
from core.domain.value_objects import ExecutionID
from core.infrastructure.database.unit_of_work import UnitOfWork
from core.infrastructure.logging import ExecutionLogAdapter, execution_logger
from core.settings import LifecycleSettings

from .base import LifecycleService


REFUND_REASON = "Seller did not commit within the deadline"


class ExpirySweeper(LifecycleService):
    """Batch job behind the auto-expire endpoint."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        refund_gateway: IRefundGateway,
        settings: Optional[LifecycleSettings] = None,
        clock: Clock = utc_now,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(session_factory, clock=clock, logger=logger)
        self._refund_gateway = refund_gateway
        self._settings = settings or LifecycleSettings()

    async def sweep_expired_commits(self, now: Optional[datetime] = None) -> SweepResult:
        """
        Cancel and refund every paid order past its commit deadline.

        Args:
            now: Override for the current time (defaults to the clock)

        Returns:
            SweepResult with per-order outcomes

        Raises:
            SweepCrashedError: The candidate list could not be read
        """
        now = self._resolve_now(now)
        execution_id = ExecutionID.generate()
        log = execution_logger(self._logger, execution_id)
        log.info(f"🔍 Sweeping expired commits at {now.isoformat()}")

        try:
            async with self._uow() as uow:
                candidates = await uow.orders.find_expired_commits(
                    now, limit=self._settings.sweep_batch_limit
                )
        except Exception as e:
            log.error(f"❌ Could not read expired orders: {e}", exc_info=True)
            raise SweepCrashedError(f"Could not read expired orders: {e}") from e

        log.info(f"Found {len(candidates)} expired order(s)")

        outcomes: List[ExpiredOrderOutcome] = []
        for order in candidates:
            outcomes.append(await self._expire_order(order, now, execution_id, log))

        result = SweepResult(
            execution_id=str(execution_id),
            expired_count=sum(1 for o in outcomes if o.action == "cancelled"),
            skipped_count=sum(1 for o in outcomes if o.action == "skipped"),
            failed_count=sum(1 for o in outcomes if o.action == "failed"),
            expired_orders=outcomes,
            processed_at=now,
        )
        log.info(
            f"✅ Sweep done: {result.expired_count} cancelled, "
            f"{result.skipped_count} skipped, {result.failed_count} failed"
        )
        return result

    # =========================================================================
    # PER-ORDER PROCESSING
    # =========================================================================

    async def _expire_order(
        self,
        order: Order,
        now: datetime,
        execution_id: ExecutionID,
        log: ExecutionLogAdapter,
    ) -> ExpiredOrderOutcome:
        try:
            async with self._uow() as uow:
                applied = await uow.orders.transition_status(
                    order.id,
                    expected_status=OrderStatus.PAID,
                    new_status=OrderStatus.CANCELLED,
                    cancelled_at=now,
                    cancellation_reason=AUTO_EXPIRE_REASON,
                    updated_at=now,
                )
                if not applied:
                    log.info(f"Skipping {order.id}: no longer paid")
                    return ExpiredOrderOutcome(order_id=order.id, action="skipped")
                await uow.commit()
        except Exception as e:
            log.error(f"❌ Failed to cancel {order.id}: {e}", exc_info=True)
            return ExpiredOrderOutcome(order_id=order.id, action="failed", error=str(e))

        order.expire(now, AUTO_EXPIRE_REASON)
        log.info(f"Cancelled expired order {order.id}")

        refund_initiated, refund_reference, refund_error = await self._initiate_refund(order, now, log)

        notifications_sent = 0
        for user_id, title, message in self._cancellation_messages(order):
            sent = await self._best_effort(
                "cancellation notice",
                order.id,
                lambda u, uid=user_id, t=title, m=message: u.notifications.add(
                    Notification(
                        order_id=order.id,
                        user_id=uid,
                        type=NotificationType.ORDER_CANCELLED,
                        title=t,
                        message=m,
                        sent_at=now,
                    )
                ),
            )
            notifications_sent += int(sent)

        await self._best_effort(
            "audit entry",
            order.id,
            lambda u: self._record_audit(u, order, refund_initiated, execution_id, now),
        )

        return ExpiredOrderOutcome(
            order_id=order.id,
            action="cancelled",
            refund_initiated=refund_initiated,
            refund_reference=refund_reference,
            notifications_sent=notifications_sent,
            error=refund_error,
        )

    async def _initiate_refund(
        self, order: Order, now: datetime, log: ExecutionLogAdapter
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Record a refund request and hand it to the gateway.

        Returns:
            (recorded, provider reference, error message)
        """
        try:
            async with self._uow() as uow:
                refund = await uow.refunds.create(order.id, order.amount, REFUND_REASON, now)
                refund_id = refund.id
                await uow.commit()
        except Exception as e:
            log.error(f"❌ Refund request not recorded for {order.id}: {e}", exc_info=True)
            return False, None, f"refund request not recorded: {e}"

        try:
            reference = await self._refund_gateway.request_refund(order, REFUND_REASON)
        except Exception as e:
            gateway_error = str(e)
            log.warning(f"Refund gateway failed for {order.id}: {gateway_error}")
            await self._best_effort(
                "refund status",
                order.id,
                lambda u: u.refunds.update_status(
                    refund_id, RefundRequestStatus.FAILED, now, error=gateway_error
                ),
            )
            return True, None, f"refund gateway: {gateway_error}"

        if reference:
            await self._best_effort(
                "refund status",
                order.id,
                lambda u: u.refunds.update_status(
                    refund_id, RefundRequestStatus.SUBMITTED, now, provider_reference=reference
                ),
            )
        log.info(f"💸 Refund requested for {order.id}")
        return True, reference, None

    def _cancellation_messages(self, order: Order) -> List[Tuple[str, str, str]]:
        hours = self._settings.commit_window_hours
        short_id = order.id[:8]
        return [
            (
                order.buyer_id,
                "Order Cancelled - Refund Initiated",
                f"The seller did not commit to order #{short_id} within {hours} hours. "
                f"Your order was cancelled and a full refund has been requested.",
            ),
            (
                order.seller_id,
                "Order Expired",
                f"Order #{short_id} was cancelled because it was not committed "
                f"within {hours} hours.",
            ),
        ]

    async def _record_audit(
        self,
        uow: UnitOfWork,
        order: Order,
        refund_initiated: bool,
        execution_id: ExecutionID,
        now: datetime,
    ) -> None:
        await uow.audit_logs.append(
            AuditEntry(
                action="order_auto_expired",
                table_name="orders",
                record_id=order.id,
                old_values={"status": OrderStatus.PAID.value},
                new_values={
                    "status": order.status.value,
                    "cancelled_at": order.cancelled_at.isoformat(),
                    "cancellation_reason": order.cancellation_reason,
                    "refund_initiated": refund_initiated,
                    "execution_id": str(execution_id),
                },
                created_at=now,
            )
        )
