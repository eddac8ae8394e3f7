"""
Reminder Dispatcher.

Sends two kinds of deadline reminders:

- commit reminders to sellers whose paid order reaches its commit
  deadline within the lookahead
- collection reminders to buyers whose committed order reaches the end
  of the collection window within the lookahead

Each order gets at most one reminder of each type.
"""
from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos import ReminderOutcome, ReminderResult
from core.domain.clock import Clock, hours_until, utc_now
from core.domain.entities import AuditEntry, Notification, Order
from core.domain.enums import NotificationType
from core.domain.errors import SweepCrashedError
from core.domain.value_objects import ExecutionID
from core.infrastructure.logging import execution_logger
from core.settings import LifecycleSettings

from .base import LifecycleService


class ReminderDispatcher(LifecycleService):
    """Batch job behind the order reminders endpoint."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        settings: Optional[LifecycleSettings] = None,
        clock: Clock = utc_now,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(session_factory, clock=clock, logger=logger)
        self._settings = settings or LifecycleSettings()

    async def dispatch_reminders(self, now: Optional[datetime] = None) -> ReminderResult:
        """
        Send commit and collection reminders that are due.

        A failure on one order is recorded in its outcome and does not
        stop the others.

        Args:
            now: Override for the current time (defaults to the clock)

        Returns:
            ReminderResult listing every reminder sent or attempted

        Raises:
            SweepCrashedError: The candidate lists could not be read
        """
        now = self._resolve_now(now)
        execution_id = ExecutionID.generate()
        log = execution_logger(self._logger, execution_id)
        settings = self._settings
        collection_start = now - settings.collection_window

        try:
            async with self._uow() as uow:
                commit_due = await uow.orders.find_commit_deadlines_between(
                    now, now + settings.commit_reminder_lookahead, limit=settings.sweep_batch_limit
                )
                collection_due = await uow.orders.find_committed_between(
                    collection_start,
                    collection_start + settings.collection_reminder_lookahead,
                    limit=settings.sweep_batch_limit,
                )
        except Exception as e:
            log.error(f"❌ Could not read reminder candidates: {e}", exc_info=True)
            raise SweepCrashedError(f"Could not read reminder candidates: {e}") from e

        log.info(
            f"🔔 {len(commit_due)} commit and "
            f"{len(collection_due)} collection reminder candidate(s)"
        )

        outcomes: List[ReminderOutcome] = []
        for order in commit_due:
            outcome = await self._send_commit_reminder(order, now)
            if outcome:
                outcomes.append(outcome)
        for order in collection_due:
            outcome = await self._send_collection_reminder(order, now)
            if outcome:
                outcomes.append(outcome)

        sent = sum(1 for o in outcomes if o.sent)
        failed = len(outcomes) - sent

        await self._best_effort(
            "reminder audit entry",
            str(execution_id),
            lambda u: u.audit_logs.append(
                AuditEntry(
                    action="order_reminders_processed",
                    table_name="orders",
                    new_values={
                        "execution_id": str(execution_id),
                        "commit_reminders": sum(
                            1 for o in outcomes
                            if o.sent and o.reminder_type == NotificationType.COMMIT_REMINDER.value
                        ),
                        "collection_reminders": sum(
                            1 for o in outcomes
                            if o.sent and o.reminder_type == NotificationType.COLLECTION_REMINDER.value
                        ),
                        "failed": failed,
                    },
                    created_at=now,
                )
            ),
        )

        log.info(f"✅ Reminders sent: {sent}, failed: {failed}")
        return ReminderResult(
            execution_id=str(execution_id),
            total_reminders=sent,
            failed_count=failed,
            reminders=outcomes,
            processed_at=now,
        )

    async def _send_commit_reminder(self, order: Order, now: datetime) -> Optional[ReminderOutcome]:
        deadline = order.commit_deadline
        hours = hours_until(deadline, now)
        return await self._send(
            order,
            user_id=order.seller_id,
            reminder_type=NotificationType.COMMIT_REMINDER,
            deadline=deadline,
            hours=hours,
            title="Reminder: Order Commitment Required",
            message=(
                f"You have {hours} hour(s) remaining to commit to order "
                f"#{order.id[:8]}{self._book_suffix(order)}. "
                f"Please log in and confirm your commitment."
            ),
            now=now,
        )

    async def _send_collection_reminder(
        self, order: Order, now: datetime
    ) -> Optional[ReminderOutcome]:
        deadline = order.collection_deadline(self._settings.collection_window)
        hours = hours_until(deadline, now)
        return await self._send(
            order,
            user_id=order.buyer_id,
            reminder_type=NotificationType.COLLECTION_REMINDER,
            deadline=deadline,
            hours=hours,
            title="Reminder: Book Collection Required",
            message=(
                f"Please collect your book{self._book_suffix(order)} within "
                f"{hours} hour(s) to avoid an automatic refund."
            ),
            now=now,
        )

    async def _send(
        self,
        order: Order,
        user_id: str,
        reminder_type: NotificationType,
        deadline: datetime,
        hours: int,
        title: str,
        message: str,
        now: datetime,
    ) -> Optional[ReminderOutcome]:
        """
        Insert one reminder unless the order already has one of this type.

        Returns:
            Outcome of the attempt, or None if the reminder was already sent
        """
        try:
            async with self._uow() as uow:
                if await uow.notifications.exists_for_order(order.id, reminder_type):
                    self._logger.debug(f"[{order.id}] {reminder_type.value} already sent")
                    return None
                await uow.notifications.add(
                    Notification(
                        order_id=order.id,
                        user_id=user_id,
                        type=reminder_type,
                        title=title,
                        message=message,
                        sent_at=now,
                    )
                )
                await uow.commit()
        except Exception as e:
            self._logger.warning(f"[{order.id}] {reminder_type.value} failed: {e}", exc_info=True)
            return ReminderOutcome(
                order_id=order.id,
                user_id=user_id,
                reminder_type=reminder_type.value,
                deadline=deadline,
                hours_until_deadline=hours,
                sent=False,
                error=str(e),
            )

        return ReminderOutcome(
            order_id=order.id,
            user_id=user_id,
            reminder_type=reminder_type.value,
            deadline=deadline,
            hours_until_deadline=hours,
        )

    @staticmethod
    def _book_suffix(order: Order) -> str:
        title = order.metadata.get("book_title")
        return f' for "{title}"' if title else ""
