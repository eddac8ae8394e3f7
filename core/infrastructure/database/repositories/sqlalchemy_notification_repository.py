"""
SQLAlchemy Notification and Audit Log Repositories.
"""
from typing import List
import logging

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.clock import utc_now
from core.domain.entities import AuditEntry, Notification
from core.domain.enums import NotificationType
from core.domain.repositories import AuditLogRepository, NotificationRepository
from core.infrastructure.database.models import AuditLogModel, NotificationModel


logger = logging.getLogger(__name__)


class SQLAlchemyNotificationRepository(NotificationRepository):
    """Stores in-app notifications. Rows are never updated here."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, notification: Notification) -> Notification:
        """
        Insert a notification.

        Args:
            notification: Notification to store

        Returns:
            The notification with ``id`` and ``sent_at`` filled in
        """
        model = NotificationModel(
            order_id=notification.order_id,
            user_id=notification.user_id,
            type=NotificationType(notification.type).value,
            title=notification.title,
            message=notification.message,
            read=notification.read,
            sent_at=notification.sent_at or utc_now(),
        )
        self.session.add(model)
        await self.session.flush()

        notification.id = model.id
        notification.sent_at = model.sent_at
        logger.debug(f"Queued {model.type} notification for user {model.user_id}")
        return notification

    async def exists_for_order(self, order_id: str, notification_type: NotificationType) -> bool:
        result = await self.session.execute(
            select(NotificationModel.id)
            .where(
                and_(
                    NotificationModel.order_id == order_id,
                    NotificationModel.type == NotificationType(notification_type).value,
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_for_order(self, order_id: str) -> List[Notification]:
        result = await self.session.execute(
            select(NotificationModel)
            .where(NotificationModel.order_id == order_id)
            .order_by(NotificationModel.sent_at.asc())
        )
        return [
            Notification(
                id=model.id,
                order_id=model.order_id,
                user_id=model.user_id,
                type=NotificationType(model.type),
                title=model.title,
                message=model.message,
                read=model.read,
                sent_at=model.sent_at,
            )
            for model in result.scalars().all()
        ]


class SQLAlchemyAuditLogRepository(AuditLogRepository):
    """Append-only audit trail."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, entry: AuditEntry) -> None:
        self.session.add(
            AuditLogModel(
                action=entry.action,
                table_name=entry.table_name,
                record_id=entry.record_id,
                user_id=entry.user_id,
                old_values=entry.old_values,
                new_values=entry.new_values,
                created_at=entry.created_at or utc_now(),
            )
        )
        await self.session.flush()

    async def list_for_record(self, record_id: str) -> List[AuditEntry]:
        result = await self.session.execute(
            select(AuditLogModel)
            .where(AuditLogModel.record_id == record_id)
            .order_by(AuditLogModel.id.asc())
        )
        return [
            AuditEntry(
                action=model.action,
                table_name=model.table_name,
                record_id=model.record_id,
                user_id=model.user_id,
                old_values=model.old_values,
                new_values=model.new_values or {},
                created_at=model.created_at,
            )
            for model in result.scalars().all()
        ]

    async def list_by_action(self, action: str) -> List[AuditEntry]:
        result = await self.session.execute(
            select(AuditLogModel)
            .where(AuditLogModel.action == action)
            .order_by(AuditLogModel.id.asc())
        )
        return [
            AuditEntry(
                action=model.action,
                table_name=model.table_name,
                record_id=model.record_id,
                user_id=model.user_id,
                old_values=model.old_values,
                new_values=model.new_values or {},
                created_at=model.created_at,
            )
            for model in result.scalars().all()
        ]
