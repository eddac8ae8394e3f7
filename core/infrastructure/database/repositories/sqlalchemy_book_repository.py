"""
SQLAlchemy Book and Refund Request Repositories.
"""
from datetime import datetime
from typing import Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.enums import RefundRequestStatus
from core.infrastructure.database.models import BookModel, RefundRequestModel


logger = logging.getLogger(__name__)


class SQLAlchemyBookRepository:
    """Book availability flags."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, book: BookModel) -> BookModel:
        self.session.add(book)
        await self.session.flush()
        return book

    async def get(self, book_id: str) -> Optional[BookModel]:
        result = await self.session.execute(
            select(BookModel)
            .where(BookModel.id == book_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def mark_sold(self, book_id: str, now: datetime) -> bool:
        """
        Flag a book as sold and no longer available.

        Returns:
            True if the book row exists
        """
        result = await self.session.execute(
            update(BookModel)
            .where(BookModel.id == book_id)
            .values(sold=True, available=False, status="sold", updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class SQLAlchemyRefundRequestRepository:
    """Refund requests raised for expired orders."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, order_id: str, amount: int, reason: str, now: datetime) -> RefundRequestModel:
        """Record that a refund was requested for ``order_id``."""
        model = RefundRequestModel(
            order_id=order_id,
            amount=amount,
            reason=reason,
            status=RefundRequestStatus.REQUESTED.value,
            requested_at=now,
            updated_at=now,
        )
        self.session.add(model)
        await self.session.flush()
        return model

    async def get_for_order(self, order_id: str) -> Optional[RefundRequestModel]:
        result = await self.session.execute(
            select(RefundRequestModel)
            .where(RefundRequestModel.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update_status(
        self,
        refund_id: str,
        status: RefundRequestStatus,
        now: datetime,
        provider_reference: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        await self.session.execute(
            update(RefundRequestModel)
            .where(RefundRequestModel.id == refund_id)
            .values(
                status=RefundRequestStatus(status).value,
                provider_reference=provider_reference,
                error=error,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
