"""
Unit of Work Pattern Implementation.

Manages database transactions and repository lifecycle.
"""
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.infrastructure.database.repositories import (
    SQLAlchemyAuditLogRepository,
    SQLAlchemyBookRepository,
    SQLAlchemyNotificationRepository,
    SQLAlchemyOrderRepository,
    SQLAlchemyRefundRequestRepository,
)


logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Unit of Work pattern implementation.

    One instance is one transaction. Lifecycle services open a fresh
    unit for the primary status change and for each side effect, so a
    failed side effect can never roll back the status change.

    Usage:
        async with create_uow(session_factory) as uow:
            changed = await uow.orders.transition_status(...)
            await uow.commit()
    """

    def __init__(self, session_factory: async_sessionmaker):
        """
        Initialize Unit of Work.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

        # Lazy-loaded repositories
        self._orders: Optional[SQLAlchemyOrderRepository] = None
        self._books: Optional[SQLAlchemyBookRepository] = None
        self._notifications: Optional[SQLAlchemyNotificationRepository] = None
        self._audit_logs: Optional[SQLAlchemyAuditLogRepository] = None
        self._refunds: Optional[SQLAlchemyRefundRequestRepository] = None

    async def __aenter__(self) -> "UnitOfWork":
        """Start transaction scope."""
        self._session = self._session_factory()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """
        Exit async context.

        Rolls back transaction if exception occurred.
        """
        if exc_type is not None:
            logger.debug(f"Transaction failed: {exc_val}")
            await self.rollback()
        await self._session.close()

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._session

    @property
    def orders(self) -> SQLAlchemyOrderRepository:
        """Order repository bound to this transaction."""
        if self._orders is None:
            self._orders = SQLAlchemyOrderRepository(self.session)
        return self._orders

    @property
    def books(self) -> SQLAlchemyBookRepository:
        if self._books is None:
            self._books = SQLAlchemyBookRepository(self.session)
        return self._books

    @property
    def notifications(self) -> SQLAlchemyNotificationRepository:
        if self._notifications is None:
            self._notifications = SQLAlchemyNotificationRepository(self.session)
        return self._notifications

    @property
    def audit_logs(self) -> SQLAlchemyAuditLogRepository:
        if self._audit_logs is None:
            self._audit_logs = SQLAlchemyAuditLogRepository(self.session)
        return self._audit_logs

    @property
    def refunds(self) -> SQLAlchemyRefundRequestRepository:
        if self._refunds is None:
            self._refunds = SQLAlchemyRefundRequestRepository(self.session)
        return self._refunds

    async def commit(self) -> None:
        """Commit transaction."""
        try:
            await self.session.commit()
        except Exception as e:
            logger.error(f"❌ Commit failed: {e}")
            await self.rollback()
            raise

    async def rollback(self) -> None:
        """Rollback transaction."""
        await self.session.rollback()


def create_uow(session_factory: async_sessionmaker) -> UnitOfWork:
    """
    Create a new Unit of Work instance.

    Args:
        session_factory: SQLAlchemy async session factory

    Returns:
        UnitOfWork instance
    """
    return UnitOfWork(session_factory)
