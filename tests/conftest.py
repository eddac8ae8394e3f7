"""Shared fixtures: in-memory database, order factory and persisted-state readers."""

from datetime import datetime, timedelta
from typing import List, Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.domain.entities import AuditEntry, Notification, Order
from core.domain.enums import NotificationType, OrderStatus
from core.infrastructure.database.models import Base, BookModel, RefundRequestModel
from core.infrastructure.database.unit_of_work import create_uow
from core.settings import LifecycleSettings


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

NOW = datetime(2025, 3, 10, 12, 0, 0)
BUYER_ID = "buyer-0001"
SELLER_ID = "seller-0001"
COMMIT_WINDOW = timedelta(hours=48)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    """Create test session factory."""
    yield async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
def lifecycle_settings() -> LifecycleSettings:
    return LifecycleSettings(
        commit_window_hours=48,
        commit_reminder_lookahead_hours=12,
        collection_window_days=7,
        collection_reminder_lookahead_hours=24,
        sweep_batch_limit=500,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fixed_clock():
    return lambda: NOW


@pytest.fixture
def create_order(session_factory):
    """
    Insert an order and return the entity.

    Paid orders get ``commit_deadline = paid_at + 48h``. Committed and
    cancelled orders go through ``paid`` first, like real ones.
    """

    async def _create(
        status: OrderStatus = OrderStatus.PAID,
        paid_at: Optional[datetime] = None,
        committed_at: Optional[datetime] = None,
        seller_id: str = SELLER_ID,
        buyer_id: str = BUYER_ID,
        book_id: Optional[str] = None,
        amount: int = 25000,
        paystack_reference: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> Order:
        order = Order(
            id=str(uuid4()),
            buyer_id=buyer_id,
            seller_id=seller_id,
            book_id=book_id,
            amount=amount,
            paystack_reference=paystack_reference,
            metadata=metadata or {},
        )
        if status != OrderStatus.PENDING:
            order.mark_paid(paid_at or NOW - timedelta(hours=1), COMMIT_WINDOW)
        if status == OrderStatus.COMMITTED:
            order.commit(committed_at or order.paid_at + timedelta(hours=1))
        elif status == OrderStatus.CANCELLED:
            order.expire(order.commit_deadline)

        async with create_uow(session_factory) as uow:
            await uow.orders.add(order)
            await uow.commit()
        return order

    return _create


@pytest.fixture
def create_book(session_factory):
    async def _create(seller_id: str = SELLER_ID, title: str = "Calculus: Early Transcendentals") -> str:
        async with create_uow(session_factory) as uow:
            book = await uow.books.add(BookModel(seller_id=seller_id, title=title, price=25000))
            await uow.commit()
            return book.id

    return _create


class StoreReader:
    """Read-only helpers for asserting on persisted state."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def order(self, order_id: str) -> Optional[Order]:
        async with create_uow(self._session_factory) as uow:
            return await uow.orders.find_by_id(order_id)

    async def notifications(
        self, order_id: str, notification_type: Optional[NotificationType] = None
    ) -> List[Notification]:
        async with create_uow(self._session_factory) as uow:
            notifications = await uow.notifications.list_for_order(order_id)
        if notification_type is not None:
            notifications = [n for n in notifications if n.type == notification_type]
        return notifications

    async def audit(self, action: str) -> List[AuditEntry]:
        async with create_uow(self._session_factory) as uow:
            return await uow.audit_logs.list_by_action(action)

    async def refund(self, order_id: str) -> Optional[RefundRequestModel]:
        async with create_uow(self._session_factory) as uow:
            return await uow.refunds.get_for_order(order_id)

    async def refund_count(self) -> int:
        async with create_uow(self._session_factory) as uow:
            result = await uow.session.execute(select(RefundRequestModel.id))
            return len(result.scalars().all())

    async def book(self, book_id: str) -> Optional[BookModel]:
        async with create_uow(self._session_factory) as uow:
            return await uow.books.get(book_id)


@pytest.fixture
def store(session_factory) -> StoreReader:
    return StoreReader(session_factory)
