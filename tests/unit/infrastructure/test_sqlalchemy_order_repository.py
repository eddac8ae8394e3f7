"""
Unit tests for the conditional status updates and deadline queries.
"""
from datetime import timedelta

import pytest

from core.domain.entities import Notification
from core.domain.enums import NotificationType, OrderStatus
from core.infrastructure.database.unit_of_work import create_uow


@pytest.mark.asyncio
async def test_transition_applies_once(session_factory, create_order, store, now):
    order = await create_order()

    async with create_uow(session_factory) as uow:
        first = await uow.orders.transition_status(
            order.id, OrderStatus.PAID, OrderStatus.COMMITTED, committed_at=now
        )
        second = await uow.orders.transition_status(
            order.id, OrderStatus.PAID, OrderStatus.CANCELLED, cancelled_at=now
        )
        await uow.commit()

    assert first is True
    assert second is False
    stored = await store.order(order.id)
    assert stored.status == OrderStatus.COMMITTED
    assert stored.cancelled_at is None


@pytest.mark.asyncio
async def test_transition_respects_seller_guard(session_factory, create_order, store, now):
    order = await create_order()

    async with create_uow(session_factory) as uow:
        applied = await uow.orders.transition_status(
            order.id,
            OrderStatus.PAID,
            OrderStatus.COMMITTED,
            seller_id="another-seller",
            committed_at=now,
        )
        await uow.commit()

    assert applied is False
    assert (await store.order(order.id)).status == OrderStatus.PAID


@pytest.mark.asyncio
async def test_undefined_transition_is_refused(session_factory, create_order):
    order = await create_order(status=OrderStatus.COMMITTED)

    async with create_uow(session_factory) as uow:
        with pytest.raises(ValueError, match="Undefined transition"):
            await uow.orders.transition_status(order.id, OrderStatus.COMMITTED, OrderStatus.CANCELLED)


@pytest.mark.asyncio
async def test_transition_writes_metadata_column(session_factory, create_order, store, now):
    order = await create_order(metadata={"book_title": "Physics"})

    async with create_uow(session_factory) as uow:
        await uow.orders.transition_status(
            order.id,
            OrderStatus.PAID,
            OrderStatus.COMMITTED,
            committed_at=now,
            metadata={"book_title": "Physics", "committed_via": "app"},
        )
        await uow.commit()

    assert (await store.order(order.id)).metadata["committed_via"] == "app"


@pytest.mark.asyncio
async def test_find_for_seller_scopes_by_owner(session_factory, create_order):
    order = await create_order()

    async with create_uow(session_factory) as uow:
        assert (await uow.orders.find_for_seller(order.id, order.seller_id)).id == order.id
        assert await uow.orders.find_for_seller(order.id, "someone-else") is None


@pytest.mark.asyncio
async def test_find_expired_commits_orders_by_deadline(session_factory, create_order, now):
    older = await create_order(paid_at=now - timedelta(hours=60))
    newer = await create_order(paid_at=now - timedelta(hours=50))
    await create_order(paid_at=now - timedelta(hours=10))
    await create_order(status=OrderStatus.CANCELLED, paid_at=now - timedelta(hours=70))

    async with create_uow(session_factory) as uow:
        expired = await uow.orders.find_expired_commits(now)
        limited = await uow.orders.find_expired_commits(now, limit=1)

    assert [o.id for o in expired] == [older.id, newer.id]
    assert [o.id for o in limited] == [older.id]


@pytest.mark.asyncio
async def test_find_commit_deadlines_between_bounds(session_factory, create_order, now):
    inside = await create_order(paid_at=now - timedelta(hours=40))  # deadline now + 8h
    await create_order(paid_at=now - timedelta(hours=48))  # deadline == now, excluded
    await create_order(paid_at=now - timedelta(hours=30))  # deadline now + 18h

    async with create_uow(session_factory) as uow:
        due = await uow.orders.find_commit_deadlines_between(now, now + timedelta(hours=12))

    assert [o.id for o in due] == [inside.id]


@pytest.mark.asyncio
async def test_find_committed_between_bounds(session_factory, create_order, now):
    start = now - timedelta(days=7)
    inside = await create_order(
        status=OrderStatus.COMMITTED,
        paid_at=start,
        committed_at=start + timedelta(hours=5),
    )
    await create_order(
        status=OrderStatus.COMMITTED,
        paid_at=start - timedelta(hours=3),
        committed_at=start - timedelta(hours=1),
    )

    async with create_uow(session_factory) as uow:
        due = await uow.orders.find_committed_between(start, start + timedelta(hours=24))

    assert [o.id for o in due] == [inside.id]


@pytest.mark.asyncio
async def test_reminder_finders_skip_reminded_orders(session_factory, create_order, now):
    reminded = await create_order(paid_at=now - timedelta(hours=40))
    fresh = await create_order(paid_at=now - timedelta(hours=39))
    start = now - timedelta(days=7)
    collected = await create_order(
        status=OrderStatus.COMMITTED, paid_at=start, committed_at=start + timedelta(hours=2)
    )

    async with create_uow(session_factory) as uow:
        for order_id, kind in (
            (reminded.id, NotificationType.COMMIT_REMINDER),
            (collected.id, NotificationType.COLLECTION_REMINDER),
        ):
            await uow.notifications.add(
                Notification(
                    order_id=order_id,
                    user_id=reminded.seller_id,
                    type=kind,
                    title="Reminder",
                    message="Already sent",
                    sent_at=now,
                )
            )
        await uow.commit()

    async with create_uow(session_factory) as uow:
        commit_due = await uow.orders.find_commit_deadlines_between(
            now, now + timedelta(hours=12), limit=1
        )
        collection_due = await uow.orders.find_committed_between(start, start + timedelta(hours=24))

    assert [o.id for o in commit_due] == [fresh.id]
    assert collection_due == []
