"""
Unit tests for ReminderDispatcher against an in-memory database.
"""
from datetime import timedelta

import pytest

from core.application.services import ReminderDispatcher
from core.domain.enums import NotificationType, OrderStatus
from core.domain.errors import SweepCrashedError
from core.infrastructure.database.repositories import (
    SQLAlchemyNotificationRepository,
    SQLAlchemyOrderRepository,
)


@pytest.fixture
def dispatcher(session_factory, lifecycle_settings, fixed_clock):
    return ReminderDispatcher(session_factory, lifecycle_settings, clock=fixed_clock)


def _paid_with_deadline_in(now, remaining: timedelta):
    """paid_at giving a 48h commit deadline ``remaining`` from now."""
    return now + remaining - timedelta(hours=48)


def _committed_with_collection_deadline_in(now, remaining: timedelta):
    """committed_at giving a 7 day collection deadline ``remaining`` from now."""
    return now + remaining - timedelta(days=7)


# =============================================================================
# COMMIT REMINDERS
# =============================================================================

@pytest.mark.asyncio
async def test_commit_reminder_sent_to_seller(dispatcher, create_order, store, now):
    order = await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=6)))

    result = await dispatcher.dispatch_reminders()

    assert result.total_reminders == 1
    assert result.failed_count == 0
    reminder = result.reminders[0]
    assert reminder.order_id == order.id
    assert reminder.user_id == order.seller_id
    assert reminder.reminder_type == "commit_reminder"
    assert reminder.hours_until_deadline == 6
    assert reminder.deadline == order.commit_deadline

    notifications = await store.notifications(order.id, NotificationType.COMMIT_REMINDER)
    assert len(notifications) == 1
    assert notifications[0].user_id == order.seller_id
    assert "6 hour(s)" in notifications[0].message


@pytest.mark.asyncio
@pytest.mark.parametrize("remaining", [timedelta(hours=13), timedelta(hours=0), timedelta(hours=-2)])
async def test_commit_reminder_outside_lookahead(dispatcher, create_order, remaining, now):
    """Only deadlines in (now, now + 12h] are reminded."""
    await create_order(paid_at=_paid_with_deadline_in(now, remaining))

    result = await dispatcher.dispatch_reminders()

    assert result.total_reminders == 0


@pytest.mark.asyncio
async def test_commit_reminder_at_lookahead_edge(dispatcher, create_order, now):
    await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=12)))

    result = await dispatcher.dispatch_reminders()

    assert result.total_reminders == 1
    assert result.reminders[0].hours_until_deadline == 12


@pytest.mark.asyncio
async def test_hours_are_rounded(dispatcher, create_order, now):
    await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=5, minutes=40)))
    await create_order(paid_at=_paid_with_deadline_in(now, timedelta(minutes=20)))

    result = await dispatcher.dispatch_reminders()

    assert sorted(r.hours_until_deadline for r in result.reminders) == [0, 6]


@pytest.mark.asyncio
async def test_commit_reminder_sent_once(dispatcher, create_order, store, now):
    order = await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=6)))

    await dispatcher.dispatch_reminders()
    second = await dispatcher.dispatch_reminders(now=now + timedelta(hours=1))

    assert second.total_reminders == 0
    assert len(await store.notifications(order.id, NotificationType.COMMIT_REMINDER)) == 1


@pytest.mark.asyncio
async def test_reminded_orders_do_not_fill_the_batch(
    session_factory, lifecycle_settings, fixed_clock, create_order, store, now
):
    settings = lifecycle_settings.model_copy(update={"sweep_batch_limit": 2})
    dispatcher = ReminderDispatcher(session_factory, settings, clock=fixed_clock)
    await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=2)))
    await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=3)))

    first = await dispatcher.dispatch_reminders(now)
    late = await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=10)))
    second = await dispatcher.dispatch_reminders(now)

    assert first.total_reminders == 2
    assert second.total_reminders == 1
    assert second.reminders[0].order_id == late.id
    assert len(await store.notifications(late.id, NotificationType.COMMIT_REMINDER)) == 1


@pytest.mark.asyncio
async def test_reminders_do_not_change_orders(dispatcher, create_order, store, now):
    order = await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=3)))

    await dispatcher.dispatch_reminders()

    stored = await store.order(order.id)
    assert stored.status == OrderStatus.PAID
    assert stored.updated_at == order.updated_at


@pytest.mark.asyncio
async def test_commit_reminder_mentions_book_title(dispatcher, create_order, store, now):
    order = await create_order(
        paid_at=_paid_with_deadline_in(now, timedelta(hours=4)),
        metadata={"book_title": "Organic Chemistry"},
    )

    await dispatcher.dispatch_reminders()

    notification = (await store.notifications(order.id, NotificationType.COMMIT_REMINDER))[0]
    assert '"Organic Chemistry"' in notification.message


# =============================================================================
# COLLECTION REMINDERS
# =============================================================================

@pytest.mark.asyncio
async def test_collection_reminder_sent_to_buyer(dispatcher, create_order, store, now):
    committed_at = _committed_with_collection_deadline_in(now, timedelta(hours=10))
    order = await create_order(
        status=OrderStatus.COMMITTED,
        paid_at=committed_at - timedelta(hours=2),
        committed_at=committed_at,
    )

    result = await dispatcher.dispatch_reminders()

    assert result.total_reminders == 1
    reminder = result.reminders[0]
    assert reminder.user_id == order.buyer_id
    assert reminder.reminder_type == "collection_reminder"
    assert reminder.hours_until_deadline == 10
    assert reminder.deadline == committed_at + timedelta(days=7)
    assert len(await store.notifications(order.id, NotificationType.COLLECTION_REMINDER)) == 1


@pytest.mark.asyncio
async def test_recently_committed_order_not_reminded(dispatcher, create_order, now):
    await create_order(
        status=OrderStatus.COMMITTED,
        paid_at=now - timedelta(days=1),
        committed_at=now - timedelta(hours=20),
    )

    result = await dispatcher.dispatch_reminders()

    assert result.total_reminders == 0


@pytest.mark.asyncio
async def test_both_reminder_kinds_in_one_run(dispatcher, create_order, store, now):
    await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=2)))
    committed_at = _committed_with_collection_deadline_in(now, timedelta(hours=20))
    await create_order(
        status=OrderStatus.COMMITTED,
        paid_at=committed_at - timedelta(hours=1),
        committed_at=committed_at,
    )

    result = await dispatcher.dispatch_reminders()

    assert result.total_reminders == 2
    assert {r.reminder_type for r in result.reminders} == {"commit_reminder", "collection_reminder"}

    audit = await store.audit("order_reminders_processed")
    assert len(audit) == 1
    assert audit[0].new_values["commit_reminders"] == 1
    assert audit[0].new_values["collection_reminders"] == 1
    assert audit[0].new_values["execution_id"] == result.execution_id


# =============================================================================
# FAILURES
# =============================================================================

@pytest.mark.asyncio
async def test_failed_reminder_does_not_stop_others(dispatcher, create_order, store, monkeypatch, now):
    bad = await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=2)))
    good = await create_order(paid_at=_paid_with_deadline_in(now, timedelta(hours=3)))
    original = SQLAlchemyNotificationRepository.add

    async def flaky_add(self, notification):
        if notification.order_id == bad.id:
            raise RuntimeError("insert failed")
        return await original(self, notification)

    monkeypatch.setattr(SQLAlchemyNotificationRepository, "add", flaky_add)

    result = await dispatcher.dispatch_reminders()

    assert result.total_reminders == 1
    assert result.failed_count == 1
    outcomes = {r.order_id: r for r in result.reminders}
    assert outcomes[bad.id].sent is False
    assert "insert failed" in outcomes[bad.id].error
    assert outcomes[good.id].sent is True
    assert len(await store.notifications(good.id, NotificationType.COMMIT_REMINDER)) == 1


@pytest.mark.asyncio
async def test_unreadable_candidates_crash_the_run(dispatcher, monkeypatch):
    async def broken_read(self, start, end, limit=500):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(SQLAlchemyOrderRepository, "find_commit_deadlines_between", broken_read)

    with pytest.raises(SweepCrashedError):
        await dispatcher.dispatch_reminders()
