"""Shared plumbing for the order lifecycle services."""

from datetime import datetime
from typing import Awaitable, Callable, Optional
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.domain.clock import Clock, to_naive_utc, utc_now
from core.infrastructure.database.unit_of_work import UnitOfWork, create_uow
from core.infrastructure.logging import get_logger


SideEffect = Callable[[UnitOfWork], Awaitable[object]]


class LifecycleService:
    """
    Base class for services that change (or watch) order status.

    Collaborators are injected: the session factory, a clock returning
    naive UTC datetimes, and a logger.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        clock: Clock = utc_now,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._logger = logger or get_logger(type(self).__module__)

    def _resolve_now(self, now: Optional[datetime]) -> datetime:
        return to_naive_utc(now) if now is not None else to_naive_utc(self._clock())

    def _uow(self) -> UnitOfWork:
        return create_uow(self._session_factory)

    async def _best_effort(self, label: str, order_id: str, effect: SideEffect) -> bool:
        """
        Run ``effect`` in its own transaction and swallow its failure.

        Used for side effects that follow an already-committed status
        change: the status change is the source of truth, so a failure
        here is logged and reported to the caller as False.

        Returns:
            True if the effect committed
        """
        try:
            async with self._uow() as uow:
                result = await effect(uow)
                if result is False:
                    self._logger.warning(f"[{order_id}] {label} had no effect")
                    return False
                await uow.commit()
            return True
        except Exception as e:
            self._logger.warning(f"[{order_id}] {label} failed: {e}", exc_info=True)
            return False
