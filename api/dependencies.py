"""
FastAPI Dependencies.

Provides dependency injection for the lifecycle services.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from fastapi import Depends
from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.interfaces import IRefundGateway
from core.domain.clock import Clock, utc_now
from core.infrastructure.database import config as database_config
from core.settings import AppSettings, get_app_settings

if TYPE_CHECKING:
    from core.application.services import CommitmentService, ExpirySweeper, ReminderDispatcher

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_refund_gateway = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_settings() -> AppSettings:
    return get_app_settings()


def get_session_factory() -> async_sessionmaker:
    return database_config.get_session_factory()


def get_clock() -> Clock:
    """Clock used by request handlers (overridden in tests)."""
    return utc_now


def get_refund_gateway() -> IRefundGateway:
    global _refund_gateway

    if _refund_gateway is None:
        settings = get_app_settings()

        if settings.paystack.enabled:
            try:
                from core.infrastructure.adapters.refunds.paystack_refund_gateway import PaystackRefundGateway
                _refund_gateway = PaystackRefundGateway(settings.paystack)
                logger.info("Created PaystackRefundGateway instance")
            except ValueError as e:
                logger.warning(f"Failed PaystackRefundGateway: {e}, fallback to deferred refunds")

        if _refund_gateway is None:
            from core.infrastructure.adapters.refunds import DeferredRefundGateway
            _refund_gateway = DeferredRefundGateway()
            logger.info("Using DeferredRefundGateway (Paystack disabled)")

    return _refund_gateway


def get_commitment_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
) -> CommitmentService:
    from core.application.services import CommitmentService

    return CommitmentService(session_factory, clock=clock)


def get_expiry_sweeper(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    refund_gateway: IRefundGateway = Depends(get_refund_gateway),
    settings: AppSettings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> ExpirySweeper:
    from core.application.services import ExpirySweeper

    return ExpirySweeper(
        session_factory,
        refund_gateway=refund_gateway,
        settings=settings.lifecycle,
        clock=clock,
    )


def get_reminder_dispatcher(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    settings: AppSettings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> ReminderDispatcher:
    from core.application.services import ReminderDispatcher

    return ReminderDispatcher(session_factory, settings=settings.lifecycle, clock=clock)


# =============================================================================
# RESET (for testing)
# =============================================================================

def reset_dependencies():
    global _refund_gateway

    _refund_gateway = None
    get_app_settings.cache_clear()

    logger.info("Dependencies reset")
