"""
Application layer.

Order lifecycle use cases (commit, auto-expire, reminders) and the
DTOs they exchange with the HTTP surface.
"""
from core.application.dtos import (
    CommitResult,
    CommitToSaleRequest,
    CommittedOrderDTO,
    ExpiredOrderOutcome,
    FunctionInvocation,
    ReminderOutcome,
    ReminderResult,
    SweepResult,
)
from core.application.interfaces import IRefundGateway, RefundGatewayError
from core.application.services import (
    CommitmentService,
    ExpirySweeper,
    ReminderDispatcher,
)

__all__ = [
    "CommitResult",
    "CommitToSaleRequest",
    "CommittedOrderDTO",
    "ExpiredOrderOutcome",
    "FunctionInvocation",
    "ReminderOutcome",
    "ReminderResult",
    "SweepResult",
    "IRefundGateway",
    "RefundGatewayError",
    "CommitmentService",
    "ExpirySweeper",
    "ReminderDispatcher",
]
