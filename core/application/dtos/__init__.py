"""Application DTOs."""

from .lifecycle_dto import (
    CommitResult,
    CommitToSaleRequest,
    CommittedOrderDTO,
    ExpiredOrderOutcome,
    FunctionInvocation,
    ReminderOutcome,
    ReminderResult,
    SweepResult,
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
]
