"""Application services."""
from .commitment_service import CommitmentService
from .expiry_sweeper import REFUND_REASON, ExpirySweeper
from .reminder_dispatcher import ReminderDispatcher

__all__ = [
    "CommitmentService",
    "ExpirySweeper",
    "REFUND_REASON",
    "ReminderDispatcher",
]
