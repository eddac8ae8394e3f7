"""Application DTOs for order lifecycle operations."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CommitToSaleRequest(BaseModel):
    """Request body for the commit-to-sale endpoint."""

    order_id: str = Field(..., alias="orderId", description="Order to commit")
    seller_id: str = Field(..., alias="sellerId", description="Seller committing to the order")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("order_id", "seller_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must be a non-empty identifier")
        return value


class CommittedOrderDTO(BaseModel):
    """Order fields returned after a successful commitment."""

    id: str
    status: str
    committed_at: datetime

    model_config = ConfigDict(frozen=True)


class CommitResult(BaseModel):
    """Outcome of commit_to_sale."""

    order: CommittedOrderDTO
    side_effect_failures: List[str] = Field(
        default_factory=list,
        description="Best-effort side effects that failed after the commit landed",
    )

    model_config = ConfigDict(frozen=True)


class ExpiredOrderOutcome(BaseModel):
    """Per-order outcome of an expiry sweep."""

    order_id: str
    action: str = Field(..., description="cancelled | skipped | failed")
    refund_initiated: bool = False
    refund_reference: Optional[str] = None
    notifications_sent: int = 0
    error: Optional[str] = None


class SweepResult(BaseModel):
    """Aggregate result of sweep_expired_commits."""

    execution_id: str
    expired_count: int = Field(..., ge=0)
    skipped_count: int = Field(default=0, ge=0)
    failed_count: int = Field(default=0, ge=0)
    expired_orders: List[ExpiredOrderOutcome] = Field(default_factory=list)
    processed_at: datetime


class ReminderOutcome(BaseModel):
    """One reminder sent (or attempted) by the dispatcher."""

    order_id: str
    user_id: str
    reminder_type: str
    deadline: datetime
    hours_until_deadline: int = Field(..., ge=0)
    sent: bool = True
    error: Optional[str] = None


class ReminderResult(BaseModel):
    """Aggregate result of dispatch_reminders."""

    execution_id: str
    total_reminders: int = Field(..., ge=0)
    failed_count: int = Field(default=0, ge=0)
    reminders: List[ReminderOutcome] = Field(default_factory=list)
    processed_at: datetime


class FunctionInvocation(BaseModel):
    """Optional body accepted by the batch endpoints."""

    action: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def is_health_check(self) -> bool:
        return (self.action or "").lower() == "health"
