"""Application layer interfaces."""
from abc import ABC, abstractmethod
from typing import Optional

from core.domain.entities import Order


class RefundGatewayError(Exception):
    """The payment provider rejected or could not receive a refund request."""


class IRefundGateway(ABC):
    """
    Interface for handing refund requests to a payment provider.

    Refunds complete asynchronously at the provider. Implementations
    only submit the request; they never wait for the money to move.
    """

    @abstractmethod
    async def request_refund(self, order: Order, reason: str) -> Optional[str]:
        """
        Submit a refund request for ``order``.

        Args:
            order: Cancelled order to refund in full
            reason: Customer-facing refund reason

        Returns:
            Provider reference if the request was submitted, or None when
            the request is left queued for a downstream processor

        Raises:
            RefundGatewayError: If the provider rejected the request
        """
        pass


__all__ = ["IRefundGateway", "RefundGatewayError"]
