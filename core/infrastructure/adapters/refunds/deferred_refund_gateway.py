"""
Deferred Refund Gateway.

Leaves refund requests queued in the refund_requests table for a
separate payment processor to pick up.
"""
from typing import Optional
import logging

from core.application.interfaces import IRefundGateway
from core.domain.entities import Order


logger = logging.getLogger(__name__)


class DeferredRefundGateway(IRefundGateway):
    """
    Refund gateway used when no payment provider is configured.

    Holds no state: the refund_requests row written before the call is
    the only record of the request.
    """

    async def request_refund(self, order: Order, reason: str) -> Optional[str]:
        logger.info(
            f"💸 Refund queued for order {order.id} "
            f"(amount={order.amount}, reference={order.paystack_reference}, reason={reason})"
        )
        return None
