"""
Paystack Refund Gateway Implementation.

Submits refunds through the Paystack Refund API.
"""
from typing import Optional
import asyncio
import logging

import aiohttp

from core.application.interfaces import IRefundGateway, RefundGatewayError
from core.domain.entities import Order
from core.settings.modules.paystack_settings import PaystackSettings


logger = logging.getLogger(__name__)


class PaystackRefundGateway(IRefundGateway):
    """
    Paystack implementation of the refund gateway.

    Paystack acknowledges the request immediately and processes the
    reversal in the background; the acknowledgement is all we wait for.
    """

    def __init__(self, settings: PaystackSettings):
        """
        Initialize Paystack refund gateway.

        Args:
            settings: Paystack settings with secret key and base URL
        """
        if not settings.secret_key:
            raise ValueError("Paystack secret key not configured")
        self.settings = settings
        self.refund_url = f"{settings.base_url.rstrip('/')}/refund"
        logger.info("PaystackRefundGateway initialized")

    async def request_refund(self, order: Order, reason: str) -> Optional[str]:
        """Submit a full refund for the order's payment reference."""
        if not order.paystack_reference:
            raise RefundGatewayError(f"No payment reference found for order {order.id}")

        payload = {
            "transaction": order.paystack_reference,
            "amount": order.amount,
            "currency": self.settings.currency,
            "customer_note": reason,
            "merchant_note": f"Refund for order {order.id}",
        }
        headers = {
            "Authorization": f"Bearer {self.settings.secret_key}",
            "Content-Type": "application/json",
        }
        timeout = aiohttp.ClientTimeout(total=self.settings.timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.refund_url, json=payload, headers=headers) as response:
                    body = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RefundGatewayError(f"Paystack refund request failed: {e!r}") from e
        except ValueError as e:
            raise RefundGatewayError(f"Paystack returned an unreadable response: {e}") from e

        if not isinstance(body, dict):
            body = {}
        if response.status >= 400 or not body.get("status"):
            message = body.get("message", "unknown error")
            logger.error(f"Paystack API error: {response.status} - {message}")
            raise RefundGatewayError(f"Paystack rejected refund: {message}")

        data = body.get("data") or {}
        reference = data.get("id") or (data.get("transaction") or {}).get("reference")
        logger.info(f"✅ Paystack refund submitted for order {order.id}: {reference}")
        return str(reference) if reference is not None else order.paystack_reference
