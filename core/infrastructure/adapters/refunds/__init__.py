"""Refund gateway adapters.

Keep this package import-light: the Paystack adapter pulls in aiohttp,
so import it from its module when needed.
"""

from .deferred_refund_gateway import DeferredRefundGateway

__all__ = ["DeferredRefundGateway"]
