"""
Unit tests for the refund gateway adapters.
"""
import asyncio
import json
import logging

import aiohttp
import pytest

from core.application.interfaces import RefundGatewayError
from core.domain.entities import Order
from core.infrastructure.adapters.refunds import DeferredRefundGateway
from core.infrastructure.adapters.refunds import paystack_refund_gateway
from core.infrastructure.adapters.refunds.paystack_refund_gateway import PaystackRefundGateway
from core.settings import PaystackSettings


def _order(reference="ps_ref_42") -> Order:
    return Order(
        id="order-42",
        buyer_id="buyer-1",
        seller_id="seller-1",
        book_id="book-1",
        amount=31500,
        status="cancelled",
        payment_status="paid",
        paystack_reference=reference,
    )


class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self._body = body

    async def json(self, content_type=None):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession and records POSTs."""

    calls = []
    response = None
    error = None

    def __init__(self, *args, **kwargs):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def post(self, url, json=None, headers=None):
        FakeSession.calls.append({"url": url, "json": json, "headers": headers})
        if FakeSession.error is not None:
            raise FakeSession.error
        return FakeSession.response


@pytest.fixture
def fake_http(monkeypatch):
    FakeSession.calls = []
    FakeSession.response = None
    FakeSession.error = None
    monkeypatch.setattr(paystack_refund_gateway.aiohttp, "ClientSession", FakeSession)
    return FakeSession


@pytest.fixture
def paystack_settings():
    return PaystackSettings(enabled=True, secret_key="sk_test_123", currency="ZAR")


# =============================================================================
# DEFERRED
# =============================================================================

@pytest.mark.asyncio
async def test_deferred_gateway_logs_and_returns_no_reference(caplog):
    gateway = DeferredRefundGateway()

    with caplog.at_level(logging.INFO):
        reference = await gateway.request_refund(_order(), "Seller did not commit")

    assert reference is None
    assert "order-42" in caplog.text
    assert "amount=31500" in caplog.text
    assert not hasattr(gateway, "requests")


# =============================================================================
# PAYSTACK
# =============================================================================

def test_paystack_requires_secret_key():
    with pytest.raises(ValueError, match="secret key"):
        PaystackRefundGateway(PaystackSettings(enabled=True, secret_key=""))


@pytest.mark.asyncio
async def test_paystack_posts_full_refund(fake_http, paystack_settings):
    fake_http.response = FakeResponse(200, {"status": True, "data": {"id": 9001}})
    gateway = PaystackRefundGateway(paystack_settings)

    reference = await gateway.request_refund(_order(), "Seller did not commit")

    assert reference == "9001"
    call = fake_http.calls[0]
    assert call["url"] == "https://api.paystack.co/refund"
    assert call["json"]["transaction"] == "ps_ref_42"
    assert call["json"]["amount"] == 31500
    assert call["json"]["currency"] == "ZAR"
    assert call["headers"]["Authorization"] == "Bearer sk_test_123"


@pytest.mark.asyncio
async def test_paystack_rejection_raises(fake_http, paystack_settings):
    fake_http.response = FakeResponse(400, {"status": False, "message": "Transaction has been fully reversed"})
    gateway = PaystackRefundGateway(paystack_settings)

    with pytest.raises(RefundGatewayError, match="fully reversed"):
        await gateway.request_refund(_order(), "Seller did not commit")


@pytest.mark.asyncio
async def test_paystack_network_error_raises(fake_http, paystack_settings):
    fake_http.error = aiohttp.ClientConnectionError("connection refused")
    gateway = PaystackRefundGateway(paystack_settings)

    with pytest.raises(RefundGatewayError, match="request failed"):
        await gateway.request_refund(_order(), "Seller did not commit")


@pytest.mark.asyncio
async def test_paystack_needs_payment_reference(fake_http, paystack_settings):
    gateway = PaystackRefundGateway(paystack_settings)

    with pytest.raises(RefundGatewayError, match="No payment reference"):
        await gateway.request_refund(_order(reference=None), "Seller did not commit")

    assert fake_http.calls == []


@pytest.mark.asyncio
async def test_paystack_timeout_raises(fake_http, paystack_settings):
    fake_http.error = asyncio.TimeoutError()
    gateway = PaystackRefundGateway(paystack_settings)

    with pytest.raises(RefundGatewayError, match="request failed"):
        await gateway.request_refund(_order(), "Seller did not commit")


@pytest.mark.asyncio
async def test_paystack_non_json_body_raises(fake_http, paystack_settings):
    fake_http.response = FakeResponse(502, json.JSONDecodeError("Expecting value", "<html>", 0))
    gateway = PaystackRefundGateway(paystack_settings)

    with pytest.raises(RefundGatewayError, match="unreadable response"):
        await gateway.request_refund(_order(), "Seller did not commit")
