import hashlib
import hmac
import json
from typing import Any, Dict, List

import httpx
import pytest  # type: ignore[reportMissingImports]

from storefront.errors import PaymentNotConfiguredError, PaymentProviderError
from storefront.payments import get_default_gateway, is_gateway_configured, normalize_gateway
from storefront.services.payments import PaymentService


def _service(handler, requests: List[httpx.Request]) -> PaymentService:
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return PaymentService(http_client=httpx.AsyncClient(transport=httpx.MockTransport(record)))


def _sign(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


# ==================== SIGNATURES ====================


def test_verify_yoco_signature_valid():
    body = json.dumps({"type": "payment.succeeded", "payload": {"id": "p_1"}}).encode()
    signature = _sign(body, "whsec")

    assert PaymentService.verify_yoco_signature(body, signature, "whsec") is True
    assert PaymentService.verify_yoco_signature(body, signature.upper(), "whsec") is True


def test_verify_yoco_signature_tampered_body():
    body = b'{"type":"payment.succeeded"}'
    signature = _sign(body, "whsec")

    assert PaymentService.verify_yoco_signature(body + b" ", signature, "whsec") is False
    assert PaymentService.verify_yoco_signature(body, signature, "other") is False


# ==================== YOCO ====================


@pytest.mark.asyncio
async def test_create_yoco_checkout(monkeypatch):
    monkeypatch.setenv("YOCO_SECRET_KEY", "sk_test_yoco")
    monkeypatch.setenv("APP_URL", "https://shop.test/")
    monkeypatch.delenv("YOCO_CALLBACK_URL", raising=False)
    requests: List[httpx.Request] = []

    def handler(request):
        return httpx.Response(200, json={"id": "ch_123", "redirectUrl": "https://pay.yoco.com/ch_123", "status": "created"})

    service = _service(handler, requests)
    result = await service.create_yoco_checkout("order-1", "ORD-1-ABC", 59900, "buyer@example.com")

    assert result == {"checkout_id": "ch_123", "redirect_url": "https://pay.yoco.com/ch_123", "status": "created"}
    request = requests[0]
    assert request.url == "https://payments.yoco.com/api/checkouts"
    assert request.headers["Authorization"] == "Bearer sk_test_yoco"
    body: Dict[str, Any] = json.loads(request.content)
    assert body["amount"] == 59900
    assert body["currency"] == "ZAR"
    assert body["successUrl"] == "https://shop.test/checkout/success?orderId=order-1"
    assert body["cancelUrl"] == "https://shop.test/checkout?cancelled=true"
    assert body["metadata"] == {
        "order_id": "order-1",
        "order_number": "ORD-1-ABC",
        "customer_email": "buyer@example.com",
    }
    await service.aclose()


@pytest.mark.asyncio
async def test_yoco_error_status_passthrough(monkeypatch):
    monkeypatch.setenv("YOCO_SECRET_KEY", "sk_test_yoco")

    def handler(request):
        return httpx.Response(422, json={"message": "Amount too small"})

    service = _service(handler, [])
    with pytest.raises(PaymentProviderError) as exc:
        await service.create_yoco_checkout("order-1", "ORD-1", 100, "buyer@example.com")

    assert exc.value.status_code == 422
    assert exc.value.message == "Amount too small"


@pytest.mark.asyncio
async def test_yoco_missing_redirect_url(monkeypatch):
    monkeypatch.setenv("YOCO_SECRET_KEY", "sk_test_yoco")

    def handler(request):
        return httpx.Response(200, json={"id": "ch_123"})

    service = _service(handler, [])
    with pytest.raises(PaymentProviderError) as exc:
        await service.create_yoco_checkout("order-1", "ORD-1", 100, "buyer@example.com")
    assert exc.value.status_code == 502


@pytest.mark.asyncio
async def test_yoco_network_error(monkeypatch):
    monkeypatch.setenv("YOCO_SECRET_KEY", "sk_test_yoco")

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = _service(handler, [])
    with pytest.raises(PaymentProviderError) as exc:
        await service.get_yoco_checkout("ch_123")
    assert exc.value.status_code == 502


@pytest.mark.asyncio
async def test_yoco_not_configured(monkeypatch):
    monkeypatch.delenv("YOCO_SECRET_KEY", raising=False)
    requests: List[httpx.Request] = []

    service = _service(lambda request: httpx.Response(200, json={}), requests)
    with pytest.raises(PaymentNotConfiguredError):
        await service.create_yoco_checkout("order-1", "ORD-1", 100, "buyer@example.com")
    assert requests == []


# ==================== PAYSTACK ====================


@pytest.mark.asyncio
async def test_initialize_paystack_transaction(monkeypatch):
    monkeypatch.setenv("PAYSTACK_SECRET_KEY", "sk_test_paystack")
    monkeypatch.setenv("APP_URL", "https://shop.test")
    requests: List[httpx.Request] = []

    def handler(request):
        return httpx.Response(
            200,
            json={
                "status": True,
                "data": {
                    "authorization_url": "https://checkout.paystack.com/abc",
                    "access_code": "abc",
                    "reference": "ORD-1-ABC",
                },
            },
        )

    service = _service(handler, requests)
    result = await service.initialize_paystack_transaction("order-1", "ORD-1-ABC", 25000, "buyer@example.com")

    assert result["authorization_url"] == "https://checkout.paystack.com/abc"
    assert result["reference"] == "ORD-1-ABC"
    body = json.loads(requests[0].content)
    assert requests[0].url == "https://api.paystack.co/transaction/initialize"
    assert body["reference"] == "ORD-1-ABC"
    assert body["amount"] == 25000
    assert body["callback_url"] == "https://shop.test/checkout/success?order_id=order-1&reference=ORD-1-ABC"
    assert body["metadata"]["order_id"] == "order-1"


@pytest.mark.asyncio
async def test_verify_paystack_transaction(monkeypatch):
    monkeypatch.setenv("PAYSTACK_SECRET_KEY", "sk_test_paystack")
    requests: List[httpx.Request] = []

    def handler(request):
        return httpx.Response(
            200, json={"status": True, "data": {"status": "success", "metadata": {"order_id": "order-1"}}}
        )

    service = _service(handler, requests)
    data = await service.verify_paystack_transaction("ORD-1-ABC")

    assert data["status"] == "success"
    assert requests[0].url.path == "/transaction/verify/ORD-1-ABC"


@pytest.mark.asyncio
async def test_paystack_error_status_passthrough(monkeypatch):
    monkeypatch.setenv("PAYSTACK_SECRET_KEY", "sk_test_paystack")

    def handler(request):
        return httpx.Response(400, json={"status": False, "message": "Duplicate Transaction Reference"})

    service = _service(handler, [])
    with pytest.raises(PaymentProviderError) as exc:
        await service.initialize_paystack_transaction("order-1", "ORD-1", 100, "buyer@example.com")
    assert exc.value.status_code == 400
    assert "Duplicate" in exc.value.message


# ==================== DISPATCH ====================


@pytest.mark.asyncio
async def test_create_payment_dispatches_by_gateway(monkeypatch):
    monkeypatch.setenv("PAYSTACK_SECRET_KEY", "sk_test_paystack")

    def handler(request):
        return httpx.Response(200, json={"data": {"authorization_url": "https://paystack/x", "reference": "ORD-9"}})

    service = _service(handler, [])
    result = await service.create_payment("PayStack", "order-9", "ORD-9", 1000, "buyer@example.com")

    assert result == {"gateway": "paystack", "redirect_url": "https://paystack/x", "reference": "ORD-9"}


def test_gateway_helpers(monkeypatch):
    monkeypatch.delenv("DEFAULT_PAYMENT_GATEWAY", raising=False)
    monkeypatch.delenv("PAYSTACK_SECRET_KEY", raising=False)

    assert normalize_gateway(None) == "yoco"
    assert normalize_gateway(" Pay_Stack ") == "paystack"
    assert get_default_gateway() == "yoco"
    assert is_gateway_configured("paystack") is False
