"""Tests for email notifications (Resend) and WhatsApp templates."""
import json
from decimal import Decimal
from typing import List

import httpx
import pytest

from storefront.services.models import DiscountCode
from storefront.services.notifications import (
    NotificationService,
    calculate_bulk_savings,
    discount_label,
    format_order_confirmation_message,
    format_order_update_message,
    whatsapp_link,
)


def _service(status: int, payload: dict, requests: List[httpx.Request]) -> NotificationService:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status, json=payload)

    return NotificationService(http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_send_order_confirmation(monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", "re_test")
    requests: List[httpx.Request] = []
    service = _service(200, {"id": "email-42"}, requests)
    items = [
        {"quantity": 10, "price": "200", "is_bulk_order": True, "bulk_price": "200", "original_price": "250", "products": {"name": "Classic Tee"}},
    ]

    result = await service.send_order_confirmation("buyer@example.com", "ORD-1-ABC", Decimal("2000"), items)

    assert result == {"success": True, "id": "email-42"}
    body = json.loads(requests[0].content)
    assert requests[0].headers["Authorization"] == "Bearer re_test"
    assert body["to"] == ["buyer@example.com"]
    assert body["subject"] == "Order Confirmation - ORD-1-ABC"
    assert "Classic Tee" in body["html"]
    assert "BULK ORDER" in body["html"]


@pytest.mark.asyncio
async def test_send_email_without_api_key(monkeypatch):
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    requests: List[httpx.Request] = []
    service = _service(200, {}, requests)

    result = await service.send_status_update("buyer@example.com", "ORD-1", "processing")

    assert result["success"] is False
    assert requests == []


@pytest.mark.asyncio
async def test_send_email_provider_error(monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", "re_test")
    service = _service(422, {"message": "Invalid `to` field"}, [])

    result = await service.send_back_in_stock("bad", "Classic Tee", "https://shop.test/products/p1")

    assert result == {"success": False, "error": "Invalid `to` field"}


@pytest.mark.asyncio
async def test_shipped_status_uses_shipping_template(monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", "re_test")
    requests: List[httpx.Request] = []
    service = _service(200, {"id": "e"}, requests)

    await service.send_order_status_notification("b@example.com", "ORD-1", "shipped", "TCG1", "https://t/TCG1")
    await service.send_order_status_notification("b@example.com", "ORD-1", "delivered")

    subjects = [json.loads(r.content)["subject"] for r in requests]
    assert subjects == ["Your Order is on the Way! - ORD-1", "Order Update - ORD-1"]


@pytest.mark.asyncio
async def test_email_escapes_product_names(monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", "re_test")
    requests: List[httpx.Request] = []
    service = _service(200, {"id": "e"}, requests)

    await service.send_back_in_stock("b@example.com", "<script>x</script>", "https://shop.test/p")

    html = json.loads(requests[0].content)["html"]
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_calculate_bulk_savings():
    items = [
        {"quantity": 4, "is_bulk_order": True, "bulk_price": "90", "original_price": "100"},
        {"quantity": 2, "is_bulk_order": False, "price": "50"},
    ]

    assert calculate_bulk_savings(items) == Decimal("40")


def test_discount_label():
    assert discount_label(DiscountCode(id="d", code="A", discount_value="15.00")) == "15%"
    assert discount_label(DiscountCode(id="d", code="B", discount_type="fixed", discount_value="50")) == "R 50.00"


# ==================== WHATSAPP ====================


def test_confirmation_message(monkeypatch):
    monkeypatch.setenv("APP_URL", "https://shop.test")

    message = format_order_confirmation_message("ORD-1", "599", "Thandi")

    assert message.startswith("Hi Thandi! ")
    assert "*Total:* R 599.00" in message
    assert "https://shop.test/account/orders" in message
    assert message.endswith("- Apparel Cast Team")


def test_update_message_with_tracking():
    message = format_order_update_message("ORD-1", "shipped", "Thandi", "TCG1")

    assert "*Status:* Shipped" in message
    assert "*Tracking Code:* TCG1" in message
    assert "Your order is on its way!" in message


def test_update_message_unknown_status():
    message = format_order_update_message("ORD-1", "on_hold", "Thandi")

    assert "Your order status has been updated." in message
    assert "Tracking Code" not in message


def test_whatsapp_link():
    assert whatsapp_link(None, "hi") is None
    assert whatsapp_link("082 123 4567", "hi there") == "https://wa.me/27821234567?text=hi%20there"
    assert whatsapp_link("+27 82 123 4567", "x").startswith("https://wa.me/27821234567")
