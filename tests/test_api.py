"""Tests for API endpoints"""
import hashlib
import hmac
import json
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from api.index import app
from storefront.errors import PaymentNotConfiguredError, PaymentProviderError
from storefront.routers.deps import get_notification_service, get_payment_service
from storefront.services.database import Database, set_database

ADMIN = {"Authorization": "Bearer admin-token"}
CUSTOMER = {"Authorization": "Bearer customer-token"}
OTHER = {"Authorization": "Bearer other-token"}

GUEST = {
    "email": "guest@example.com",
    "phone": "0821234567",
    "first_name": "Lerato",
    "last_name": "Dlamini",
    "address": "12 Long Street",
    "city": "Cape Town",
    "province": "Western Cape",
    "postal_code": "8001",
}


@pytest.fixture
def payments():
    service = Mock()
    service.get_yoco_checkout = AsyncMock()
    service.verify_paystack_transaction = AsyncMock()
    service.create_yoco_checkout = AsyncMock(
        return_value={"checkout_id": "ch_1", "redirect_url": "https://pay.yoco.com/ch_1", "status": "created"}
    )
    service.initialize_paystack_transaction = AsyncMock()
    service.create_payment = AsyncMock(
        return_value={"gateway": "yoco", "redirect_url": "https://pay.yoco.com/ch_1", "reference": "ch_1"}
    )
    return service


@pytest.fixture
def store(fake_supabase, sample_order, sample_product):
    fake_supabase.seed("products", sample_product)
    fake_supabase.seed("orders", sample_order)
    fake_supabase.seed(
        "profiles",
        {"id": "user-1", "full_name": "Thandi Mokoena", "phone": "0821234567", "is_admin": False},
        {"id": "user-2", "full_name": "Sipho", "is_admin": False},
        {"id": "admin-1", "full_name": "Store Admin", "is_admin": True},
    )
    fake_supabase.add_user("customer-token", "user-1", "thandi@example.com")
    fake_supabase.add_user("other-token", "user-2", "sipho@example.com")
    fake_supabase.add_user("admin-token", "admin-1", "admin@example.com")
    set_database(Database(fake_supabase))
    yield fake_supabase
    set_database(None)


@pytest.fixture
def client(store, notifications, payments):
    """Test client"""
    app.dependency_overrides[get_notification_service] = lambda: notifications
    app.dependency_overrides[get_payment_service] = lambda: payments
    yield TestClient(app)
    app.dependency_overrides.clear()


def _webhook(client, event, secret="whsec_test", signature=None):
    body = json.dumps(event).encode()
    headers = {"Content-Type": "application/json"}
    if signature is not False:
        headers["X-Yoco-Signature"] = signature or hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return client.post("/api/yoco/webhook", content=body, headers=headers)


def _succeeded(order_id="order-123", payment_id="p_1"):
    return {
        "type": "payment.succeeded",
        "payload": {"id": payment_id, "metadata": {"order_id": order_id, "customer_email": "thandi@example.com"}},
    }


def test_health_check(client):
    """Test health check endpoint"""
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


# ==================== WEBHOOK ====================


def test_webhook_confirms_order(client, store, monkeypatch, notifications):
    monkeypatch.setenv("YOCO_WEBHOOK_SECRET", "whsec_test")

    response = _webhook(client, _succeeded())

    assert response.status_code == 200
    assert response.json() == {"success": True, "order_id": "order-123", "already_confirmed": False, "email_sent": True}
    order = store.rows("orders")[0]
    assert order["payment_status"] == "paid"
    assert order["status"] == "confirmed"
    assert order["payment_reference"] == "p_1"


def test_webhook_replay_is_idempotent(client, store, monkeypatch, notifications):
    monkeypatch.setenv("YOCO_WEBHOOK_SECRET", "whsec_test")

    _webhook(client, _succeeded(payment_id="p_1"))
    response = _webhook(client, _succeeded(payment_id="p_2"))

    assert response.status_code == 200
    assert response.json()["already_confirmed"] is True
    assert store.rows("orders")[0]["payment_reference"] == "p_1"
    assert notifications.send_order_confirmation.await_count == 1


def test_webhook_requires_signature(client, monkeypatch):
    monkeypatch.setenv("YOCO_WEBHOOK_SECRET", "whsec_test")

    assert _webhook(client, _succeeded(), signature=False).status_code == 400


def test_webhook_secret_not_configured(client, monkeypatch):
    monkeypatch.delenv("YOCO_WEBHOOK_SECRET", raising=False)

    assert _webhook(client, _succeeded()).status_code == 500


def test_webhook_invalid_signature(client, store, monkeypatch):
    monkeypatch.setenv("YOCO_WEBHOOK_SECRET", "whsec_test")

    response = _webhook(client, _succeeded(), secret="wrong")

    assert response.status_code == 401
    assert store.rows("orders")[0]["payment_status"] == "pending"


def test_webhook_ignores_other_events(client, monkeypatch):
    monkeypatch.setenv("YOCO_WEBHOOK_SECRET", "whsec_test")

    response = _webhook(client, {"type": "payment.failed", "payload": {}})

    assert response.status_code == 200
    assert response.json() == {"message": "Event ignored"}


def test_webhook_without_order_id(client, monkeypatch):
    monkeypatch.setenv("YOCO_WEBHOOK_SECRET", "whsec_test")

    assert _webhook(client, {"type": "payment.succeeded", "payload": {"id": "p", "metadata": {}}}).status_code == 400


def test_webhook_unknown_order(client, monkeypatch):
    monkeypatch.setenv("YOCO_WEBHOOK_SECRET", "whsec_test")

    assert _webhook(client, _succeeded(order_id="missing")).status_code == 404


def test_webhook_unparseable_body(client, monkeypatch):
    monkeypatch.setenv("YOCO_WEBHOOK_SECRET", "whsec_test")
    body = b"not json"
    signature = hmac.new(b"whsec_test", body, hashlib.sha256).hexdigest()

    response = client.post("/api/yoco/webhook", content=body, headers={"X-Yoco-Signature": signature})

    assert response.status_code == 400


def test_webhook_rejects_non_object_body(client, store, monkeypatch):
    monkeypatch.setenv("YOCO_WEBHOOK_SECRET", "whsec_test")

    response = _webhook(client, [_succeeded()])

    assert response.status_code == 400
    assert store.rows("orders")[0]["payment_status"] == "pending"


def test_webhook_without_payment_id(client, store, monkeypatch, notifications):
    monkeypatch.setenv("YOCO_WEBHOOK_SECRET", "whsec_test")
    event = {"type": "payment.succeeded", "payload": {"metadata": {"order_id": "order-123"}}}

    response = _webhook(client, event)

    assert response.status_code == 400
    order = store.rows("orders")[0]
    assert order["payment_status"] == "pending"
    assert order.get("payment_reference") is None
    notifications.send_order_confirmation.assert_not_awaited()


# ==================== VERIFY ====================


def test_yoco_verify_requires_auth(client):
    assert client.get("/api/yoco/verify", params={"checkout_id": "ch_1"}).status_code == 401


def test_yoco_verify_requires_identifier(client):
    assert client.get("/api/yoco/verify", headers=CUSTOMER).status_code == 400


def test_yoco_verify_successful_checkout(client, store, payments):
    payments.get_yoco_checkout.return_value = {
        "id": "ch_1",
        "paymentStatus": "successful",
        "metadata": {"order_id": "order-123", "customer_email": "thandi@example.com"},
    }

    response = client.get("/api/yoco/verify", params={"checkout_id": "ch_1"}, headers=CUSTOMER)

    assert response.status_code == 200
    data = response.json()
    assert data["payment_status"] == "paid"
    assert data["order_status"] == "confirmed"
    assert data["already_confirmed"] is False
    assert store.rows("orders")[0]["payment_reference"] == "ch_1"


def test_yoco_verify_other_users_order(client, store, payments):
    payments.get_yoco_checkout.return_value = {
        "id": "ch_1",
        "paymentStatus": "successful",
        "metadata": {"order_id": "order-123"},
    }

    response = client.get("/api/yoco/verify", params={"checkout_id": "ch_1"}, headers=OTHER)

    assert response.status_code == 404
    assert store.rows("orders")[0]["payment_status"] == "pending"


def test_yoco_verify_by_order_id_reports_paid(client, store):
    store.rows("orders")[0].update({"payment_status": "paid", "status": "confirmed"})

    response = client.get("/api/yoco/verify", params={"order_id": "order-123"}, headers=CUSTOMER)

    assert response.json()["status"] == "succeeded"


def test_yoco_verify_provider_error_passthrough(client, payments):
    payments.get_yoco_checkout.side_effect = PaymentProviderError("Checkout not found", 404)

    response = client.get("/api/yoco/verify", params={"checkout_id": "bad"}, headers=CUSTOMER)

    assert response.status_code == 404
    assert response.json()["detail"] == "Checkout not found"


def test_paystack_verify_success(client, store, payments):
    payments.verify_paystack_transaction.return_value = {
        "status": "success",
        "amount": 59900,
        "reference": "ORD-1",
        "metadata": {"order_id": "order-123"},
        "customer": {"email": "thandi@example.com"},
    }

    response = client.get("/api/paystack/verify", params={"reference": "ORD-1"}, headers=CUSTOMER)

    assert response.status_code == 200
    assert response.json()["payment_status"] == "paid"
    assert store.rows("orders")[0]["payment_reference"] == "ORD-1"


def test_paystack_verify_abandoned_marks_failed(client, store, payments):
    payments.verify_paystack_transaction.return_value = {"status": "abandoned", "metadata": {"order_id": "order-123"}}

    response = client.get("/api/paystack/verify", params={"reference": "ORD-1"}, headers=CUSTOMER)

    assert response.json()["payment_status"] == "failed"
    assert store.rows("orders")[0]["payment_status"] == "failed"


def test_paystack_verify_without_metadata(client, payments):
    payments.verify_paystack_transaction.return_value = {"status": "success"}

    assert client.get("/api/paystack/verify", params={"reference": "x"}, headers=CUSTOMER).status_code == 400


def test_paystack_not_configured(client, payments):
    payments.verify_paystack_transaction.side_effect = PaymentNotConfiguredError("Paystack not configured")

    assert client.get("/api/paystack/verify", params={"reference": "x"}, headers=CUSTOMER).status_code == 500


def test_initialize_requires_fields(client):
    response = client.post("/api/yoco/initialize", json={"email": "a@example.com", "amount": 100})

    assert response.status_code == 400


def test_initialize_yoco(client, payments):
    response = client.post(
        "/api/yoco/initialize",
        json={"email": "a@example.com", "amount": 59900, "orderId": "order-123", "orderNumber": "ORD-1"},
    )

    assert response.status_code == 200
    assert response.json()["redirect_url"] == "https://pay.yoco.com/ch_1"
    payments.create_yoco_checkout.assert_awaited_once_with("order-123", "ORD-1", 59900, "a@example.com")


# ==================== ORDERS ====================


def test_confirm_payment_fallback(client, store):
    response = client.post(
        "/api/orders/order-123/confirm-payment", json={"payment_reference": "ch_9"}, headers=CUSTOMER
    )

    assert response.status_code == 200
    data = response.json()
    assert data["order"]["payment_status"] == "paid"
    assert data["cart_cleared"] is True
    assert "Thandi Mokoena" in data["whatsapp_message"]


def test_get_order_hidden_from_other_users(client):
    assert client.get("/api/orders/order-123", headers=CUSTOMER).status_code == 200
    assert client.get("/api/orders/order-123", headers=OTHER).status_code == 404


def test_notify_requires_admin(client):
    body = {"orderId": "order-123", "newStatus": "processing"}

    assert client.post("/api/orders/notify", json=body).status_code == 401
    assert client.post("/api/orders/notify", json=body, headers=CUSTOMER).status_code == 403
    assert client.post("/api/orders/notify", json=body, headers=ADMIN).status_code == 200


def test_notify_invalid_status(client):
    response = client.post("/api/orders/notify", json={"orderId": "order-123", "newStatus": "lost"}, headers=ADMIN)

    assert response.status_code == 400


# ==================== CHECKOUT ====================


def test_guest_checkout(client, store, payments):
    response = client.post(
        "/api/checkout",
        json={"delivery_method": "pudo", "guest": GUEST, "items": [{"product_id": "prod-0001-tee", "quantity": 2}]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 565.0
    assert data["redirect_url"] == "https://pay.yoco.com/ch_1"
    assert payments.create_payment.await_args.args[3] == 56500


def test_checkout_payment_failure_keeps_order(client, store, payments):
    payments.create_payment.side_effect = PaymentProviderError("Card declined", 402)

    response = client.post(
        "/api/checkout",
        json={"delivery_method": "pudo", "guest": GUEST, "items": [{"product_id": "prod-0001-tee"}]},
    )

    assert response.status_code == 402
    data = response.json()
    assert data["error"] == "Card declined"
    assert any(row["id"] == data["order_id"] for row in store.rows("orders"))


def test_checkout_unknown_product(client):
    response = client.post(
        "/api/checkout",
        json={"delivery_method": "pudo", "guest": GUEST, "items": [{"product_id": "missing"}]},
    )

    assert response.status_code == 404


def test_delivery_options(client):
    ids = [o["id"] for o in client.get("/api/delivery-options", params={"has_bulk": True}).json()["options"]]

    assert ids == ["courier_guy", "pudo"]


def test_cart_add_and_read(client):
    response = client.post("/api/cart", json={"product_id": "prod-0001-tee", "quantity": 2}, headers=CUSTOMER)

    assert response.status_code == 200
    assert client.get("/api/cart", headers=CUSTOMER).json()["item_count"] == 2
    assert client.get("/api/cart").status_code == 401


# ==================== ADMIN ====================


def test_admin_orders_forbidden_for_customers(client):
    assert client.get("/api/admin/orders").status_code == 401
    assert client.get("/api/admin/orders", headers=CUSTOMER).status_code == 403


def test_admin_orders_list(client):
    response = client.get("/api/admin/orders", headers=ADMIN)

    assert response.status_code == 200
    orders = response.json()["orders"]
    assert orders[0]["customer"]["name"] == "Thandi Mokoena"


def test_admin_ship_order(client, store, notifications):
    response = client.patch(
        "/api/admin/orders/order-123/status", json={"status": "shipped", "tracking_code": "TCG1"}, headers=ADMIN
    )

    assert response.status_code == 200
    assert response.json()["email_sent"] is True
    assert store.rows("orders")[0]["tracking_code"] == "TCG1"


def test_admin_ship_without_tracking(client):
    response = client.patch("/api/admin/orders/order-123/status", json={"status": "shipped"}, headers=ADMIN)

    assert response.status_code == 400


def test_admin_generate_variants_conflict(client, store):
    first = client.post("/api/admin/products/prod-0001-tee/variants/generate", json={}, headers=ADMIN)
    second = client.post("/api/admin/products/prod-0001-tee/variants/generate", json={}, headers=ADMIN)

    assert first.status_code == 200
    assert first.json()["summary"]["count"] == 6
    assert second.status_code == 409
    assert second.json()["existingVariantsCount"] == 6


def test_admin_export_csv(client):
    response = client.get("/api/admin/products/export", headers=ADMIN)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "products-export-" in response.headers["content-disposition"]
    assert response.text.startswith('"Product ID"')


def test_admin_cannot_revoke_own_access(client):
    response = client.patch("/api/admin/users/admin-1/admin", json={"is_admin": False}, headers=ADMIN)

    assert response.status_code == 400


def test_admin_content_requires_admin(client):
    assert client.get("/api/admin/banners/hero").status_code == 401
    assert client.post("/api/admin/brands", json={"name": "Puma"}, headers=CUSTOMER).status_code == 403


def test_admin_banner_lifecycle(client, store):
    bad = client.post("/api/admin/banners/hero", json={"title": "No media"}, headers=ADMIN)
    assert bad.status_code == 400
    assert client.get("/api/admin/banners/popup", headers=ADMIN).status_code == 400

    created = client.post(
        "/api/admin/banners/hero", json={"title": "Winter Drop", "media_url": "https://cdn.test/w.jpg"}, headers=ADMIN
    )
    assert created.status_code == 200
    banner_id = created.json()["banner"]["id"]

    response = client.patch(f"/api/admin/banners/hero/{banner_id}", json={"is_active": False}, headers=ADMIN)
    assert response.status_code == 200
    assert store.rows("hero_banners")[0]["is_active"] is False
    assert store.rows("hero_banners")[0]["title"] == "Winter Drop"

    assert client.delete(f"/api/admin/banners/hero/{banner_id}", headers=ADMIN).status_code == 200
    assert client.delete(f"/api/admin/banners/hero/{banner_id}", headers=ADMIN).status_code == 404


def test_admin_featured_ads(client, store):
    store.seed(
        "ad_banners",
        {"id": "ad-1", "media_url": "https://cdn.test/1.jpg", "is_active": True, "display_order": 1},
        {"id": "ad-2", "media_url": "https://cdn.test/2.jpg", "is_active": True, "display_order": 2},
    )

    assert client.put("/api/admin/banners/ad/featured", json={"ids": ["ad-1"]}, headers=ADMIN).status_code == 400
    response = client.put("/api/admin/banners/ad/featured", json={"ids": ["ad-2", "ad-1"]}, headers=ADMIN)

    assert response.status_code == 200
    assert [ad["id"] for ad in response.json()["featured"]] == ["ad-2", "ad-1"]
    assert [ad["id"] for ad in client.get("/api/banners").json()["ads"]] == ["ad-2", "ad-1"]


def test_public_banners_and_brands(client, store):
    store.seed(
        "hero_banners",
        {"id": "h1", "title": "Live", "media_url": "https://cdn.test/h.jpg", "is_active": True, "display_order": 1},
        {"id": "h2", "title": "Hidden", "media_url": "https://cdn.test/x.jpg", "is_active": False, "display_order": 2},
    )
    store.seed("brands", {"name": "Nike"})

    banners = client.get("/api/banners").json()
    assert [b["id"] for b in banners["hero"]] == ["h1"]
    assert banners["categories"] == []
    assert client.get("/api/brands").json() == {"brands": ["Nike"]}


def test_admin_brand_conflict_and_merge(client, store):
    store.seed("brands", {"name": "Nike"})
    store.rows("products")[0]["brand"] = "nike"

    assert client.post("/api/admin/brands", json={"name": "nike"}, headers=ADMIN).status_code == 409
    assert client.post("/api/admin/brands", json={"name": "?"}, headers=ADMIN).status_code == 400
    assert client.post("/api/admin/brands/merge", json={"from_name": "nike", "into": "Reebok"}, headers=ADMIN).status_code == 400

    response = client.post("/api/admin/brands/merge", json={"from_name": "nike", "into": "Nike"}, headers=ADMIN)
    assert response.json() == {"success": True, "updated": 1}
    overview = client.get("/api/admin/brands", headers=ADMIN).json()
    assert overview == {"canonical": ["Nike"], "in_use": [{"name": "Nike", "count": 1}]}
