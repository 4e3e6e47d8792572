"""
Tests for Pydantic models
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from storefront.routers.models import NotifyOrderRequest, PaymentInitRequest
from storefront.services.models import CartItem, Order, OrderItem, Product


class TestProduct:
    """Tests for Product model."""

    def test_price_becomes_decimal(self):
        product = Product(id="p1", name="Tee", price=249.99)

        assert product.price == Decimal("249.99")

    def test_null_sizes_become_empty(self):
        product = Product(id="p1", name="Tee", price="100", sizes=None, colors=None)

        assert product.sizes == []
        assert product.colors == []

    def test_in_stock(self):
        assert Product(id="p1", name="Tee", price="1", stock_quantity=3).in_stock is True
        assert Product(id="p1", name="Tee", price="1").in_stock is False

    def test_extra_columns_ignored(self):
        product = Product(id="p1", name="Tee", price="1", search_vector="x")

        assert not hasattr(product, "search_vector")


class TestOrder:
    """Tests for Order model."""

    def test_paid_and_guest_flags(self):
        order = Order(id="o1", order_number="ORD-1", total_amount="100", payment_status="paid")

        assert order.is_paid is True
        assert order.is_guest is True
        assert order.delivery_fee == Decimal("0")

    def test_requires_total(self):
        with pytest.raises(ValidationError):
            Order(id="o1", order_number="ORD-1")


class TestLineItems:
    def test_order_item_optional_prices(self):
        item = OrderItem(id="i1", order_id="o1", product_id="p1", price="90", bulk_price=None, original_price="100")

        assert item.bulk_price is None
        assert item.original_price == Decimal("100")

    def test_cart_item_defaults(self):
        item = CartItem(id="c1", user_id="u1", product_id="p1")

        assert item.quantity == 1
        assert item.bulk_savings == Decimal("0")


class TestRequestModels:
    """Request bodies accept camelCase aliases and snake_case names."""

    def test_payment_init_aliases(self):
        body = PaymentInitRequest(**{"email": "a@example.com", "amount": 100, "orderId": "o1", "orderNumber": "ORD-1"})
        assert body.order_id == "o1"
        assert PaymentInitRequest(order_number="ORD-2").order_number == "ORD-2"

    def test_notify_aliases(self):
        body = NotifyOrderRequest(**{"orderId": "o1", "newStatus": "shipped"})

        assert (body.order_id, body.status) == ("o1", "shipped")
