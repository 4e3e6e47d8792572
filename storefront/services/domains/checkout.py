"""Checkout Domain Service.

Turns a cart (or a guest payload) into a pending order with item
snapshots, then hands off to the payment gateway. Prices always come from
the database, never from the client.
"""

import random
import string
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from storefront.errors import (
    ERROR_ADDRESS_REQUIRED,
    ERROR_CART_EMPTY,
    ERROR_GUEST_DETAILS_REQUIRED,
    ERROR_INVALID_DELIVERY_METHOD,
    ERROR_PEP_SEND_BULK,
    ERROR_PRODUCT_NOT_FOUND,
    NotFoundError,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.payments import get_default_gateway, normalize_gateway
from storefront.services.domains.pricing import LinePrice, evaluate_discount, price_line
from storefront.services.models import Order
from storefront.services.money import round_money, to_cents

logger = get_logger(__name__)

DELIVERY_OPTIONS: dict[str, dict[str, Any]] = {
    "courier_guy": {"name": "Courier Guy", "price": Decimal("99"), "description": "3-5 business days"},
    "pudo": {"name": "Pudo Locker", "price": Decimal("65"), "description": "Collect from nearest locker"},
    "pep_send": {"name": "PEP Send", "price": Decimal("55"), "description": "Collect from PEP Pax pickup point"},
}
BULK_EXCLUDED_METHODS = {"pep_send"}
FREE_SHIPPING_THRESHOLD = Decimal("750")

GUEST_REQUIRED_FIELDS = (
    "email",
    "phone",
    "first_name",
    "last_name",
    "address",
    "city",
    "province",
    "postal_code",
)

_BASE36 = string.digits + string.ascii_uppercase


def generate_order_number(now_ms: Optional[int] = None) -> str:
    """ORD-<epoch ms>-<9 upper-case base36 chars>."""
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"ORD-{ms}-{suffix}"


def delivery_fee(method: str, subtotal: Decimal, has_bulk: bool) -> Decimal:
    """Fee for a delivery method; free at or above the threshold.

    Raises:
        ValueError: unknown method, or PEP Send for a bulk order
    """
    option = DELIVERY_OPTIONS.get(method)
    if option is None:
        raise ValueError(ERROR_INVALID_DELIVERY_METHOD)
    if has_bulk and method in BULK_EXCLUDED_METHODS:
        raise ValueError(ERROR_PEP_SEND_BULK)
    if subtotal >= FREE_SHIPPING_THRESHOLD:
        return Decimal("0")
    return option["price"]


def available_delivery_options(has_bulk: bool) -> list[dict[str, Any]]:
    return [
        {"id": key, "name": o["name"], "price": float(o["price"]), "description": o["description"]}
        for key, o in DELIVERY_OPTIONS.items()
        if not (has_bulk and key in BULK_EXCLUDED_METHODS)
    ]


@dataclass
class PricedLine:
    product_id: str
    quantity: int
    size: Optional[str]
    color: Optional[str]
    price: LinePrice

    def order_item(self, order_id: str) -> dict[str, Any]:
        return {
            "order_id": order_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": str(self.price.unit_price),
            "size": self.size,
            "color": self.color,
            **self.price.as_row(),
        }


@dataclass
class CheckoutQuote:
    """Totals for a set of lines: total = subtotal + delivery_fee - discount."""

    lines: list[PricedLine]
    subtotal: Decimal
    delivery_fee: Decimal
    discount_amount: Decimal = Decimal("0")
    discount_code_id: Optional[str] = None

    @property
    def has_bulk(self) -> bool:
        return any(line.price.is_bulk_order for line in self.lines)

    @property
    def total(self) -> Decimal:
        return round_money(self.subtotal + self.delivery_fee - self.discount_amount)


class CheckoutService:
    """Checkout domain service."""

    def __init__(self, db, payments) -> None:
        self.db = db
        self.payments = payments

    async def _price_lines(self, raw_lines: list[dict[str, Any]]) -> list[PricedLine]:
        """Reprice lines from current product data and tiers."""
        lines = []
        for raw in raw_lines:
            product = await self.db.products.get_by_id(raw["product_id"])
            if product is None or not product.is_active:
                raise NotFoundError(ERROR_PRODUCT_NOT_FOUND)
            quantity = max(1, int(raw.get("quantity") or 1))
            tiers = await self.db.products.get_tiers(product.id) if product.enable_bulk_pricing else []
            lines.append(
                PricedLine(
                    product_id=product.id,
                    quantity=quantity,
                    size=raw.get("size"),
                    color=raw.get("color"),
                    price=price_line(product.price, quantity, tiers, bulk_enabled=product.enable_bulk_pricing),
                )
            )
        return lines

    async def quote(
        self,
        raw_lines: list[dict[str, Any]],
        delivery_method: str,
        discount_code: Optional[str] = None,
    ) -> CheckoutQuote:
        """Price lines, delivery and discount.

        Raises:
            ValueError: empty cart, bad delivery method, invalid discount code
            NotFoundError: a product no longer exists
        """
        if not raw_lines:
            raise ValueError(ERROR_CART_EMPTY)
        lines = await self._price_lines(raw_lines)
        subtotal = round_money(sum((line.price.line_total for line in lines), Decimal("0")))
        has_bulk = any(line.price.is_bulk_order for line in lines)
        quote = CheckoutQuote(lines=lines, subtotal=subtotal, delivery_fee=delivery_fee(delivery_method, subtotal, has_bulk))

        if discount_code:
            code = await self.db.discounts.get_active_by_code(discount_code)
            result = evaluate_discount(code, subtotal)
            if not result.valid:
                raise ValueError(result.error)
            quote.discount_amount = result.amount
            quote.discount_code_id = result.code.id
        return quote

    async def validate_discount(self, code: str, subtotal: Decimal) -> dict[str, Any]:
        """Preview a discount code for a subtotal (no side effects)."""
        discount = await self.db.discounts.get_active_by_code(code)
        return evaluate_discount(discount, subtotal).as_dict()

    async def create_order(
        self,
        delivery_method: str,
        user_id: Optional[str] = None,
        address_id: Optional[str] = None,
        guest: Optional[dict[str, Any]] = None,
        guest_items: Optional[list[dict[str, Any]]] = None,
        discount_code: Optional[str] = None,
        gateway: Optional[str] = None,
    ) -> tuple[Order, CheckoutQuote]:
        """
        Create a pending order and its items.

        Signed-in customers check out their server cart and a saved address;
        guests send their cart lines and full contact/address details.
        """
        if user_id:
            if not address_id or await self.db.addresses.get_by_id(address_id, user_id=user_id) is None:
                raise ValueError(ERROR_ADDRESS_REQUIRED)
            raw_lines = await self.db.carts.get_items(user_id)
        else:
            guest = guest or {}
            if any(not str(guest.get(key) or "").strip() for key in GUEST_REQUIRED_FIELDS):
                raise ValueError(ERROR_GUEST_DETAILS_REQUIRED)
            raw_lines = guest_items or []

        quote = await self.quote(raw_lines, delivery_method, discount_code)

        order_data: dict[str, Any] = {
            "user_id": user_id,
            "order_number": generate_order_number(),
            "total_amount": str(quote.total),
            "delivery_fee": str(quote.delivery_fee),
            "delivery_method": delivery_method,
            "address_id": address_id if user_id else None,
            "discount_code_id": quote.discount_code_id,
            "discount_amount": str(quote.discount_amount),
            "payment_gateway": normalize_gateway(gateway or get_default_gateway()),
        }
        if not user_id:
            order_data.update({f"guest_{key}": str(guest[key]).strip() for key in GUEST_REQUIRED_FIELDS})

        order = await self.db.orders.create(order_data)
        try:
            await self.db.orders.create_items([line.order_item(order.id) for line in quote.lines])
        except Exception:
            logger.error("Order items insert failed, removing order %s", sanitize_id_for_logging(order.id), exc_info=True)
            await self.db.orders.delete(order.id)
            raise

        logger.info(
            "Order %s created (%s lines, total=%s)",
            sanitize_id_for_logging(order.id),
            len(quote.lines),
            quote.total,
        )
        return order, quote

    async def start_payment(self, order: Order, email: str) -> dict[str, Any]:
        """Initialize the order's gateway. Provider errors propagate; the order stays pending."""
        return await self.payments.create_payment(
            order.payment_gateway or get_default_gateway(),
            order.id,
            order.order_number,
            to_cents(order.total_amount),
            email,
        )
