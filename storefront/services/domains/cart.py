"""Cart Domain Service.

Server-side cart for signed-in customers. Every operation is scoped to the
caller's user_id; bulk tiers are re-evaluated whenever a quantity changes.
"""

from decimal import Decimal
from typing import Any, Optional

from storefront.errors import (
    ERROR_CART_ITEM_NOT_FOUND,
    ERROR_INVALID_QUANTITY,
    ERROR_PRODUCT_NOT_FOUND,
    ERROR_PRODUCT_UNAVAILABLE,
    NotFoundError,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.domains.pricing import LinePrice, price_line
from storefront.services.models import Product
from storefront.services.money import to_decimal, to_float

logger = get_logger(__name__)


def _line_unit_price(row: dict) -> Decimal:
    product = row.get("products") or {}
    if row.get("is_bulk_order") and row.get("bulk_price") is not None:
        return to_decimal(row["bulk_price"])
    return to_decimal(product.get("price", row.get("original_price")))


def summarize_cart(rows: list[dict]) -> dict[str, Any]:
    """Items plus subtotal, bulk savings and item count."""
    items = []
    subtotal = Decimal("0")
    savings = Decimal("0")
    count = 0
    for row in rows:
        product = row.get("products") or {}
        quantity = int(row.get("quantity") or 0)
        unit = _line_unit_price(row)
        line_total = unit * quantity
        subtotal += line_total
        savings += to_decimal(row.get("bulk_savings"))
        count += quantity
        items.append(
            {
                "id": row.get("id"),
                "product_id": row.get("product_id"),
                "name": product.get("name"),
                "image_url": product.get("image_url"),
                "quantity": quantity,
                "size": row.get("size"),
                "color": row.get("color"),
                "unit_price": to_float(unit),
                "original_price": to_float(row.get("original_price") or product.get("price")),
                "is_bulk_order": bool(row.get("is_bulk_order")),
                "line_total": to_float(line_total),
            }
        )
    return {
        "items": items,
        "subtotal": to_float(subtotal),
        "bulk_savings": to_float(savings),
        "item_count": count,
    }


class CartService:
    """Cart domain service."""

    def __init__(self, db) -> None:
        self.db = db

    async def _price(self, product: Product, quantity: int) -> LinePrice:
        tiers = await self.db.products.get_tiers(product.id) if product.enable_bulk_pricing else []
        return price_line(product.price, quantity, tiers, bulk_enabled=product.enable_bulk_pricing)

    async def _get_product(self, product_id: str) -> Product:
        product = await self.db.products.get_by_id(product_id)
        if product is None or not product.is_active:
            raise NotFoundError(ERROR_PRODUCT_NOT_FOUND)
        return product

    async def get_cart(self, user_id: str) -> dict[str, Any]:
        return summarize_cart(await self.db.carts.get_items(user_id))

    async def add_item(
        self,
        user_id: str,
        product_id: str,
        quantity: int = 1,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> dict[str, Any]:
        """Add a product; an existing line with the same size/colour is merged."""
        if quantity < 1:
            raise ValueError(ERROR_INVALID_QUANTITY)
        product = await self._get_product(product_id)
        if not product.in_stock:
            raise ValueError(ERROR_PRODUCT_UNAVAILABLE)

        existing = await self.db.carts.find_line(user_id, product_id, size, color)
        new_quantity = quantity + (existing.quantity if existing else 0)
        line = await self._price(product, new_quantity)

        if existing:
            await self.db.carts.update(existing.id, user_id, {"quantity": new_quantity, **line.as_row()})
        else:
            await self.db.carts.insert(
                {
                    "user_id": user_id,
                    "product_id": product_id,
                    "quantity": new_quantity,
                    "size": size,
                    "color": color,
                    **line.as_row(),
                }
            )
        return await self.get_cart(user_id)

    async def update_quantity(self, user_id: str, item_id: str, quantity: int) -> dict[str, Any]:
        """Set a line's quantity; 0 or less removes it."""
        if quantity <= 0:
            return await self.remove_item(user_id, item_id)

        item = await self.db.carts.get_item(item_id, user_id)
        if item is None:
            raise NotFoundError(ERROR_CART_ITEM_NOT_FOUND)
        product = await self._get_product(item.product_id)
        line = await self._price(product, quantity)
        await self.db.carts.update(item_id, user_id, {"quantity": quantity, **line.as_row()})
        return await self.get_cart(user_id)

    async def remove_item(self, user_id: str, item_id: str) -> dict[str, Any]:
        removed = await self.db.carts.delete_item(item_id, user_id)
        if not removed:
            raise NotFoundError(ERROR_CART_ITEM_NOT_FOUND)
        return await self.get_cart(user_id)

    async def merge_guest_cart(self, user_id: str, items: list[dict[str, Any]]) -> dict[str, Any]:
        """Fold a browser-stored guest cart into the account cart after login.

        Lines that can no longer be added (product gone, out of stock) are skipped.
        """
        for item in items:
            try:
                await self.add_item(
                    user_id,
                    item["product_id"],
                    int(item.get("quantity") or 1),
                    item.get("size"),
                    item.get("color"),
                )
            except (NotFoundError, ValueError) as e:
                logger.info(
                    "Skipping guest cart line %s: %s", sanitize_id_for_logging(item.get("product_id")), e
                )
        return await self.get_cart(user_id)
