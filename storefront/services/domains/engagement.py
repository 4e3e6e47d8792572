"""Engagement Domain Services - wishlist, special offers, admin moderation."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from storefront.errors import ERROR_NOT_FOUND, ERROR_PRODUCT_NOT_FOUND, NotFoundError
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.money import to_decimal, to_float

logger = get_logger(__name__)

ERROR_OFFER_NOT_FOUND = "Special offer not found"
ERROR_OFFER_FIELDS_REQUIRED = (
    "Title, description, special_price, original_price, valid_until and product_ids are required"
)
ERROR_OFFER_PRICES = "Special price must be below the original price"
ERROR_REVIEW_NOT_FOUND = "Review not found"
ERROR_DISCOUNT_NOT_FOUND = "Discount code not found"

OFFER_REQUIRED_FIELDS = ("title", "description", "special_price", "original_price", "valid_until")


def discount_percentage(original_price: Any, special_price: Any) -> int:
    """round((orig - special) / orig * 100), half away from zero."""
    original = to_decimal(original_price)
    if original <= 0:
        return 0
    pct = (original - to_decimal(special_price)) / original * 100
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def offer_payload(row: dict) -> dict[str, Any]:
    """Flatten the special_offer_products join into a product list."""
    links = row.get("special_offer_products") or []
    payload = {k: v for k, v in row.items() if k != "special_offer_products"}
    payload["products"] = [link["products"] for link in links if link.get("products")]
    for key in ("special_price", "original_price"):
        if payload.get(key) is not None:
            payload[key] = to_float(payload[key])
    return payload


class WishlistService:
    def __init__(self, db) -> None:
        self.db = db

    async def list(self, user_id: str) -> list[dict]:
        return await self.db.wishlist.get_by_user(user_id)

    async def add(self, user_id: str, product_id: str) -> bool:
        """Returns False when the product was already saved."""
        if await self.db.products.get_by_id(product_id) is None:
            raise NotFoundError(ERROR_PRODUCT_NOT_FOUND)
        if await self.db.wishlist.exists(user_id, product_id):
            return False
        await self.db.wishlist.add(user_id, product_id)
        return True

    async def remove(self, user_id: str, product_id: str) -> bool:
        return await self.db.wishlist.remove(user_id, product_id)


class OfferService:
    """Special offers: public reads and admin management."""

    def __init__(self, db) -> None:
        self.db = db

    async def list_active(self) -> list[dict[str, Any]]:
        return [offer_payload(o) for o in await self.db.offers.get_active()]

    async def list_all(self) -> list[dict[str, Any]]:
        return [offer_payload(o) for o in await self.db.offers.get_all()]

    async def get(self, offer_id: str) -> dict[str, Any]:
        row = await self.db.offers.get_by_id(offer_id)
        if row is None:
            raise NotFoundError(ERROR_OFFER_NOT_FOUND)
        return offer_payload(row)

    async def create(self, data: dict[str, Any], product_ids: list[str]) -> dict[str, Any]:
        """Create an offer and link its products.

        The offer row is removed again if the product links cannot be written.
        """
        if any(data.get(key) in (None, "") for key in OFFER_REQUIRED_FIELDS) or not product_ids:
            raise ValueError(ERROR_OFFER_FIELDS_REQUIRED)
        if to_decimal(data["special_price"]) >= to_decimal(data["original_price"]):
            raise ValueError(ERROR_OFFER_PRICES)

        row = {
            **data,
            "special_price": str(to_decimal(data["special_price"])),
            "original_price": str(to_decimal(data["original_price"])),
            "discount_percentage": discount_percentage(data["original_price"], data["special_price"]),
            "is_active": data.get("is_active", True),
        }
        offer = await self.db.offers.create(row)
        try:
            await self.db.offers.link_products(offer.id, product_ids)
        except Exception:
            logger.error("Linking products to offer %s failed, removing it", sanitize_id_for_logging(offer.id), exc_info=True)
            await self.db.offers.delete(offer.id)
            raise
        logger.info("Special offer %s created (%s products)", sanitize_id_for_logging(offer.id), len(product_ids))
        return await self.get(offer.id)

    async def update(
        self, offer_id: str, data: dict[str, Any], product_ids: Optional[list[str]] = None
    ) -> dict[str, Any]:
        """Partial update; product_ids, when given, replaces the linked set."""
        current = await self.db.offers.get_by_id(offer_id)
        if current is None:
            raise NotFoundError(ERROR_OFFER_NOT_FOUND)

        changes = dict(data)
        if "special_price" in changes or "original_price" in changes:
            original = changes.get("original_price", current.get("original_price"))
            special = changes.get("special_price", current.get("special_price"))
            if to_decimal(special) >= to_decimal(original):
                raise ValueError(ERROR_OFFER_PRICES)
            changes["discount_percentage"] = discount_percentage(original, special)
            for key in ("special_price", "original_price"):
                if key in changes:
                    changes[key] = str(to_decimal(changes[key]))
        if changes:
            await self.db.offers.update(offer_id, changes)
        if product_ids is not None:
            await self.db.offers.unlink_products(offer_id)
            if product_ids:
                await self.db.offers.link_products(offer_id, product_ids)
        return await self.get(offer_id)

    async def delete(self, offer_id: str) -> None:
        await self.db.offers.unlink_products(offer_id)
        if not await self.db.offers.delete(offer_id):
            raise NotFoundError(ERROR_OFFER_NOT_FOUND)


class ModerationService:
    """Admin review moderation, discount codes and user roles."""

    def __init__(self, db) -> None:
        self.db = db

    async def list_reviews(self, approved: Optional[bool] = None) -> list[dict]:
        return await self.db.reviews.get_all(approved)

    async def approve_review(self, review_id: str, approved: bool = True) -> dict[str, Any]:
        review = await self.db.reviews.set_approved(review_id, approved)
        if review is None:
            raise NotFoundError(ERROR_REVIEW_NOT_FOUND)
        return review.model_dump(mode="json")

    async def delete_review(self, review_id: str) -> None:
        if not await self.db.reviews.delete(review_id):
            raise NotFoundError(ERROR_REVIEW_NOT_FOUND)

    async def list_discounts(self) -> list[dict[str, Any]]:
        return [d.model_dump(mode="json") for d in await self.db.discounts.get_all()]

    async def create_discount(self, data: dict[str, Any]):
        return await self.db.discounts.create({**data, "code": str(data["code"]).strip().upper()})

    async def update_discount(self, discount_id: str, data: dict[str, Any]) -> dict[str, Any]:
        if "code" in data:
            data = {**data, "code": str(data["code"]).strip().upper()}
        discount = await self.db.discounts.update(discount_id, data)
        if discount is None:
            raise NotFoundError(ERROR_DISCOUNT_NOT_FOUND)
        return discount.model_dump(mode="json")

    async def delete_discount(self, discount_id: str) -> None:
        if not await self.db.discounts.delete(discount_id):
            raise NotFoundError(ERROR_DISCOUNT_NOT_FOUND)

    async def list_users(self, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
        return [p.model_dump(mode="json") for p in await self.db.profiles.get_all(limit, offset)]

    async def set_admin(self, user_id: str, is_admin: bool) -> dict[str, Any]:
        profile = await self.db.profiles.set_admin(user_id, is_admin)
        if profile is None:
            raise NotFoundError(ERROR_NOT_FOUND)
        logger.info("User %s admin=%s", sanitize_id_for_logging(user_id), is_admin)
        return profile.model_dump(mode="json")
