"""Products Domain Service.

Public catalog (listing, detail, reviews, back-in-stock signup) and the
admin side (CRUD, bulk tiers, variant generation, export).
"""

from typing import Any, Optional

from storefront.errors import ERROR_PRODUCT_NOT_FOUND, NotFoundError
from storefront.logging import get_logger, mask_email, sanitize_id_for_logging
from storefront.services.domains.pricing import tier_unit_price
from storefront.services.domains.variants import (
    VariantOptions,
    generate_variants,
    products_to_csv,
    validate_for_generation,
    variant_price,
)
from storefront.services.models import Product
from storefront.services.money import to_float

logger = get_logger(__name__)

ERROR_INVALID_RATING = "Rating must be between 1 and 5"
ERROR_ALREADY_REVIEWED = "You have already reviewed this product"
ERROR_VARIANTS_EXIST = "Product already has variants. Use update endpoint to modify existing variants."
ERROR_UNSUPPORTED_EXPORT = "Unsupported format. Use 'csv' or 'json'"


class VariantsExistError(Exception):
    """Active variants already exist for the product."""

    def __init__(self, existing_count: int):
        super().__init__(ERROR_VARIANTS_EXIST)
        self.existing_count = existing_count


class VariantValidationError(ValueError):
    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


def product_payload(product: Product) -> dict[str, Any]:
    data = product.model_dump(mode="json")
    data["price"] = to_float(product.price)
    data["in_stock"] = product.in_stock
    return data


def summarize_variants(product: Product, variants: list[dict]) -> dict[str, Any]:
    """Stock and price range for a generated grid."""
    prices = [variant_price(product.price, v) for v in variants] or [product.price]
    return {
        "count": len(variants),
        "total_stock": sum(int(v.get("stock_quantity") or 0) for v in variants),
        "min_price": to_float(min(prices)),
        "max_price": to_float(max(prices)),
    }


def average_rating(reviews: list[dict]) -> Optional[float]:
    ratings = [int(r["rating"]) for r in reviews if r.get("rating") is not None]
    if not ratings:
        return None
    return round(sum(ratings) / len(ratings), 1)


class CatalogService:
    """Storefront-facing product reads plus review and stock-alert signups."""

    def __init__(self, db) -> None:
        self.db = db

    async def _get_active(self, product_id: str) -> Product:
        product = await self.db.products.get_by_id(product_id)
        if product is None or not product.is_active:
            raise NotFoundError(ERROR_PRODUCT_NOT_FOUND)
        return product

    async def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "newest",
        limit: int = 24,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        products = await self.db.products.get_all(category, search, sort, limit, offset)
        return [product_payload(p) for p in products]

    async def get_product(self, product_id: str) -> dict[str, Any]:
        """Product with active variants, bulk tiers and approved reviews."""
        product = await self._get_active(product_id)
        variants = await self.db.products.get_variants(product_id)
        tiers = await self.db.products.get_tiers(product_id) if product.enable_bulk_pricing else []
        reviews = await self.db.reviews.get_approved(product_id)

        payload = product_payload(product)
        payload["variants"] = [
            {**v, "final_price": to_float(variant_price(product.price, v))} for v in variants
        ]
        payload["bulk_tiers"] = [
            {
                "id": t.id,
                "min_quantity": t.min_quantity,
                "max_quantity": t.max_quantity,
                "discount_type": t.discount_type,
                "discount_value": to_float(t.discount_value),
                "unit_price": to_float(tier_unit_price(product.price, t)),
            }
            for t in tiers
        ]
        payload["reviews"] = reviews
        payload["average_rating"] = average_rating(reviews)
        payload["review_count"] = len(reviews)
        return payload

    async def submit_review(
        self, user_id: str, product_id: str, rating: int, comment: Optional[str] = None
    ) -> dict[str, Any]:
        """New reviews stay hidden until an admin approves them."""
        if not 1 <= rating <= 5:
            raise ValueError(ERROR_INVALID_RATING)
        await self._get_active(product_id)
        if await self.db.reviews.get_by_user_and_product(user_id, product_id):
            raise ValueError(ERROR_ALREADY_REVIEWED)
        review = await self.db.reviews.create(
            {
                "user_id": user_id,
                "product_id": product_id,
                "rating": rating,
                "comment": (comment or "").strip() or None,
                "is_approved": False,
            }
        )
        return review.model_dump(mode="json")

    async def subscribe_back_in_stock(
        self, product_id: str, email: str, user_id: Optional[str] = None
    ) -> bool:
        """Returns False when the email was already subscribed."""
        product = await self.db.products.get_by_id(product_id)
        if product is None:
            raise NotFoundError(ERROR_PRODUCT_NOT_FOUND)
        email = email.strip().lower()
        if await self.db.subscriptions.get_stock_subscription(product_id, email):
            return False
        await self.db.subscriptions.add_stock_subscription(product_id, email, user_id)
        logger.info("Back-in-stock signup %s for %s", mask_email(email), sanitize_id_for_logging(product_id))
        return True


class ProductAdminService:
    """Admin product management."""

    def __init__(self, db) -> None:
        self.db = db

    async def list_products(self) -> list[dict[str, Any]]:
        products = await self.db.products.get_all(limit=1000, active_only=False)
        return [product_payload(p) for p in products]

    async def create_product(self, data: dict[str, Any], tiers: Optional[list[dict]] = None) -> dict[str, Any]:
        product = await self.db.products.create(data)
        if tiers:
            await self.db.products.replace_tiers(product.id, tiers)
        logger.info("Product %s created", sanitize_id_for_logging(product.id))
        return product_payload(product)

    async def update_product(
        self, product_id: str, data: dict[str, Any], tiers: Optional[list[dict]] = None
    ) -> dict[str, Any]:
        """Update fields; when tiers is given (even empty) it replaces the set."""
        if data:
            product = await self.db.products.update(product_id, data)
        else:
            product = await self.db.products.get_by_id(product_id)
        if product is None:
            raise NotFoundError(ERROR_PRODUCT_NOT_FOUND)
        if tiers is not None:
            await self.db.products.replace_tiers(product_id, tiers)
        return product_payload(product)

    async def delete_product(self, product_id: str) -> None:
        if not await self.db.products.delete(product_id):
            raise NotFoundError(ERROR_PRODUCT_NOT_FOUND)
        logger.info("Product %s deleted", sanitize_id_for_logging(product_id))

    async def generate_variants(
        self, product_id: str, options: Optional[VariantOptions] = None
    ) -> dict[str, Any]:
        """Create the size x colour grid for a product.

        Raises:
            NotFoundError: product missing
            VariantValidationError: no sizes/colours, blanks, negative stock
            VariantsExistError: active variants already exist
        """
        product = await self.db.products.get_by_id(product_id)
        if product is None:
            raise NotFoundError(ERROR_PRODUCT_NOT_FOUND)

        errors = validate_for_generation(product.sizes, product.colors, product.stock_quantity)
        if errors:
            raise VariantValidationError(errors)

        existing = await self.db.products.count_active_variants(product_id)
        if existing:
            raise VariantsExistError(existing)

        rows = generate_variants(product_id, product.sizes, product.colors, product.stock_quantity, options)
        created = await self.db.products.upsert_variants(rows)
        logger.info("Generated %s variants for %s", len(created), sanitize_id_for_logging(product_id))
        return {"variants": created, "summary": summarize_variants(product, created)}

    async def export(self, fmt: str = "csv") -> Any:
        """CSV text or the raw product+variant rows for format=json."""
        if fmt not in ("csv", "json"):
            raise ValueError(ERROR_UNSUPPORTED_EXPORT)
        rows = await self.db.products.get_all_with_variants()
        if fmt == "json":
            return rows
        return products_to_csv(rows)

