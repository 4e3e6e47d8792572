"""Product Repository - products, variants and bulk pricing tiers."""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from .base import BaseRepository
from storefront.services.models import BulkPricingTier, Product

SORT_COLUMNS = {
    "newest": ("created_at", True),
    "price_asc": ("price", False),
    "price_desc": ("price", True),
}


class ProductRepository(BaseRepository):
    """Product database operations."""

    async def get_all(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "newest",
        limit: int = 24,
        offset: int = 0,
        active_only: bool = True,
    ) -> list[Product]:
        """Catalog listing with filters and sort."""
        query = self.client.table("products").select("*")
        if active_only:
            query = query.eq("is_active", True)
        if category:
            query = query.eq("category", category)
        if search:
            query = query.ilike("name", f"%{search}%")
        column, desc = SORT_COLUMNS.get(sort, SORT_COLUMNS["newest"])
        result = await query.order(column, desc=desc).range(offset, offset + limit - 1).execute()
        return [Product(**p) for p in result.data or []]

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        result = await self.client.table("products").select("*").eq("id", product_id).limit(1).execute()
        return Product(**result.data[0]) if result.data else None

    async def get_by_ids(self, product_ids: list[str]) -> list[Product]:
        if not product_ids:
            return []
        result = await self.client.table("products").select("*").in_("id", product_ids).execute()
        return [Product(**p) for p in result.data or []]

    async def get_new_arrivals(self, since_days: int = 7, limit: int = 8) -> list[Product]:
        """Active products created within the last `since_days` days."""
        since = (datetime.now(timezone.utc) - timedelta(days=since_days)).isoformat()
        result = (
            await self.client.table("products")
            .select("*")
            .eq("is_active", True)
            .gte("created_at", since)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [Product(**p) for p in result.data or []]

    async def create(self, data: dict[str, Any]) -> Product:
        result = await self.client.table("products").insert(data).execute()
        return Product(**result.data[0])

    async def update(self, product_id: str, data: dict[str, Any]) -> Optional[Product]:
        result = await self.client.table("products").update(data).eq("id", product_id).execute()
        return Product(**result.data[0]) if result.data else None

    async def delete(self, product_id: str) -> bool:
        result = await self.client.table("products").delete().eq("id", product_id).execute()
        return bool(result.data)

    # ==================== VARIANTS ====================

    async def get_variants(self, product_id: str, active_only: bool = True) -> list[dict]:
        query = self.client.table("product_variants").select("*").eq("product_id", product_id)
        if active_only:
            query = query.eq("is_active", True)
        result = await query.order("created_at").execute()
        return result.data or []

    async def count_active_variants(self, product_id: str) -> int:
        result = (
            await self.client.table("product_variants")
            .select("id", count="exact")
            .eq("product_id", product_id)
            .eq("is_active", True)
            .execute()
        )
        return result.count or 0

    async def upsert_variants(self, variants: list[dict[str, Any]]) -> list[dict]:
        """Insert variants, updating existing (product_id, size, color) rows."""
        if not variants:
            return []
        result = (
            await self.client.table("product_variants")
            .upsert(variants, on_conflict="product_id,size,color")
            .execute()
        )
        return result.data or []

    async def get_all_with_variants(self) -> list[dict]:
        """Every product with all of its variants (CSV export)."""
        result = (
            await self.client.table("products")
            .select("*, product_variants(*)")
            .order("created_at", desc=True)
            .execute()
        )
        return result.data or []

    # ==================== BULK PRICING ====================

    async def get_tiers(self, product_id: str) -> list[BulkPricingTier]:
        """Bulk pricing tiers ordered by min_quantity."""
        result = (
            await self.client.table("bulk_pricing_tiers")
            .select("*")
            .eq("product_id", product_id)
            .order("min_quantity")
            .execute()
        )
        return [BulkPricingTier(**t) for t in result.data or []]

    async def replace_tiers(self, product_id: str, tiers: list[dict[str, Any]]) -> list[BulkPricingTier]:
        """Swap a product's tiers for a new set."""
        await self.client.table("bulk_pricing_tiers").delete().eq("product_id", product_id).execute()
        if not tiers:
            return []
        rows = [{**t, "product_id": product_id} for t in tiers]
        result = await self.client.table("bulk_pricing_tiers").insert(rows).execute()
        return [BulkPricingTier(**t) for t in result.data or []]
