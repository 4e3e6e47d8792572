"""Content Repository - storefront banners and the canonical brand list."""
from typing import Any, Optional

from .base import BaseRepository

BANNER_TABLES = {
    "hero": "hero_banners",
    "category": "category_banners",
    "ad": "ad_banners",
}


class BannerRepository(BaseRepository):
    """Hero, category and ad banners. Each kind lives in its own table."""

    @staticmethod
    def _table(kind: str) -> str:
        return BANNER_TABLES[kind]

    async def get_all(self, kind: str, active_only: bool = False) -> list[dict]:
        query = self.client.table(self._table(kind)).select("*")
        if active_only:
            query = query.eq("is_active", True)
        result = await query.order("display_order").execute()
        return result.data or []

    async def get_featured_ads(self) -> list[dict]:
        """Active ad banners holding a featured slot, slot 1 first."""
        result = (
            await self.client.table("ad_banners")
            .select("*")
            .eq("is_active", True)
            .in_("featured_rank", [1, 2])
            .order("featured_rank")
            .execute()
        )
        return result.data or []

    async def get_by_id(self, kind: str, banner_id: str) -> Optional[dict]:
        result = await self.client.table(self._table(kind)).select("*").eq("id", banner_id).limit(1).execute()
        return result.data[0] if result.data else None

    async def create(self, kind: str, data: dict[str, Any]) -> dict:
        result = await self.client.table(self._table(kind)).insert(data).execute()
        return result.data[0]

    async def update(self, kind: str, banner_id: str, data: dict[str, Any]) -> Optional[dict]:
        result = await self.client.table(self._table(kind)).update(data).eq("id", banner_id).execute()
        return result.data[0] if result.data else None

    async def delete(self, kind: str, banner_id: str) -> bool:
        result = await self.client.table(self._table(kind)).delete().eq("id", banner_id).execute()
        return bool(result.data)

    async def clear_featured(self) -> None:
        await self.client.table("ad_banners").update({"featured_rank": None}).in_("featured_rank", [1, 2]).execute()


class BrandRepository(BaseRepository):
    """Canonical brands table plus the free-text products.brand column."""

    async def get_canonical(self) -> list[str]:
        result = await self.client.table("brands").select("name").order("name").execute()
        return [row["name"] for row in result.data or []]

    async def add_canonical(self, name: str) -> dict:
        result = await self.client.table("brands").insert({"name": name}).execute()
        return result.data[0]

    async def get_product_brands(self) -> list[Optional[str]]:
        """products.brand for every product (None included)."""
        result = await self.client.table("products").select("brand").execute()
        return [row.get("brand") for row in result.data or []]

    async def set_product_brand(self, old_name: Optional[str], new_name: Optional[str]) -> int:
        """Rewrite products.brand from old_name (None matches unbranded) to new_name."""
        query = self.client.table("products").update({"brand": new_name})
        if old_name is None:
            query = query.is_("brand", "null")
        else:
            query = query.eq("brand", old_name)
        result = await query.execute()
        return len(result.data or [])
