"""Cart Repository - cart_items rows, always scoped to a user."""
from typing import Any, Optional

from .base import BaseRepository
from storefront.services.models import CartItem

CART_WITH_PRODUCT = "*, products(id, name, price, image_url, stock_quantity, enable_bulk_pricing)"


class CartRepository(BaseRepository):
    """Cart database operations."""

    async def get_items(self, user_id: str) -> list[dict]:
        """Cart rows with product snapshot, oldest first."""
        result = (
            await self.client.table("cart_items")
            .select(CART_WITH_PRODUCT)
            .eq("user_id", user_id)
            .order("created_at")
            .execute()
        )
        return result.data or []

    async def get_item(self, item_id: str, user_id: str) -> Optional[CartItem]:
        result = (
            await self.client.table("cart_items")
            .select("*")
            .eq("id", item_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        return CartItem(**result.data[0]) if result.data else None

    async def find_line(
        self, user_id: str, product_id: str, size: Optional[str], color: Optional[str]
    ) -> Optional[CartItem]:
        """Existing line for the same product/size/colour."""
        query = (
            self.client.table("cart_items")
            .select("*")
            .eq("user_id", user_id)
            .eq("product_id", product_id)
        )
        query = query.eq("size", size) if size is not None else query.is_("size", "null")
        query = query.eq("color", color) if color is not None else query.is_("color", "null")
        result = await query.limit(1).execute()
        return CartItem(**result.data[0]) if result.data else None

    async def insert(self, data: dict[str, Any]) -> CartItem:
        result = await self.client.table("cart_items").insert(data).execute()
        return CartItem(**result.data[0])

    async def update(self, item_id: str, user_id: str, data: dict[str, Any]) -> list[dict]:
        result = (
            await self.client.table("cart_items")
            .update(data)
            .eq("id", item_id)
            .eq("user_id", user_id)
            .execute()
        )
        return result.data or []

    async def delete_item(self, item_id: str, user_id: str) -> list[dict]:
        result = (
            await self.client.table("cart_items")
            .delete()
            .eq("id", item_id)
            .eq("user_id", user_id)
            .execute()
        )
        return result.data or []

    async def clear(self, user_id: str) -> int:
        """Delete every cart row owned by user_id. Returns rows removed."""
        result = await self.client.table("cart_items").delete().eq("user_id", user_id).execute()
        return len(result.data or [])
