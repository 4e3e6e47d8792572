"""Discount Repository - discount_codes."""
from typing import Any, Optional

from .base import BaseRepository
from storefront.services.models import DiscountCode


class DiscountRepository(BaseRepository):
    """Discount code database operations."""

    async def get_active_by_code(self, code: str) -> Optional[DiscountCode]:
        """Active code by (upper-cased) code."""
        result = (
            await self.client.table("discount_codes")
            .select("*")
            .eq("code", code.strip().upper())
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
        return DiscountCode(**result.data[0]) if result.data else None

    async def get_by_id(self, discount_id: str) -> Optional[DiscountCode]:
        result = await self.client.table("discount_codes").select("*").eq("id", discount_id).limit(1).execute()
        return DiscountCode(**result.data[0]) if result.data else None

    async def get_all(self) -> list[DiscountCode]:
        result = await self.client.table("discount_codes").select("*").order("created_at", desc=True).execute()
        return [DiscountCode(**d) for d in result.data or []]

    async def create(self, data: dict[str, Any]) -> DiscountCode:
        result = await self.client.table("discount_codes").insert(data).execute()
        return DiscountCode(**result.data[0])

    async def update(self, discount_id: str, data: dict[str, Any]) -> Optional[DiscountCode]:
        result = await self.client.table("discount_codes").update(data).eq("id", discount_id).execute()
        return DiscountCode(**result.data[0]) if result.data else None

    async def delete(self, discount_id: str) -> bool:
        result = await self.client.table("discount_codes").delete().eq("id", discount_id).execute()
        return bool(result.data)

    async def increment_usage(self, discount_id: str) -> None:
        """Bump usage_count by one."""
        result = (
            await self.client.table("discount_codes")
            .select("usage_count")
            .eq("id", discount_id)
            .limit(1)
            .execute()
        )
        if not result.data:
            return
        current = result.data[0].get("usage_count") or 0
        await (
            self.client.table("discount_codes")
            .update({"usage_count": current + 1})
            .eq("id", discount_id)
            .execute()
        )
