"""User Repository - profiles and saved addresses."""
from typing import Any, Optional

from .base import BaseRepository
from storefront.services.models import Address, Profile


class ProfileRepository(BaseRepository):
    """Profile database operations."""

    async def get_by_id(self, user_id: str) -> Optional[Profile]:
        result = await self.client.table("profiles").select("*").eq("id", user_id).limit(1).execute()
        return Profile(**result.data[0]) if result.data else None

    async def update(self, user_id: str, data: dict[str, Any]) -> Optional[Profile]:
        result = await self.client.table("profiles").update(data).eq("id", user_id).execute()
        return Profile(**result.data[0]) if result.data else None

    async def get_all(self, limit: int = 100, offset: int = 0) -> list[Profile]:
        result = (
            await self.client.table("profiles")
            .select("*")
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [Profile(**p) for p in result.data or []]

    async def set_admin(self, user_id: str, is_admin: bool) -> Optional[Profile]:
        return await self.update(user_id, {"is_admin": is_admin})


class AddressRepository(BaseRepository):
    """Address database operations, scoped to the owning user."""

    async def get_by_user(self, user_id: str) -> list[Address]:
        result = (
            await self.client.table("addresses")
            .select("*")
            .eq("user_id", user_id)
            .order("is_default", desc=True)
            .execute()
        )
        return [Address(**a) for a in result.data or []]

    async def get_by_id(self, address_id: str, user_id: Optional[str] = None) -> Optional[Address]:
        query = self.client.table("addresses").select("*").eq("id", address_id)
        if user_id is not None:
            query = query.eq("user_id", user_id)
        result = await query.limit(1).execute()
        return Address(**result.data[0]) if result.data else None

    async def create(self, data: dict[str, Any]) -> Address:
        result = await self.client.table("addresses").insert(data).execute()
        return Address(**result.data[0])

    async def update(self, address_id: str, user_id: str, data: dict[str, Any]) -> Optional[Address]:
        result = (
            await self.client.table("addresses")
            .update(data)
            .eq("id", address_id)
            .eq("user_id", user_id)
            .execute()
        )
        return Address(**result.data[0]) if result.data else None

    async def delete(self, address_id: str, user_id: str) -> bool:
        result = (
            await self.client.table("addresses")
            .delete()
            .eq("id", address_id)
            .eq("user_id", user_id)
            .execute()
        )
        return bool(result.data)

    async def clear_default(self, user_id: str, except_id: Optional[str] = None) -> None:
        """Unset is_default on the user's other addresses."""
        query = self.client.table("addresses").update({"is_default": False}).eq("user_id", user_id)
        if except_id is not None:
            query = query.neq("id", except_id)
        await query.execute()
