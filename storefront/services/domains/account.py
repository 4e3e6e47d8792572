"""Account Domain Service.

Profile, saved addresses and order history for the signed-in customer.
"""

from typing import Any, Optional

from storefront.errors import ERROR_NOT_FOUND, NotFoundError, OrderNotFoundError
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.orders.serializer import build_order_detail, build_order_payload
from storefront.services.repositories.order_repo import ORDER_WITH_ADDRESS

logger = get_logger(__name__)

ERROR_ADDRESS_NOT_FOUND = "Address not found"
PROFILE_FIELDS = ("full_name", "phone")


class AccountService:
    """Account domain service. Everything is scoped to the caller's user_id."""

    def __init__(self, db) -> None:
        self.db = db

    async def get_profile(self, user_id: str) -> dict[str, Any]:
        profile = await self.db.profiles.get_by_id(user_id)
        if profile is None:
            raise NotFoundError(ERROR_NOT_FOUND)
        return profile.model_dump(mode="json")

    async def update_profile(self, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Only full_name and phone are customer-editable."""
        changes = {k: v for k, v in data.items() if k in PROFILE_FIELDS}
        if not changes:
            return await self.get_profile(user_id)
        profile = await self.db.profiles.update(user_id, changes)
        if profile is None:
            raise NotFoundError(ERROR_NOT_FOUND)
        return profile.model_dump(mode="json")

    # ==================== ADDRESSES ====================

    async def list_addresses(self, user_id: str) -> list[dict[str, Any]]:
        return [a.model_dump() for a in await self.db.addresses.get_by_user(user_id)]

    async def create_address(self, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """The first address is always the default; a new default unseats the old one."""
        existing = await self.db.addresses.get_by_user(user_id)
        is_default = bool(data.get("is_default")) or not existing
        address = await self.db.addresses.create({**data, "user_id": user_id, "is_default": is_default})
        if is_default:
            await self.db.addresses.clear_default(user_id, except_id=address.id)
        return address.model_dump()

    async def update_address(self, user_id: str, address_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Update an address. Un-defaulting the default hands the flag to the
        next address; the only address stays default.
        """
        data = {k: v for k, v in data.items() if k not in ("id", "user_id")}
        promote = None
        if "is_default" in data and not data["is_default"]:
            current = await self.db.addresses.get_by_id(address_id, user_id=user_id)
            if current is None:
                raise NotFoundError(ERROR_ADDRESS_NOT_FOUND)
            if current.is_default:
                others = [a for a in await self.db.addresses.get_by_user(user_id) if a.id != address_id]
                if others:
                    promote = others[0].id
                else:
                    data.pop("is_default")
            if not data:
                return current.model_dump()

        address = await self.db.addresses.update(address_id, user_id, data)
        if address is None:
            raise NotFoundError(ERROR_ADDRESS_NOT_FOUND)
        if data.get("is_default"):
            await self.db.addresses.clear_default(user_id, except_id=address_id)
        elif promote:
            await self.db.addresses.update(promote, user_id, {"is_default": True})
        return address.model_dump()

    async def delete_address(self, user_id: str, address_id: str) -> None:
        """Deleting the default promotes the next remaining address."""
        address = await self.db.addresses.get_by_id(address_id, user_id=user_id)
        if address is None or not await self.db.addresses.delete(address_id, user_id):
            raise NotFoundError(ERROR_ADDRESS_NOT_FOUND)
        if address.is_default:
            remaining = await self.db.addresses.get_by_user(user_id)
            if remaining:
                await self.db.addresses.update(remaining[0].id, user_id, {"is_default": True})

    # ==================== ORDERS ====================

    async def list_orders(self, user_id: str, limit: int = 20, offset: int = 0) -> list[dict[str, Any]]:
        orders = await self.db.orders.get_by_user(user_id, limit=limit, offset=offset)
        return [build_order_payload(o) for o in orders]

    async def get_order(self, order_id: str, user_id: Optional[str]) -> dict[str, Any]:
        """Order detail; pass user_id=None only for admin reads."""
        row = await self.db.orders.get_row(order_id, ORDER_WITH_ADDRESS, user_id=user_id)
        if row is None:
            logger.info("Order %s not visible to caller", sanitize_id_for_logging(order_id))
            raise OrderNotFoundError(order_id)
        items = await self.db.orders.get_items(order_id)
        return build_order_detail(row, items)
