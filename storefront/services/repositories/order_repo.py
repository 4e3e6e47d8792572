"""Order Repository - orders and order_items."""
from datetime import datetime, timezone
from typing import Any, Optional

from .base import BaseRepository
from storefront.services.models import Order, OrderItem

ORDER_WITH_CUSTOMER = "*, profiles(full_name, phone)"
ORDER_WITH_ADDRESS = (
    "*, addresses(full_name, phone, street_address, city, province, postal_code)"
)
ITEM_WITH_PRODUCT = "*, products(id, name, image_url)"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class OrderRepository(BaseRepository):
    """Order database operations."""

    async def create(self, data: dict[str, Any]) -> Order:
        """Insert a pending order and return it."""
        payload = {"status": "pending", "payment_status": "pending", **data}
        result = await self.client.table("orders").insert(payload).execute()
        return Order(**result.data[0])

    async def create_items(self, items: list[dict[str, Any]]) -> list[OrderItem]:
        """Batch insert order_items."""
        if not items:
            return []
        result = await self.client.table("order_items").insert(items).execute()
        return [OrderItem(**row) for row in result.data or []]

    async def delete(self, order_id: str) -> None:
        await self.client.table("orders").delete().eq("id", order_id).execute()

    async def get_by_id(self, order_id: str, user_id: Optional[str] = None) -> Optional[Order]:
        """Get order by ID, optionally scoped to its owner."""
        query = self.client.table("orders").select("*").eq("id", order_id)
        if user_id is not None:
            query = query.eq("user_id", user_id)
        result = await query.limit(1).execute()
        return Order(**result.data[0]) if result.data else None

    async def get_row(
        self, order_id: str, columns: str = "*", user_id: Optional[str] = None
    ) -> Optional[dict]:
        """Get raw order row with embedded relations."""
        query = self.client.table("orders").select(columns).eq("id", order_id)
        if user_id is not None:
            query = query.eq("user_id", user_id)
        result = await query.limit(1).execute()
        return result.data[0] if result.data else None

    async def get_items(self, order_id: str) -> list[dict]:
        """Order items with product name and image."""
        result = (
            await self.client.table("order_items")
            .select(ITEM_WITH_PRODUCT)
            .eq("order_id", order_id)
            .execute()
        )
        return result.data or []

    async def update(
        self, order_id: str, data: dict[str, Any], user_id: Optional[str] = None
    ) -> list[dict]:
        """Update an order; returns affected rows (empty when not found / not owned)."""
        payload = {**data, "updated_at": _now_iso()}
        query = self.client.table("orders").update(payload).eq("id", order_id)
        if user_id is not None:
            query = query.eq("user_id", user_id)
        result = await query.execute()
        return result.data or []

    async def mark_paid(
        self, order_id: str, payment_reference: str, user_id: Optional[str] = None
    ) -> list[dict]:
        """Conditional paid transition; matches nothing once the order is already paid."""
        payload = {
            "payment_reference": payment_reference,
            "payment_status": "paid",
            "status": "confirmed",
            "updated_at": _now_iso(),
        }
        query = (
            self.client.table("orders")
            .update(payload)
            .eq("id", order_id)
            .neq("payment_status", "paid")
        )
        if user_id is not None:
            query = query.eq("user_id", user_id)
        result = await query.execute()
        return result.data or []

    async def get_by_user(self, user_id: str, limit: int = 20, offset: int = 0) -> list[Order]:
        """Customer's orders, newest first."""
        result = (
            await self.client.table("orders")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [Order(**o) for o in result.data or []]

    async def list_all(
        self, status: Optional[str] = None, limit: int = 50, offset: int = 0
    ) -> list[dict]:
        """All orders with customer name, newest first (admin)."""
        query = self.client.table("orders").select(ORDER_WITH_CUSTOMER)
        if status:
            query = query.eq("status", status)
        result = await query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()
        return result.data or []
