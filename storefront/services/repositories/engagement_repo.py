"""Engagement Repository - wishlist, reviews, subscriptions, special offers."""
from datetime import datetime, timezone
from typing import Any, Optional

from .base import BaseRepository
from storefront.services.models import Review, SpecialOffer


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class WishlistRepository(BaseRepository):
    """Wishlist rows (unique per user/product)."""

    async def get_by_user(self, user_id: str) -> list[dict]:
        result = (
            await self.client.table("wishlist")
            .select("id, product_id, created_at, products(id, name, price, image_url, stock_quantity)")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return result.data or []

    async def exists(self, user_id: str, product_id: str) -> bool:
        result = (
            await self.client.table("wishlist")
            .select("id")
            .eq("user_id", user_id)
            .eq("product_id", product_id)
            .limit(1)
            .execute()
        )
        return bool(result.data)

    async def add(self, user_id: str, product_id: str) -> None:
        await self.client.table("wishlist").insert({"user_id": user_id, "product_id": product_id}).execute()

    async def remove(self, user_id: str, product_id: str) -> bool:
        result = (
            await self.client.table("wishlist")
            .delete()
            .eq("user_id", user_id)
            .eq("product_id", product_id)
            .execute()
        )
        return bool(result.data)


class ReviewRepository(BaseRepository):
    """Product reviews."""

    async def get_approved(self, product_id: str) -> list[dict]:
        result = (
            await self.client.table("reviews")
            .select("*, profiles(full_name)")
            .eq("product_id", product_id)
            .eq("is_approved", True)
            .order("created_at", desc=True)
            .execute()
        )
        return result.data or []

    async def get_by_user_and_product(self, user_id: str, product_id: str) -> Optional[Review]:
        result = (
            await self.client.table("reviews")
            .select("*")
            .eq("user_id", user_id)
            .eq("product_id", product_id)
            .limit(1)
            .execute()
        )
        return Review(**result.data[0]) if result.data else None

    async def create(self, data: dict[str, Any]) -> Review:
        result = await self.client.table("reviews").insert(data).execute()
        return Review(**result.data[0])

    async def get_all(self, approved: Optional[bool] = None) -> list[dict]:
        query = self.client.table("reviews").select("*, profiles(full_name), products(name)")
        if approved is not None:
            query = query.eq("is_approved", approved)
        result = await query.order("created_at", desc=True).execute()
        return result.data or []

    async def set_approved(self, review_id: str, approved: bool = True) -> Optional[Review]:
        result = await self.client.table("reviews").update({"is_approved": approved}).eq("id", review_id).execute()
        return Review(**result.data[0]) if result.data else None

    async def delete(self, review_id: str) -> bool:
        result = await self.client.table("reviews").delete().eq("id", review_id).execute()
        return bool(result.data)


class SubscriptionRepository(BaseRepository):
    """Back-in-stock subscriptions, newsletter subscribers and the email log."""

    async def get_stock_subscription(self, product_id: str, email: str) -> Optional[dict]:
        result = (
            await self.client.table("back_in_stock_subscriptions")
            .select("*")
            .eq("product_id", product_id)
            .eq("email", email)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None

    async def add_stock_subscription(self, product_id: str, email: str, user_id: Optional[str]) -> None:
        await self.client.table("back_in_stock_subscriptions").insert(
            {"product_id": product_id, "email": email, "user_id": user_id}
        ).execute()

    async def get_pending_stock_subscribers(self, product_id: str) -> list[dict]:
        """Subscribers for a product that have not been notified yet."""
        result = (
            await self.client.table("back_in_stock_subscriptions")
            .select("*")
            .eq("product_id", product_id)
            .is_("notified_at", "null")
            .execute()
        )
        return result.data or []

    async def mark_stock_notified(self, subscription_id: str) -> None:
        await (
            self.client.table("back_in_stock_subscriptions")
            .update({"notified_at": _now_iso()})
            .eq("id", subscription_id)
            .execute()
        )

    async def get_newsletter_subscriber(self, email: str) -> Optional[dict]:
        result = (
            await self.client.table("newsletter_subscribers")
            .select("*")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None

    async def add_newsletter_subscriber(self, email: str) -> None:
        await self.client.table("newsletter_subscribers").insert({"email": email, "is_active": True}).execute()

    async def reactivate_newsletter_subscriber(self, subscriber_id: str) -> None:
        await (
            self.client.table("newsletter_subscribers")
            .update({"is_active": True})
            .eq("id", subscriber_id)
            .execute()
        )

    async def get_active_newsletter_subscribers(self) -> list[dict]:
        result = (
            await self.client.table("newsletter_subscribers")
            .select("id, email")
            .eq("is_active", True)
            .execute()
        )
        return result.data or []

    async def log_email(
        self, recipient: str, subject: str, content: str, status: str, error: Optional[str] = None
    ) -> None:
        """Record one outbound marketing email in email_notifications."""
        row = {"email": recipient, "subject": subject, "content": content, "status": status}
        if error:
            row["error_message"] = error
        await self.client.table("email_notifications").insert(row).execute()


class OfferRepository(BaseRepository):
    """Special offers and their product links."""

    OFFER_WITH_PRODUCTS = "*, special_offer_products(product_id, products(id, name, price, image_url))"

    async def get_active(self) -> list[dict]:
        """Active offers that have not expired."""
        result = (
            await self.client.table("special_offers")
            .select(self.OFFER_WITH_PRODUCTS)
            .eq("is_active", True)
            .gte("valid_until", _now_iso())
            .order("created_at", desc=True)
            .execute()
        )
        return result.data or []

    async def get_all(self) -> list[dict]:
        result = (
            await self.client.table("special_offers")
            .select(self.OFFER_WITH_PRODUCTS)
            .order("created_at", desc=True)
            .execute()
        )
        return result.data or []

    async def get_by_id(self, offer_id: str) -> Optional[dict]:
        result = (
            await self.client.table("special_offers")
            .select(self.OFFER_WITH_PRODUCTS)
            .eq("id", offer_id)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None

    async def create(self, data: dict[str, Any]) -> SpecialOffer:
        result = await self.client.table("special_offers").insert(data).execute()
        return SpecialOffer(**result.data[0])

    async def update(self, offer_id: str, data: dict[str, Any]) -> Optional[SpecialOffer]:
        result = await self.client.table("special_offers").update(data).eq("id", offer_id).execute()
        return SpecialOffer(**result.data[0]) if result.data else None

    async def delete(self, offer_id: str) -> bool:
        result = await self.client.table("special_offers").delete().eq("id", offer_id).execute()
        return bool(result.data)

    async def link_products(self, offer_id: str, product_ids: list[str]) -> None:
        rows = [{"special_offer_id": offer_id, "product_id": pid} for pid in product_ids]
        await self.client.table("special_offer_products").insert(rows).execute()

    async def unlink_products(self, offer_id: str) -> None:
        await self.client.table("special_offer_products").delete().eq("special_offer_id", offer_id).execute()
