"""Marketing Domain Service.

Newsletter signups and the admin-triggered email campaigns: back-in-stock
alerts, new-arrivals digest and discount announcements. Sends go out one
recipient at a time; a failed send is logged and the campaign carries on.
"""

from typing import Optional

from storefront.errors import ERROR_OUT_OF_STOCK, ERROR_PRODUCT_NOT_FOUND, NotFoundError
from storefront.logging import get_logger, mask_email, sanitize_id_for_logging
from storefront.services.models import DiscountCode
from storefront.services.notifications import NEW_ARRIVALS_SUBJECT

logger = get_logger(__name__)

ERROR_NO_PRODUCTS_TO_ANNOUNCE = "No products found to announce"
ERROR_NO_SUBSCRIBERS = "No active subscribers"


class MarketingService:
    """Subscriber lists and campaign sends."""

    def __init__(self, db, notifications) -> None:
        self.db = db
        self.notifications = notifications

    async def subscribe_newsletter(self, email: str) -> str:
        """Returns "subscribed", "reactivated" or "already_subscribed"."""
        email = email.strip().lower()
        existing = await self.db.subscriptions.get_newsletter_subscriber(email)
        if existing is None:
            await self.db.subscriptions.add_newsletter_subscriber(email)
            logger.info("Newsletter signup %s", mask_email(email))
            return "subscribed"
        if not existing.get("is_active"):
            await self.db.subscriptions.reactivate_newsletter_subscriber(existing["id"])
            logger.info("Newsletter subscriber %s reactivated", mask_email(email))
            return "reactivated"
        return "already_subscribed"

    async def send_back_in_stock(self, product_id: str) -> int:
        """Email every unnotified subscriber of a product that is in stock again.

        notified_at is stamped only for successful sends so failures are
        retried on the next run.

        Raises:
            NotFoundError: product missing
            ValueError: product still out of stock
        """
        product = await self.db.products.get_by_id(product_id)
        if product is None:
            raise NotFoundError(ERROR_PRODUCT_NOT_FOUND)
        if not product.in_stock:
            raise ValueError(ERROR_OUT_OF_STOCK)

        subscribers = await self.db.subscriptions.get_pending_stock_subscribers(product_id)
        product_url = f"{self.notifications.app_url}/products/{product.id}"
        sent = 0
        for subscription in subscribers:
            result = await self.notifications.send_back_in_stock(subscription["email"], product.name, product_url)
            if result.get("success"):
                await self.db.subscriptions.mark_stock_notified(subscription["id"])
                sent += 1
            else:
                logger.warning(
                    "Back-in-stock email to %s failed: %s", mask_email(subscription["email"]), result.get("error")
                )
        logger.info("Back-in-stock for %s: %s/%s sent", sanitize_id_for_logging(product_id), sent, len(subscribers))
        return sent

    async def send_new_arrivals(
        self, product_ids: Optional[list[str]] = None, since_days: int = 7, limit: int = 8
    ) -> int:
        """Digest of chosen products, or of the latest arrivals.

        Raises:
            NotFoundError: nothing to announce, or nobody to send to
        """
        if product_ids:
            products = await self.db.products.get_by_ids(product_ids)
        else:
            products = await self.db.products.get_new_arrivals(since_days=since_days, limit=limit)
        if not products:
            raise NotFoundError(ERROR_NO_PRODUCTS_TO_ANNOUNCE)

        subscribers = await self.db.subscriptions.get_active_newsletter_subscribers()
        if not subscribers:
            raise NotFoundError(ERROR_NO_SUBSCRIBERS)

        content = "Announced products: " + ", ".join(p.id for p in products)
        sent = 0
        for subscriber in subscribers:
            result = await self.notifications.send_new_arrivals(subscriber["email"], products)
            ok = bool(result.get("success"))
            sent += ok
            await self.db.subscriptions.log_email(
                subscriber["email"],
                NEW_ARRIVALS_SUBJECT,
                content,
                "sent" if ok else "failed",
                None if ok else result.get("error"),
            )
        logger.info("New arrivals digest: %s/%s sent", sent, len(subscribers))
        return sent

    async def announce_discount(self, discount: DiscountCode) -> int:
        """Email an active discount code to all newsletter subscribers."""
        subscribers = await self.db.subscriptions.get_active_newsletter_subscribers()
        sent = 0
        for subscriber in subscribers:
            result = await self.notifications.send_discount_announcement(subscriber["email"], discount)
            if result.get("success"):
                sent += 1
        logger.info("Discount %s announced to %s/%s subscribers", discount.code, sent, len(subscribers))
        return sent

