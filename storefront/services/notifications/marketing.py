"""
Marketing Notifications

Back-in-stock alerts, new-arrivals newsletter and discount announcements.
"""

from typing import Any

from storefront.logging import get_logger
from storefront.services.money import format_money, to_decimal

from .base import NotificationServiceBase, button, esc, render_layout, sender_alerts, sender_news

logger = get_logger(__name__)

NEW_ARRIVALS_SUBJECT = "New Arrivals at Apparel Cast ✨"


def discount_label(discount: Any) -> str:
    """"15%" for percentage codes, "R 50.00" for fixed ones."""
    value = to_decimal(getattr(discount, "discount_value", 0))
    if getattr(discount, "discount_type", "percentage") == "percentage":
        return f"{value.normalize():f}%"
    return format_money(value)


def _product_card(product: Any, app_url: str) -> str:
    image = (
        f'<img src="{esc(product.image_url)}" alt="{esc(product.name)}" '
        'style="width: 100%; max-width: 240px; border-radius: 6px;">'
        if product.image_url
        else ""
    )
    return (
        '<div style="display: inline-block; width: 260px; margin: 10px; vertical-align: top; text-align: center;">'
        f"{image}<p style=\"margin: 8px 0 4px 0; font-weight: 600;\">{esc(product.name)}</p>"
        f'<p style="margin: 0 0 8px 0; color: #666;">{format_money(product.price)}</p>'
        f"{button(f'{app_url}/products/{product.id}', 'Shop now')}</div>"
    )


class MarketingNotificationsMixin(NotificationServiceBase):
    """Subscriber-facing marketing emails."""

    async def send_back_in_stock(self, to: str, product_name: str, product_url: str) -> dict[str, Any]:
        body = f"""
          <h2 style="color: #1a1a1a; margin-top: 0;">Good news!</h2>
          <p style="color: #666;"><strong>{esc(product_name)}</strong> is back in stock.</p>
          <p style="color: #666;">Hurry while it lasts. Click below to grab yours:</p>
          <div style="text-align: center; margin: 30px 0;">{button(product_url, "View Product")}</div>
        """
        return await self.send_email(
            to, f"{product_name} is back in stock!", render_layout("Back in Stock", body), sender_alerts()
        )

    async def send_new_arrivals(self, to: str, products: list[Any]) -> dict[str, Any]:
        cards = "".join(_product_card(p, self.app_url) for p in products)
        body = f"""
          <h2 style="color: #1a1a1a; margin-top: 0;">Fresh off the rail</h2>
          <p style="color: #666;">Here's what just landed in store.</p>
          <div style="text-align: center;">{cards}</div>
          <div style="text-align: center; margin-top: 30px;">{button(f"{self.app_url}/products", "See all products")}</div>
        """
        return await self.send_email(to, NEW_ARRIVALS_SUBJECT, render_layout("New Arrivals", body), sender_news())

    async def send_discount_announcement(self, to: str, discount: Any) -> dict[str, Any]:
        label = discount_label(discount)
        expiry = (
            f"Valid until {discount.valid_until.strftime('%d %B %Y')}"
            if discount.valid_until
            else "No expiry date"
        )
        minimum = to_decimal(discount.minimum_order_amount)
        min_text = (
            f"Minimum purchase: {format_money(minimum)}" if minimum > 0 else "No minimum purchase required"
        )
        description = (
            f"<p><strong>{esc(discount.description)}</strong></p>" if discount.description else ""
        )
        body = f"""
          <h2 style="color: #1a1a1a; margin-top: 0;">Save {esc(label)} on your next order</h2>
          {description}
          <div style="background: white; border: 2px dashed #1a1a1a; padding: 20px; text-align: center; margin: 20px 0; border-radius: 8px;">
            <p style="margin: 0; color: #666;">Use code</p>
            <p style="font-size: 24px; font-weight: bold; font-family: monospace; letter-spacing: 2px; margin: 8px 0;">{esc(discount.code)}</p>
          </div>
          <p style="color: #666;">{esc(expiry)}<br>{esc(min_text)}</p>
          <div style="text-align: center; margin-top: 30px;">{button(f"{self.app_url}/products", "Shop Now")}</div>
        """
        return await self.send_email(
            to, f"\U0001F389 New Discount Code: Save {label}!", render_layout("New Discount", body), sender_news()
        )
