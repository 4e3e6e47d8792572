"""
Order Notifications

Emails for the order lifecycle: confirmation, shipping, status updates.
"""

from decimal import Decimal
from typing import Any, Optional

from storefront.logging import get_logger
from storefront.services.money import format_money, to_decimal

from .base import NotificationServiceBase, button, esc, render_layout, sender_orders

logger = get_logger(__name__)

STATUS_EMAIL_MESSAGES = {
    "confirmed": "Your order has been confirmed and is being prepared.",
    "processing": "Your order is currently being processed.",
    "shipped": "Your order has been shipped and is on its way to you.",
    "delivered": "Your order has been successfully delivered. If you have any questions, please contact us.",
    "cancelled": "Your order has been cancelled. If you have any questions, please contact us.",
}
DEFAULT_STATUS_MESSAGE = "Your order status has been updated."


# =============================================================================
# Helper Functions
# =============================================================================


def _item_name(item: dict) -> str:
    product = item.get("products")
    if isinstance(product, dict) and product.get("name"):
        return str(product["name"])
    return item.get("name") or "Product"


def _is_bulk_line(item: dict) -> bool:
    return bool(item.get("is_bulk_order") and item.get("bulk_price") and item.get("original_price"))


def calculate_bulk_savings(items: list[dict]) -> Decimal:
    """Total (original - bulk) * quantity over bulk lines."""
    total = Decimal("0")
    for item in items:
        if _is_bulk_line(item):
            unit_saving = to_decimal(item["original_price"]) - to_decimal(item["bulk_price"])
            total += unit_saving * int(item.get("quantity") or 1)
    return total


def _render_item_row(item: dict) -> str:
    quantity = int(item.get("quantity") or 1)
    if _is_bulk_line(item):
        original = to_decimal(item["original_price"])
        unit = to_decimal(item["bulk_price"])
        saving = (original - unit) * quantity
        details = (
            '<br><span style="color: #e67e22; font-size: 12px; font-weight: 600;">BULK ORDER</span>'
            f'<br><span style="color: #666; font-size: 12px;">Original: {format_money(original)} each</span>'
            f'<br><span style="color: #e67e22; font-size: 12px;">Bulk Price: {format_money(unit)} each</span>'
            f'<br><span style="color: #27ae60; font-size: 12px;">You Save: {format_money(saving)}</span>'
        )
        struck = (
            '<div style="text-decoration: line-through; color: #999; font-size: 12px;">'
            f"{format_money(original * quantity)}</div>"
        )
    else:
        unit = to_decimal(item.get("price"))
        details = ""
        struck = ""

    return (
        '<tr style="border-bottom: 1px solid #E8D5D0;">'
        f'<td style="padding: 15px 0;"><strong>{esc(_item_name(item))}</strong><br>'
        f'<span style="color: #666; font-size: 14px;">Qty: {quantity}</span>{details}</td>'
        f'<td style="padding: 15px 0; text-align: right;">{struck}'
        f"<strong>{format_money(unit * quantity)}</strong></td></tr>"
    )


def render_order_confirmation(
    order_number: str,
    total: Any,
    items: list[dict],
    bulk_savings: Optional[Decimal],
    orders_url: str,
) -> str:
    rows = "".join(_render_item_row(item) for item in items)
    if bulk_savings and bulk_savings > 0:
        rows += (
            '<tr style="border-bottom: 1px solid #E8D5D0;">'
            '<td style="padding: 15px 0; color: #27ae60; font-weight: 600;">Total Bulk Order Savings</td>'
            '<td style="padding: 15px 0; text-align: right; color: #27ae60; font-weight: 600;">'
            f"-{format_money(bulk_savings)}</td></tr>"
        )
    rows += (
        '<tr><td style="padding: 15px 0;"><strong>Total</strong></td>'
        f'<td style="padding: 15px 0; text-align: right;"><strong>{format_money(total)}</strong></td></tr>'
    )

    body = f"""
      <h2 style="color: #1a1a1a; margin-top: 0;">Thank you for your order!</h2>
      <p style="color: #666;">Your order has been confirmed and will be processed shortly.</p>
      <div style="background-color: #FFF9F5; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <p style="margin: 0; color: #666; font-size: 14px;">Order Number</p>
        <p style="margin: 5px 0 0 0; font-size: 20px; font-weight: bold;">{esc(order_number)}</p>
      </div>
      <h3 style="color: #1a1a1a; margin-top: 30px;">Order Summary</h3>
      <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">{rows}</table>
      <p style="color: #666; font-size: 14px; margin-top: 30px;">
        You can track your order status from your account page. We'll send you another email when your order ships.
      </p>
      <div style="text-align: center; margin-top: 30px;">{button(orders_url, "View Order")}</div>
    """
    return render_layout("Order Confirmation", body)


def render_shipping_notification(
    order_number: str, tracking_code: str, tracking_url: Optional[str], orders_url: str
) -> str:
    track_button = (
        button(tracking_url, "Track Your Package", background="#4CAF50", color="white") + " "
        if tracking_url
        else ""
    )
    body = f"""
      <h2 style="color: #1a1a1a; margin-top: 0;">Your Order is on the Way!</h2>
      <p style="color: #666; font-size: 16px;">Great news! Your order has been shipped and is making its way to you.</p>
      <div style="background-color: #FFF9F5; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <p style="margin: 0; color: #666; font-size: 14px;">Order Number</p>
        <p style="margin: 5px 0 15px 0; font-size: 20px; font-weight: bold;">{esc(order_number)}</p>
        <p style="margin: 0; color: #666; font-size: 14px;">Tracking Code</p>
        <p style="margin: 5px 0 0 0; font-size: 18px; font-weight: bold; font-family: monospace;">{esc(tracking_code)}</p>
      </div>
      <p style="color: #666;">You can use this tracking code to monitor your package's progress. Most deliveries arrive within 3-5 business days.</p>
      <div style="text-align: center; margin: 30px 0;">{track_button}{button(orders_url, "View Order Details")}</div>
    """
    return render_layout("Order Shipped", body)


def render_status_update(
    order_number: str, status: str, tracking_code: Optional[str], orders_url: str
) -> str:
    message = STATUS_EMAIL_MESSAGES.get(status, DEFAULT_STATUS_MESSAGE)
    tracking = (
        '<p style="margin: 15px 0 0 0; color: #666; font-size: 14px;">Tracking Number</p>'
        f'<p style="margin: 5px 0 0 0; font-family: monospace;">{esc(tracking_code)}</p>'
        if tracking_code
        else ""
    )
    body = f"""
      <h2 style="color: #1a1a1a; margin-top: 0;">Order Update</h2>
      <div style="background-color: #FFF9F5; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <p style="margin: 0; color: #666; font-size: 14px;">Order Number</p>
        <p style="margin: 5px 0 15px 0; font-size: 20px; font-weight: bold;">{esc(order_number)}</p>
        <p style="margin: 0; color: #666; font-size: 14px;">Status</p>
        <p style="margin: 5px 0 0 0; font-size: 18px; font-weight: bold;">{esc(status.capitalize())}</p>
        {tracking}
      </div>
      <p style="color: #666;">{esc(message)}</p>
      <div style="text-align: center; margin-top: 30px;">{button(orders_url, "View Order Details")}</div>
    """
    return render_layout("Order Update", body)


class OrderNotificationsMixin(NotificationServiceBase):
    """Order-related email notifications."""

    @property
    def orders_url(self) -> str:
        return f"{self.app_url}/account/orders"

    async def send_order_confirmation(
        self,
        to: str,
        order_number: str,
        total: Any,
        items: list[dict],
        bulk_savings: Optional[Decimal] = None,
    ) -> dict[str, Any]:
        """Send the "Order Confirmation - {number}" email."""
        if bulk_savings is None:
            bulk_savings = calculate_bulk_savings(items)
        html_body = render_order_confirmation(order_number, total, items, bulk_savings, self.orders_url)
        return await self.send_email(to, f"Order Confirmation - {order_number}", html_body, sender_orders())

    async def send_shipping_notification(
        self, to: str, order_number: str, tracking_code: str, tracking_url: Optional[str] = None
    ) -> dict[str, Any]:
        html_body = render_shipping_notification(order_number, tracking_code, tracking_url, self.orders_url)
        return await self.send_email(
            to, f"Your Order is on the Way! - {order_number}", html_body, sender_orders()
        )

    async def send_status_update(
        self, to: str, order_number: str, status: str, tracking_code: Optional[str] = None
    ) -> dict[str, Any]:
        html_body = render_status_update(order_number, status, tracking_code, self.orders_url)
        return await self.send_email(to, f"Order Update - {order_number}", html_body, sender_orders())

    async def send_order_status_notification(
        self,
        to: str,
        order_number: str,
        status: str,
        tracking_code: Optional[str] = None,
        tracking_url: Optional[str] = None,
    ) -> dict[str, Any]:
        """Pick the template for a status change: shipped with tracking uses the shipping email."""
        if status == "shipped" and tracking_code:
            return await self.send_shipping_notification(to, order_number, tracking_code, tracking_url)
        return await self.send_status_update(to, order_number, status, tracking_code)
