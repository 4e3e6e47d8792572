"""
WhatsApp message templates.

Nothing is sent automatically: admins copy the text, or open the wa.me link,
and send it by hand.
"""

import re
from typing import Any, Optional
from urllib.parse import quote

from storefront.payments.config import get_app_url
from storefront.services.money import format_money

STATUS_EMOJIS = {
    "confirmed": "✅",
    "processing": "⚙️",
    "shipped": "\U0001F69A",
    "delivered": "\U0001F4E6",
    "cancelled": "❌",
}
DEFAULT_EMOJI = "\U0001F4E2"

STATUS_MESSAGES = {
    "confirmed": "Your order has been confirmed!",
    "processing": "Your order is being prepared.",
    "shipped": "Your order is on its way!",
    "delivered": "Your order has been delivered!",
    "cancelled": "Your order has been cancelled.",
}
DEFAULT_MESSAGE = "Your order status has been updated."

SIGN_OFF = "- Apparel Cast Team"


def format_order_confirmation_message(order_number: str, total: Any, customer_name: str) -> str:
    return (
        f"Hi {customer_name}! \U0001F389\n\n"
        "Thank you for your order at Apparel Cast!\n\n"
        f"*Order Number:* {order_number}\n"
        f"*Total:* {format_money(total)}\n\n"
        "Your order has been confirmed and will be processed shortly. "
        "We'll keep you updated on its progress.\n\n"
        f"Track your order: {get_app_url()}/account/orders\n\n"
        "Thank you for shopping with us! \U0001F495\n\n"
        f"{SIGN_OFF}"
    )


def format_order_update_message(
    order_number: str, status: str, customer_name: str, tracking_code: Optional[str] = None
) -> str:
    tracking = f"*Tracking Code:* {tracking_code}\n" if tracking_code else ""
    return (
        f"Hi {customer_name}! {STATUS_EMOJIS.get(status, DEFAULT_EMOJI)}\n\n"
        "*Order Update*\n\n"
        f"*Order Number:* {order_number}\n"
        f"*Status:* {status.capitalize()}\n"
        f"{tracking}\n"
        f"{STATUS_MESSAGES.get(status, DEFAULT_MESSAGE)}\n\n"
        f"View details: {get_app_url()}/account/orders\n\n"
        f"{SIGN_OFF}"
    )


def whatsapp_link(phone: Optional[str], message: str) -> Optional[str]:
    """wa.me deep link with the message pre-filled; None without a phone number.

    Local South African numbers (leading 0) are rewritten to the 27 country code.
    """
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        return None
    if digits.startswith("0"):
        digits = "27" + digits[1:]
    return f"https://wa.me/{digits}?text={quote(message)}"
