"""
Notification Service Module

Unified notification service combining all email notification types.
"""

from .base import NotificationServiceBase, render_layout
from .marketing import NEW_ARRIVALS_SUBJECT, MarketingNotificationsMixin, discount_label
from .orders import OrderNotificationsMixin, calculate_bulk_savings
from .whatsapp import (
    format_order_confirmation_message,
    format_order_update_message,
    whatsapp_link,
)


class NotificationService(OrderNotificationsMixin, MarketingNotificationsMixin):
    """
    Service for sending customer emails.

    Combines all notification mixins into a single service class.
    """


__all__ = [
    "NEW_ARRIVALS_SUBJECT",
    "NotificationService",
    "NotificationServiceBase",
    "calculate_bulk_savings",
    "discount_label",
    "format_order_confirmation_message",
    "format_order_update_message",
    "render_layout",
    "whatsapp_link",
]
