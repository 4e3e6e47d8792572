"""
Order Status Management Service

Payment confirmation and admin status changes, plus the side effects that
follow them (cart clearing, discount usage, customer notifications).

Only the order update is authoritative. Everything after it is a separate
best-effort step: failures are logged and never undo the update.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from storefront.errors import (
    ERROR_INVALID_STATUS,
    ERROR_TRACKING_REQUIRED,
    ERROR_USER_EMAIL_NOT_FOUND,
    OrderNotFoundError,
)
from storefront.logging import get_logger, mask_email, sanitize_id_for_logging
from storefront.payments import ORDER_STATUSES, OrderStatus, PaymentStatus
from storefront.payments.constants import FULFILMENT_STATES
from storefront.services.models import Order
from storefront.services.notifications import (
    calculate_bulk_savings,
    format_order_confirmation_message,
    format_order_update_message,
    whatsapp_link,
)

logger = get_logger(__name__)


@dataclass
class ConfirmationResult:
    """Outcome of one provider confirmation."""

    order: Order
    already_paid: bool = False
    cart_cleared: bool = False
    email: dict[str, Any] = field(default_factory=dict)
    whatsapp_message: Optional[str] = None


def _customer_name(order_row: dict) -> str:
    profile = order_row.get("profiles")
    if isinstance(profile, dict) and profile.get("full_name"):
        return str(profile["full_name"])
    guest = " ".join(
        part for part in (order_row.get("guest_first_name"), order_row.get("guest_last_name")) if part
    )
    return guest or "there"


class OrderStatusService:
    """Centralized service for order status management."""

    def __init__(self, db, notifications):
        self.db = db
        self.notifications = notifications

    async def get_order(self, order_id: str, user_id: Optional[str] = None) -> Order:
        """Fetch an order, scoped to user_id when given.

        Raises:
            OrderNotFoundError: missing, or owned by someone else
        """
        order = await self.db.orders.get_by_id(order_id, user_id=user_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def mark_payment_confirmed(
        self,
        order_id: str,
        payment_reference: str,
        user_id: Optional[str] = None,
    ) -> tuple[Order, bool]:
        """
        Mark order as paid and confirmed.

        IDEMPOTENT: an order that is already paid is returned unchanged. The
        first reference wins and fulfilment statuses are never pulled back.

        Args:
            order_id: Order to confirm
            payment_reference: Provider checkout id / transaction reference
            user_id: Owner scope for browser-path confirmations; None for webhooks

        Returns:
            (order, already_paid)
        """
        order = await self.get_order(order_id, user_id=user_id)
        log_id = sanitize_id_for_logging(order_id)

        if order.is_paid:
            self._log_duplicate(order, payment_reference)
            return order, True

        if order.status == OrderStatus.CANCELLED.value:
            logger.warning("Payment received for cancelled order %s, confirming anyway", log_id)

        # Conditional on payment_status so a concurrent confirmation cannot win twice
        rows = await self.db.orders.mark_paid(order_id, payment_reference, user_id=user_id)
        if not rows:
            current = await self.get_order(order_id, user_id=user_id)
            if not current.is_paid:
                raise OrderNotFoundError(order_id)
            self._log_duplicate(current, payment_reference)
            return current, True

        logger.info("Order %s marked paid", log_id)
        return Order(**rows[0]), False

    def _log_duplicate(self, order: Order, payment_reference: str) -> None:
        log_id = sanitize_id_for_logging(order.id)
        if order.payment_reference and order.payment_reference != payment_reference:
            logger.warning("Order %s already paid with a different reference, keeping the first one", log_id)
        if order.status in FULFILMENT_STATES:
            logger.info("Order %s already in '%s', late confirmation ignored", log_id, order.status)
        else:
            logger.info("Order %s already paid (idempotency check), skipping", log_id)

    async def mark_payment_failed(self, order_id: str, user_id: Optional[str] = None) -> Order:
        """Record a failed/abandoned payment. A paid order is left untouched."""
        order = await self.get_order(order_id, user_id=user_id)
        if order.payment_status != PaymentStatus.PENDING.value:
            return order
        rows = await self.db.orders.update(
            order_id, {"payment_status": PaymentStatus.FAILED.value}, user_id=user_id
        )
        return Order(**rows[0]) if rows else order

    async def clear_cart(self, user_id: Optional[str]) -> bool:
        """Delete every cart row of the order's owner. Best-effort."""
        if not user_id:
            return False
        try:
            removed = await self.db.carts.clear(user_id)
        except Exception:
            logger.error("Failed to clear cart for user %s", sanitize_id_for_logging(user_id), exc_info=True)
            return False
        logger.info("Cleared %d cart items for user %s", removed, sanitize_id_for_logging(user_id))
        return True

    async def resolve_customer_email(self, order: Order, hint: Optional[str] = None) -> Optional[str]:
        """Provider metadata email, then guest email, then identity-provider lookup."""
        if hint:
            return hint
        if order.guest_email:
            return order.guest_email
        if order.user_id:
            return await self.db.get_user_email(order.user_id)
        return None

    async def send_confirmation(self, order: Order, email: Optional[str]) -> dict[str, Any]:
        """Send the confirmation email. Never raises."""
        if not email:
            logger.warning("No email for order %s, confirmation not sent", sanitize_id_for_logging(order.id))
            return {"success": False, "error": ERROR_USER_EMAIL_NOT_FOUND}
        try:
            items = await self.db.orders.get_items(order.id)
            result = await self.notifications.send_order_confirmation(
                email, order.order_number, order.total_amount, items, calculate_bulk_savings(items)
            )
        except Exception as e:
            logger.error("Error sending confirmation email for order %s", sanitize_id_for_logging(order.id), exc_info=True)
            return {"success": False, "error": str(e)}

        if not result.get("success"):
            logger.error(
                "Failed to send order confirmation to %s: %s", mask_email(email), result.get("error")
            )
        return result

    async def _increment_discount_usage(self, order: Order) -> None:
        if not order.discount_code_id:
            return
        try:
            await self.db.discounts.increment_usage(order.discount_code_id)
        except Exception:
            logger.warning("Failed to bump discount usage for order %s", sanitize_id_for_logging(order.id), exc_info=True)

    async def _whatsapp_confirmation(self, order: Order) -> Optional[str]:
        try:
            row = await self.db.orders.get_row(order.id, "*, profiles(full_name, phone)")
        except Exception:
            logger.warning("Could not load customer for WhatsApp template", exc_info=True)
            row = None
        return format_order_confirmation_message(
            order.order_number, order.total_amount, _customer_name(row or {})
        )

    async def confirm_and_notify(
        self,
        order_id: str,
        payment_reference: str,
        user_id: Optional[str] = None,
        customer_email: Optional[str] = None,
    ) -> ConfirmationResult:
        """
        Full confirmation pipeline: mark paid, clear the owner's cart, notify.

        Side effects run only on the first confirmation; a duplicate callback
        returns the current state without touching the cart or re-sending email.

        Raises:
            OrderNotFoundError: order missing or not owned (when user_id given)
            Exception: database errors from the order update itself
        """
        order, already_paid = await self.mark_payment_confirmed(order_id, payment_reference, user_id=user_id)
        result = ConfirmationResult(order=order, already_paid=already_paid)
        if already_paid:
            return result

        await self._increment_discount_usage(order)
        result.cart_cleared = await self.clear_cart(order.user_id)

        try:
            email = await self.resolve_customer_email(order, customer_email)
        except Exception:
            logger.warning("Customer email lookup failed", exc_info=True)
            email = None
        result.email = await self.send_confirmation(order, email)
        result.whatsapp_message = await self._whatsapp_confirmation(order)
        return result

    # ==================== ADMIN STATUS CHANGES ====================

    async def update_status(
        self,
        order_id: str,
        new_status: str,
        tracking_code: Optional[str] = None,
        tracking_url: Optional[str] = None,
        notify: bool = True,
    ) -> tuple[Order, dict[str, Any]]:
        """
        Admin status change. `shipped` requires a tracking code and stamps shipped_at.

        Returns:
            (updated order, notification result)

        Raises:
            ValueError: unknown status, or shipped without tracking code
            OrderNotFoundError: no such order
        """
        new_status = (new_status or "").lower().strip()
        if new_status not in ORDER_STATUSES:
            raise ValueError(ERROR_INVALID_STATUS)

        update: dict[str, Any] = {"status": new_status}
        if new_status == OrderStatus.SHIPPED.value:
            if not tracking_code or not tracking_code.strip():
                raise ValueError(ERROR_TRACKING_REQUIRED)
            update["tracking_code"] = tracking_code.strip()
            update["tracking_url"] = (tracking_url or "").strip() or None
            update["shipped_at"] = datetime.now(timezone.utc).isoformat()

        rows = await self.db.orders.update(order_id, update)
        if not rows:
            raise OrderNotFoundError(order_id)
        order = Order(**rows[0])
        logger.info("Order %s status -> %s", sanitize_id_for_logging(order_id), new_status)

        notification: dict[str, Any] = {}
        if notify:
            notification = await self.notify_status_change(order, new_status)
        return order, notification

    async def notify_status_change(self, order: Order, status: Optional[str] = None) -> dict[str, Any]:
        """Send the status email for an order. Never raises."""
        status = status or order.status
        try:
            email = await self.resolve_customer_email(order)
        except Exception:
            logger.warning("Customer email lookup failed", exc_info=True)
            email = None
        if not email:
            return {"success": False, "error": ERROR_USER_EMAIL_NOT_FOUND}

        try:
            result = await self.notifications.send_order_status_notification(
                email, order.order_number, status, order.tracking_code, order.tracking_url
            )
        except Exception as e:
            logger.error("Status email failed for order %s", sanitize_id_for_logging(order.id), exc_info=True)
            return {"success": False, "error": str(e)}
        if not result.get("success"):
            logger.error("Status email to %s failed: %s", mask_email(email), result.get("error"))
        return result

    async def whatsapp_update(self, order_id: str) -> dict[str, Any]:
        """Copyable status message for an order plus the wa.me link when a phone is known."""
        row = await self.db.orders.get_row(order_id, "*, profiles(full_name, phone)")
        if row is None:
            raise OrderNotFoundError(order_id)
        profile = row.get("profiles") if isinstance(row.get("profiles"), dict) else {}
        phone = profile.get("phone") or row.get("guest_phone")
        status = row.get("status") or OrderStatus.PENDING.value
        if status == OrderStatus.CONFIRMED.value:
            message = format_order_confirmation_message(
                row["order_number"], row.get("total_amount"), _customer_name(row)
            )
        else:
            message = format_order_update_message(
                row["order_number"], status, _customer_name(row), row.get("tracking_code")
            )
        return {"message": message, "phone": phone, "whatsapp_url": whatsapp_link(phone, message)}
