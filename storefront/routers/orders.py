"""
Orders Router

Customer order detail, the client-side payment confirmation fallback and
the admin re-notify endpoint.
"""

from fastapi import APIRouter, Depends, HTTPException

from storefront.auth import AuthUser, verify_admin, verify_user
from storefront.errors import (
    ERROR_INVALID_STATUS,
    ERROR_MISSING_FIELDS,
    ERROR_ORDER_NOT_FOUND,
    ERROR_ORDER_UPDATE_FAILED,
    ERROR_USER_EMAIL_NOT_FOUND,
    OrderNotFoundError,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.orders import build_order_payload
from storefront.payments import ORDER_STATUSES
from storefront.routers.deps import get_account_service, get_status_service
from storefront.routers.models import ConfirmPaymentRequest, NotifyOrderRequest

logger = get_logger(__name__)

router = APIRouter(tags=["orders"])


@router.get("/api/orders/{order_id}")
async def get_order(
    order_id: str,
    user: AuthUser = Depends(verify_user),
    account=Depends(get_account_service),
):
    """Caller's order with delivery address and items. Other users' orders are 404."""
    try:
        return await account.get_order(order_id, user_id=user.id)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_ORDER_NOT_FOUND)


@router.post("/api/orders/{order_id}/confirm-payment")
async def confirm_payment(
    order_id: str,
    request: ConfirmPaymentRequest,
    user: AuthUser = Depends(verify_user),
    status_service=Depends(get_status_service),
):
    """
    Confirm payment from the success page.

    Fallback for when the provider webhook is slow or missing. Safe to call
    more than once: a paid order is returned as-is.
    """
    try:
        result = await status_service.confirm_and_notify(
            order_id, request.payment_reference, user_id=user.id, customer_email=user.email
        )
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_ORDER_NOT_FOUND)
    except Exception:
        logger.error("Confirm-payment failed for order %s", sanitize_id_for_logging(order_id), exc_info=True)
        raise HTTPException(status_code=500, detail=ERROR_ORDER_UPDATE_FAILED)

    return {
        "success": True,
        "order": build_order_payload(result.order),
        "already_confirmed": result.already_paid,
        "cart_cleared": result.cart_cleared,
        "whatsapp_message": result.whatsapp_message,
    }


@router.post("/api/orders/notify")
async def notify_order(
    request: NotifyOrderRequest,
    admin=Depends(verify_admin),
    status_service=Depends(get_status_service),
):
    """Re-send the status email for an order (admin)."""
    if not request.order_id or not request.status:
        raise HTTPException(status_code=400, detail=ERROR_MISSING_FIELDS)
    status = request.status.lower().strip()
    if status not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail=ERROR_INVALID_STATUS)

    try:
        order = await status_service.get_order(request.order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_ORDER_NOT_FOUND)

    result = await status_service.notify_status_change(order, status)
    if not result.get("success"):
        if result.get("error") == ERROR_USER_EMAIL_NOT_FOUND:
            raise HTTPException(status_code=404, detail=ERROR_USER_EMAIL_NOT_FOUND)
        raise HTTPException(status_code=500, detail="Failed to send notifications")
    return {"success": True}
