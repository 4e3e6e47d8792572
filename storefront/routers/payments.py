"""
Payments Router

Hosted-checkout initialization and the browser-redirect verification path
for Yoco and Paystack. Verification is owner-scoped: a caller can only
confirm their own order.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.auth import AuthUser, verify_user
from storefront.errors import (
    ERROR_MISSING_FIELDS,
    ERROR_NO_ORDER_IN_METADATA,
    ERROR_ORDER_NOT_FOUND,
    ERROR_ORDER_UPDATE_FAILED,
    ERROR_PAYMENT_NOT_CONFIGURED,
    OrderNotFoundError,
    PaymentNotConfiguredError,
    PaymentProviderError,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.payments.constants import PAYSTACK_FAILED_STATES, PAYSTACK_SUCCESS, YOCO_SUCCESSFUL
from storefront.routers.deps import get_payment_service, get_status_service
from storefront.routers.models import PaymentInitRequest

logger = get_logger(__name__)

router = APIRouter(tags=["payments"])

ERROR_CHECKOUT_OR_ORDER_REQUIRED = "Checkout ID or Order ID is required"
ERROR_REFERENCE_REQUIRED = "Payment reference is required"


def provider_http_error(e: Exception) -> HTTPException:
    """Map gateway exceptions to the HTTP error the caller sees."""
    if isinstance(e, PaymentNotConfiguredError):
        return HTTPException(status_code=500, detail=ERROR_PAYMENT_NOT_CONFIGURED)
    if isinstance(e, PaymentProviderError):
        return HTTPException(status_code=e.status_code, detail=e.message)
    return HTTPException(status_code=500, detail=str(e))


async def _confirm(
    status_service,
    order_id: str,
    reference: str,
    user_id: str,
    customer_email: Optional[str],
) -> dict[str, Any]:
    try:
        result = await status_service.confirm_and_notify(
            order_id, reference, user_id=user_id, customer_email=customer_email
        )
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_ORDER_NOT_FOUND)
    except Exception:
        logger.error("Failed to confirm order %s", sanitize_id_for_logging(order_id), exc_info=True)
        raise HTTPException(status_code=500, detail=ERROR_ORDER_UPDATE_FAILED)
    return {
        "order_status": result.order.status,
        "payment_status": result.order.payment_status,
        "already_confirmed": result.already_paid,
        "whatsapp_message": result.whatsapp_message,
    }


# ==================== INITIALIZE ====================

async def _initialize(gateway: str, request: PaymentInitRequest, payments) -> dict[str, Any]:
    if not (request.email and request.amount and request.order_id and request.order_number):
        raise HTTPException(status_code=400, detail=ERROR_MISSING_FIELDS)
    try:
        if gateway == "paystack":
            return await payments.initialize_paystack_transaction(
                request.order_id, request.order_number, request.amount, request.email
            )
        return await payments.create_yoco_checkout(
            request.order_id, request.order_number, request.amount, request.email
        )
    except (PaymentNotConfiguredError, PaymentProviderError) as e:
        logger.warning("%s initialization failed for order %s: %s", gateway, sanitize_id_for_logging(request.order_id), e)
        raise provider_http_error(e)


@router.post("/api/yoco/initialize")
async def yoco_initialize(request: PaymentInitRequest, payments=Depends(get_payment_service)):
    """Create a Yoco hosted checkout. Amount is in cents."""
    return await _initialize("yoco", request, payments)


@router.post("/api/paystack/initialize")
async def paystack_initialize(request: PaymentInitRequest, payments=Depends(get_payment_service)):
    """Initialize a Paystack transaction. Amount is in cents."""
    return await _initialize("paystack", request, payments)


# ==================== VERIFY (browser redirect) ====================

@router.get("/api/yoco/verify")
async def yoco_verify(
    checkout_id: Optional[str] = Query(None),
    order_id: Optional[str] = Query(None),
    user: AuthUser = Depends(verify_user),
    payments=Depends(get_payment_service),
    status_service=Depends(get_status_service),
):
    """
    Verify a Yoco checkout after the customer is redirected back.

    With a checkout_id the checkout is fetched from Yoco and, if successful,
    the order named in its metadata is confirmed. With only an order_id the
    current order state is returned.
    """
    if not checkout_id and not order_id:
        raise HTTPException(status_code=400, detail=ERROR_CHECKOUT_OR_ORDER_REQUIRED)

    checkout: dict[str, Any] = {}
    if checkout_id:
        try:
            checkout = await payments.get_yoco_checkout(checkout_id)
        except (PaymentNotConfiguredError, PaymentProviderError) as e:
            raise provider_http_error(e)

    metadata = checkout.get("metadata") or {}
    target_order = metadata.get("order_id") or order_id
    payment_status = checkout.get("paymentStatus")
    response: dict[str, Any] = {
        "status": payment_status or "unknown",
        "checkout_id": checkout_id,
        "order_id": target_order,
    }
    if not target_order:
        return response

    if payment_status == YOCO_SUCCESSFUL:
        response.update(
            await _confirm(
                status_service,
                target_order,
                checkout.get("id") or checkout_id,
                user.id,
                metadata.get("customer_email"),
            )
        )
        response["message"] = "Payment confirmed"
        return response

    try:
        order = await status_service.get_order(target_order, user_id=user.id)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_ORDER_NOT_FOUND)
    response.update({"order_status": order.status, "payment_status": order.payment_status})
    if order.is_paid:
        response["status"] = "succeeded"
        response["message"] = "Payment already confirmed"
    else:
        response["message"] = "Verification completed"
    return response


@router.get("/api/paystack/verify")
async def paystack_verify(
    reference: Optional[str] = Query(None),
    user: AuthUser = Depends(verify_user),
    payments=Depends(get_payment_service),
    status_service=Depends(get_status_service),
):
    """Verify a Paystack transaction and confirm (or fail) the caller's order."""
    if not reference:
        raise HTTPException(status_code=400, detail=ERROR_REFERENCE_REQUIRED)

    try:
        tx = await payments.verify_paystack_transaction(reference)
    except (PaymentNotConfiguredError, PaymentProviderError) as e:
        raise provider_http_error(e)

    order_id = (tx.get("metadata") or {}).get("order_id")
    if not order_id:
        raise HTTPException(status_code=400, detail=ERROR_NO_ORDER_IN_METADATA)

    tx_status = tx.get("status")
    response: dict[str, Any] = {
        "status": tx_status,
        "amount": tx.get("amount"),
        "reference": tx.get("reference", reference),
        "order_id": order_id,
    }

    if tx_status == PAYSTACK_SUCCESS:
        customer_email = (tx.get("customer") or {}).get("email")
        response.update(await _confirm(status_service, order_id, reference, user.id, customer_email))
        return response

    try:
        if tx_status in PAYSTACK_FAILED_STATES:
            order = await status_service.mark_payment_failed(order_id, user_id=user.id)
        else:
            order = await status_service.get_order(order_id, user_id=user.id)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_ORDER_NOT_FOUND)
    logger.info("Paystack reference %s not successful: %s", sanitize_id_for_logging(reference), tx_status)
    response.update({"order_status": order.status, "payment_status": order.payment_status})
    return response
