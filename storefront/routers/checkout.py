"""
Checkout Router

Order creation, delivery options and discount previews. Signed-in callers
check out their server cart; guests post their lines and contact details.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from storefront.auth import AuthUser, optional_user
from storefront.errors import (
    ERROR_PRODUCT_NOT_FOUND,
    NotFoundError,
    PaymentNotConfiguredError,
    PaymentProviderError,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.routers.deps import get_checkout_service
from storefront.routers.models import CheckoutRequest, DiscountValidateRequest
from storefront.routers.payments import provider_http_error
from storefront.services.domains.checkout import available_delivery_options
from storefront.services.money import to_decimal, to_float

logger = get_logger(__name__)

router = APIRouter(tags=["checkout"])


@router.get("/api/delivery-options")
async def delivery_options(has_bulk: bool = Query(False)):
    """Delivery methods for a cart; PEP Send is hidden when it has bulk lines."""
    return {"options": available_delivery_options(has_bulk)}


@router.post("/api/checkout")
async def create_checkout(
    request: CheckoutRequest,
    user: Optional[AuthUser] = Depends(optional_user),
    checkout=Depends(get_checkout_service),
):
    """
    Create a pending order and start the payment.

    A payment initialization failure leaves the pending order in place; the
    response carries its id so the customer can retry.
    """
    guest = request.guest.model_dump() if request.guest else None
    try:
        order, quote = await checkout.create_order(
            delivery_method=request.delivery_method,
            user_id=user.id if user else None,
            address_id=request.address_id,
            guest=guest,
            guest_items=[item.model_dump() for item in request.items],
            discount_code=request.discount_code,
            gateway=request.payment_gateway,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_PRODUCT_NOT_FOUND)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    email = (user.email if user else None) or (guest or {}).get("email")
    summary = {
        "order_id": order.id,
        "order_number": order.order_number,
        "subtotal": to_float(quote.subtotal),
        "delivery_fee": to_float(quote.delivery_fee),
        "discount_amount": to_float(quote.discount_amount),
        "total": to_float(quote.total),
    }

    try:
        payment = await checkout.start_payment(order, email)
    except (PaymentNotConfiguredError, PaymentProviderError) as e:
        logger.warning("Payment init failed for order %s: %s", sanitize_id_for_logging(order.id), e)
        http_error = provider_http_error(e)
        return JSONResponse({**summary, "error": http_error.detail}, status_code=http_error.status_code)

    return {**summary, **payment}


@router.post("/api/discounts/validate")
async def validate_discount(request: DiscountValidateRequest, checkout=Depends(get_checkout_service)):
    """Preview a discount code against a subtotal."""
    return await checkout.validate_discount(request.code, to_decimal(request.subtotal))
