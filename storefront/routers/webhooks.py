"""
Webhooks Router

Server-to-server payment notifications. The signature is checked against
the raw request body before anything is parsed.
"""

import json
import os

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from storefront.errors import (
    ERROR_INVALID_SIGNATURE,
    ERROR_NO_ORDER_IN_METADATA,
    ERROR_NO_PAYMENT_ID,
    ERROR_NO_SIGNATURE,
    ERROR_ORDER_NOT_FOUND,
    ERROR_ORDER_UPDATE_FAILED,
    ERROR_WEBHOOK_SECRET_MISSING,
    ERROR_WEBHOOK_UNPARSEABLE,
    OrderNotFoundError,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.payments.constants import YOCO_PAYMENT_SUCCEEDED_EVENT
from storefront.routers.deps import get_status_service
from storefront.services.payments import PaymentService

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])


# ==================== YOCO WEBHOOK ====================

@router.post("/api/yoco/webhook")
async def yoco_webhook(request: Request, status_service=Depends(get_status_service)):
    """
    Handle Yoco payment webhook.

    X-Yoco-Signature carries the hex HMAC-SHA256 of the raw body keyed with
    YOCO_WEBHOOK_SECRET. Only payment.succeeded events change state; the
    order lookup is unscoped (service role).
    """
    raw_body = await request.body()
    signature = request.headers.get("x-yoco-signature")
    if not signature:
        logger.warning("Yoco webhook: no signature provided")
        return JSONResponse({"error": ERROR_NO_SIGNATURE}, status_code=400)

    secret = os.environ.get("YOCO_WEBHOOK_SECRET")
    if not secret:
        logger.error("Yoco webhook: YOCO_WEBHOOK_SECRET not configured")
        return JSONResponse({"error": ERROR_WEBHOOK_SECRET_MISSING}, status_code=500)

    if not PaymentService.verify_yoco_signature(raw_body, signature, secret):
        logger.warning("Yoco webhook: invalid signature")
        return JSONResponse({"error": ERROR_INVALID_SIGNATURE}, status_code=401)

    try:
        event = json.loads(raw_body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Yoco webhook: could not parse body")
        return JSONResponse({"error": ERROR_WEBHOOK_UNPARSEABLE}, status_code=400)
    if not isinstance(event, dict):
        logger.warning("Yoco webhook: body is not a JSON object")
        return JSONResponse({"error": ERROR_WEBHOOK_UNPARSEABLE}, status_code=400)

    if event.get("type") != YOCO_PAYMENT_SUCCEEDED_EVENT:
        return JSONResponse({"message": "Event ignored"}, status_code=200)

    payment = event.get("payload")
    if not isinstance(payment, dict):
        payment = {}
    metadata = payment.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}
    order_id = metadata.get("order_id")
    if not order_id:
        return JSONResponse({"error": ERROR_NO_ORDER_IN_METADATA}, status_code=400)

    payment_id = payment.get("id")
    if not payment_id:
        logger.warning("Yoco webhook: no payment id for order %s", sanitize_id_for_logging(order_id))
        return JSONResponse({"error": ERROR_NO_PAYMENT_ID}, status_code=400)

    logger.info("Yoco webhook payment.succeeded for order %s", sanitize_id_for_logging(order_id))
    try:
        result = await status_service.confirm_and_notify(
            order_id,
            payment_id,
            customer_email=metadata.get("customer_email"),
        )
    except OrderNotFoundError:
        logger.warning("Yoco webhook: order %s not found", sanitize_id_for_logging(order_id))
        return JSONResponse({"error": ERROR_ORDER_NOT_FOUND}, status_code=404)
    except Exception:
        logger.error("Yoco webhook: failed to update order %s", sanitize_id_for_logging(order_id), exc_info=True)
        return JSONResponse({"error": ERROR_ORDER_UPDATE_FAILED}, status_code=500)

    return JSONResponse(
        {
            "success": True,
            "order_id": order_id,
            "already_confirmed": result.already_paid,
            "email_sent": bool(result.email and result.email.get("success")),
        }
    )
