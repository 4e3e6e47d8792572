"""
Admin Orders Router

Order list/detail, status changes with customer notification, and the
WhatsApp message template for an order.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.auth import verify_admin
from storefront.errors import ERROR_ORDER_NOT_FOUND, OrderNotFoundError
from storefront.orders import build_order_payload
from storefront.payments import ORDER_STATUSES
from storefront.routers.deps import get_account_service, get_db, get_status_service
from storefront.routers.models import OrderStatusUpdateRequest
from storefront.services.money import to_float

router = APIRouter(tags=["admin-orders"])


def _customer(row: dict) -> dict:
    profile = row.get("profiles") if isinstance(row.get("profiles"), dict) else {}
    if row.get("user_id"):
        return {"name": profile.get("full_name"), "phone": profile.get("phone"), "guest": False}
    name = " ".join(p for p in (row.get("guest_first_name"), row.get("guest_last_name")) if p)
    return {"name": name or None, "phone": row.get("guest_phone"), "email": row.get("guest_email"), "guest": True}


@router.get("/orders")
async def admin_list_orders(
    status: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin=Depends(verify_admin),
    db=Depends(get_db),
):
    """All orders, newest first, optionally filtered by status."""
    if status and status not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid order status")
    rows = await db.orders.list_all(status=status, limit=limit, offset=offset)
    orders = []
    for row in rows:
        orders.append(
            {
                "id": row["id"],
                "order_number": row.get("order_number"),
                "status": row.get("status"),
                "payment_status": row.get("payment_status"),
                "payment_gateway": row.get("payment_gateway"),
                "total_amount": to_float(row.get("total_amount")),
                "created_at": row.get("created_at"),
                "customer": _customer(row),
            }
        )
    return {"orders": orders, "count": len(orders)}


@router.get("/orders/{order_id}")
async def admin_get_order(order_id: str, admin=Depends(verify_admin), account=Depends(get_account_service)):
    try:
        return await account.get_order(order_id, user_id=None)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_ORDER_NOT_FOUND)


@router.patch("/orders/{order_id}/status")
async def admin_update_order_status(
    order_id: str,
    request: OrderStatusUpdateRequest,
    admin=Depends(verify_admin),
    status_service=Depends(get_status_service),
):
    """Change status; shipped needs a tracking code. Email failures do not undo the change."""
    try:
        order, notification = await status_service.update_status(
            order_id, request.status, request.tracking_code, request.tracking_url, notify=request.notify
        )
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_ORDER_NOT_FOUND)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "success": True,
        "order": build_order_payload(order),
        "email_sent": bool(notification.get("success")),
        "email_error": notification.get("error"),
    }


@router.get("/orders/{order_id}/whatsapp")
async def admin_order_whatsapp(order_id: str, admin=Depends(verify_admin), status_service=Depends(get_status_service)):
    """Copyable WhatsApp text for the order's current status."""
    try:
        return await status_service.whatsapp_update(order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_ORDER_NOT_FOUND)
